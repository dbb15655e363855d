"""
Booking lifecycle derivation.

The status shown for a booking is computed from the record the backend sent,
the current instant and the set of bookings staff cleared locally:

    effective_booking_status(booking, now, cleared_ids)

Every function here is pure: `now` is always passed in and nothing is
cached between calls. Naive datetimes are read as venue-local time.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, date, time, timedelta
from enum import Enum
from typing import Optional

import pytz

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    BOOKED = 'BOOKED'
    RESERVED = 'RESERVED'
    OCCUPIED = 'OCCUPIED'
    COMPLETED = 'COMPLETED'
    CANCELLED = 'CANCELLED'


class TableStatus(str, Enum):
    AVAILABLE = 'AVAILABLE'
    RESERVED = 'RESERVED'
    OCCUPIED = 'OCCUPIED'


# Forward order of the lifecycle. CANCELLED is outside it.
_RANK = {
    BookingStatus.BOOKED: 0,
    BookingStatus.RESERVED: 1,
    BookingStatus.OCCUPIED: 2,
    BookingStatus.COMPLETED: 3,
}

# Coarse slots of the legacy booking form, [start hour, end hour)
SLOT_HOURS = {
    'MORNING': (8, 12),
    'AFTERNOON': (12, 17),
    'EVENING': (17, 22),
}

DEFAULT_SERVICE_DURATION = timedelta(minutes=120)
DEFAULT_LEAD_TIME = timedelta(hours=2)

_ACTIVE = (BookingStatus.BOOKED, BookingStatus.RESERVED, BookingStatus.OCCUPIED)


@dataclass(frozen=True)
class BookingWindow:
    start: datetime
    end: datetime
    lead_start: datetime  # equals start for coarse slots


@dataclass(frozen=True)
class TableOccupancy:
    table: object
    status: TableStatus
    booking: Optional[object] = None

    def to_dict(self):
        return {
            'table': self.table.to_dict(),
            'status': self.status.value,
            'booking': self.booking.to_dict() if self.booking is not None else None
        }


def options_from_config(config):
    """Reconciler keyword arguments built from the Flask config."""
    return {
        'service_duration': timedelta(minutes=config['SERVICE_DURATION_MINUTES']),
        'lead_time': timedelta(minutes=config['LEAD_TIME_MINUTES']),
        'tz': config['VENUE_TIMEZONE'],
    }


def _venue_tz(tz):
    if tz is None:
        return pytz.utc
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def _localize(dt: datetime, tz) -> datetime:
    if dt.tzinfo is None:
        return tz.localize(dt)
    return dt.astimezone(tz)


def _parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    return datetime.fromisoformat(text)


def _parse_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # "2025-06-01" or a full ISO timestamp
    return date.fromisoformat(str(value).strip()[:10])


def _seed_status(raw) -> Optional[BookingStatus]:
    if not raw:
        return None
    try:
        return BookingStatus(str(raw).upper())
    except ValueError:
        return None


def _is_cleared(booking_id, cleared_ids) -> bool:
    return booking_id in cleared_ids or str(booking_id) in cleared_ids


def is_coarse_slot(time_slot) -> bool:
    return isinstance(time_slot, str) and time_slot.strip().upper() in SLOT_HOURS


def _compute_window(booking, service_duration, lead_time, tz) -> BookingWindow:
    slot = booking.time_slot
    if is_coarse_slot(slot):
        if not booking.booking_date:
            raise ValueError("slot %s without booking date" % slot)
        day = _parse_date(booking.booking_date)
        start_hour, end_hour = SLOT_HOURS[slot.strip().upper()]
        start = tz.localize(datetime.combine(day, time(start_hour)))
        end = tz.localize(datetime.combine(day, time(end_hour)))
        return BookingWindow(start=start, end=end, lead_start=start)

    if not slot:
        raise ValueError("missing time slot")
    start = _localize(_parse_timestamp(slot), tz)
    return BookingWindow(start=start, end=start + service_duration, lead_start=start - lead_time)


def time_window(booking, service_duration=DEFAULT_SERVICE_DURATION,
                lead_time=DEFAULT_LEAD_TIME, tz=None) -> Optional[BookingWindow]:
    """Window during which the booking holds its table, or None if its time data is unusable."""
    tz = _venue_tz(tz)
    try:
        return _compute_window(booking, service_duration, lead_time, tz)
    except (TypeError, ValueError) as e:
        logger.warning("Booking %s has unusable time data (time_slot=%r, booking_date=%r): %s",
                       getattr(booking, 'id', None), getattr(booking, 'time_slot', None),
                       getattr(booking, 'booking_date', None), e)
        return None


def _derive(booking, now, cleared_ids, window, tz) -> BookingStatus:
    seed = _seed_status(booking.status)
    if seed is BookingStatus.CANCELLED:
        return BookingStatus.CANCELLED
    if _is_cleared(booking.id, cleared_ids):
        return BookingStatus.COMPLETED

    if window is None:
        # unknown time: treat as still in the future
        derived = BookingStatus.BOOKED
    else:
        now = _localize(now, tz)
        if now < window.lead_start:
            derived = BookingStatus.BOOKED
        elif now < window.start:
            derived = BookingStatus.RESERVED
        elif now < window.end:
            derived = BookingStatus.OCCUPIED
        else:
            derived = BookingStatus.COMPLETED

    # the server status is a lower bound, never walk back past it
    if seed is not None and _RANK[seed] > _RANK[derived]:
        return seed
    return derived


def effective_booking_status(booking, now: datetime, cleared_ids=frozenset(),
                             service_duration=DEFAULT_SERVICE_DURATION,
                             lead_time=DEFAULT_LEAD_TIME, tz=None) -> BookingStatus:
    tz = _venue_tz(tz)
    if _seed_status(booking.status) is BookingStatus.CANCELLED:
        return BookingStatus.CANCELLED
    window = time_window(booking, service_duration, lead_time, tz)
    return _derive(booking, now, cleared_ids, window, tz)


def table_occupancy(table, bookings, now: datetime, cleared_ids=frozenset(),
                    service_duration=DEFAULT_SERVICE_DURATION,
                    lead_time=DEFAULT_LEAD_TIME, tz=None) -> TableOccupancy:
    """
    Occupancy of one table. When several active bookings target the table,
    the one whose window starts first is shown.
    """
    tz = _venue_tz(tz)
    candidates = []
    for booking in bookings:
        if booking.table_number is None or str(booking.table_number) != table.number:
            continue
        if _seed_status(booking.status) is BookingStatus.CANCELLED:
            continue
        window = time_window(booking, service_duration, lead_time, tz)
        if window is None:
            # unknown time never holds a table
            continue
        status = _derive(booking, now, cleared_ids, window, tz)
        if status not in _ACTIVE:
            continue
        candidates.append((window, status, booking))

    if not candidates:
        return TableOccupancy(table=table, status=TableStatus.AVAILABLE)

    # sort is stable for equal starts
    candidates.sort(key=lambda c: c[0].start.astimezone(pytz.utc))
    window, status, booking = candidates[0]

    if status is BookingStatus.OCCUPIED:
        return TableOccupancy(table=table, status=TableStatus.OCCUPIED, booking=booking)
    if status is BookingStatus.RESERVED:
        return TableOccupancy(table=table, status=TableStatus.RESERVED, booking=booking)
    # upcoming but outside the lead window: the table is still free
    return TableOccupancy(table=table, status=TableStatus.AVAILABLE, booking=booking)


def occupancy_board(tables, bookings, now: datetime, cleared_ids=frozenset(), **options):
    bookings = list(bookings)
    return [table_occupancy(table, bookings, now, cleared_ids, **options) for table in tables]


def upcoming_bookings(bookings, now: datetime, cleared_ids=frozenset(), **options):
    """Bookings that have not ended, been cleared or been cancelled, soonest first."""
    tz = _venue_tz(options.get('tz'))
    service_duration = options.get('service_duration', DEFAULT_SERVICE_DURATION)
    lead_time = options.get('lead_time', DEFAULT_LEAD_TIME)

    upcoming = []
    for booking in bookings:
        if _seed_status(booking.status) is BookingStatus.CANCELLED:
            continue
        window = time_window(booking, service_duration, lead_time, tz)
        if _derive(booking, now, cleared_ids, window, tz) in _ACTIVE:
            upcoming.append((window, booking))
    upcoming.sort(key=lambda u: (u[0] is None, u[0].start.astimezone(pytz.utc) if u[0] else 0))
    return [booking for _, booking in upcoming]


_EPOCH = datetime(1970, 1, 1, tzinfo=pytz.utc)


def _sort_instant(booking) -> datetime:
    candidates = [booking.created_at]
    if not is_coarse_slot(booking.time_slot):
        candidates.append(booking.time_slot)
    for value in candidates:
        if not value:
            continue
        try:
            return _localize(_parse_timestamp(value), pytz.utc)
        except (TypeError, ValueError):
            continue
    if booking.booking_date:
        try:
            return pytz.utc.localize(datetime.combine(_parse_date(booking.booking_date), time()))
        except (TypeError, ValueError):
            pass
    return _EPOCH


def sort_newest_first(bookings):
    return sorted(bookings, key=_sort_instant, reverse=True)
