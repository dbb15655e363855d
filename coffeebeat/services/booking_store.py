import logging
import queue
import threading
from dataclasses import dataclass

from sqlalchemy import func

from coffeebeat.extensions import db
from coffeebeat.models.booking import Booking
from coffeebeat.services.cleared_bookings import ClearedBookings

logger = logging.getLogger(__name__)


# --- EVENTS ---

@dataclass
class SnapshotReceived:
    bookings: list
    issued_seq: int  # store sequence number when the fetch was sent


@dataclass
class BookingUpserted:
    data: dict


@dataclass
class BookingCancelled:
    booking_id: str


@dataclass
class BookingCleared:
    booking_id: str


class BookingStore:
    """
    Local mirror of backend bookings.

    Poll results and user actions are both turned into events and applied one
    at a time, in arrival order, by whichever thread holds the lock. Every
    applied event bumps a sequence number and stamps the rows it touched. A
    snapshot whose fetch was issued before a row's stamp leaves that row
    alone, so a slow poll cannot undo a cancellation made while it was in
    flight.
    """

    def __init__(self):
        self._queue = queue.Queue()
        self._lock = threading.Lock()
        self._seq = None

    def _current_seq(self):
        if self._seq is None:
            self._seq = db.session.query(func.max(Booking.local_seq)).scalar() or 0
        return self._seq

    def begin_fetch(self):
        with self._lock:
            return self._current_seq()

    def dispatch(self, event):
        self._queue.put(event)
        with self._lock:
            while True:
                try:
                    pending = self._queue.get_nowait()
                except queue.Empty:
                    break
                try:
                    self._apply(pending)
                except Exception:
                    db.session.rollback()
                    logger.exception("Failed to apply %s", type(pending).__name__)
                    raise

    def _apply(self, event):
        self._seq = self._current_seq() + 1
        seq = self._seq

        if isinstance(event, SnapshotReceived):
            skipped = 0
            for data in event.bookings:
                if data.get('id') is None:
                    continue
                row = db.session.get(Booking, str(data['id']))
                if row is None:
                    row = Booking.from_api(data)
                    db.session.add(row)
                elif (row.local_seq or 0) > event.issued_seq:
                    skipped += 1
                    continue
                else:
                    row.update_from_api(data)
                row.local_seq = seq
            if skipped:
                logger.info("Kept %d locally changed bookings over a stale snapshot", skipped)

        elif isinstance(event, BookingUpserted):
            row = db.session.get(Booking, str(event.data['id']))
            if row is None:
                row = Booking.from_api(event.data)
                db.session.add(row)
            else:
                row.update_from_api(event.data)
            row.local_seq = seq

        elif isinstance(event, BookingCancelled):
            row = db.session.get(Booking, str(event.booking_id))
            if row is not None:
                row.status = 'CANCELLED'
                row.local_seq = seq

        elif isinstance(event, BookingCleared):
            # the override set is the record; the row keeps the server status
            ClearedBookings.mark_cleared(event.booking_id)

        else:
            raise TypeError(f"Unknown booking event {event!r}")

        db.session.commit()

    # --- READ ---

    @staticmethod
    def all_bookings():
        return Booking.query.all()

    @staticmethod
    def get(booking_id):
        return db.session.get(Booking, str(booking_id))

    @staticmethod
    def get_many(booking_ids):
        ids = [str(i) for i in booking_ids]
        if not ids:
            return []
        rows = {b.id: b for b in Booking.query.filter(Booking.id.in_(ids)).all()}
        return [rows[i] for i in ids if i in rows]

    # --- BACKEND ROUND TRIPS ---

    def refresh(self, client, scope='all'):
        """Fetch bookings (the caller's own with scope='mine') and mirror them."""
        issued = self.begin_fetch()
        if scope == 'mine':
            data = client.get_my_bookings()
        else:
            data = client.get_all_bookings()
        self.dispatch(SnapshotReceived(bookings=data, issued_seq=issued))
        return self.get_many([d['id'] for d in data if d.get('id') is not None])

    def create(self, client, payload):
        data = client.create_booking(payload)
        self.dispatch(BookingUpserted(data=data))
        return self.get(data['id'])

    def update(self, client, booking_id, payload):
        data = client.update_booking(booking_id, payload)
        if not data:
            data = dict(payload, id=booking_id)
        self.dispatch(BookingUpserted(data=data))
        return self.get(booking_id)

    def cancel(self, client, booking_id):
        data = client.cancel_booking(booking_id)
        if isinstance(data, dict) and data.get('id') is not None:
            self.dispatch(BookingUpserted(data=dict(data, status='CANCELLED')))
        else:
            self.dispatch(BookingCancelled(booking_id=str(booking_id)))
        return self.get(booking_id)

    def clear(self, booking_id):
        self.dispatch(BookingCleared(booking_id=str(booking_id)))
