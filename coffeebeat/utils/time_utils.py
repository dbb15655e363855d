"""
Clock and booking-time helpers
"""
from datetime import datetime, date, time
import pytz

# representative hour sent to the backend when a customer picks a coarse slot
SLOT_BOOKING_HOURS = {
    'MORNING': 9,
    'AFTERNOON': 14,
    'EVENING': 19,
}
DEFAULT_BOOKING_HOUR = 12


def venue_now(tz_name: str) -> datetime:
    """Current instant in the venue's timezone."""
    return datetime.now(pytz.timezone(tz_name))


def slot_to_timestamp(booking_date, slot: str) -> str:
    """
    "2025-06-01" + "EVENING" -> "2025-06-01T19:00:00", the local timestamp
    format the backend expects.
    """
    if isinstance(booking_date, datetime):
        day = booking_date.date()
    elif isinstance(booking_date, date):
        day = booking_date
    else:
        day = date.fromisoformat(str(booking_date).strip()[:10])
    hour = SLOT_BOOKING_HOURS.get((slot or '').upper(), DEFAULT_BOOKING_HOUR)
    return datetime.combine(day, time(hour)).strftime("%Y-%m-%dT%H:%M:%S")
