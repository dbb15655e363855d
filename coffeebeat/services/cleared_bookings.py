import logging

from coffeebeat.services.local_store import LocalStore
from coffeebeat.signals import table_cleared

logger = logging.getLogger(__name__)

STORAGE_KEY = 'clearedBookings'

class ClearedBookings:
    """
    Bookings a staff member completed with "Clear Table".

    The set only grows during a session. It is not authoritative: a
    server-side CANCELLED still wins when statuses are derived.
    """

    @staticmethod
    def cleared_ids():
        stored = LocalStore.get(STORAGE_KEY, [])
        if not isinstance(stored, list):
            logger.warning("Ignoring malformed %s entry", STORAGE_KEY)
            return frozenset()
        return frozenset(str(booking_id) for booking_id in stored)

    @staticmethod
    def is_cleared(booking_id) -> bool:
        return str(booking_id) in ClearedBookings.cleared_ids()

    @staticmethod
    def mark_cleared(booking_id):
        booking_id = str(booking_id)
        stored = LocalStore.get(STORAGE_KEY, [])
        if not isinstance(stored, list):
            stored = []
        if booking_id not in stored:
            stored.append(booking_id)
            LocalStore.set(STORAGE_KEY, stored)
            logger.info("Booking %s marked as cleared", booking_id)
        # other open views refresh on this, even for a repeated clear
        table_cleared.send(ClearedBookings, booking_id=booking_id)
        return booking_id

    @staticmethod
    def subscribe(callback):
        """Call `callback(booking_id)` on every clear. Returns an unsubscribe function."""
        def receiver(sender, **kwargs):
            callback(kwargs['booking_id'])

        table_cleared.connect(receiver, weak=False)
        return lambda: table_cleared.disconnect(receiver)
