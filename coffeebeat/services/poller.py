"""
Periodic booking refresh
"""
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from coffeebeat.errors import ApiError
from coffeebeat.services.api_client import BackendClient
from coffeebeat.services.session_service import SessionService

logger = logging.getLogger(__name__)

MIN_INTERVAL_SECONDS = 30
MAX_INTERVAL_SECONDS = 60


def poll_bookings_job(app):
    """Re-fetch bookings for the signed-in user and feed them to the store."""
    with app.app_context():
        user = SessionService.load()
        if user is None:
            return
        if SessionService.has_any_role(['admin', 'waiter'], user):
            scope = 'all'
        elif SessionService.has_role('customer', user):
            scope = 'mine'
        else:
            return
        store = app.extensions['booking_store']
        try:
            bookings = store.refresh(BackendClient.from_config(app.config), scope=scope)
            logger.debug("Polled %d bookings (%s)", len(bookings), scope)
        except ApiError as e:
            # next tick tries again; nothing is retried sooner
            logger.warning("Booking poll failed: %s", e.message)


def start_poller(app) -> BackgroundScheduler:
    interval = app.config['POLL_INTERVAL_SECONDS']
    interval = max(MIN_INTERVAL_SECONDS, min(MAX_INTERVAL_SECONDS, interval))

    scheduler = BackgroundScheduler(daemon=True)
    scheduler.add_job(
        poll_bookings_job,
        trigger=IntervalTrigger(seconds=interval),
        args=[app],
        id='poll_bookings',
        name='Refresh bookings from backend',
        replace_existing=True,
        max_instances=1,
        coalesce=True
    )
    scheduler.start()
    logger.info("Booking poller started (every %ss)", interval)
    return scheduler
