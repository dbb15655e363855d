import json
import logging

from coffeebeat.extensions import db
from coffeebeat.models.local_entry import LocalEntry
from coffeebeat.signals import local_entry_changed

logger = logging.getLogger(__name__)

class LocalStore:
    """
    Durable key/value storage for client-local state (cart, favorites,
    cleared bookings, session tokens...).

    Every key holds an independent JSON document. All consumers read and
    write through this class; nothing else touches the local_entries table.
    """

    @staticmethod
    def get(key, default=None):
        entry = db.session.get(LocalEntry, key)
        if entry is None:
            return default
        try:
            return json.loads(entry.value)
        except (TypeError, ValueError):
            logger.warning("Discarding corrupt local entry %r", key)
            db.session.delete(entry)
            db.session.commit()
            return default

    @staticmethod
    def set(key, value):
        payload = json.dumps(value)
        entry = db.session.get(LocalEntry, key)
        if entry is None:
            entry = LocalEntry(key=key, value=payload)
            db.session.add(entry)
        else:
            entry.value = payload
        db.session.commit()
        local_entry_changed.send(LocalStore, key=key, value=value)
        return value

    @staticmethod
    def remove(key):
        entry = db.session.get(LocalEntry, key)
        if entry is None:
            return False
        db.session.delete(entry)
        db.session.commit()
        local_entry_changed.send(LocalStore, key=key, value=None)
        return True

    @staticmethod
    def subscribe(key, callback):
        """
        Call `callback(value)` whenever `key` is written or removed.
        Returns a function that cancels the subscription.
        """
        def receiver(sender, **kwargs):
            if kwargs.get('key') == key:
                callback(kwargs.get('value'))

        local_entry_changed.connect(receiver, weak=False)

        def unsubscribe():
            local_entry_changed.disconnect(receiver)

        return unsubscribe
