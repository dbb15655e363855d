from blinker import Namespace

_signals = Namespace()

# sender: LocalStore, kwargs: key, value
local_entry_changed = _signals.signal('local-entry-changed')

# sender: ClearedBookings, kwargs: booking_id
table_cleared = _signals.signal('table-cleared')
