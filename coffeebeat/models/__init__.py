from coffeebeat.models.booking import Booking
from coffeebeat.models.local_entry import LocalEntry
from coffeebeat.models.table import Table
