import logging
from datetime import datetime, timedelta

import pytz
import pytest

from coffeebeat.models import Booking
from coffeebeat.services.booking_status import (
    BookingStatus, TableStatus, effective_booking_status, occupancy_board, sort_newest_first,
    table_occupancy, time_window, upcoming_bookings, DEFAULT_SERVICE_DURATION
)
from coffeebeat.services.table_registry import TableRegistry

T = datetime(2025, 6, 1, 19, 0)

def timed_booking(booking_id='b1', table='T2', when=T, status='BOOKED'):
    return Booking(id=booking_id, table_number=table, people_count=2,
                   time_slot=when.isoformat(), status=status)

def slot_booking(booking_id='b3', table='T3', day='2025-06-01', slot='EVENING', status='BOOKED'):
    return Booking(id=booking_id, table_number=table, people_count=2,
                   time_slot=slot, booking_date=day, status=status)

# --- effective status ---

@pytest.mark.parametrize('now', [T - timedelta(hours=5), T, T + timedelta(days=2)])
def test_cancelled_always_wins(now):
    booking = timed_booking(status='CANCELLED')
    assert effective_booking_status(booking, now, frozenset({'b1'})) == BookingStatus.CANCELLED
    assert effective_booking_status(booking, now) == BookingStatus.CANCELLED

def test_cleared_booking_is_completed():
    booking = timed_booking()
    assert effective_booking_status(booking, T - timedelta(hours=5), {'b1'}) == BookingStatus.COMPLETED
    # occupied by time, cleared by staff
    assert effective_booking_status(booking, T + timedelta(minutes=10), {'b1'}) == BookingStatus.COMPLETED

def test_timestamp_ladder():
    booking = timed_booking()
    assert effective_booking_status(booking, T - timedelta(hours=3)) == BookingStatus.BOOKED
    assert effective_booking_status(booking, T - timedelta(hours=2)) == BookingStatus.RESERVED
    assert effective_booking_status(booking, T - timedelta(hours=1)) == BookingStatus.RESERVED
    assert effective_booking_status(booking, T) == BookingStatus.OCCUPIED
    assert effective_booking_status(booking, T + DEFAULT_SERVICE_DURATION) == BookingStatus.COMPLETED

def test_coarse_slot_has_no_lead_window():
    booking = slot_booking()
    assert effective_booking_status(booking, datetime(2025, 6, 1, 16, 0)) == BookingStatus.BOOKED
    assert effective_booking_status(booking, datetime(2025, 6, 1, 17, 0)) == BookingStatus.OCCUPIED
    assert effective_booking_status(booking, datetime(2025, 6, 1, 22, 0)) == BookingStatus.COMPLETED

def test_status_never_moves_backwards_as_time_advances():
    rank = [BookingStatus.BOOKED, BookingStatus.RESERVED, BookingStatus.OCCUPIED, BookingStatus.COMPLETED]
    booking = timed_booking()
    now = T - timedelta(hours=4)
    previous = 0
    while now < T + timedelta(hours=4):
        current = rank.index(effective_booking_status(booking, now))
        assert current >= previous
        previous = current
        now += timedelta(minutes=15)

def test_server_status_is_a_lower_bound():
    booking = timed_booking(status='OCCUPIED')
    assert effective_booking_status(booking, T - timedelta(hours=5)) == BookingStatus.OCCUPIED
    completed = timed_booking(status='COMPLETED')
    assert effective_booking_status(completed, T) == BookingStatus.COMPLETED

def test_idempotent():
    booking = timed_booking()
    cleared = frozenset({'other'})
    now = T - timedelta(minutes=30)
    first = effective_booking_status(booking, now, cleared)
    second = effective_booking_status(booking, now, cleared)
    assert first == second == BookingStatus.RESERVED
    assert booking.status == 'BOOKED'

def test_aware_now_is_converted_to_venue_time():
    booking = timed_booking(when=datetime(2025, 6, 1, 19, 0))
    # 13:30 UTC is 19:00 in Kolkata
    now = pytz.utc.localize(datetime(2025, 6, 1, 13, 30))
    assert effective_booking_status(booking, now, tz='Asia/Kolkata') == BookingStatus.OCCUPIED
    # read as 19:00 UTC the booking is still five and a half hours away
    assert effective_booking_status(booking, now, tz='UTC') == BookingStatus.BOOKED

def test_custom_service_duration():
    booking = timed_booking()
    now = T + timedelta(minutes=100)
    assert effective_booking_status(booking, now, service_duration=timedelta(minutes=90)) == BookingStatus.COMPLETED
    assert effective_booking_status(booking, now) == BookingStatus.OCCUPIED

@pytest.mark.parametrize('bad_slot', ['12:00-13:00', 'not a date', None, ''])
def test_malformed_time_slot_degrades_to_booked(bad_slot, caplog):
    booking = Booking(id='bad', table_number='T1', time_slot=bad_slot, status='BOOKED')
    with caplog.at_level(logging.WARNING):
        status = effective_booking_status(booking, T)
    assert status == BookingStatus.BOOKED
    assert 'unusable time data' in caplog.text

def test_coarse_slot_without_date_is_unusable():
    booking = slot_booking(day=None)
    assert time_window(booking) is None
    assert effective_booking_status(booking, T) == BookingStatus.BOOKED

def test_time_window_for_utc_suffix():
    booking = Booking(id='z', table_number='T1', time_slot='2025-06-01T19:00:00Z', status='BOOKED')
    window = time_window(booking, tz='UTC')
    assert window.start == pytz.utc.localize(datetime(2025, 6, 1, 19, 0))
    assert window.lead_start == window.start - timedelta(hours=2)

# --- table occupancy ---

def test_table_without_bookings_is_available():
    table = TableRegistry.get_table('T1')
    occupancy = table_occupancy(table, [], T)
    assert occupancy.status == TableStatus.AVAILABLE
    assert occupancy.booking is None

def test_evening_slot_occupancy_over_the_day():
    table = TableRegistry.get_table('T3')
    bookings = [slot_booking()]
    assert table_occupancy(table, bookings, datetime(2025, 6, 1, 16, 0)).status == TableStatus.AVAILABLE
    during = table_occupancy(table, bookings, datetime(2025, 6, 1, 18, 0))
    assert during.status == TableStatus.OCCUPIED
    assert during.booking.id == 'b3'
    after = table_occupancy(table, bookings, datetime(2025, 6, 1, 23, 0))
    assert after.status == TableStatus.AVAILABLE
    assert after.booking is None

def test_reserved_within_lead_window():
    table = TableRegistry.get_table('T2')
    occupancy = table_occupancy(table, [timed_booking()], T - timedelta(hours=1))
    assert occupancy.status == TableStatus.RESERVED

def test_elapsed_booking_frees_table():
    table = TableRegistry.get_table('T2')
    occupancy = table_occupancy(table, [timed_booking()], T + DEFAULT_SERVICE_DURATION)
    assert occupancy.status == TableStatus.AVAILABLE

def test_other_tables_and_cancelled_bookings_are_ignored():
    table = TableRegistry.get_table('T2')
    bookings = [timed_booking('x', table='T5'), timed_booking('y', status='CANCELLED')]
    assert table_occupancy(table, bookings, T).status == TableStatus.AVAILABLE

def test_cleared_booking_frees_table():
    table = TableRegistry.get_table('T2')
    occupancy = table_occupancy(table, [timed_booking()], T + timedelta(minutes=5), {'b1'})
    assert occupancy.status == TableStatus.AVAILABLE
    assert occupancy.booking is None

def test_double_booking_shows_earliest_start():
    table = TableRegistry.get_table('T2')
    early = timed_booking('early', when=T)
    late = timed_booking('late', when=T + timedelta(minutes=30))
    occupancy = table_occupancy(table, [late, early], T + timedelta(minutes=45))
    assert occupancy.status == TableStatus.OCCUPIED
    assert occupancy.booking.id == 'early'

@pytest.mark.parametrize('seed', ['BOOKED', 'RESERVED', 'OCCUPIED'])
def test_malformed_booking_does_not_block_table(seed):
    table = TableRegistry.get_table('T1')
    bookings = [Booking(id='bad', table_number='T1', time_slot='garbage', status=seed)]
    occupancy = table_occupancy(table, bookings, T)
    assert occupancy.status == TableStatus.AVAILABLE
    assert occupancy.booking is None

def test_malformed_booking_does_not_hide_a_valid_one():
    table = TableRegistry.get_table('T2')
    bad = Booking(id='bad', table_number='T2', time_slot='garbage', status='OCCUPIED')
    occupancy = table_occupancy(table, [bad, timed_booking()], T - timedelta(hours=1))
    assert occupancy.status == TableStatus.RESERVED
    assert occupancy.booking.id == 'b1'

def test_fractional_seconds_in_timestamps():
    booking = Booking(id='f', table_number='T1', time_slot='2025-06-01T19:00:00.12', status='BOOKED')
    assert time_window(booking, tz='UTC').start == pytz.utc.localize(datetime(2025, 6, 1, 19, 0, 0, 120000))

def test_board_covers_every_table():
    board = occupancy_board(TableRegistry.all_tables(), [slot_booking()], datetime(2025, 6, 1, 18, 0))
    assert len(board) == 8
    statuses = {entry.table.number: entry.status for entry in board}
    assert statuses['T3'] == TableStatus.OCCUPIED
    assert statuses['T1'] == TableStatus.AVAILABLE

# --- listing helpers ---

def test_upcoming_bookings_skip_finished_ones():
    bookings = [
        timed_booking('past', when=T - timedelta(days=1)),
        timed_booking('later', when=T + timedelta(hours=6)),
        timed_booking('soon', when=T + timedelta(hours=1)),
        timed_booking('cancelled', when=T + timedelta(hours=1), status='CANCELLED'),
    ]
    assert [b.id for b in upcoming_bookings(bookings, T)] == ['soon', 'later']

def test_sort_newest_first():
    older = Booking(id='a', created_at='2025-05-01T10:00:00', time_slot='EVENING', booking_date='2025-06-01')
    newer = Booking(id='b', created_at='2025-05-02T10:00:00Z', time_slot='MORNING', booking_date='2025-06-01')
    undated = Booking(id='c', time_slot='MORNING', booking_date='2025-04-01')
    assert [b.id for b in sort_newest_first([older, undated, newer])] == ['b', 'a', 'c']
