from flask import Blueprint, request, jsonify, current_app
from coffeebeat.errors import ValidationError
from coffeebeat.services.api_client import BackendClient
from coffeebeat.services.booking_status import (
    effective_booking_status, is_coarse_slot, options_from_config, sort_newest_first, upcoming_bookings
)
from coffeebeat.services.cleared_bookings import ClearedBookings
from coffeebeat.services.table_registry import TableRegistry
from coffeebeat.utils.decorators import login_required, role_required
from coffeebeat.utils.roles import Role
from coffeebeat.utils.time_utils import slot_to_timestamp, venue_now

bookings_bp = Blueprint('bookings', __name__)

def _store():
    return current_app.extensions['booking_store']

def _client():
    return BackendClient.from_config(current_app.config)

def serialize_bookings(bookings):
    """Booking dicts with the status the views display."""
    options = options_from_config(current_app.config)
    now = venue_now(current_app.config['VENUE_TIMEZONE'])
    cleared = ClearedBookings.cleared_ids()

    if request.args.get('upcoming') == '1':
        bookings = upcoming_bookings(bookings, now, cleared, **options)
    else:
        bookings = sort_newest_first(bookings)

    results = []
    for booking in bookings:
        data = booking.to_dict()
        data['effectiveStatus'] = effective_booking_status(booking, now, cleared, **options).value
        results.append(data)
    return results

def _booking_payload(data, partial=False):
    """Validate a create/update body and convert the coarse slot form to a timestamp."""
    payload = dict(data)

    slot = payload.pop('bookingTimeSlot', None)
    if slot is None and is_coarse_slot(payload.get('timeSlot')):
        slot = payload.pop('timeSlot')
    if slot is not None:
        if not payload.get('bookingDate'):
            raise ValidationError("bookingDate is required with a time slot")
        try:
            payload['timeSlot'] = slot_to_timestamp(payload['bookingDate'], slot)
        except ValueError:
            raise ValidationError("bookingDate must be YYYY-MM-DD")

    if not partial:
        for field in ('tableNumber', 'peopleCount', 'timeSlot'):
            if not payload.get(field):
                raise ValidationError(f"{field} is required")

    if 'peopleCount' in payload:
        try:
            payload['peopleCount'] = int(payload['peopleCount'])
        except (TypeError, ValueError):
            raise ValidationError("peopleCount must be a number")
        if payload['peopleCount'] <= 0:
            raise ValidationError("peopleCount must be positive")

    if 'tableNumber' in payload:
        table = TableRegistry.get_table(payload['tableNumber'])
        if table is None:
            raise ValidationError(f"Unknown table {payload['tableNumber']}")
        payload['tableNumber'] = table.number
        if payload.get('peopleCount') and payload['peopleCount'] > table.capacity:
            raise ValidationError(f"Table {table.number} seats {table.capacity}, requested {payload['peopleCount']}.")

    return payload

@bookings_bp.route('/my-bookings', methods=['GET'])
@login_required
@role_required(Role.CUSTOMER)
def get_my_bookings(current_user):
    bookings = _store().refresh(_client(), scope='mine')
    return jsonify(serialize_bookings(bookings))

@bookings_bp.route('/', methods=['GET'])
@login_required
@role_required(Role.ADMIN, Role.WAITER)
def get_all_bookings(current_user):
    bookings = _store().refresh(_client(), scope='all')
    return jsonify(serialize_bookings(bookings))

@bookings_bp.route('/', methods=['POST'])
@login_required
def create_booking(current_user):
    payload = _booking_payload(request.get_json() or {})
    if current_user.get('id') and 'userId' not in payload:
        payload['userId'] = current_user['id']

    booking = _store().create(_client(), payload)
    current_app.logger.info(f"Booking {booking.id} created for table {booking.table_number}")
    return jsonify(serialize_bookings([booking])[0]), 201

@bookings_bp.route('/<booking_id>', methods=['PUT'])
@login_required
def update_booking(current_user, booking_id):
    payload = _booking_payload(request.get_json() or {}, partial=True)
    booking = _store().update(_client(), booking_id, payload)
    if booking is None:
        return jsonify({'error': 'Booking not found'}), 404
    return jsonify(serialize_bookings([booking])[0]), 200

@bookings_bp.route('/<booking_id>/cancel', methods=['PUT'])
@login_required
def cancel_booking(current_user, booking_id):
    booking = _store().cancel(_client(), booking_id)
    if booking is None:
        return jsonify({'message': 'Booking cancelled successfully.'}), 200
    return jsonify(serialize_bookings([booking])[0]), 200
