from flask import Blueprint, request, jsonify, current_app
from coffeebeat.errors import NotFound, ValidationError
from coffeebeat.services.api_client import BackendClient
from coffeebeat.services.booking_status import TableStatus, occupancy_board, options_from_config, table_occupancy
from coffeebeat.services.cleared_bookings import ClearedBookings
from coffeebeat.services.table_registry import LOCATIONS, TableRegistry
from coffeebeat.utils.decorators import login_required, role_required
from coffeebeat.utils.roles import Role
from coffeebeat.utils.time_utils import venue_now

tables_bp = Blueprint('tables', __name__)

def _store():
    return current_app.extensions['booking_store']

def _occupancy(table):
    now = venue_now(current_app.config['VENUE_TIMEZONE'])
    return table_occupancy(table, _store().all_bookings(), now, ClearedBookings.cleared_ids(),
                           **options_from_config(current_app.config))

def _get_table_or_404(number):
    table = TableRegistry.get_table(number)
    if table is None:
        raise NotFound(f"Table {number} not found")
    return table

@tables_bp.route('/', methods=['GET'])
@login_required
@role_required(Role.ADMIN, Role.WAITER)
def get_tables(current_user):
    # ?refresh=0 renders from the local mirror without calling the backend
    if request.args.get('refresh', '1') != '0':
        _store().refresh(BackendClient.from_config(current_app.config), scope='all')

    location = request.args.get('location')
    if location:
        if location.lower() not in [l.lower() for l in LOCATIONS]:
            return jsonify({'message': f'Unknown location {location}'}), 400
        tables = TableRegistry.tables_by_location(location)
    else:
        tables = TableRegistry.all_tables()

    now = venue_now(current_app.config['VENUE_TIMEZONE'])
    board = occupancy_board(tables, _store().all_bookings(), now, ClearedBookings.cleared_ids(),
                            **options_from_config(current_app.config))

    summary = {'AVAILABLE': 0, 'RESERVED': 0, 'OCCUPIED': 0}
    for entry in board:
        summary[entry.status.value] += 1

    return jsonify({
        'tables': [entry.to_dict() for entry in board],
        'summary': summary,
        'locations': list(LOCATIONS)
    })

@tables_bp.route('/<number>', methods=['GET'])
@login_required
@role_required(Role.ADMIN, Role.WAITER)
def get_table(current_user, number):
    table = _get_table_or_404(number)
    return jsonify(_occupancy(table).to_dict())

@tables_bp.route('/<number>/clear', methods=['POST'])
@login_required
@role_required(Role.ADMIN, Role.WAITER)
def clear_table(current_user, number):
    table = _get_table_or_404(number)
    occupancy = _occupancy(table)
    if occupancy.status is not TableStatus.OCCUPIED:
        raise ValidationError(f"Table {table.number} is not occupied")

    _store().clear(occupancy.booking.id)
    current_app.logger.info(f"Table {table.number} cleared (booking {occupancy.booking.id})")
    return jsonify({
        'message': f'Table {table.number} cleared',
        'clearedBookingId': occupancy.booking.id,
        'occupancy': _occupancy(table).to_dict()
    })
