from flask import Blueprint, request, jsonify
from coffeebeat.services.preferences import AddressBook, Favorites, Theme

preferences_bp = Blueprint('preferences', __name__)

# --- FAVORITES ---

@preferences_bp.route('/favorites', methods=['GET'])
def get_favorites():
    return jsonify({'favorites': Favorites.product_ids()})

@preferences_bp.route('/favorites', methods=['POST'])
def toggle_favorite():
    data = request.get_json() or {}
    if not data.get('productId'):
        return jsonify({'message': 'productId is required'}), 400
    is_favorite = Favorites.toggle(data['productId'])
    return jsonify({'productId': data['productId'], 'favorite': is_favorite, 'favorites': Favorites.product_ids()})

# --- ADDRESSES ---

@preferences_bp.route('/addresses', methods=['GET'])
def get_addresses():
    return jsonify({'addresses': AddressBook.addresses(), 'selected': AddressBook.selected()})

@preferences_bp.route('/addresses', methods=['POST'])
def add_address():
    address = AddressBook.add(request.get_json() or {})
    return jsonify(address), 201

@preferences_bp.route('/addresses/<address_id>', methods=['DELETE'])
def delete_address(address_id):
    return jsonify({'addresses': AddressBook.remove(address_id)})

@preferences_bp.route('/addresses/<address_id>/select', methods=['PUT'])
def select_address(address_id):
    return jsonify(AddressBook.select(address_id))

# --- THEME ---

@preferences_bp.route('/theme', methods=['GET'])
def get_theme():
    return jsonify({'theme': Theme.get()})

@preferences_bp.route('/theme', methods=['PUT'])
def set_theme():
    data = request.get_json() or {}
    return jsonify({'theme': Theme.set(data.get('theme'))})
