from flask import Blueprint, request, jsonify, current_app
from coffeebeat.errors import ValidationError
from coffeebeat.services.api_client import BackendClient
from coffeebeat.services.cart_service import CartService, OrderBuilder
from coffeebeat.services.preferences import AddressBook
from coffeebeat.utils.decorators import login_required

cart_bp = Blueprint('cart', __name__)

def _totals(items, order_type):
    return OrderBuilder.order_totals(
        items,
        (order_type or 'DINE_IN').upper(),
        current_app.config['TAX_RATE'],
        current_app.config['DELIVERY_FEE']
    )

def _cart_response(items):
    return jsonify({
        'items': items,
        'totals': _totals(items, request.args.get('orderType'))
    })

@cart_bp.route('/', methods=['GET'])
def get_cart():
    return _cart_response(CartService.items())

@cart_bp.route('/', methods=['POST'])
def add_to_cart():
    data = request.get_json() or {}
    if not data.get('productId') or data.get('price') is None:
        return jsonify({'message': 'productId and price are required'}), 400
    try:
        price = float(data['price'])
        quantity = int(data.get('quantity', 1))
    except (TypeError, ValueError):
        return jsonify({'message': 'price and quantity must be numbers'}), 400

    items = CartService.add_item(data['productId'], data.get('name', ''), price, quantity)
    return _cart_response(items), 201

@cart_bp.route('/', methods=['DELETE'])
def clear_cart():
    return _cart_response(CartService.clear())

@cart_bp.route('/items/<product_id>', methods=['PUT'])
def update_item(product_id):
    data = request.get_json() or {}
    try:
        quantity = int(data.get('quantity'))
    except (TypeError, ValueError):
        return jsonify({'message': 'quantity must be a number'}), 400
    return _cart_response(CartService.update_quantity(product_id, quantity))

@cart_bp.route('/items/<product_id>', methods=['DELETE'])
def remove_item(product_id):
    return _cart_response(CartService.remove_item(product_id))

@cart_bp.route('/totals', methods=['GET'])
def get_totals():
    return jsonify(_totals(CartService.items(), request.args.get('orderType')))

@cart_bp.route('/checkout', methods=['POST'])
@login_required
def checkout(current_user):
    data = request.get_json() or {}
    order_type = (data.get('orderType') or 'DINE_IN').upper()

    delivery_address = data.get('deliveryAddress')
    if order_type == 'DELIVERY' and not delivery_address:
        selected = AddressBook.selected()
        if selected is None:
            raise ValidationError("Please select a delivery address")
        delivery_address = AddressBook.format(selected)

    totals = _totals(CartService.items(), order_type)
    order = OrderBuilder.submit_order(
        BackendClient.from_config(current_app.config),
        order_type,
        table_number=data.get('tableNumber'),
        delivery_address=delivery_address,
        special_instructions=data.get('specialInstructions')
    )
    return jsonify({'order': order, 'totals': totals}), 201
