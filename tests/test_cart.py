from unittest.mock import MagicMock

import pytest

from coffeebeat.errors import NetworkError, NotFound, ValidationError
from coffeebeat.services.cart_service import CartService, OrderBuilder

ITEMS = [
    {'id': 'p1', 'name': 'Latte', 'price': 4.5, 'quantity': 2},
    {'id': 'p2', 'name': 'Croissant', 'price': 3.25, 'quantity': 1},
]

def test_totals_for_dine_in():
    assert OrderBuilder.order_totals(ITEMS, 'DINE_IN', 0.08, 2.99) == {
        'subtotal': 12.25,
        'deliveryFee': 0.0,
        'tax': 0.98,
        'total': 13.23
    }

def test_delivery_fee_only_for_delivery():
    assert OrderBuilder.order_totals(ITEMS, 'DELIVERY', 0.08, 2.99)['total'] == 16.22
    assert OrderBuilder.order_totals(ITEMS, 'TAKEAWAY', 0.08, 2.99)['deliveryFee'] == 0.0

def test_build_dine_in_order():
    order = OrderBuilder.build_order(ITEMS, 'dine_in', table_number=5, special_instructions='no sugar')
    assert order == {
        'items': [{'productId': 'p1', 'quantity': 2}, {'productId': 'p2', 'quantity': 1}],
        'orderType': 'DINE_IN',
        'specialInstructions': 'no sugar',
        'tableNumber': '5'
    }

def test_build_takeaway_and_delivery():
    assert OrderBuilder.build_order(ITEMS, 'TAKEAWAY')['pickupTime'] == 'ASAP'
    delivery = OrderBuilder.build_order(ITEMS, 'DELIVERY', delivery_address='1 Main St, Pune')
    assert delivery['deliveryAddress'] == '1 Main St, Pune'
    assert 'tableNumber' not in delivery

@pytest.mark.parametrize('items, order_type, kwargs', [
    ([], 'DINE_IN', {'table_number': '1'}),
    (ITEMS, 'DINE_IN', {}),
    (ITEMS, 'DELIVERY', {}),
    (ITEMS, 'DRIVE_THRU', {}),
    (ITEMS, None, {}),
])
def test_build_order_rejects_incomplete_input(items, order_type, kwargs):
    with pytest.raises(ValidationError):
        OrderBuilder.build_order(items, order_type, **kwargs)

def test_cart_lines(app):
    CartService.add_item('p1', 'Latte', 4.5)
    CartService.add_item('p1', 'Latte', 4.5, quantity=2)
    CartService.add_item('p2', 'Croissant', '3.25')
    assert [(i['id'], i['quantity']) for i in CartService.items()] == [('p1', 3), ('p2', 1)]
    assert CartService.subtotal() == 16.75

    CartService.update_quantity('p1', 1)
    CartService.update_quantity('p2', 0)
    assert CartService.items() == [{'id': 'p1', 'name': 'Latte', 'price': 4.5, 'quantity': 1}]

    with pytest.raises(NotFound):
        CartService.update_quantity('p9', 2)
    with pytest.raises(ValidationError):
        CartService.add_item('p3', 'Tea', 2.0, quantity=0)

def test_submit_clears_cart_on_success(app):
    CartService.add_item('p1', 'Latte', 4.5)
    backend = MagicMock()
    backend.create_order.return_value = {'id': 'o-1', 'status': 'PENDING'}

    order = OrderBuilder.submit_order(backend, 'TAKEAWAY')

    assert order['id'] == 'o-1'
    assert backend.create_order.call_args.args[0]['orderType'] == 'TAKEAWAY'
    assert CartService.items() == []

def test_failed_submit_keeps_cart(app):
    CartService.add_item('p1', 'Latte', 4.5)
    backend = MagicMock()
    backend.create_order.side_effect = NetworkError("Unable to reach the server. Please try again.")

    with pytest.raises(NetworkError):
        OrderBuilder.submit_order(backend, 'DINE_IN', table_number='4')

    assert backend.create_order.call_count == 1
    assert len(CartService.items()) == 1

def test_invalid_order_is_not_sent(app):
    CartService.add_item('p1', 'Latte', 4.5)
    backend = MagicMock()

    with pytest.raises(ValidationError):
        OrderBuilder.submit_order(backend, 'DELIVERY')

    backend.create_order.assert_not_called()
