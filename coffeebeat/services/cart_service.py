import logging

from coffeebeat.errors import NotFound, ValidationError
from coffeebeat.services.local_store import LocalStore

logger = logging.getLogger(__name__)

CART_KEY = 'cart'

ORDER_TYPES = ('DINE_IN', 'TAKEAWAY', 'DELIVERY')

class CartService:
    """Cart lines kept in local storage: {id, name, price, quantity}."""

    @staticmethod
    def items():
        items = LocalStore.get(CART_KEY, [])
        if not isinstance(items, list):
            logger.warning("Cart entry is not a list, starting with an empty cart")
            return []
        return items

    @staticmethod
    def _save(items):
        LocalStore.set(CART_KEY, items)
        return items

    @staticmethod
    def add_item(product_id, name, price, quantity=1):
        if quantity <= 0:
            raise ValidationError("Quantity must be positive")
        product_id = str(product_id)
        items = CartService.items()
        for item in items:
            if str(item['id']) == product_id:
                item['quantity'] += quantity
                break
        else:
            items.append({'id': product_id, 'name': name, 'price': float(price), 'quantity': quantity})
        return CartService._save(items)

    @staticmethod
    def update_quantity(product_id, quantity):
        """Set a line's quantity. Zero or less removes the line."""
        product_id = str(product_id)
        if quantity <= 0:
            return CartService.remove_item(product_id)
        items = CartService.items()
        for item in items:
            if str(item['id']) == product_id:
                item['quantity'] = quantity
                return CartService._save(items)
        raise NotFound(f"Product {product_id} is not in the cart")

    @staticmethod
    def remove_item(product_id):
        items = [item for item in CartService.items() if str(item['id']) != str(product_id)]
        return CartService._save(items)

    @staticmethod
    def clear():
        return CartService._save([])

    @staticmethod
    def subtotal(items=None):
        items = CartService.items() if items is None else items
        return round(sum(item['price'] * item['quantity'] for item in items), 2)


class OrderBuilder:

    @staticmethod
    def order_totals(items, order_type, tax_rate, delivery_fee):
        subtotal = sum(item['price'] * item['quantity'] for item in items)
        fee = delivery_fee if order_type == 'DELIVERY' else 0.0
        tax = subtotal * tax_rate
        return {
            'subtotal': round(subtotal, 2),
            'deliveryFee': round(fee, 2),
            'tax': round(tax, 2),
            'total': round(subtotal + fee + tax, 2)
        }

    @staticmethod
    def build_order(items, order_type, table_number=None, delivery_address=None, special_instructions=None):
        """Request body for POST /orders. Raises ValidationError when a required field is missing."""
        if not items:
            raise ValidationError("Your cart is empty")

        order_type = (order_type or '').upper()
        if order_type not in ORDER_TYPES:
            raise ValidationError(f"Unknown order type: {order_type or 'none'}")
        if order_type == 'DINE_IN' and not table_number:
            raise ValidationError("Please enter a table number")
        if order_type == 'DELIVERY' and not delivery_address:
            raise ValidationError("Please enter a delivery address")

        order = {
            'items': [{'productId': item['id'], 'quantity': item['quantity']} for item in items],
            'orderType': order_type,
            'specialInstructions': special_instructions or ''
        }
        if order_type == 'DINE_IN':
            order['tableNumber'] = str(table_number)
        elif order_type == 'DELIVERY':
            order['deliveryAddress'] = delivery_address
        else:
            order['pickupTime'] = 'ASAP'
        return order

    @staticmethod
    def submit_order(client, order_type, table_number=None, delivery_address=None, special_instructions=None):
        """
        Send the current cart as an order. The cart is emptied only when the
        backend accepts it; failures propagate untouched and are not retried.
        """
        items = CartService.items()
        payload = OrderBuilder.build_order(items, order_type, table_number, delivery_address, special_instructions)
        order = client.create_order(payload)
        CartService.clear()
        logger.info("Order %s placed (%s, %d lines)", (order or {}).get('id'), payload['orderType'], len(items))
        return order
