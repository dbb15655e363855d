import uuid

from coffeebeat.errors import NotFound, ValidationError
from coffeebeat.services.local_store import LocalStore

FAVORITES_KEY = 'favorites'
ADDRESSES_KEY = 'userAddresses'
SELECTED_ADDRESS_KEY = 'selectedAddress'
THEME_KEY = 'theme'

THEMES = ('light', 'dark')

def _as_list(value):
    return value if isinstance(value, list) else []

class Favorites:

    @staticmethod
    def product_ids():
        return _as_list(LocalStore.get(FAVORITES_KEY, []))

    @staticmethod
    def toggle(product_id):
        """Add or remove a product; returns True when it is now a favorite."""
        product_id = str(product_id)
        favorites = [str(p) for p in Favorites.product_ids()]
        if product_id in favorites:
            favorites.remove(product_id)
            LocalStore.set(FAVORITES_KEY, favorites)
            return False
        favorites.append(product_id)
        LocalStore.set(FAVORITES_KEY, favorites)
        return True


class AddressBook:
    REQUIRED = ('street', 'city')

    @staticmethod
    def addresses():
        return _as_list(LocalStore.get(ADDRESSES_KEY, []))

    @staticmethod
    def add(address):
        missing = [f for f in AddressBook.REQUIRED if not address.get(f)]
        if missing:
            raise ValidationError(f"Missing address fields: {', '.join(missing)}")

        addresses = AddressBook.addresses()
        entry = dict(address, id=address.get('id') or uuid.uuid4().hex[:8])
        if not addresses:
            entry['isDefault'] = True
        elif entry.get('isDefault'):
            for other in addresses:
                other['isDefault'] = False
        entry.setdefault('isDefault', False)
        addresses.append(entry)
        LocalStore.set(ADDRESSES_KEY, addresses)
        return entry

    @staticmethod
    def remove(address_id):
        addresses = AddressBook.addresses()
        remaining = [a for a in addresses if a.get('id') != address_id]
        if len(remaining) == len(addresses):
            raise NotFound("Address not found")
        if remaining and not any(a.get('isDefault') for a in remaining):
            remaining[0]['isDefault'] = True
        LocalStore.set(ADDRESSES_KEY, remaining)
        selected = LocalStore.get(SELECTED_ADDRESS_KEY)
        if isinstance(selected, dict) and selected.get('id') == address_id:
            LocalStore.remove(SELECTED_ADDRESS_KEY)
        return remaining

    @staticmethod
    def select(address_id):
        """Address the checkout will deliver to."""
        for address in AddressBook.addresses():
            if address.get('id') == address_id:
                LocalStore.set(SELECTED_ADDRESS_KEY, address)
                return address
        raise NotFound("Address not found")

    @staticmethod
    def selected():
        selected = LocalStore.get(SELECTED_ADDRESS_KEY)
        if isinstance(selected, dict):
            return selected
        for address in AddressBook.addresses():
            if address.get('isDefault'):
                return address
        return None

    @staticmethod
    def format(address):
        parts = [address.get('street'), address.get('city'), address.get('state'), address.get('zipCode')]
        return ', '.join(p for p in parts if p)


class Theme:

    @staticmethod
    def get():
        theme = LocalStore.get(THEME_KEY, 'light')
        return theme if theme in THEMES else 'light'

    @staticmethod
    def set(theme):
        if theme not in THEMES:
            raise ValidationError(f"Theme must be one of: {', '.join(THEMES)}")
        return LocalStore.set(THEME_KEY, theme)
