"""Client-local rental cart.

The cart is never stored server side; it is serialized to JSON for local
persistence and cleared only after a successful charge. Prices are
snapshotted when an item is added.
"""
import json
import logging
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class CartItem:
    def __init__(self, listing_id: str, title: str, unit_price: float, image_url: Optional[str] = None,
                 quantity: int = 1, rental_days: int = 1):
        if not listing_id:
            raise ValueError('listing_id is required')
        if quantity < 1:
            raise ValueError('quantity must be >= 1')
        if rental_days < 1:
            raise ValueError('rental_days must be >= 1')
        self.listing_id = listing_id
        self.title = title
        self.unit_price = float(unit_price)
        self.image_url = image_url
        self.quantity = int(quantity)
        self.rental_days = int(rental_days)

    @property
    def subtotal(self) -> float:
        return self.unit_price * self.quantity * self.rental_days

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.listing_id,
            'title': self.title,
            'price': self.unit_price,
            'imageUrl': self.image_url,
            'quantity': self.quantity,
            'rentalDuration': self.rental_days
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CartItem':
        return cls(
            listing_id=data.get('id') or data.get('listing_id'),
            title=data.get('title') or '',
            unit_price=data.get('price') or 0,
            image_url=data.get('imageUrl'),
            quantity=int(data.get('quantity') or 1),
            rental_days=int(data.get('rentalDuration') or 1)
        )


class Cart:
    def __init__(self, items: Optional[List[CartItem]] = None):
        self._items: Dict[str, CartItem] = {}
        for item in items or []:
            self._items[item.listing_id] = item

    @property
    def items(self) -> List[CartItem]:
        return list(self._items.values())

    def __len__(self):
        return len(self._items)

    def get(self, listing_id: str) -> Optional[CartItem]:
        return self._items.get(listing_id)

    def add(self, item: CartItem) -> CartItem:
        """Add an item; adding a listing already in the cart bumps its quantity by one."""
        existing = self._items.get(item.listing_id)
        if existing:
            existing.quantity += 1
            return existing
        self._items[item.listing_id] = item
        return item

    def update_quantity(self, listing_id: str, quantity: int, rental_days: Optional[int] = None) -> CartItem:
        item = self._items.get(listing_id)
        if item is None:
            raise KeyError(listing_id)
        if quantity < 1:
            raise ValueError('quantity must be >= 1')
        if rental_days is not None and rental_days < 1:
            raise ValueError('rental_days must be >= 1')
        item.quantity = int(quantity)
        if rental_days:
            item.rental_days = int(rental_days)
        return item

    def remove(self, listing_id: str) -> bool:
        return self._items.pop(listing_id, None) is not None

    def clear(self):
        self._items.clear()

    @property
    def total(self) -> float:
        return sum(item.subtotal for item in self._items.values())

    def to_json(self) -> str:
        return json.dumps([item.to_dict() for item in self._items.values()])

    @classmethod
    def from_json(cls, raw: Optional[str]) -> 'Cart':
        """Restore a saved cart; unreadable data gives an empty cart."""
        if not raw:
            return cls()
        try:
            data = json.loads(raw)
            return cls([CartItem.from_dict(entry) for entry in data])
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Discarding unreadable saved cart: {e}")
            return cls()

    def checkout(self, charge: Callable[[float], Any]) -> bool:
        """Charge the cart total; the cart is cleared only when the charge succeeds.

        `charge` receives the total and returns a truthy value, or a dict
        with a `success` flag.
        """
        if not self._items:
            raise ValueError('cart is empty')
        amount = round(self.total, 2)
        result = charge(amount)
        success = result.get('success', False) if isinstance(result, dict) else bool(result)
        if success:
            logger.info(f"Checkout of {len(self._items)} items for {amount} succeeded")
            self.clear()
        else:
            logger.warning(f"Checkout for {amount} was not completed")
        return success
