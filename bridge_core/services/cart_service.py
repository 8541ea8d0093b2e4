# =============================================================================
# bridge_core/services/cart_service.py
# Shopping cart persisted in the local store
# =============================================================================

from __future__ import annotations
from typing import TYPE_CHECKING, Any, Dict, List

from bridge_core.errors import LocalStorageError
from bridge_core.models import CART_KEY, CartItem
from bridge_core.services.base_service import BaseService

if TYPE_CHECKING:
    from bridge_core.offline.local_store import LocalStore


class CartService(BaseService):
    """
    Cart lines kept under the ``shopping_cart`` key.

    Every change is written back immediately so a reload restores the cart.
    """

    def __init__(self, local_store: LocalStore):
        super().__init__()
        self.local_store = local_store
        self._items: List[CartItem] = self._load()

    def _load(self) -> List[CartItem]:
        stored = self.local_store.get(CART_KEY, [])
        if not isinstance(stored, list):
            return []
        items = []
        for record in stored:
            try:
                items.append(CartItem.from_record(record))
            except (KeyError, TypeError, ValueError) as e:
                self.logger.warning(f"Dropping unreadable cart line: {e}")
        return items

    def _save(self) -> None:
        try:
            self.local_store.set(CART_KEY, [item.to_record() for item in self._items])
        except LocalStorageError as e:
            self.logger.error(f"Cart not persisted: {e.message}")

    @property
    def items(self) -> List[CartItem]:
        return list(self._items)

    def _find(self, product_id: str):
        return next((item for item in self._items if item.id == str(product_id)), None)

    def add(self, product: Dict[str, Any], quantity: int = 1) -> CartItem:
        """Add ``product``; an existing line has its quantity increased."""
        existing = self._find(product["id"])
        if existing is not None:
            existing.quantity += quantity
            item = existing
        else:
            item = CartItem.from_product(product, quantity)
            self._items.append(item)
        self._save()
        return item

    def remove(self, product_id: str) -> None:
        self._items = [item for item in self._items if item.id != str(product_id)]
        self._save()

    def update_quantity(self, product_id: str, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line."""
        item = self._find(product_id)
        if item is not None:
            item.quantity = max(0, quantity)
        self._items = [i for i in self._items if i.quantity > 0]
        self._save()

    def clear(self) -> None:
        self._items = []
        self._save()

    @property
    def total(self) -> float:
        return sum(item.line_total for item in self._items)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    def is_empty(self) -> bool:
        return not self._items
