"""
Cart binding.

Wraps CartManager mutations with a transient busy flag and keeps a current
snapshot of the cart for the UI layer.
"""

from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional

from ..domain.catalog.models import CartLineItem
from ..services.cache.cart_manager import CartItemLike, CartManager
from .base import Observable


class CartBinding(Observable):
    """Observable cart with busy-flag wrapped mutations."""

    def __init__(self, cart: CartManager):
        super().__init__()
        self.manager = cart
        self.cart: List[CartLineItem] = cart.get_cart()
        self.is_loading = False

    @contextmanager
    def _busy(self) -> Iterator[None]:
        self.is_loading = True
        self._notify()
        try:
            yield
        finally:
            self.cart = self.manager.get_cart()
            self.is_loading = False
            self._notify()

    def add_to_cart(self, item: CartItemLike) -> None:
        with self._busy():
            self.manager.add_item(item)

    def remove_from_cart(
        self, product_id: str, size: Optional[str] = None, color: Optional[str] = None
    ) -> None:
        with self._busy():
            self.manager.remove_item(product_id, size, color)

    def update_item_quantity(
        self,
        product_id: str,
        quantity: int,
        size: Optional[str] = None,
        color: Optional[str] = None,
    ) -> None:
        with self._busy():
            self.manager.update_item_quantity(product_id, quantity, size, color)

    def clear_cart(self) -> None:
        with self._busy():
            self.manager.clear_cart()

    def update_cart(self, items: Iterable[CartItemLike]) -> None:
        """Replace the whole cart, e.g. with data synced from another view."""
        with self._busy():
            self.manager.save_cart(items)

    def reload(self) -> None:
        """Re-read the cart without mutating it."""
        self.cart = self.manager.get_cart()
        self._notify()

    def get_cart_count(self) -> int:
        return self.manager.get_cart_count()

    def get_cart_total(self) -> float:
        return self.manager.get_cart_total()
