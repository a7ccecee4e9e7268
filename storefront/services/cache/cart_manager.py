"""
Cart Manager Service

Shopping cart persisted as a single long-lived cache entry. The cart has no
remote source of truth before checkout, so it is always read from the cache
and never refetched.
"""

from typing import Any, Iterable, List, Mapping, Optional, Union

import structlog
from pydantic import TypeAdapter, ValidationError

from ...constants import CacheKeys, CacheTTL
from ...domain.cache.value_objects import CartMatchMode
from ...domain.catalog.models import CartLineItem
from .cache_manager import CacheManager

logger = structlog.get_logger()

CartItemLike = Union[CartLineItem, Mapping[str, Any]]

_CART_ADAPTER = TypeAdapter(List[CartLineItem])


class CartManager:
    """
    Cart operations on top of a CacheManager.

    Lines are merged by ``(product_id, selected_size, selected_color)`` when
    added. Remove and update follow ``match_mode``: IDENTITY narrows the
    match with the size/colour arguments when given, PRODUCT matches on
    ``product_id`` alone and ignores them.
    """

    CART_KEY = CacheKeys.CART
    CART_TTL = CacheTTL.CART

    def __init__(
        self,
        cache: CacheManager,
        match_mode: CartMatchMode = CartMatchMode.IDENTITY,
    ):
        self.cache = cache
        self.match_mode = CartMatchMode(match_mode)

    def get_cart(self) -> List[CartLineItem]:
        """Current cart lines; an absent or unreadable cart is empty."""
        cached = self.cache.get(self.CART_KEY, schema=_CART_ADAPTER)
        if cached is None:
            return []

        try:
            items = _CART_ADAPTER.validate_python(cached)
        except ValidationError as e:
            logger.warning("Discarding unreadable cart", error=str(e))
            return []

        return [item.model_copy() for item in items]

    def save_cart(self, items: Iterable[CartItemLike]) -> None:
        self.cache.set(self.CART_KEY, self._coerce_all(items), self.CART_TTL)

    def add_item(self, item: CartItemLike) -> List[CartLineItem]:
        """
        Add a line, or increase the quantity of the line with the same identity.

        A missing or zero quantity on ``item`` counts as one.
        """
        item = self._coerce(item)
        added = item.quantity or 1
        cart = self.get_cart()

        existing = next((line for line in cart if line.identity == item.identity), None)
        if existing is not None:
            existing.quantity = existing.billed_quantity + added
        else:
            cart.append(item.model_copy(update={"quantity": added}))

        self.save_cart(cart)
        return cart

    def remove_item(
        self,
        product_id: str,
        size: Optional[str] = None,
        color: Optional[str] = None,
    ) -> List[CartLineItem]:
        """Remove every line matching ``product_id`` (and size/colour in IDENTITY mode)."""
        cart = [
            line
            for line in self.get_cart()
            if not self._matches(line, product_id, size, color)
        ]
        self.save_cart(cart)
        return cart

    def update_item_quantity(
        self,
        product_id: str,
        quantity: int,
        size: Optional[str] = None,
        color: Optional[str] = None,
    ) -> bool:
        """
        Set the quantity of the first matching line, clamped at zero.

        Zero-quantity lines stay in the cart until removed explicitly.

        Returns:
            False when no line matched; the cart is left untouched
        """
        cart = self.get_cart()
        line = next(
            (line for line in cart if self._matches(line, product_id, size, color)),
            None,
        )
        if line is None:
            return False

        line.quantity = max(0, int(quantity))
        self.save_cart(cart)
        return True

    def clear_cart(self) -> None:
        """Delete the cart entry; an emptied cart reads back as ``[]``."""
        self.cache.delete(self.CART_KEY)

    def get_cart_count(self) -> int:
        """Sum of line quantities, counting a zero quantity as one."""
        return sum(line.quantity or 1 for line in self.get_cart())

    def get_cart_total(self) -> float:
        """
        Sum of unit price times quantity; the discounted price wins.

        A line without a quantity is billed once, a zero-quantity line adds nothing.
        """
        return sum(line.unit_price * line.billed_quantity for line in self.get_cart())

    def _matches(
        self,
        line: CartLineItem,
        product_id: str,
        size: Optional[str],
        color: Optional[str],
    ) -> bool:
        if line.product_id != product_id:
            return False
        if self.match_mode == CartMatchMode.PRODUCT:
            return True
        if size is not None and line.selected_size != size:
            return False
        if color is not None and line.selected_color != color:
            return False
        return True

    @staticmethod
    def _coerce(item: CartItemLike) -> CartLineItem:
        if isinstance(item, CartLineItem):
            return item
        return CartLineItem.model_validate(item)

    def _coerce_all(self, items: Iterable[CartItemLike]) -> List[CartLineItem]:
        return [self._coerce(item).model_copy() for item in items]
