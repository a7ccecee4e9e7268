"""
Storefront Data-Access Service

Read-through access to backend resources (products, categories, wilayas,
site settings, about-us content) and the uncached order write path.
"""

from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, TypeVar

import structlog
from opentelemetry import trace
from pydantic import TypeAdapter

from ...constants import CacheKeys, CacheTTL
from ...domain.cache.repository_interfaces import StorefrontBackend
from ...domain.catalog.models import (
    AboutUsContent,
    Category,
    OrderDraft,
    Product,
    ProductColor,
    ProductVariant,
    SiteSettings,
    Wilaya,
)
from ...infrastructure.backend.default_wilayas import default_wilayas
from ...infrastructure.storage.exceptions import (
    FetchError,
    OrderWriteError,
    PartialOrderWriteError,
)
from ..cache.cache_manager import CacheManager
from ..cache.cart_manager import CartManager

logger = structlog.get_logger()
tracer = trace.get_tracer(__name__)

T = TypeVar("T")

_PRODUCTS = TypeAdapter(List[Product])
_CATEGORIES = TypeAdapter(List[Category])
_WILAYAS = TypeAdapter(List[Wilaya])
_SITE_SETTINGS = TypeAdapter(SiteSettings)
_ABOUT_US = TypeAdapter(AboutUsContent)


def _detached(data: T) -> T:
    """Copy list results so callers cannot reorder or grow the cached list."""
    return list(data) if isinstance(data, list) else data


def map_product_row(row: Mapping[str, Any]) -> Product:
    """
    Map a product row with embedded ``product_variants`` to a Product.

    Sizes keep first-seen order; colours are deduplicated by name with the
    last hex seen winning. Without variants the row's own lists are used.
    """
    variants = [ProductVariant.model_validate(v) for v in row.get("product_variants") or []]

    sizes = list(dict.fromkeys(v.size for v in variants))
    colors: Dict[str, ProductColor] = {}
    for v in variants:
        colors[v.color_name] = ProductColor(name=v.color_name, hex=v.color_hex)

    return Product(
        id=str(row["id"]),
        name=row["name"],
        price=row["price"],
        discount_price=row.get("discount_price"),
        category=row.get("category_id"),
        images=row.get("images") or [],
        description=row.get("description"),
        variants=variants,
        sizes=sizes or row.get("sizes") or [],
        colors=list(colors.values()) or row.get("colors") or [],
    )


def map_category_row(row: Mapping[str, Any]) -> Category:
    return Category(
        id=str(row["id"]),
        name=row["name"],
        image_url=row.get("image_url"),
        display_order=row.get("display_order") or 0,
    )


def map_wilaya_row(row: Mapping[str, Any]) -> Wilaya:
    return Wilaya(
        id=str(row["id"]),
        name=row["name"],
        delivery_home=row["delivery_price_home"],
        delivery_post=row["delivery_price_desk"],
    )


class StorefrontDataService:
    """
    Read-through data access for the storefront.

    Every read consults the cache first and only reaches the backend on a
    miss. Backend failures degrade to an empty list (list resources), None
    (singletons) or the bundled delivery-zone table (wilayas); they are
    never retried and never cached.
    """

    def __init__(
        self,
        cache: CacheManager,
        backend: StorefrontBackend,
        cart: Optional[CartManager] = None,
    ):
        self.cache = cache
        self.backend = backend
        self.cart = cart

    async def _read_through(
        self,
        resource: str,
        key: str,
        ttl: int,
        schema: TypeAdapter,
        load: Callable[[], Awaitable[Optional[T]]],
    ) -> Optional[T]:
        """
        Cache-first read of one resource.

        Returns:
            Cached or freshly loaded data; None when the backend failed or
            returned nothing
        """
        with tracer.start_as_current_span(f"storefront.fetch.{resource}") as span:
            span.set_attribute("cache.key", key)

            cached = self.cache.get(key, schema=schema)
            if cached is not None:
                span.set_attribute("cache_hit", True)
                return _detached(cached)

            span.set_attribute("cache_hit", False)
            try:
                data = await load()
            except FetchError as e:
                logger.error(
                    f"Error fetching {resource}",
                    resource=resource,
                    error_code=e.error_code,
                    details=e.details,
                )
                span.set_status(trace.Status(trace.StatusCode.ERROR, e.message))
                return None
            except (KeyError, TypeError, ValueError) as e:
                logger.error(
                    f"Unexpected {resource} rows from backend",
                    resource=resource,
                    error=str(e),
                )
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                return None

            if data is None:
                return None

            self.cache.set(key, data, ttl)
            return _detached(data)

    async def fetch_products(self) -> List[Product]:
        async def load() -> List[Product]:
            rows = await self.backend.select("products", columns="*,product_variants(*)")
            return [map_product_row(row) for row in rows]

        products = await self._read_through(
            "products", CacheKeys.PRODUCTS, CacheTTL.SHORT, _PRODUCTS, load
        )
        return products or []

    async def fetch_categories(self) -> List[Category]:
        async def load() -> List[Category]:
            rows = await self.backend.select("categories", order="display_order.asc")
            return [map_category_row(row) for row in rows]

        categories = await self._read_through(
            "categories", CacheKeys.CATEGORIES, CacheTTL.STATIC, _CATEGORIES, load
        )
        return categories or []

    async def fetch_wilayas(self) -> List[Wilaya]:
        """
        Delivery zones, falling back to the bundled table.

        An empty backend table is not cached, so the next call asks the
        backend again.
        """

        async def load() -> Optional[List[Wilaya]]:
            rows = await self.backend.select("wilayas", order="id.asc")
            return [map_wilaya_row(row) for row in rows] or None

        wilayas = await self._read_through(
            "wilayas", CacheKeys.WILAYAS, CacheTTL.STATIC, _WILAYAS, load
        )
        if not wilayas:
            logger.warning("Serving bundled wilaya table")
            return default_wilayas()
        return wilayas

    async def fetch_site_settings(self) -> Optional[SiteSettings]:
        async def load() -> Optional[SiteSettings]:
            row = await self.backend.select_single("site_settings")
            return SiteSettings.model_validate(row) if row else None

        return await self._read_through(
            "site settings",
            CacheKeys.SITE_SETTINGS,
            CacheTTL.STATIC,
            _SITE_SETTINGS,
            load,
        )

    async def fetch_about_us(self) -> Optional[AboutUsContent]:
        async def load() -> Optional[AboutUsContent]:
            row = await self.backend.select_single("about_us_content")
            return AboutUsContent.model_validate(row) if row else None

        return await self._read_through(
            "about us content", CacheKeys.ABOUT_US, CacheTTL.STATIC, _ABOUT_US, load
        )

    def invalidate(self, *keys: str) -> None:
        """Drop cached resources, e.g. after an admin edit."""
        for key in keys:
            self.cache.delete(key)

    async def create_order(self, draft: OrderDraft) -> str:
        """
        Write an order and its items to the backend, bypassing the cache.

        The cart is cleared once both inserts succeed.

        Returns:
            Generated order id

        Raises:
            OrderWriteError: The order row was not created
            PartialOrderWriteError: The order row exists but its items do not
        """
        with tracer.start_as_current_span("storefront.create_order") as span:
            span.set_attribute("order.item_count", len(draft.items))

            rows = await self.backend.insert("orders", [draft.to_order_row()])
            if not rows or rows[0].get("id") is None:
                span.set_status(trace.Status(trace.StatusCode.ERROR, "no order id"))
                raise OrderWriteError(
                    message="Backend did not return the created order id",
                    details={"rows": len(rows or [])},
                )

            order_id = str(rows[0]["id"])
            span.set_attribute("order.id", order_id)

            try:
                await self.backend.insert(
                    "order_items", [item.to_row(order_id) for item in draft.items]
                )
            except OrderWriteError as e:
                logger.error(
                    "Order items were not saved; order needs manual reconciliation",
                    order_id=order_id,
                    item_count=len(draft.items),
                    error=e.message,
                )
                span.set_status(trace.Status(trace.StatusCode.ERROR, e.message))
                raise PartialOrderWriteError(
                    order_id=order_id, item_count=len(draft.items), original_error=e
                ) from e

            if self.cart is not None:
                self.cart.clear_cart()

            logger.info(
                "Order created",
                order_id=order_id,
                item_count=len(draft.items),
                total_price=draft.total_price,
            )
            return order_id
