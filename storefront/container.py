"""
Application container.

Builds one durable store, cache, cart and data-access service per
application root and hands them to whatever needs them.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import structlog

from .bindings import CacheCleanup, CacheStatsBinding, CartBinding, StorageSync
from .constants import CacheKeys
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .domain.cache.repository_interfaces import DurableStore, StorefrontBackend
from .domain.cache.value_objects import CartMatchMode, StorageLimits
from .infrastructure.backend.rest_client import RestBackend
from .infrastructure.storage.durable_store import (
    MemoryDurableStore,
    ObservableDurableStore,
    RedisDurableStore,
)
from .infrastructure.storage.events import StorageEventBus
from .infrastructure.storage.exceptions import BackendConfigurationError
from .services.cache.cache_manager import CacheManager
from .services.cache.cart_manager import CartManager
from .services.catalog.data_access import StorefrontDataService

logger = structlog.get_logger()


def build_durable_store(
    settings: Settings, bus: Optional[StorageEventBus] = None
) -> ObservableDurableStore:
    """Durable store selected by ``DURABLE_STORE``."""
    if settings.DURABLE_STORE == "redis":
        return RedisDurableStore.from_url(settings.REDIS_URL, bus=bus)

    limits = None
    if settings.STORAGE_MAX_BYTES:
        limits = StorageLimits(
            max_size=settings.STORAGE_MAX_BYTES,
            warning_threshold=settings.STORAGE_WARNING_THRESHOLD,
            critical_threshold=max(0.95, settings.STORAGE_WARNING_THRESHOLD),
        )
    return MemoryDurableStore(bus=bus, limits=limits)


@dataclass
class StorefrontContainer:
    """Service graph of one storefront view."""

    settings: Settings
    store: DurableStore
    bus: StorageEventBus
    cache: CacheManager
    cart: CartManager
    data: Optional[StorefrontDataService] = None
    backend: Optional[StorefrontBackend] = None
    origin: Optional[str] = field(default=None)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        store: Optional[ObservableDurableStore] = None,
        backend: Optional[StorefrontBackend] = None,
    ) -> "StorefrontContainer":
        """
        Wire a container from settings.

        A backend is built from ``BACKEND_URL``/``BACKEND_API_KEY`` when not
        given; without either, the container has no data-access service.
        """
        settings = settings or get_settings()
        store = store or build_durable_store(settings)

        cache = CacheManager(
            store=store,
            use_durable_store=settings.CACHE_USE_DURABLE_STORE,
            default_ttl=settings.CACHE_DEFAULT_TTL_MS,
            namespace=settings.CACHE_NAMESPACE,
        )
        cart = CartManager(cache, match_mode=CartMatchMode(settings.CART_MATCH_MODE))

        if backend is None and settings.backend_configured:
            backend = RestBackend(
                settings.BACKEND_URL,
                settings.BACKEND_API_KEY,
                timeout=settings.BACKEND_TIMEOUT,
            )

        data = StorefrontDataService(cache, backend, cart) if backend else None
        if data is None:
            logger.info("No backend configured; data access disabled")

        return cls(
            settings=settings,
            store=store,
            bus=store.bus,
            cache=cache,
            cart=cart,
            data=data,
            backend=backend,
            origin=store.origin,
        )

    def open_view(self) -> "StorefrontContainer":
        """
        A second view over the same in-memory durable storage.

        Each view has its own memory tier and origin, like a second tab.
        """
        if not isinstance(self.store, MemoryDurableStore):
            raise TypeError("Views can only be opened over a MemoryDurableStore")
        return StorefrontContainer.from_settings(
            self.settings, store=self.store.spawn_view(), backend=self.backend
        )

    def require_data(self) -> StorefrontDataService:
        if self.data is None:
            raise BackendConfigurationError(
                "Backend URL and API key must be configured", config_key="BACKEND_URL"
            )
        return self.data

    # Bindings

    def cart_binding(self) -> CartBinding:
        return CartBinding(self.cart)

    def storage_sync(
        self, key: str, callback: Callable[[Any], None]
    ) -> StorageSync:
        return StorageSync(
            self.bus,
            key,
            callback,
            namespace=self.cache.namespace,
            origin=self.origin,
            cache=self.cache,
        )

    def cart_sync(self, binding: CartBinding) -> StorageSync:
        """Keep ``binding`` in step with cart changes made by other views."""
        return self.storage_sync(CacheKeys.CART, lambda _data: binding.reload())

    def cache_cleanup(self) -> CacheCleanup:
        return CacheCleanup(self.store, namespace=self.cache.namespace)

    def cache_stats(self) -> CacheStatsBinding:
        return CacheStatsBinding(self.cache)

    async def close(self) -> None:
        if self.backend is not None:
            await self.backend.close()
        if isinstance(self.store, RedisDurableStore):
            self.store.close()


def create_container(settings: Optional[Settings] = None) -> StorefrontContainer:
    """Configure logging and build the application root container."""
    settings = settings or get_settings()
    level = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL
    configure_logging(level, json=settings.LOG_JSON)
    container = StorefrontContainer.from_settings(settings)
    logger.info(
        "Storefront container ready",
        environment=settings.ENVIRONMENT,
        durable_store=settings.DURABLE_STORE,
        cart_match_mode=settings.CART_MATCH_MODE,
    )
    return container
