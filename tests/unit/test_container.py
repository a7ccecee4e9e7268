"""
Unit tests for settings and container wiring.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog
from pydantic import ValidationError

from storefront.constants import CacheKeys
from storefront.container import (
    StorefrontContainer,
    build_durable_store,
    create_container,
)
from storefront.core.config import Settings
from storefront.core.logging import configure_logging
from storefront.domain.cache.repository_interfaces import StorefrontBackend
from storefront.domain.cache.value_objects import CartMatchMode
from storefront.infrastructure.backend import RestBackend
from storefront.infrastructure.storage.durable_store import (
    MemoryDurableStore,
    RedisDurableStore,
)
from storefront.infrastructure.storage.exceptions import BackendConfigurationError


def make_settings(**overrides):
    values = {"ENVIRONMENT": "test", "BACKEND_URL": None, "BACKEND_API_KEY": None}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:
    def test_defaults(self):
        settings = make_settings()

        assert settings.CACHE_NAMESPACE == "cache:"
        assert settings.CACHE_DEFAULT_TTL_MS == 5 * 60 * 1000
        assert settings.DURABLE_STORE == "memory"
        assert settings.CART_MATCH_MODE == "identity"
        assert not settings.backend_configured
        assert not settings.is_production

    def test_normalisation(self):
        settings = make_settings(LOG_LEVEL="debug", DURABLE_STORE="Redis", CART_MATCH_MODE="PRODUCT")

        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.DURABLE_STORE == "redis"
        assert settings.CART_MATCH_MODE == "product"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"ENVIRONMENT": "qa"},
            {"LOG_LEVEL": "LOUD"},
            {"CACHE_DEFAULT_TTL_MS": 0},
            {"DURABLE_STORE": "sqlite"},
            {"CART_MATCH_MODE": "fuzzy"},
            {"STORAGE_WARNING_THRESHOLD": 1.5},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValidationError):
            make_settings(**overrides)


class TestDurableStoreSelection:
    def test_memory_store_with_quota(self):
        store = build_durable_store(make_settings(STORAGE_MAX_BYTES=1000))

        assert isinstance(store, MemoryDurableStore)
        assert store.limits.max_size == 1000

    def test_memory_store_without_quota(self):
        store = build_durable_store(make_settings(STORAGE_MAX_BYTES=None))
        assert store.limits is None

    def test_redis_store(self):
        store = build_durable_store(
            make_settings(DURABLE_STORE="redis", REDIS_URL="redis://cache.internal:6379/2")
        )

        assert isinstance(store, RedisDurableStore)
        store.close()


class TestStorefrontContainer:
    def test_without_backend(self):
        container = StorefrontContainer.from_settings(make_settings())

        assert container.data is None
        assert container.cache.store is container.store
        assert container.origin == container.store.origin
        with pytest.raises(BackendConfigurationError):
            container.require_data()

    def test_builds_rest_backend_from_settings(self):
        container = StorefrontContainer.from_settings(
            make_settings(BACKEND_URL="https://shop.example.co", BACKEND_API_KEY="anon")
        )

        assert isinstance(container.backend, RestBackend)
        assert container.require_data().cart is container.cart

    def test_settings_reach_services(self):
        container = StorefrontContainer.from_settings(
            make_settings(
                CACHE_USE_DURABLE_STORE=False,
                CACHE_DEFAULT_TTL_MS=1000,
                CACHE_NAMESPACE="shop:",
                CART_MATCH_MODE="product",
            )
        )

        assert container.cache.use_durable_store is False
        assert container.cache.default_ttl == 1000
        assert container.cache.namespace == "shop:"
        assert container.cart.match_mode is CartMatchMode.PRODUCT

    def test_views_share_cart_storage(self, make_line):
        backend = AsyncMock(spec=StorefrontBackend)
        first = StorefrontContainer.from_settings(make_settings(), backend=backend)
        second = first.open_view()

        binding = second.cart_binding()
        second.cart_sync(binding).start()

        first.cart.add_item(make_line(quantity=2))

        assert binding.cart[0].quantity == 2
        assert second.origin != first.origin
        assert second.backend is backend

    def test_views_need_memory_store(self):
        container = StorefrontContainer.from_settings(
            make_settings(), store=RedisDurableStore(MagicMock())
        )

        with pytest.raises(TypeError):
            container.open_view()

    def test_housekeeping_bindings(self):
        container = StorefrontContainer.from_settings(make_settings())
        container.cache.set(CacheKeys.PRODUCTS, [])

        assert container.cache_stats().stats.hot_entry_count == 1
        assert container.cache_cleanup().cleanup() == 1

    @pytest.mark.asyncio
    async def test_close_releases_backend(self):
        backend = AsyncMock(spec=StorefrontBackend)
        container = StorefrontContainer.from_settings(make_settings(), backend=backend)

        await container.close()

        backend.close.assert_awaited_once()


def test_create_container_configures_logging(monkeypatch):
    configure = MagicMock()
    monkeypatch.setattr("storefront.container.configure_logging", configure)
    settings = make_settings(LOG_LEVEL="warning", LOG_JSON=True)

    container = create_container(settings)

    configure.assert_called_once_with("WARNING", json=True)
    assert container.settings is settings


def test_debug_flag_forces_debug_logging(monkeypatch):
    configure = MagicMock()
    monkeypatch.setattr("storefront.container.configure_logging", configure)

    create_container(make_settings(DEBUG=True, LOG_LEVEL="error"))

    configure.assert_called_once_with("DEBUG", json=False)


def test_configure_logging_installs_renderer():
    try:
        configure_logging("DEBUG", json=True)

        config = structlog.get_config()
        assert structlog.is_configured()
        assert isinstance(config["processors"][-1], structlog.processors.JSONRenderer)
        assert config["wrapper_class"] is structlog.stdlib.BoundLogger
    finally:
        structlog.reset_defaults()
