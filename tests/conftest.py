"""
Main pytest configuration for storefront tests.

Fixtures for a controllable clock, in-memory durable stores and wired cache,
cart and data-access services.
"""

import os

import pytest

# Set test environment variables before importing storefront modules
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"

from storefront.constants import CACHE_NAMESPACE
from storefront.domain.catalog.models import CartLineItem
from storefront.infrastructure.storage.durable_store import MemoryDurableStore
from storefront.infrastructure.storage.events import StorageEventBus
from storefront.services.cache.cache_manager import CacheManager
from storefront.services.cache.cart_manager import CartManager


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def bus():
    return StorageEventBus()


@pytest.fixture
def store(bus):
    return MemoryDurableStore(bus=bus)


@pytest.fixture
def cache(store, clock):
    return CacheManager(store=store, clock=clock)


@pytest.fixture
def cart(cache):
    return CartManager(cache)


@pytest.fixture
def namespace():
    return CACHE_NAMESPACE


@pytest.fixture
def make_line():
    """Factory for cart lines with sensible defaults."""

    def _make(product_id="p1", size="M", color="red", quantity=1, **overrides):
        data = {
            "product_id": product_id,
            "name": f"Product {product_id}",
            "price": 1000,
            "selected_size": size,
            "selected_color": color,
            "quantity": quantity,
        }
        data.update(overrides)
        return CartLineItem(**data)

    return _make


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "redis: marks tests as Redis-related")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
