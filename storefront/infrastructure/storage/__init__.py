"""
Durable Storage Infrastructure

Cold-tier key-value adapters for the storefront cache.

This module provides:
- MemoryDurableStore: quota-aware in-process store with shareable views
- RedisDurableStore: Redis-backed store
- StorageEventBus: change notifications between store views
- Exception hierarchy for storage, backend reads and order writes
"""

from .durable_store import MemoryDurableStore, ObservableDurableStore, RedisDurableStore
from .events import StorageEvent, StorageEventBus
from .exceptions import (
    BackendConfigurationError,
    FetchError,
    OrderWriteError,
    PartialOrderWriteError,
    StorageError,
    StorageQuotaExceededError,
    StorageSerializationError,
    StorageUnavailableError,
    StorefrontException,
)

__all__ = [
    # Stores
    "MemoryDurableStore",
    "ObservableDurableStore",
    "RedisDurableStore",
    # Events
    "StorageEvent",
    "StorageEventBus",
    # Exceptions
    "StorefrontException",
    "StorageError",
    "StorageUnavailableError",
    "StorageQuotaExceededError",
    "StorageSerializationError",
    "FetchError",
    "OrderWriteError",
    "PartialOrderWriteError",
    "BackendConfigurationError",
]
