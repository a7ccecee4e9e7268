"""
Cross-view synchronisation and cache housekeeping bindings.
"""

import json
from typing import Any, Callable, Iterable, Optional

import structlog

from ..constants import CACHE_NAMESPACE
from ..domain.cache.entities import CacheEntry, CacheStats
from ..domain.cache.repository_interfaces import DurableStore
from ..domain.cache.value_objects import CacheKey
from ..infrastructure.storage.events import StorageEvent, StorageEventBus
from ..services.cache.cache_manager import CacheManager
from .base import Observable

logger = structlog.get_logger()


class StorageSync:
    """
    Listen for changes another view made to one cache key.

    Events raised by ``origin`` (this view's own store) are ignored, as are
    removals. The new envelope is parsed and ``callback`` receives its data.
    When ``cache`` is given, its memory copy of the key is dropped first so
    the next read picks up the fresh durable value.
    """

    def __init__(
        self,
        bus: StorageEventBus,
        key: str,
        callback: Callable[[Any], None],
        namespace: str = CACHE_NAMESPACE,
        origin: Optional[str] = None,
        cache: Optional[CacheManager] = None,
    ):
        self.bus = bus
        self.key = key
        self.durable_key = CacheKey(key).durable(namespace)
        self.callback = callback
        self.origin = origin
        self.cache = cache
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> "StorageSync":
        if self._unsubscribe is None:
            self._unsubscribe = self.bus.subscribe(self._on_event, key=self.durable_key)
        return self

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self) -> "StorageSync":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def _on_event(self, event: StorageEvent) -> None:
        if event.key != self.durable_key or event.new_value is None:
            return
        if self.origin is not None and event.origin == self.origin:
            return

        try:
            entry = CacheEntry.from_envelope(json.loads(event.new_value))
        except (ValueError, TypeError) as e:
            logger.error("Error parsing synced data", key=self.key, error=str(e))
            return

        if self.cache is not None:
            self.cache.evict_from_memory(self.key)

        self.callback(entry.data)


class CacheCleanup:
    """Bulk removal of durable cache entries."""

    def __init__(self, store: DurableStore, namespace: str = CACHE_NAMESPACE):
        self.store = store
        self.namespace = namespace

    def cleanup(self, prefixes: Iterable[str] = ()) -> int:
        """
        Remove durable entries under the cache namespace.

        Args:
            prefixes: Key fragments to select; every namespace key when empty

        Returns:
            Number of entries removed
        """
        fragments = list(prefixes)
        keys = [
            key
            for key in self.store.list_prefixed(self.namespace)
            if not fragments or any(fragment in key for fragment in fragments)
        ]

        for key in keys:
            self.store.remove(key)

        logger.info(f"Cleaned up {len(keys)} cache entries", removed=len(keys))
        return len(keys)


class CacheStatsBinding(Observable):
    """Cache statistics snapshot for debugging views."""

    def __init__(self, cache: CacheManager):
        super().__init__()
        self.cache = cache
        self.stats: CacheStats = cache.get_stats()

    def refresh(self) -> CacheStats:
        self.stats = self.cache.get_stats()
        self._notify()
        return self.stats
