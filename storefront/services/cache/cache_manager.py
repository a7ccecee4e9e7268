"""
Cache Manager Service

Two-tier cache: a process-memory hot tier in front of a durable cold tier,
with a per-entry TTL evaluated lazily on every read.
"""

import json
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

import structlog
from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

from ...constants import CACHE_NAMESPACE, DEFAULT_TTL_MS, now_ms
from ...domain.cache.entities import CacheEntry, CacheStats
from ...domain.cache.repository_interfaces import DurableStore
from ...domain.cache.value_objects import TTL, CacheKey
from ...infrastructure.storage.exceptions import (
    StorageError,
    StorageSerializationError,
)

logger = structlog.get_logger()

T = TypeVar("T")
TTLLike = Union[int, TTL]


def _ttl_ms(ttl: TTLLike) -> int:
    if isinstance(ttl, TTL):
        return ttl.milliseconds
    if ttl < 0:
        raise ValueError("TTL cannot be negative")
    return int(ttl)


class CacheManager:
    """
    Two-tier cache with per-entry TTL.

    Reads check memory first, then the durable store, promoting valid
    durable entries back into memory. Writes go to memory unconditionally
    and to the durable store when enabled; durable failures are logged and
    never raised, so the cache keeps working for the rest of the session.
    """

    def __init__(
        self,
        store: Optional[DurableStore] = None,
        use_durable_store: bool = True,
        default_ttl: TTLLike = DEFAULT_TTL_MS,
        namespace: str = CACHE_NAMESPACE,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store
        self.use_durable_store = use_durable_store and store is not None
        self.default_ttl = _ttl_ms(default_ttl)
        self.namespace = namespace
        self._clock = clock
        self._memory: Dict[str, CacheEntry[Any]] = {}

        if use_durable_store and store is None:
            logger.warning("Durable cache tier requested without a store; memory only")

    def durable_key(self, key: str) -> str:
        """Namespaced key of ``key`` in the durable store."""
        return f"{self.namespace}{key}"

    # Read path

    def get(self, key: str, schema: Optional[TypeAdapter] = None) -> Optional[Any]:
        """
        Get cached data or None.

        Args:
            key: Logical cache key
            schema: Optional TypeAdapter the data must conform to, in
                either tier; a validation failure evicts the entry and
                counts as a miss

        Returns:
            Cached data, or None when missing or expired
        """
        entry = self._lookup(key, schema)
        return entry.data if entry is not None else None

    def get_entry(self, key: str) -> Optional[CacheEntry[Any]]:
        """Get the full valid entry (data, timestamp, ttl) or None."""
        return self._lookup(key, None)

    def has(self, key: str) -> bool:
        return self._lookup(key, None) is not None

    def _lookup(
        self, key: str, schema: Optional[TypeAdapter]
    ) -> Optional[CacheEntry[Any]]:
        now = self._clock()

        memory_entry = self._memory.get(key)
        if memory_entry is not None:
            if memory_entry.is_valid(now):
                if schema is not None and not self._conform(key, memory_entry, schema):
                    return None
                logger.debug("Cache hit", key=key, tier="memory")
                return memory_entry
            del self._memory[key]

        if self.use_durable_store:
            entry = self._read_durable(key, schema, now)
            if entry is not None:
                self._memory[key] = entry
                logger.debug("Cache hit", key=key, tier="durable")
                return entry

        logger.debug("Cache miss", key=key)
        return None

    def _conform(
        self, key: str, entry: CacheEntry[Any], schema: TypeAdapter
    ) -> bool:
        """Validate a hot-tier entry in place; a mismatch evicts both tiers."""
        try:
            entry.data = schema.validate_python(entry.data)
        except ValidationError as e:
            logger.warning(
                "Evicting cache entry that does not match its schema",
                key=key,
                error=str(e),
            )
            self.delete(key)
            return False
        return True

    def _read_durable(
        self, key: str, schema: Optional[TypeAdapter], now: int
    ) -> Optional[CacheEntry[Any]]:
        durable_key = self.durable_key(key)
        raw = self.store.read(durable_key)
        if raw is None:
            return None

        try:
            entry = CacheEntry.from_envelope(json.loads(raw))
            if schema is not None:
                entry.data = schema.validate_python(entry.data)
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning(
                "Evicting unreadable durable cache entry", key=key, error=str(e)
            )
            self.store.remove(durable_key)
            return None

        if entry.is_expired(now):
            self.store.remove(durable_key)
            return None

        return entry

    # Write path

    def set(self, key: str, value: Any, ttl: Optional[TTLLike] = None) -> None:
        """
        Store a value under ``key``.

        Args:
            key: Logical cache key
            value: JSON-compatible data or pydantic models
            ttl: Milliseconds (or TTL); None uses the default TTL and 0
                stores an entry that is already expired
        """
        durable_key = CacheKey(key).durable(self.namespace)
        entry = CacheEntry.create(
            value,
            self.default_ttl if ttl is None else _ttl_ms(ttl),
            self._clock(),
        )

        self._memory[key] = entry

        if self.use_durable_store:
            self._write_durable(key, durable_key, entry)

    def _write_durable(
        self, key: str, durable_key: str, entry: CacheEntry[Any]
    ) -> None:
        try:
            try:
                payload = json.dumps(entry.to_envelope(), default=to_jsonable_python)
            except (TypeError, ValueError) as e:
                raise StorageSerializationError(key=key, original_error=e) from e

            self.store.write(durable_key, payload)

        except StorageError as e:
            logger.warning(
                "Durable cache write failed; continuing with memory tier",
                key=key,
                error_code=e.error_code,
                error=e.message,
            )

    def delete(self, key: str) -> None:
        """Remove an entry from both tiers; missing keys are ignored."""
        self._memory.pop(key, None)
        if self.use_durable_store:
            self.store.remove(self.durable_key(key))

    def clear(self) -> None:
        """Empty memory and remove every durable key under the namespace."""
        self._memory.clear()
        if self.use_durable_store:
            keys = self.store.list_prefixed(self.namespace)
            for durable_key in keys:
                self.store.remove(durable_key)
            logger.info("Cache cleared", durable_keys_removed=len(keys))

    def refresh(self, key: str, ttl: Optional[TTLLike] = None) -> bool:
        """
        Re-stamp an existing entry with the current time.

        Returns:
            False when the key is a miss; no entry is created in that case
        """
        entry = self._lookup(key, None)
        if entry is None:
            return False
        self.set(key, entry.data, ttl)
        return True

    def evict_from_memory(self, key: str) -> bool:
        """Drop the hot-tier copy only, as a page reload would."""
        return self._memory.pop(key, None) is not None

    def list_durable_keys(self) -> List[str]:
        """Durable keys owned by this cache."""
        if not self.use_durable_store:
            return []
        return self.store.list_prefixed(self.namespace)

    def get_stats(self) -> CacheStats:
        """Introspection snapshot; no side effects."""
        return CacheStats(
            hot_entry_count=len(self._memory),
            use_durable_store=self.use_durable_store,
            default_ttl=self.default_ttl,
        )
