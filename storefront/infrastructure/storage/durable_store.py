"""
Durable Store Adapters

Key-value adapters used as the cache's cold tier: a quota-aware in-memory
store whose backing map can be shared between several views of the same
origin, and a Redis-backed store for persistence across process restarts.
"""

import re
import uuid
from typing import Callable, Dict, List, Optional, Union

import redis
import structlog
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError, ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from ...domain.cache.repository_interfaces import DurableStore
from ...domain.cache.value_objects import StorageLimits
from .events import StorageEvent, StorageEventBus
from .exceptions import (
    StorageError,
    StorageQuotaExceededError,
    StorageUnavailableError,
)

logger = structlog.get_logger()


class ObservableDurableStore(DurableStore):
    """Durable store that announces its changes on a storage event bus."""

    def __init__(self, bus: Optional[StorageEventBus] = None, origin: Optional[str] = None):
        self.bus = bus or StorageEventBus()
        self.origin = origin or uuid.uuid4().hex

    def _notify(self, key: str, old_value: Optional[str], new_value: Optional[str]) -> None:
        if old_value == new_value:
            return
        self.bus.publish(
            StorageEvent(
                key=key, old_value=old_value, new_value=new_value, origin=self.origin
            )
        )


class MemoryDurableStore(ObservableDurableStore):
    """
    Dict-backed durable store.

    Several instances may share one ``backing`` dict and one ``bus`` to model
    independent views (tabs) over the same per-origin storage. When ``limits``
    is given, writes are accounted against the quota.
    """

    def __init__(
        self,
        backing: Optional[Dict[str, str]] = None,
        bus: Optional[StorageEventBus] = None,
        limits: Optional[StorageLimits] = None,
        origin: Optional[str] = None,
    ):
        super().__init__(bus=bus, origin=origin)
        self._data: Dict[str, str] = backing if backing is not None else {}
        self.limits = limits

    def spawn_view(self) -> "MemoryDurableStore":
        """Another view over the same storage with its own origin."""
        return MemoryDurableStore(backing=self._data, bus=self.bus, limits=self.limits)

    def usage(self) -> int:
        """Characters used by keys plus values."""
        return sum(len(key) + len(value) for key, value in self._data.items())

    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(
                message="Durable store values must be strings", key=key
            )

        old_value = self._data.get(key)

        if self.limits is not None:
            projected = self.usage() + len(value)
            if old_value is None:
                projected += len(key)
            else:
                projected -= len(old_value)

            if self.limits.exceeds(projected):
                logger.warning(
                    "Durable store quota exceeded",
                    key=key,
                    usage=projected,
                    limit=self.limits.max_size,
                )
                raise StorageQuotaExceededError(
                    key=key, usage=projected, limit=self.limits.max_size
                )

            if self.limits.is_warning(projected):
                logger.warning(
                    "Durable store nearing quota",
                    key=key,
                    usage=projected,
                    limit=self.limits.max_size,
                    critical=self.limits.is_critical(projected),
                )

        self._data[key] = value
        self._notify(key, old_value, value)

    def remove(self, key: str) -> None:
        old_value = self._data.pop(key, None)
        if old_value is not None:
            self._notify(key, old_value, None)

    def list_keys(self, predicate: Optional[Callable[[str], bool]] = None) -> List[str]:
        keys = list(self._data.keys())
        if predicate is None:
            return keys
        return [key for key in keys if predicate(key)]

    def __len__(self) -> int:
        return len(self._data)


def _decode(value: Union[bytes, str, None]) -> Optional[str]:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


def _translate_redis_error(error: RedisError, key: Optional[str]) -> StorageError:
    if isinstance(error, (RedisConnectionError, RedisTimeoutError)):
        return StorageUnavailableError(key=key, original_error=error)
    if isinstance(error, ResponseError) and str(error).startswith("OOM"):
        return StorageQuotaExceededError(key=key, original_error=error)
    return StorageError(
        message=f"Redis storage operation failed: {error}",
        key=key,
        original_error=error,
    )


class RedisDurableStore(ObservableDurableStore):
    """
    Redis-backed durable store.

    Uses the synchronous client: every cache read path stays synchronous
    from the caller's point of view.
    """

    _GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")

    def __init__(
        self,
        client: redis.Redis,
        bus: Optional[StorageEventBus] = None,
        origin: Optional[str] = None,
        scan_count: int = 100,
    ):
        super().__init__(bus=bus, origin=origin)
        self._client = client
        self.scan_count = scan_count

    @classmethod
    def from_url(
        cls, url: str, bus: Optional[StorageEventBus] = None, **kwargs
    ) -> "RedisDurableStore":
        client = redis.Redis.from_url(url, decode_responses=True, **kwargs)
        return cls(client, bus=bus)

    def read(self, key: str) -> Optional[str]:
        try:
            return _decode(self._client.get(key))
        except (RedisError, UnicodeDecodeError) as e:
            logger.warning("Durable store read failed", key=key, error=str(e))
            return None

    def write(self, key: str, value: str) -> None:
        try:
            old_value = _decode(self._client.set(key, value, get=True))
        except RedisError as e:
            raise _translate_redis_error(e, key) from e
        except UnicodeDecodeError:
            # written; only the replaced value was unreadable
            old_value = None
        self._notify(key, old_value, value)

    def remove(self, key: str) -> None:
        try:
            old_value = _decode(self._client.getdel(key))
        except RedisError as e:
            logger.warning("Durable store remove failed", key=key, error=str(e))
            return
        except UnicodeDecodeError:
            logger.warning("Removed undecodable durable store value", key=key)
            return

        if old_value is not None:
            self._notify(key, old_value, None)

    def list_keys(self, predicate: Optional[Callable[[str], bool]] = None) -> List[str]:
        return self._scan(match=None, predicate=predicate)

    def list_prefixed(self, prefix: str) -> List[str]:
        pattern = self._GLOB_SPECIAL.sub(r"\\\1", prefix) + "*"
        return self._scan(match=pattern, predicate=lambda key: key.startswith(prefix))

    def _scan(
        self, match: Optional[str], predicate: Optional[Callable[[str], bool]]
    ) -> List[str]:
        keys: List[str] = []
        try:
            for raw_key in self._client.scan_iter(match=match, count=self.scan_count):
                try:
                    key = _decode(raw_key)
                except UnicodeDecodeError:
                    logger.warning("Skipping undecodable durable store key", key=repr(raw_key))
                    continue
                if predicate is None or predicate(key):
                    keys.append(key)
        except (RedisError, UnicodeDecodeError) as e:
            logger.warning("Durable store key listing failed", error=str(e))
            return []
        return keys

    def close(self) -> None:
        try:
            self._client.close()
        except RedisError as e:
            logger.warning("Failed to close Redis client", error=str(e))
