"""
Cached data binding.

Exposes one cache key to the UI layer: served synchronously from the cache
when present, otherwise loaded through an async fetcher and written back.
"""

from typing import Awaitable, Callable, Generic, Optional, TypeVar

import structlog
from pydantic import TypeAdapter

from ..domain.cache.value_objects import CachePolicy
from ..services.cache.cache_manager import CacheManager
from .base import Observable

logger = structlog.get_logger()

T = TypeVar("T")


class CachedData(Observable, Generic[T]):
    """
    Observable view of a cached resource.

    State: ``data``, ``loading`` and ``error``. Subscribers are notified on
    every state change. ``policy`` decides when ``activate()`` may reach
    the fetcher. Overlapping ``refresh()`` calls are not cancelled;
    whichever fetch finishes last wins.
    """

    def __init__(
        self,
        cache: CacheManager,
        key: str,
        fetcher: Callable[[], Awaitable[T]],
        ttl: Optional[int] = None,
        schema: Optional[TypeAdapter] = None,
        policy: CachePolicy = CachePolicy.CACHE_FIRST,
    ):
        super().__init__()
        self.cache = cache
        self.key = key
        self.fetcher = fetcher
        self.ttl = ttl
        self.schema = schema
        self.policy = CachePolicy(policy)
        self._fetched = False

        self.data: Optional[T] = cache.get(key, schema=schema)
        self.loading: bool = self.data is None and self.policy is not CachePolicy.CACHE_ONLY
        self.error: Optional[Exception] = None

    async def activate(self) -> Optional[T]:
        """
        Load the resource for first display.

        With ``CACHE_FIRST`` a cache hit is exposed immediately without a
        loading state and a miss fetches, caches and exposes the result.
        ``CACHE_ONLY`` never fetches. ``NETWORK_FIRST`` always fetches and
        keeps the cached data if that fails. ``ONCE`` behaves like
        ``CACHE_FIRST`` until the first successful fetch and then only reads
        the cache.
        """
        cached = self.cache.get(self.key, schema=self.schema)
        if self.policy is CachePolicy.NETWORK_FIRST:
            self.data = cached
            return await self._load(keep_data_on_error=True)

        if cached is not None or self.policy is CachePolicy.CACHE_ONLY or (
            self.policy is CachePolicy.ONCE and self._fetched
        ):
            return self._expose(cached)

        return await self._load(keep_data_on_error=False)

    def _expose(self, data: Optional[T]) -> Optional[T]:
        self.data = data
        self.loading = False
        self.error = None
        self._notify()
        return data

    async def refresh(self) -> Optional[T]:
        """
        Fetch again regardless of the cache and overwrite the entry.

        Under ``CACHE_ONLY`` this re-reads the cache instead.
        """
        if self.policy is CachePolicy.CACHE_ONLY:
            return self._expose(self.cache.get(self.key, schema=self.schema))
        return await self._load(keep_data_on_error=True)

    async def _load(self, keep_data_on_error: bool) -> Optional[T]:
        self.loading = True
        self._notify()

        try:
            result = await self.fetcher()
            self.data = result
            self.cache.set(self.key, result, self.ttl)
            self.error = None
            self._fetched = True
        except Exception as e:
            logger.warning("Cached data fetch failed", key=self.key, error=str(e))
            self.error = e
            if not keep_data_on_error:
                self.data = None
        finally:
            self.loading = False
            self._notify()

        return self.data
