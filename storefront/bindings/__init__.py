"""
UI-facing bindings over the cache and cart.
"""

from .base import Observable
from .cached_data import CachedData
from .cart import CartBinding
from .sync import CacheCleanup, CacheStatsBinding, StorageSync

__all__ = [
    "Observable",
    "CachedData",
    "CartBinding",
    "StorageSync",
    "CacheCleanup",
    "CacheStatsBinding",
]
