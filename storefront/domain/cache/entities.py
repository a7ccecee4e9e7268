"""
Cache Domain Entities

Core entities for cache management: the entry envelope stored in both tiers
and the statistics snapshot exposed for introspection.
"""

from dataclasses import dataclass
from typing import Any, Dict, Generic, Mapping, TypeVar

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """
    Cache entry envelope.

    The same envelope shape lives in memory and, serialized, in the durable
    store. An entry is valid while ``now < timestamp + ttl``.
    """

    data: T
    timestamp: int
    ttl: int

    @classmethod
    def create(cls, data: T, ttl: int, now: int) -> "CacheEntry[T]":
        """Create a fresh entry stamped with ``now``."""
        if ttl < 0:
            raise ValueError("TTL cannot be negative")
        return cls(data=data, timestamp=int(now), ttl=int(ttl))

    @property
    def expires_at(self) -> int:
        return self.timestamp + self.ttl

    def is_valid(self, now: int) -> bool:
        """Check whether the entry is still within its TTL."""
        return now < self.expires_at

    def is_expired(self, now: int) -> bool:
        return not self.is_valid(now)

    def remaining_ms(self, now: int) -> int:
        return max(0, self.expires_at - now)

    def to_envelope(self) -> Dict[str, Any]:
        """Durable representation: ``{data, timestamp, ttl}``."""
        return {"data": self.data, "timestamp": self.timestamp, "ttl": self.ttl}

    @classmethod
    def from_envelope(cls, envelope: Any) -> "CacheEntry[Any]":
        """
        Rebuild an entry from its durable representation.

        Raises:
            ValueError: If the envelope is not a well-formed cache entry
        """
        if not isinstance(envelope, Mapping):
            raise ValueError("Cache envelope must be an object")
        if "data" not in envelope:
            raise ValueError("Cache envelope has no data")

        timestamp = envelope.get("timestamp")
        ttl = envelope.get("ttl")
        for name, value in (("timestamp", timestamp), ("ttl", ttl)):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Cache envelope {name} must be a number")

        return cls(data=envelope["data"], timestamp=int(timestamp), ttl=int(ttl))


@dataclass(frozen=True)
class CacheStats:
    """Introspection snapshot of a cache manager."""

    hot_entry_count: int
    use_durable_store: bool
    default_ttl: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "hot_entry_count": self.hot_entry_count,
            "use_durable_store": self.use_durable_store,
            "default_ttl": self.default_ttl,
        }
