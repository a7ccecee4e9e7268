"""
Cache Value Objects

Immutable value objects for the cache domain. Provides type safety and
validation for keys, TTLs, cache policies and storage limits.
"""

from dataclasses import dataclass
from enum import Enum

from ...constants import CACHE_NAMESPACE, CacheTTL


class CachePolicy(str, Enum):
    """When a reader is allowed to go to the backend."""

    # Use the cache whenever an entry exists, never fetch
    CACHE_ONLY = "cache_only"
    # Use a valid entry, otherwise fetch and populate
    CACHE_FIRST = "cache_first"
    # Always fetch and overwrite the entry
    NETWORK_FIRST = "network_first"
    # Fetch once, then rely on explicit refreshes
    ONCE = "once"


class CartMatchMode(str, Enum):
    """How cart remove/update locate lines."""

    # (product_id, size, color) when size/color are given
    IDENTITY = "identity"
    # product_id alone
    PRODUCT = "product"


@dataclass(frozen=True)
class CacheKey:
    """
    Immutable cache key value object.

    Enforces key naming rules and maps logical keys to namespaced durable keys.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate cache key format."""
        if not self.value:
            raise ValueError("Cache key cannot be empty")

        if len(self.value) > 250:
            raise ValueError("Cache key too long (max 250 characters)")

        if any(char.isspace() for char in self.value):
            raise ValueError("Cache key cannot contain whitespace")

    def durable(self, namespace: str = CACHE_NAMESPACE) -> str:
        """Key under which the entry is stored in the durable tier."""
        return f"{namespace}{self.value}"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TTL:
    """
    Time To Live value object in milliseconds.

    Zero is allowed and yields an entry that is already expired.
    """

    milliseconds: int

    def __post_init__(self) -> None:
        """Validate TTL value."""
        if self.milliseconds < 0:
            raise ValueError("TTL cannot be negative")
        if self.milliseconds > CacheTTL.MAX:
            raise ValueError("TTL too large (max 1 year)")

    @classmethod
    def seconds(cls, seconds: int) -> "TTL":
        """Create TTL from seconds."""
        return cls(seconds * 1000)

    @classmethod
    def minutes(cls, minutes: int) -> "TTL":
        """Create TTL from minutes."""
        return cls(minutes * 60 * 1000)

    @classmethod
    def hours(cls, hours: int) -> "TTL":
        """Create TTL from hours."""
        return cls(hours * 3600 * 1000)

    @classmethod
    def days(cls, days: int) -> "TTL":
        """Create TTL from days."""
        return cls(days * 86400 * 1000)

    def __int__(self) -> int:
        return self.milliseconds

    def __str__(self) -> str:
        return f"{self.milliseconds}ms"


@dataclass(frozen=True)
class StorageLimits:
    """
    Quota thresholds for a size-limited durable store.

    Usage is measured in characters of key plus value, which is how browser
    storage quotas are accounted.
    """

    max_size: int = 5 * 1024 * 1024
    warning_threshold: float = 0.8
    critical_threshold: float = 0.95

    def __post_init__(self) -> None:
        if self.max_size <= 0:
            raise ValueError("Storage max size must be positive")
        if not 0 < self.warning_threshold <= self.critical_threshold <= 1:
            raise ValueError("Storage thresholds must satisfy 0 < warning <= critical <= 1")

    def usage_ratio(self, usage: int) -> float:
        return usage / self.max_size

    def is_warning(self, usage: int) -> bool:
        return self.usage_ratio(usage) >= self.warning_threshold

    def is_critical(self, usage: int) -> bool:
        return self.usage_ratio(usage) >= self.critical_threshold

    def exceeds(self, usage: int) -> bool:
        return usage > self.max_size
