"""
Cache Repository Interfaces

Abstract contracts for the durable key-value store behind the cache and for
the hosted database backend behind the data-access facade.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence


class DurableStore(ABC):
    """
    Abstract durable key-value store.

    Keys and values are strings. ``write`` raises ``StorageError`` when the
    value cannot be persisted; ``read``, ``remove`` and ``list_keys`` degrade
    to a no-op with a logged warning when the backing store fails.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """Return the stored value or None."""
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Persist a value, raising StorageError on failure."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""
        pass

    @abstractmethod
    def list_keys(self, predicate: Optional[Callable[[str], bool]] = None) -> List[str]:
        """List stored keys, optionally filtered by a predicate."""
        pass

    def list_prefixed(self, prefix: str) -> List[str]:
        """List keys that start with ``prefix``."""
        return self.list_keys(lambda key: key.startswith(prefix))


class StorefrontBackend(ABC):
    """
    Abstract hosted database backend.

    Implementations raise ``FetchError`` from reads and ``OrderWriteError``
    from inserts.
    """

    @abstractmethod
    async def select(
        self,
        table: str,
        columns: str = "*",
        order: Optional[str] = None,
        filters: Optional[Mapping[str, str]] = None,
    ) -> List[Dict[str, Any]]:
        """Read all rows of a table."""
        pass

    @abstractmethod
    async def select_single(
        self, table: str, columns: str = "*"
    ) -> Optional[Dict[str, Any]]:
        """Read exactly one row of a table."""
        pass

    @abstractmethod
    async def insert(
        self, table: str, rows: Sequence[Mapping[str, Any]]
    ) -> List[Dict[str, Any]]:
        """Insert rows and return their stored representation."""
        pass

    async def close(self) -> None:
        """Release network resources."""
        return None
