"""
Storage change notifications.

A small publish/subscribe bus carrying "another writer changed this key"
events between durable store views. Each store instance has its own origin
id; listeners normally ignore events raised by their own origin, which
mirrors how browser ``storage`` events only reach other tabs.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import structlog

logger = structlog.get_logger()

StorageListener = Callable[["StorageEvent"], None]


@dataclass(frozen=True)
class StorageEvent:
    """A durable key changed; ``new_value`` is None on removal."""

    key: str
    old_value: Optional[str]
    new_value: Optional[str]
    origin: str


class StorageEventBus:
    """In-process storage event channel keyed by durable key."""

    _ALL = "*"

    def __init__(self):
        self._listeners: Dict[str, List[StorageListener]] = {}

    def subscribe(
        self, listener: StorageListener, key: Optional[str] = None
    ) -> Callable[[], None]:
        """
        Register a listener for one durable key, or for every key.

        Returns:
            A callable that removes the listener
        """
        channel = key or self._ALL
        self._listeners.setdefault(channel, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(channel, [])
            if listener in listeners:
                listeners.remove(listener)
            if not listeners:
                self._listeners.pop(channel, None)

        return unsubscribe

    def publish(self, event: StorageEvent) -> None:
        """Deliver an event; a failing listener does not stop delivery."""
        listeners = list(self._listeners.get(event.key, [])) + list(
            self._listeners.get(self._ALL, [])
        )
        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.warning(
                    "Storage event listener failed",
                    key=event.key,
                    origin=event.origin,
                    error=str(e),
                )

    def listener_count(self, key: Optional[str] = None) -> int:
        if key is None:
            return sum(len(listeners) for listeners in self._listeners.values())
        return len(self._listeners.get(key, []))
