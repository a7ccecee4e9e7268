"""
Observable base for UI-facing bindings.
"""

from typing import Callable, List

import structlog

logger = structlog.get_logger()


class Observable:
    """Minimal subscribe/notify support; listeners receive the binding."""

    def __init__(self):
        self._subscribers: List[Callable[["Observable"], None]] = []

    def subscribe(self, callback: Callable[["Observable"], None]) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            A callable that removes the listener
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self)
            except Exception as e:
                logger.warning(
                    "Binding subscriber failed",
                    binding=type(self).__name__,
                    error=str(e),
                )
