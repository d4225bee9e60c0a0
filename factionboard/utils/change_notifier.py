"""
Change notification for the faction store.

Listeners are zero-argument callables: the signal carries no payload and
consumers re-read whatever snapshot they need.
"""

from typing import Callable, List
from loguru import logger

Listener = Callable[[], None]


class ChangeNotifier:
    """
    Observer list with explicit subscribe/unsubscribe lifetime.

    - Registering the same listener twice keeps a single registration
    - Removing a listener that is not registered is a no-op
    - No batching: every notify() call invokes every listener once
    """

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener.

        Args:
            listener: Zero-argument callback

        Returns:
            Function that removes this listener when called
        """
        if listener not in self._listeners:
            self._listeners.append(listener)

        def unsubscribe():
            self.unsubscribe(listener)

        return unsubscribe

    def unsubscribe(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify(self):
        """Synchronously call every listener registered at call time."""
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception(f"Change listener {listener!r} failed")
