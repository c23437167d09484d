"""
Change notification shared by the client stores.
"""
from typing import Callable, List

from InventoryConsole.core.logging import get_logger

logger = get_logger(__name__)

Listener = Callable[[], None]


class ObservableStore:
    """
    Base class for stores that views and aggregators subscribe to.

    Listeners are called synchronously after every state change. A disposed
    store ignores late responses and stops notifying.
    """

    def __init__(self):
        self._listeners: List[Listener] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def is_alive(self) -> bool:
        return not self._disposed

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _notify(self) -> None:
        if self._disposed:
            return
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Store listener %r failed", listener)

    def dispose(self) -> None:
        """Detach listeners; pending responses become no-ops."""
        self._disposed = True
        self._listeners.clear()
