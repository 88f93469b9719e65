"""Thread-safe observer list.

Shared by the strand store and the discovery responders so that each
keeps its own observers without duplicating registration code.
"""

import logging
from threading import Lock
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=object)


class ObserverManager(Generic[T]):
    """
    Observer list with thread-safe registration and notification.

    Type Parameters:
        T: The observer protocol type (e.g., StrandObserver)

    Thread Safety:
        The lock only guards the list. It is released before observer
        callbacks run, so callbacks may register or unregister observers.

    Example:
        ```python
        class StrandStore:
            def __init__(self):
                self._observers = ObserverManager[StrandObserver](observer_type_name="strand")

            def _notify(self, event, channel):
                self._observers.notify("on_strand_event", event, channel)
        ```
    """

    def __init__(self, observer_type_name: str = "observer"):
        self._observers: list[T] = []
        self._lock = Lock()
        self._observer_type_name = observer_type_name

    def register(self, observer: T) -> None:
        """Register an observer (idempotent)."""
        with self._lock:
            if observer in self._observers:
                logger.debug(f"{self._observer_type_name} observer already registered: {observer}")
                return
            self._observers.append(observer)
        logger.debug(f"Registered {self._observer_type_name} observer: {observer}")

    def unregister(self, observer: T) -> None:
        """Unregister an observer; unknown observers are logged and ignored."""
        with self._lock:
            if observer not in self._observers:
                logger.warning(
                    f"Attempted to unregister unknown {self._observer_type_name} observer: {observer}"
                )
                return
            self._observers.remove(observer)
        logger.debug(f"Unregistered {self._observer_type_name} observer: {observer}")

    def notify(self, callback_name: str, *args: Any, **kwargs: Any) -> None:
        """
        Call `callback_name` on every registered observer.

        Exceptions raised by one observer are logged and do not stop the
        others from being notified.
        """
        with self._lock:
            observers = list(self._observers)

        for observer in observers:
            try:
                getattr(observer, callback_name)(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Error notifying {self._observer_type_name} observer {observer} via {callback_name}: {e}",
                    exc_info=True,
                )

    def clear(self) -> None:
        """Remove all registered observers."""
        with self._lock:
            self._observers.clear()

    def __contains__(self, observer: T) -> bool:
        with self._lock:
            return observer in self._observers

    def __len__(self) -> int:
        with self._lock:
            return len(self._observers)
