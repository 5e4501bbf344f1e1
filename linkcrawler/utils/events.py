"""
Lightweight notification hooks used to publish crawl events to listeners.
"""

import logging
import threading
from typing import Any, Callable, List


class EventHook:
    """
    A list of listeners that are called synchronously, in subscription
    order, every time the event is emitted.

    Listeners run on the emitting thread. A failing listener is logged
    and does not prevent the remaining listeners from running.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(__name__)
        self._listeners: List[Callable[..., Any]] = []
        self._lock = threading.Lock()

    def connect(self, listener: Callable[..., Any]) -> Callable[..., Any]:
        """Subscribe a listener. Returns the listener so it can be used as a decorator."""
        with self._lock:
            self._listeners.append(listener)
        return listener

    def emit(self, *args: Any):
        """Call every connected listener with the given arguments."""
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(*args)
            except Exception as e:
                self.logger.error(f"Listener for '{self.name}' failed: {e}", exc_info=True)
