import logging
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)


class EventEmitter:
    """
    Minimal synchronous event emitter.
    Callbacks run on the emitting thread, in registration order. A failing
    listener is logged and skipped so it cannot abort a catalog load.
    Listeners must not call load()/unload() on the emitting catalog.
    """
    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = {}

    def on(self, event_name: str, callback: Callable):
        """Register a callback for an event."""
        self._listeners.setdefault(event_name, []).append(callback)

    def off(self, event_name: str, callback: Callable):
        """Unregister a callback. Unknown callbacks are ignored."""
        callbacks = self._listeners.get(event_name)
        if callbacks and callback in callbacks:
            callbacks.remove(callback)

    def emit(self, event_name: str, *args, **kwargs):
        for callback in list(self._listeners.get(event_name, ())):
            try:
                callback(*args, **kwargs)
            except Exception:
                logger.exception(f"Error in listener for '{event_name}'")

    def clear(self):
        """Remove all listeners."""
        self._listeners.clear()
