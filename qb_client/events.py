"""
Minimal event bus for client notifications.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

Handler = Callable[..., Any]


class EventBus:
    """
    Per-instance observer registry.

    Handlers run synchronously in registration order. A handler that raises
    stops the emit and the exception reaches the emitter.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)

    def on(self, event: str, handler: Handler) -> Handler:
        self._handlers[event].append(handler)
        return handler

    def once(self, event: str, handler: Handler) -> Handler:
        """Register a handler that is removed after its first call."""
        def wrapper(*args, **kwargs):
            self.off(event, wrapper)
            return handler(*args, **kwargs)

        wrapper.__wrapped__ = handler
        return self.on(event, wrapper)

    def off(self, event: str, handler: Optional[Handler] = None):
        """Remove one handler, or every handler for the event."""
        if handler is None:
            self._handlers.pop(event, None)
            return

        # once() handlers are stored wrapped; match the original too
        handlers = self._handlers.get(event, [])
        for registered in handlers:
            if registered is handler or getattr(registered, '__wrapped__', None) is handler:
                handlers.remove(registered)
                return

    def emit(self, event: str, *args, **kwargs) -> int:
        """
        Call every handler registered for an event.

        Returns:
            Number of handlers called
        """
        handlers = list(self._handlers.get(event, []))
        for handler in handlers:
            handler(*args, **kwargs)
        return len(handlers)

    def listeners(self, event: str) -> List[Handler]:
        return list(self._handlers.get(event, []))
