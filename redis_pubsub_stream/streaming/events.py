"""
Lifecycle notifications emitted by a publish stream.
"""

from collections import defaultdict
from enum import Enum
from typing import Any, Callable

Handler = Callable[..., Any]


class StreamEvent(str, Enum):
    """Names of the notifications a stream emits."""

    PAUSE = "pause"
    DRAIN = "drain"
    END = "end"
    CLOSE = "close"
    FLUSH = "flush"
    ERROR = "error"


def _coerce(event: StreamEvent | str) -> StreamEvent:
    try:
        return StreamEvent(event)
    except ValueError:
        raise ValueError(f"Unknown stream event: {event!r}") from None


class EventEmitter:
    """
    Minimal synchronous observer list keyed by StreamEvent.

    Handlers run in registration order on the emitting call. An exception
    raised by a handler propagates to the caller of emit().
    """

    def __init__(self) -> None:
        self._handlers: dict[StreamEvent, list[Handler]] = defaultdict(list)

    def on(self, event: StreamEvent | str, handler: Handler) -> Handler:
        """Register a handler. Returns it so it can be used as a decorator."""
        self._handlers[_coerce(event)].append(handler)
        return handler

    def once(self, event: StreamEvent | str, handler: Handler) -> Handler:
        """Register a handler that is removed after its first call."""
        name = _coerce(event)

        def wrapper(*args: Any) -> Any:
            self.off(name, wrapper)
            return handler(*args)

        wrapper.__wrapped__ = handler  # type: ignore[attr-defined]
        self._handlers[name].append(wrapper)
        return handler

    def off(self, event: StreamEvent | str, handler: Handler) -> None:
        """Remove a handler registered with on() or once(). Unknown handlers are ignored."""
        handlers = self._handlers[_coerce(event)]
        for registered in handlers:
            if registered is handler or getattr(registered, "__wrapped__", None) is handler:
                handlers.remove(registered)
                return

    def emit(self, event: StreamEvent | str, *args: Any) -> bool:
        """Call every handler for an event. Returns True if there were any."""
        handlers = list(self._handlers[_coerce(event)])
        for handler in handlers:
            handler(*args)
        return bool(handlers)

    def listener_count(self, event: StreamEvent | str) -> int:
        return len(self._handlers[_coerce(event)])
