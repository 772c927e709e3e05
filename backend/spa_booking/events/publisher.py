"""Event publisher - dispatches committed booking events to in-process handlers."""
from datetime import datetime
import logging
from typing import Any, Callable, Dict, List, Protocol

logger = logging.getLogger(__name__)


class Event(Protocol):
    """Protocol for event types."""

    def to_dict(self) -> Dict[str, Any]:
        ...


EventHandler = Callable[[Event], None]


class EventPublisher:
    """
    Publishes domain events to registered handlers.

    Events are only published after the transaction that produced them has
    committed. Email and calendar collaborators subscribe by event class
    name; a failing handler is logged and never affects the caller or the
    remaining handlers.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = {}

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: Event) -> None:
        event_type = type(event).__name__
        payload = event.to_dict()

        # Convert datetime objects to ISO strings for the log line
        for key, value in payload.items():
            if isinstance(value, datetime):
                payload[key] = value.isoformat()

        logger.info("event:%s %s", event_type, payload)

        for handler in list(self._handlers.get(event_type, [])):
            try:
                handler(event)
            except Exception:
                logger.exception("Handler %r failed for event:%s", handler, event_type)


_default_publisher = EventPublisher()


def get_event_publisher() -> EventPublisher:
    """Process-wide publisher shared by request-scoped services."""
    return _default_publisher
