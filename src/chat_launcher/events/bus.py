"""Event bus for backend push events.

Usage:
    bus = EventBus()

    def on_settings_changed(event):
        print(event.data["new_chat_default"])

    bus.subscribe(SETTINGS_CHANGED, on_settings_changed)
    bus.publish(SETTINGS_CHANGED, {"new_chat_default": True})

Handlers are plain callables run synchronously in subscription order, so
two events never interleave inside a handler.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import logging
from typing import Any

LOGGER = logging.getLogger(__name__)


@dataclass
class Event:
    """Event data container."""

    name: str
    data: dict[str, Any] = field(default_factory=dict)
    source: str | None = None


EventHandler = Callable[[Event], Any]


class EventBus:
    """Simple synchronous publish/subscribe bus keyed by topic name."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventHandler]] = {}

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        """Subscribe to an event.

        Args:
            event_name: Topic to listen for (e.g., "settings-changed")
            handler: Function called with the :class:`Event`
        """
        self._subscribers.setdefault(event_name, []).append(handler)
        LOGGER.debug("Subscribed to event: %s", event_name)

    def unsubscribe(self, event_name: str, handler: EventHandler) -> None:
        """Unsubscribe from an event; unknown handlers are ignored."""
        handlers = self._subscribers.get(event_name)
        if handlers and handler in handlers:
            handlers.remove(handler)
            LOGGER.debug("Unsubscribed from event: %s", event_name)

    def publish(
        self,
        event_name: str,
        data: dict[str, Any] | None = None,
        source: str | None = None,
    ) -> int:
        """Publish an event to all subscribers.

        Returns the number of handlers that ran without raising.
        """
        event = Event(name=event_name, data=dict(data or {}), source=source)
        handlers = list(self._subscribers.get(event_name, []))

        if not handlers:
            LOGGER.debug("No subscribers for event: %s", event_name)
            return 0

        delivered = 0
        for handler in handlers:
            try:
                handler(event)
            except Exception as exc:
                LOGGER.error(
                    "bus.handler.failed",
                    extra={
                        "event": "bus.handler.failed",
                        "topic": event_name,
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                    },
                )
            else:
                delivered += 1
        return delivered

    def clear(self, event_name: str | None = None) -> None:
        """Clear subscribers for one topic, or all topics when ``None``."""
        if event_name:
            self._subscribers.pop(event_name, None)
        else:
            self._subscribers.clear()
