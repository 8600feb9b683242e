"""Backend push events: topics, typed payloads, bus and stream listener."""

from .bus import Event, EventBus
from .domain import (
    INJECT_RESULT,
    LAUNCHER_SHOWN,
    RESPONSE_COMPLETE,
    SETTINGS_CHANGED,
    TOPICS,
    InjectResult,
)
from .stream import EventStreamListener

__all__ = [
    "Event",
    "EventBus",
    "EventStreamListener",
    "INJECT_RESULT",
    "InjectResult",
    "LAUNCHER_SHOWN",
    "RESPONSE_COMPLETE",
    "SETTINGS_CHANGED",
    "TOPICS",
]
