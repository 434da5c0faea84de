"""Event bus package: async pub/sub used by services to announce game events."""

from petengine.core.event.bus import EventBus, EventMetrics
from petengine.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)

__all__ = [
    "EventBus",
    "EventMetrics",
    "EventListener",
    "EventPayload",
    "CallbackType",
    "ListenerPriority",
]
