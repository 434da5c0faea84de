"""
Core event types for the pet engine EventBus.

- `EventPayload`: plain dict, JSON-serializable by convention.
- `ListenerPriority`: lower value executes first.
- `EventListener`: registration record produced by `from_callback()`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

EventPayload = dict[str, Any]


class ListenerPriority(Enum):
    """
    Priority levels for event listeners.

    CRITICAL and HIGH listeners are meant for state that other listeners
    depend on (e.g. ledgers); NORMAL for notifications; LOW for analytics.
    """

    CRITICAL = 0
    HIGH = 10
    NORMAL = 50
    LOW = 100


CallbackType = Union[
    Callable[[EventPayload], Any],
    Callable[[EventPayload], Awaitable[Any]],
]


@dataclass(slots=True, frozen=True)
class EventListener:
    """A registered listener for one event name or wildcard pattern."""

    callback: CallbackType
    priority: ListenerPriority
    identifier: str
    once: bool = False

    @classmethod
    def from_callback(
        cls,
        callback: CallbackType,
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
        once: bool = False,
    ) -> "EventListener":
        if identifier is None:
            module = getattr(callback, "__module__", "unknown")
            qualname = getattr(callback, "__qualname__", repr(callback))
            identifier = f"{module}.{qualname}"
        return cls(callback=callback, priority=priority, identifier=identifier, once=once)


__all__ = ["EventPayload", "ListenerPriority", "CallbackType", "EventListener"]
