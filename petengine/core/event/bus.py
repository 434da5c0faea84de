"""
Async pub/sub event bus for the pet engine.

Services publish game events ("pet.leveled_up", "challenge.claimed", ...)
without knowing who listens. The bus is instance-based so each service
graph (and each test) owns its own listeners.

Features
--------
- Priority-based listener execution (CRITICAL > HIGH > NORMAL > LOW)
- Error isolation: a failing listener is logged and skipped
- One-time listeners (automatically unsubscribed after first delivery)
- Duplicate prevention by listener identifier
- Wildcard patterns ("pet.*", "*.claimed", "*")
- Sync callbacks run in the default executor
- Metrics summary (events published, listener errors)

Usage
-----
    bus = EventBus()
    bus.subscribe("pet.*", on_pet_event, priority=ListenerPriority.HIGH)
    await bus.publish("pet.leveled_up", {"pet_id": 1, "new_level": 5})
"""

from __future__ import annotations

import asyncio
import fnmatch
import inspect
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from petengine.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)
from petengine.core.exceptions import EventBusError
from petengine.core.logging.logger import get_logger

logger = get_logger(__name__)


@dataclass
class EventMetrics:
    """Counters for event bus operations."""

    events_published: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    listener_errors: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    total_listeners: int = 0

    def record_publish(self, event_name: str) -> None:
        self.events_published[event_name] += 1

    def record_error(self, event_name: str) -> None:
        self.listener_errors[event_name] += 1

    def get_summary(self) -> Dict[str, Any]:
        published = sum(self.events_published.values())
        errors = sum(self.listener_errors.values())
        return {
            "total_events_published": published,
            "events_by_type": dict(self.events_published),
            "total_errors": errors,
            "errors_by_event": dict(self.listener_errors),
            "total_listeners": self.total_listeners,
            "error_rate": errors / max(1, published) * 100,
        }


class EventBus:
    """
    Async pub/sub event bus.

    Listeners for one event run sequentially in priority order; registration
    order breaks ties. Designed for single-threaded asyncio usage.
    """

    def __init__(self, *, enable_metrics: bool = True) -> None:
        self._listeners: Dict[str, List[EventListener]] = {}
        self._wildcard_listeners: List[tuple[str, EventListener]] = []
        self._metrics: Optional[EventMetrics] = EventMetrics() if enable_metrics else None

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def subscribe(
        self,
        event_name: str,
        callback: CallbackType,
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
        once: bool = False,
        allow_duplicates: bool = False,
    ) -> str:
        """
        Subscribe a callback to an event name or wildcard pattern.

        Returns
        -------
        str
            Listener identifier for later `unsubscribe()`.

        Raises
        ------
        EventBusError
            If the event name is empty or the callback is not callable.
        """
        if not event_name:
            raise EventBusError(event_name, "event name cannot be empty")
        if not callable(callback):
            raise EventBusError(event_name, "callback must be callable")

        listener = EventListener.from_callback(
            callback, priority=priority, identifier=identifier, once=once
        )

        if not allow_duplicates and self._is_registered(event_name, listener.identifier):
            logger.warning(
                "Duplicate listener prevented",
                extra={"event_name": event_name, "listener_id": listener.identifier},
            )
            return listener.identifier

        if "*" in event_name:
            self._wildcard_listeners.append((event_name, listener))
            self._wildcard_listeners.sort(key=lambda item: item[1].priority.value)
        else:
            bucket = self._listeners.setdefault(event_name, [])
            bucket.append(listener)
            bucket.sort(key=lambda item: item.priority.value)

        if self._metrics:
            self._metrics.total_listeners += 1

        logger.debug(
            "Listener subscribed",
            extra={
                "event_name": event_name,
                "listener_id": listener.identifier,
                "priority": priority.name,
                "once": once,
            },
        )
        return listener.identifier

    def _is_registered(self, event_name: str, identifier: str) -> bool:
        if "*" in event_name:
            return any(
                pattern == event_name and existing.identifier == identifier
                for pattern, existing in self._wildcard_listeners
            )
        return any(existing.identifier == identifier for existing in self._listeners.get(event_name, []))

    def unsubscribe(self, event_name: str, identifier: str) -> bool:
        """Remove a listener. Returns True if one was removed."""
        removed = False

        if event_name in self._listeners:
            before = len(self._listeners[event_name])
            self._listeners[event_name] = [
                listener for listener in self._listeners[event_name] if listener.identifier != identifier
            ]
            removed = len(self._listeners[event_name]) < before
            if not self._listeners[event_name]:
                del self._listeners[event_name]

        if not removed:
            before = len(self._wildcard_listeners)
            self._wildcard_listeners = [
                (pattern, listener)
                for pattern, listener in self._wildcard_listeners
                if not (pattern == event_name and listener.identifier == identifier)
            ]
            removed = len(self._wildcard_listeners) < before

        if removed:
            if self._metrics:
                self._metrics.total_listeners -= 1
            logger.debug(
                "Listener unsubscribed",
                extra={"event_name": event_name, "listener_id": identifier},
            )
        return removed

    def clear(self) -> None:
        """Remove all listeners."""
        self._listeners.clear()
        self._wildcard_listeners.clear()
        if self._metrics:
            self._metrics.total_listeners = 0

    # ------------------------------------------------------------------ #
    # Publishing
    # ------------------------------------------------------------------ #

    async def publish(self, event_name: str, data: EventPayload) -> List[Any]:
        """
        Deliver `data` to every listener matching `event_name`.

        Returns
        -------
        List[Any]
            Listener return values in execution order (None for failures).
        """
        if self._metrics:
            self._metrics.record_publish(event_name)

        listeners: List[tuple[str, EventListener]] = [
            (event_name, listener) for listener in self._listeners.get(event_name, [])
        ]
        listeners.extend(
            (pattern, listener)
            for pattern, listener in self._wildcard_listeners
            if self._matches_wildcard(event_name, pattern)
        )
        # sort() is stable, so exact listeners precede wildcard ones on ties
        listeners.sort(key=lambda item: item[1].priority.value)

        if not listeners:
            logger.debug("No listeners for event", extra={"event_name": event_name})
            return []

        return await self._execute_listeners(event_name, data, listeners)

    async def _execute_listeners(
        self,
        event_name: str,
        data: EventPayload,
        listeners: List[tuple[str, EventListener]],
    ) -> List[Any]:
        results: List[Any] = []
        spent: List[tuple[str, str]] = []

        for registered_as, listener in listeners:
            if listener.once:
                # Remove before awaiting so a re-entrant publish cannot fire it twice
                if not self.unsubscribe(registered_as, listener.identifier):
                    continue
                spent.append((registered_as, listener.identifier))
            try:
                if inspect.iscoroutinefunction(listener.callback):
                    result = await listener.callback(data)
                else:
                    loop = asyncio.get_running_loop()
                    result = await loop.run_in_executor(None, listener.callback, data)
                    if inspect.isawaitable(result):
                        result = await result
                results.append(result)
            except Exception as exc:
                if self._metrics:
                    self._metrics.record_error(event_name)
                logger.error(
                    "Event listener failed",
                    exc_info=True,
                    extra={
                        "event_name": event_name,
                        "listener_id": listener.identifier,
                        "error_type": type(exc).__name__,
                    },
                )
                results.append(None)

        if spent:
            logger.debug(
                "One-time listeners removed",
                extra={"event_name": event_name, "listener_ids": [identifier for _, identifier in spent]},
            )
        return results

    @staticmethod
    def _matches_wildcard(event_name: str, pattern: str) -> bool:
        return fnmatch.fnmatchcase(event_name, pattern)

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def get_metrics_summary(self) -> Dict[str, Any]:
        return self._metrics.get_summary() if self._metrics else {}

    def get_listener_count(self, event_name: Optional[str] = None) -> int:
        if event_name is None:
            return sum(len(bucket) for bucket in self._listeners.values()) + len(self._wildcard_listeners)
        count = len(self._listeners.get(event_name, []))
        count += sum(
            1 for pattern, _ in self._wildcard_listeners if self._matches_wildcard(event_name, pattern)
        )
        return count

    def get_all_events(self) -> List[str]:
        events = list(self._listeners.keys())
        events.extend(pattern for pattern, _ in self._wildcard_listeners)
        return sorted(set(events))


__all__ = ["EventBus", "EventMetrics"]
