"""
Base domain model classes for the pet engine.

Purpose
-------
Foundational abstractions for rich domain models that own their
invariants and record domain events for services to publish.

Responsibilities
----------------
- Base Entity class with identity and equality semantics
- Base ValueObject class for immutable value types
- Base AggregateRoot class for consistency boundaries
- Validation helpers that raise `DomainValidationError`
- Pending domain events for the event bus

Non-Responsibilities
--------------------
- Persistence (repositories)
- Publishing events (services drain `clear_domain_events()`)
- Balance values (passed in by engines and services)

Usage Example
-------------
>>> class Pet(AggregateRoot):
...     def level_up(self) -> None:
...         self.level += 1
...         self.add_domain_event("pet.leveled_up", {"pet_id": self.id, "new_level": self.level})
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


# ============================================================================
# DOMAIN EVENTS
# ============================================================================


@dataclass
class DomainEvent:
    """
    A state change recorded by an entity.

    Attributes
    ----------
    event_name : str
        Event name (e.g., "pet.evolved")
    payload : Dict[str, Any]
        Event payload with relevant data
    occurred_at : datetime
        When the event was recorded (UTC)
    """

    event_name: str
    payload: Dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


# ============================================================================
# VALUE OBJECT
# ============================================================================


class ValueObject(ABC):
    """
    Base class for immutable value objects.

    Equality is attribute-based. Frozen dataclasses that need structural
    equality get it from `@dataclass(frozen=True)` instead.
    """

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.__dict__.items())))

    def _validate(self) -> None:
        """Validate invariants; subclasses override."""


# ============================================================================
# ENTITY
# ============================================================================


class Entity(ABC):
    """
    Base class for entities with identity.

    Two entities with the same ID are the same entity even when their
    attributes differ. Entities record domain events for significant
    transitions; the owning service publishes and clears them.
    """

    def __init__(self, entity_id: int) -> None:
        self._id = entity_id
        self._domain_events: List[DomainEvent] = []

    @property
    def id(self) -> int:
        return self._id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity) or type(self) is not type(other):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))

    def add_domain_event(self, event_name: str, payload: Dict[str, Any]) -> None:
        """
        Record a domain event to be published.

        Examples
        --------
        >>> self.add_domain_event("pet.evolved", {
        ...     "pet_id": self.id,
        ...     "old_stage": 0,
        ...     "new_stage": 1,
        ... })
        """
        self._domain_events.append(DomainEvent(event_name=event_name, payload=payload))

    def clear_domain_events(self) -> List[DomainEvent]:
        """Return all pending events and forget them."""
        events = self._domain_events.copy()
        self._domain_events.clear()
        return events

    def get_pending_events(self) -> List[DomainEvent]:
        return self._domain_events.copy()


# ============================================================================
# AGGREGATE ROOT
# ============================================================================


class AggregateRoot(Entity):
    """
    Entry point for all changes to a cluster of domain objects.

    External objects reference aggregates by ID only; invariants spanning
    the aggregate are enforced by its methods.
    """


# ============================================================================
# DOMAIN MODEL VALIDATION
# ============================================================================


class DomainValidationError(Exception):
    """Raised when a domain model invariant is violated."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


def validate_positive(value: int, field_name: str) -> None:
    """
    Raises
    ------
    DomainValidationError
        If value is not positive
    """
    if value <= 0:
        raise DomainValidationError(
            f"{field_name} must be positive, got {value}",
            field=field_name,
        )


def validate_non_negative(value: int, field_name: str) -> None:
    """
    Raises
    ------
    DomainValidationError
        If value is negative
    """
    if value < 0:
        raise DomainValidationError(
            f"{field_name} must be non-negative, got {value}",
            field=field_name,
        )


def validate_range(value: int, min_val: int, max_val: int, field_name: str) -> None:
    """
    Validate that `min_val <= value <= max_val`.

    Raises
    ------
    DomainValidationError
        If value is outside the range
    """
    if not (min_val <= value <= max_val):
        raise DomainValidationError(
            f"{field_name} must be between {min_val} and {max_val}, got {value}",
            field=field_name,
        )


def validate_not_empty(value: str, field_name: str) -> None:
    """
    Raises
    ------
    DomainValidationError
        If value is empty or whitespace-only
    """
    if not value or not value.strip():
        raise DomainValidationError(
            f"{field_name} cannot be empty",
            field=field_name,
        )
