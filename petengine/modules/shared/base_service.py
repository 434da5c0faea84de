"""
Base Service Foundation

Purpose
-------
Foundation for the async orchestration services. Services compose the
pure engines (decay, progression, genetics, challenge tracking) around
repositories, enforce business rules, and emit events.

Design Notes
------------
This base class provides:
- Structured logging with operation context
- Safe config access patterns
- Event emission helpers, including draining an entity's domain events
- Validation helpers raising `ValidationError`

What this class does NOT do:
- Manage database transactions (repositories and DatabaseService do)
- Contain game-specific logic

Usage
-----
    class CareService(BaseService):
        def __init__(self, pets, challenges, wallet, clock, config_manager, event_bus, logger):
            super().__init__(config_manager, event_bus, logger)
            ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from petengine.core.exceptions import ConfigurationError

from .exceptions import ValidationError

if TYPE_CHECKING:
    from logging import Logger

    from petengine.core.config.manager import ConfigManager
    from petengine.core.event.bus import EventBus
    from petengine.domain.models.base import Entity


class BaseService:
    """
    Base class for all domain services.

    Args:
        config_manager: Game-balance configuration (class or instance)
        event_bus: Event bus for cross-module communication
        logger: Structured logger instance
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self._config = config_manager
        self._events = event_bus
        self.log = logger

    def get_config(self, key: str, default: Optional[Any] = None, required: bool = False) -> Any:
        """
        Safely retrieve a configuration value.

        Raises:
            ConfigurationError: If required=True and key is missing
        """
        value = self._config.get(key, default)
        if required and value is None:
            raise ConfigurationError(key, f"Required configuration key '{key}' is missing")
        return value

    async def emit_event(
        self,
        event_type: str,
        data: Dict[str, Any],
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        await self._events.publish(event_type, {**data, **(context or {})})

    async def publish_domain_events(self, entity: Entity) -> int:
        """Publish and clear the entity's pending domain events. Returns the count."""
        events = entity.clear_domain_events()
        for event in events:
            await self._events.publish(
                event.event_name,
                {**event.payload, "occurred_at": event.occurred_at.isoformat()},
            )
        return len(events)

    def log_operation(self, operation: str, **context: Any) -> None:
        self.log.info(
            f"Service operation: {operation}",
            extra={"operation": operation, **context},
        )

    def validate_positive_int(self, value: int, name: str) -> None:
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise ValidationError(name, f"{name} must be a positive integer, got {value}")

    def validate_range(self, value: int, name: str, min_val: int, max_val: int) -> None:
        """
        Raises:
            ValidationError: If value is outside [min_val, max_val]
        """
        if not (min_val <= value <= max_val):
            raise ValidationError(name, f"{name} must be between {min_val} and {max_val}, got {value}")
