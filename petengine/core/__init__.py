"""
Core infrastructure layer for the pet engine.

Purpose
-------
Provide a single import surface for the infrastructure subsystems:

- Configuration management (Config, ConfigManager)
- Database subsystem (DatabaseService, declarative Base)
- Event bus (EventBus, ListenerPriority)
- Logging (structured logging, logger factory)
- Clock and day-key policies
- Infrastructure exceptions

Design Decisions
----------------
- This module is intentionally thin: no logic, no configuration, no I/O.
- Feature modules import from their own packages, not from petengine.core.
"""

from petengine.core.clock import (
    Clock,
    DayKeyPolicy,
    FixedClock,
    SystemClock,
    offset_day_key,
    utc_day_key,
)
from petengine.core.config import Config, ConfigManager
from petengine.core.database import Base, DatabaseService
from petengine.core.event import EventBus, ListenerPriority
from petengine.core.exceptions import (
    ConfigurationError,
    DatabaseError,
    DatabaseNotInitializedError,
    ErrorSeverity,
    EventBusError,
    PetEngineInfrastructureException,
)
from petengine.core.logging import LogContext, get_logger

__all__ = [
    "Clock",
    "DayKeyPolicy",
    "FixedClock",
    "SystemClock",
    "offset_day_key",
    "utc_day_key",
    "Config",
    "ConfigManager",
    "Base",
    "DatabaseService",
    "EventBus",
    "ListenerPriority",
    "ConfigurationError",
    "DatabaseError",
    "DatabaseNotInitializedError",
    "ErrorSeverity",
    "EventBusError",
    "PetEngineInfrastructureException",
    "LogContext",
    "get_logger",
]
