"""
Infrastructure exceptions for the pet engine.

Purpose
-------
Define the structured exception hierarchy for infrastructure-level concerns:
database failures, configuration errors, and event delivery problems that
require technical attention rather than a player-facing message.

Design Notes
------------
- All infrastructure exceptions inherit from `PetEngineInfrastructureException`.
- Each exception carries:
  - `message`: human-readable description
  - `details`: additional structured context (dict)
  - `severity`: `ErrorSeverity` value for logging/alerting
  - `is_retryable`: whether the operation can be retried
  - `error_code`: short, stable identifier for programmatic use
- Game-rule violations live in `petengine.modules.shared.exceptions`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels for logging and alerting."""

    DEBUG = "debug"  # Expected, not concerning (e.g., cooldowns)
    INFO = "info"  # Normal operation (e.g., validation failures)
    WARNING = "warning"  # Concerning but handled (e.g., retryable errors)
    ERROR = "error"  # Unexpected errors requiring attention
    CRITICAL = "critical"  # System-level failures requiring immediate action


class PetEngineInfrastructureException(Exception):
    """
    Base exception for all infrastructure-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"


class ConfigurationError(PetEngineInfrastructureException):
    """
    Raised when a configuration key is invalid or missing.

    Args:
        config_key: The configuration key that has issues
        message: Description of the configuration problem
    """

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, config_key: str, message: str) -> None:
        self.config_key = config_key
        super().__init__(
            f"Configuration error for {config_key}: {message}",
            details={"config_key": config_key, "message": message},
            error_code="CONFIG_ERROR",
        )


class DatabaseError(PetEngineInfrastructureException):
    """
    Raised when database operations fail.

    Args:
        operation: Description of the database operation that failed
        original_error: The underlying database exception
    """

    DEFAULT_RETRYABLE = True

    def __init__(self, operation: str, original_error: Exception) -> None:
        self.operation = operation
        self.original_error = original_error
        super().__init__(
            f"Database error during {operation}: {original_error}",
            details={
                "operation": operation,
                "error": str(original_error),
                "error_type": type(original_error).__name__,
            },
            error_code="DATABASE_ERROR",
        )


class DatabaseNotInitializedError(PetEngineInfrastructureException):
    """Raised when a session is requested before `DatabaseService.initialize()`."""

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self) -> None:
        super().__init__(
            "DatabaseService is not initialized",
            error_code="DATABASE_NOT_INITIALIZED",
        )


class EventBusError(PetEngineInfrastructureException):
    """
    Raised when an event listener cannot be registered.

    Args:
        event_name: Event the failure relates to
        reason: Why the operation failed
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING

    def __init__(self, event_name: str, reason: str) -> None:
        self.event_name = event_name
        super().__init__(
            f"Event bus error for '{event_name}': {reason}",
            details={"event_name": event_name, "reason": reason},
            error_code="EVENT_BUS_ERROR",
        )
