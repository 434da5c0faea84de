"""
Domain exceptions for the pet engine.

Purpose
-------
Define the structured, domain-specific exception hierarchy for game logic.
These exceptions are raised by engines and services for business rule
violations, resource constraints, and player-facing errors. Callers (an HTTP
layer, a bot, a CLI) translate them into user-facing messages.

Design Notes
------------
- All domain exceptions inherit from `PetEngineException`.
- Each exception carries:
  - `message`: human-readable description
  - `details`: additional structured context (dict-like)
  - `severity`: `ErrorSeverity` value for logging/alerting
  - `is_retryable`: whether the operation can be retried
  - `error_code`: short, stable identifier for programmatic use
- Challenge claims fail with a distinct exception per reason so that callers
  can tell "not completed" apart from "already claimed".
- Helper functions (`is_transient_error`, `get_error_severity`, `should_alert`)
  centralize common exception handling patterns.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from petengine.core.exceptions import ErrorSeverity


class PetEngineException(Exception):
    """
    Base exception for all domain-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error (dict-like)
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling

    Example:
        >>> raise PetEngineException(
        ...     "Breeding failed",
        ...     {"reason": "parent is an egg"}
        ... )
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
        """String representation for logging."""
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}, "
            f"is_retryable={self.is_retryable!r}"
            ")"
        )


class InsufficientResourcesError(PetEngineException):
    """
    Raised when a user lacks required resources for an action.

    Args:
        resource: Name of the resource type (e.g., "coins")
        required: Amount required for the action
        current: Amount the user currently has
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, resource: str, required: int, current: int) -> None:
        self.resource = resource
        self.required = required
        self.current = current
        message = f"Insufficient {resource}: need {required:,}, have {current:,}"
        super().__init__(
            message,
            details={
                "resource": resource,
                "required": required,
                "current": current,
                "deficit": required - current,
            },
            error_code=f"INSUFFICIENT_{resource.upper()}",
        )


class NotFoundError(PetEngineException):
    """
    Raised when a requested game resource cannot be found.

    Args:
        resource_type: Type of resource (e.g., "Pet", "Egg", "UserChallenge")
        identifier: Optional identifier for the missing resource
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, resource_type: str, identifier: Optional[Any] = None) -> None:
        self.resource_type = resource_type
        self.identifier = identifier

        if identifier is not None:
            message = f"{resource_type} not found: {identifier}"
        else:
            message = f"{resource_type} not found"

        super().__init__(
            message,
            details={
                "resource_type": resource_type,
                "identifier": identifier,
            },
            error_code=f"{resource_type.upper()}_NOT_FOUND",
        )


class ValidationError(PetEngineException):
    """
    Raised when input fails domain validation.

    Args:
        field: Name of the field that failed validation
        message: Explanation of why validation failed
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.validation_message = message
        super().__init__(
            f"Validation error for {field}: {message}",
            details={
                "field": field,
                "validation_message": message,
            },
            error_code=f"VALIDATION_{field.upper()}",
        )


class CooldownActiveError(PetEngineException):
    """
    Raised when an action is on cooldown.

    Args:
        action: Name of the action on cooldown
        remaining_seconds: Time remaining until cooldown expires
    """

    DEFAULT_SEVERITY = ErrorSeverity.DEBUG
    DEFAULT_RETRYABLE = True

    def __init__(self, action: str, remaining_seconds: float) -> None:
        self.action = action
        self.remaining_seconds = remaining_seconds
        message = f"{action} is on cooldown: {remaining_seconds:.1f}s remaining"
        super().__init__(
            message,
            details={
                "action": action,
                "remaining": remaining_seconds,
                "retry_after": remaining_seconds,
            },
            error_code="COOLDOWN_ACTIVE",
            is_retryable=True,
        )


class InvalidOperationError(PetEngineException):
    """
    Raised when a user attempts an action that violates game rules.

    Args:
        action: Description of the invalid action
        reason: Explanation of why it's not allowed

    Example:
        >>> raise InvalidOperationError(
        ...     "start_breeding",
        ...     "Cannot breed a pet with itself"
        ... )
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, action: str, reason: str) -> None:
        self.action = action
        self.reason = reason
        super().__init__(
            f"Invalid operation '{action}': {reason}",
            details={
                "action": action,
                "reason": reason,
            },
            error_code=f"INVALID_{action.upper()}",
        )


class ChallengeNotCompletedError(PetEngineException):
    """
    Raised when claiming a challenge whose target has not been reached.

    Args:
        user_challenge_id: The user challenge the claim targeted
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, user_challenge_id: int) -> None:
        self.user_challenge_id = user_challenge_id
        super().__init__(
            "Challenge not completed",
            details={"user_challenge_id": user_challenge_id},
            error_code="CHALLENGE_NOT_COMPLETED",
        )


class ChallengeAlreadyClaimedError(PetEngineException):
    """
    Raised when a challenge reward has already been paid out.

    Args:
        user_challenge_id: The user challenge the claim targeted
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, user_challenge_id: int) -> None:
        self.user_challenge_id = user_challenge_id
        super().__init__(
            "Reward already claimed",
            details={"user_challenge_id": user_challenge_id},
            error_code="CHALLENGE_ALREADY_CLAIMED",
        )


class MaxPetsReachedError(PetEngineException):
    """
    Raised when a user already owns the maximum number of pets.

    Args:
        owner_id: The user attempting to add a pet
        max_pets: Configured ownership limit
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, owner_id: int, max_pets: int) -> None:
        self.owner_id = owner_id
        self.max_pets = max_pets
        super().__init__(
            f"Maximum of {max_pets} pets reached",
            details={"owner_id": owner_id, "max_pets": max_pets},
            error_code="MAX_PETS_REACHED",
        )


# Utility functions for exception handling patterns


def is_transient_error(exc: Exception) -> bool:
    """
    Check if an exception represents a transient error that can be retried.

    Args:
        exc: Exception to check

    Returns:
        True if error is retryable, False otherwise.
    """
    if isinstance(exc, PetEngineException):
        return exc.is_retryable
    return False


def get_error_severity(exc: Exception) -> ErrorSeverity:
    """
    Get the severity level of an exception for logging.

    Args:
        exc: Exception to check

    Returns:
        ErrorSeverity level.
    """
    if isinstance(exc, PetEngineException):
        return exc.severity
    return ErrorSeverity.ERROR


def should_alert(exc: Exception) -> bool:
    """
    Determine if an exception should trigger alerting.

    Args:
        exc: Exception to check

    Returns:
        True if severity is ERROR or CRITICAL, False otherwise.
    """
    severity = get_error_severity(exc)
    return severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)
