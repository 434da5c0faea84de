"""
Shared module foundations.

- BaseService: logging, config access, event emission for services
- BaseRepository: generic SQLAlchemy async data access
- Domain exceptions: player-facing errors and business rule violations
- Formulas: pure calculation helpers
"""

from __future__ import annotations

from .base_repository import BaseRepository
from .base_service import BaseService
from .exceptions import (
    ChallengeAlreadyClaimedError,
    ChallengeNotCompletedError,
    CooldownActiveError,
    InsufficientResourcesError,
    InvalidOperationError,
    MaxPetsReachedError,
    NotFoundError,
    PetEngineException,
    ValidationError,
    get_error_severity,
    is_transient_error,
    should_alert,
)

__all__ = [
    "BaseRepository",
    "BaseService",
    "PetEngineException",
    "ChallengeAlreadyClaimedError",
    "ChallengeNotCompletedError",
    "CooldownActiveError",
    "InsufficientResourcesError",
    "InvalidOperationError",
    "MaxPetsReachedError",
    "NotFoundError",
    "ValidationError",
    "get_error_severity",
    "is_transient_error",
    "should_alert",
]
