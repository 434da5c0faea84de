"""
Domain models package.

Rich models own invariants and record domain events; database rows
(`petengine.database.models`) are anemic schemas. Services convert between
them.
"""

from .base import (
    AggregateRoot,
    DomainEvent,
    DomainValidationError,
    Entity,
    ValueObject,
    validate_non_negative,
    validate_not_empty,
    validate_positive,
    validate_range,
)
from .breeding import BreedingRecord, BreedingStatus, Egg
from .challenge import ChallengeTemplate, ChallengeType, ClaimReceipt, UserChallenge
from .pet import (
    STAT_MAX,
    STAT_MIN,
    STAT_NAMES,
    DecayWatermarks,
    EvolutionStage,
    Mood,
    Pet,
    PetGenetics,
)

__all__ = [
    "Entity",
    "ValueObject",
    "AggregateRoot",
    "DomainEvent",
    "DomainValidationError",
    "validate_positive",
    "validate_non_negative",
    "validate_range",
    "validate_not_empty",
    "Pet",
    "PetGenetics",
    "DecayWatermarks",
    "EvolutionStage",
    "Mood",
    "STAT_MIN",
    "STAT_MAX",
    "STAT_NAMES",
    "ChallengeType",
    "ChallengeTemplate",
    "UserChallenge",
    "ClaimReceipt",
    "BreedingRecord",
    "BreedingStatus",
    "Egg",
]
