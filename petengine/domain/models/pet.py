"""
Pet domain model.

Purpose
-------
Rich aggregate for a single pet: needs (hunger, happiness, cleanliness,
energy, health), progression (level, xp, evolution stage), per-stat decay
watermarks, care-action timestamps, and immutable genetics.

Responsibilities
----------------
- Keep every stat clamped to [STAT_MIN, STAT_MAX]
- Keep the evolution stage non-decreasing
- Keep decay watermarks from moving backward
- Record domain events (pet.leveled_up, pet.evolved, pet.became_sick)

Non-Responsibilities
--------------------
- Computing decay or progression (pure engines produce results that the
  pet applies via `apply_decay` / `apply_progression`)
- Persistence (repositories)

Usage Example
-------------
>>> result = compute_decay(pet, now)
>>> pet.apply_decay(result)
>>> pet.apply_progression(apply_xp(pet.level, pet.xp, pet.evolution_stage, 10), xp_gained=10)
>>> for event in pet.clear_domain_events():
...     await event_bus.publish(event.event_name, event.payload)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from petengine.core.clock import ensure_utc
from petengine.domain.models.base import (
    AggregateRoot,
    DomainValidationError,
    validate_non_negative,
    validate_not_empty,
    validate_positive,
    validate_range,
)
from petengine.modules.shared.formulas import clamp

if TYPE_CHECKING:
    from petengine.modules.decay.calculator import DecayResult
    from petengine.modules.progression.engine import ProgressionResult

STAT_MIN = 0
STAT_MAX = 100

STAT_NAMES = ("hunger", "happiness", "cleanliness", "energy", "health")


class EvolutionStage(IntEnum):
    BABY = 0
    CHILD = 1
    TEEN = 2
    ADULT = 3


class Mood(str, Enum):
    HAPPY = "happy"
    NEUTRAL = "neutral"
    SAD = "sad"
    SLEEPING = "sleeping"


# ============================================================================
# VALUE OBJECTS
# ============================================================================


@dataclass(frozen=True)
class PetGenetics:
    """
    Immutable genetic lineage of a pet.

    Attributes
    ----------
    color, pattern : str
        Visible traits (normal palette or rare mutation set)
    is_mutation : bool
        True only when the pet itself rolled a mutation at birth
    parent1_id, parent2_id : Optional[int]
        Parents for bred pets; None for adopted pets
    """

    color: str
    pattern: str
    is_mutation: bool = False
    parent1_id: Optional[int] = None
    parent2_id: Optional[int] = None

    def __post_init__(self) -> None:
        validate_not_empty(self.color, "color")
        validate_not_empty(self.pattern, "pattern")
        if (self.parent1_id is None) != (self.parent2_id is None):
            raise DomainValidationError("a bred pet needs both parents", field="parent2_id")


@dataclass(frozen=True)
class DecayWatermarks:
    """Per-stat instants up to which decay has been processed."""

    hunger: datetime
    happiness: datetime
    cleanliness: datetime
    health: datetime

    @classmethod
    def starting_at(cls, moment: datetime) -> "DecayWatermarks":
        moment = ensure_utc(moment)
        return cls(hunger=moment, happiness=moment, cleanliness=moment, health=moment)


# ============================================================================
# PET AGGREGATE ROOT
# ============================================================================


class Pet(AggregateRoot):
    """
    Pet aggregate root.

    Business Rules
    --------------
    - Stats stay within [0, 100]; `is_sick` is true iff health is 0
    - Evolution stage never decreases
    - Decay watermarks never move backward
    - Genetics are fixed at creation

    Domain Events
    -------------
    - pet.leveled_up: level increased
    - pet.evolved: evolution stage increased
    - pet.became_sick: health dropped to 0
    """

    def __init__(
        self,
        pet_id: int,
        owner_id: int,
        name: str,
        pet_type: str,
        genetics: PetGenetics,
        created_at: datetime,
        *,
        level: int = 1,
        xp: int = 0,
        evolution_stage: int = EvolutionStage.BABY,
        hunger: int = STAT_MAX,
        happiness: int = STAT_MAX,
        cleanliness: int = STAT_MAX,
        energy: int = STAT_MAX,
        health: int = STAT_MAX,
        watermarks: Optional[DecayWatermarks] = None,
        last_fed: Optional[datetime] = None,
        last_played: Optional[datetime] = None,
        last_cleaned: Optional[datetime] = None,
        mood: Mood = Mood.HAPPY,
    ) -> None:
        super().__init__(pet_id)
        validate_positive(owner_id, "owner_id")
        validate_not_empty(name, "name")
        validate_not_empty(pet_type, "type")
        validate_positive(level, "level")
        validate_non_negative(xp, "xp")
        validate_range(int(evolution_stage), EvolutionStage.BABY, EvolutionStage.ADULT, "evolution_stage")
        for stat_name, value in (
            ("hunger", hunger),
            ("happiness", happiness),
            ("cleanliness", cleanliness),
            ("energy", energy),
            ("health", health),
        ):
            validate_range(value, STAT_MIN, STAT_MAX, stat_name)

        self.owner_id = owner_id
        self.name = name
        self.type = pet_type
        self.genetics = genetics
        self.created_at = ensure_utc(created_at)

        self.level = level
        self.xp = xp
        self.evolution_stage = EvolutionStage(evolution_stage)

        self.hunger = hunger
        self.happiness = happiness
        self.cleanliness = cleanliness
        self.energy = energy
        self.health = health
        self.is_sick = health == 0

        marks = watermarks or DecayWatermarks.starting_at(self.created_at)
        self.last_hunger_decay = ensure_utc(marks.hunger)
        self.last_happiness_decay = ensure_utc(marks.happiness)
        self.last_cleanliness_decay = ensure_utc(marks.cleanliness)
        self.last_health_decay = ensure_utc(marks.health)

        self.last_fed = ensure_utc(last_fed) if last_fed else None
        self.last_played = ensure_utc(last_played) if last_played else None
        self.last_cleaned = ensure_utc(last_cleaned) if last_cleaned else None
        self.mood = Mood(mood)

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    @property
    def color(self) -> str:
        return self.genetics.color

    @property
    def pattern(self) -> str:
        return self.genetics.pattern

    @property
    def is_mutation(self) -> bool:
        return self.genetics.is_mutation

    @property
    def parent1_id(self) -> Optional[int]:
        return self.genetics.parent1_id

    @property
    def parent2_id(self) -> Optional[int]:
        return self.genetics.parent2_id

    @property
    def watermarks(self) -> DecayWatermarks:
        return DecayWatermarks(
            hunger=self.last_hunger_decay,
            happiness=self.last_happiness_decay,
            cleanliness=self.last_cleanliness_decay,
            health=self.last_health_decay,
        )

    def stats(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in STAT_NAMES}

    def is_owned_by(self, owner_id: int) -> bool:
        return self.owner_id == owner_id

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def apply_decay(self, result: DecayResult) -> None:
        """
        Apply a decay result computed for this pet.

        Watermarks only move forward; a result computed from stale state
        cannot rewind them.
        """
        was_sick = self.is_sick

        self.hunger = clamp(result.hunger, STAT_MIN, STAT_MAX)
        self.happiness = clamp(result.happiness, STAT_MIN, STAT_MAX)
        self.cleanliness = clamp(result.cleanliness, STAT_MIN, STAT_MAX)
        self.health = clamp(result.health, STAT_MIN, STAT_MAX)
        self.is_sick = self.health == 0

        self.last_hunger_decay = max(self.last_hunger_decay, ensure_utc(result.last_hunger_decay))
        self.last_happiness_decay = max(self.last_happiness_decay, ensure_utc(result.last_happiness_decay))
        self.last_cleanliness_decay = max(
            self.last_cleanliness_decay, ensure_utc(result.last_cleanliness_decay)
        )
        # The health watermark legitimately resets to `now`, which is still forward
        self.last_health_decay = max(self.last_health_decay, ensure_utc(result.last_health_decay))

        if self.is_sick and not was_sick:
            self.add_domain_event(
                "pet.became_sick",
                {"pet_id": self.id, "owner_id": self.owner_id},
            )

    def apply_progression(self, result: ProgressionResult, xp_gained: int) -> None:
        """Apply a progression result; records level-up and evolution events."""
        old_level = self.level
        old_stage = self.evolution_stage

        if result.new_stage < old_stage:
            raise DomainValidationError(
                f"evolution stage cannot decrease ({old_stage} -> {result.new_stage})",
                field="evolution_stage",
            )

        self.level = result.new_level
        self.xp = result.new_xp
        self.evolution_stage = EvolutionStage(result.new_stage)

        if result.leveled_up:
            self.add_domain_event(
                "pet.leveled_up",
                {
                    "pet_id": self.id,
                    "owner_id": self.owner_id,
                    "old_level": old_level,
                    "new_level": self.level,
                    "xp_gained": xp_gained,
                },
            )
        if result.evolved:
            self.add_domain_event(
                "pet.evolved",
                {
                    "pet_id": self.id,
                    "owner_id": self.owner_id,
                    "old_stage": old_stage.name.lower(),
                    "new_stage": self.evolution_stage.name.lower(),
                },
            )

    def apply_stat_deltas(self, deltas: Mapping[str, int]) -> Dict[str, int]:
        """
        Add `deltas` to the named stats, clamping each one.

        Returns
        -------
        Dict[str, int]
            The resulting value of every touched stat.

        Raises
        ------
        DomainValidationError
            If a delta names an unknown stat.
        """
        changed: Dict[str, int] = {}
        for stat_name, delta in deltas.items():
            if stat_name not in STAT_NAMES:
                raise DomainValidationError(f"unknown stat '{stat_name}'", field=stat_name)
            value = clamp(getattr(self, stat_name) + delta, STAT_MIN, STAT_MAX)
            setattr(self, stat_name, value)
            changed[stat_name] = value
        self.is_sick = self.health == 0
        return changed

    def record_action(self, timestamp_field: str, now: datetime) -> None:
        if timestamp_field not in ("last_fed", "last_played", "last_cleaned"):
            raise DomainValidationError(f"unknown action timestamp '{timestamp_field}'", field=timestamp_field)
        setattr(self, timestamp_field, ensure_utc(now))

    def set_mood(self, mood: Mood) -> None:
        self.mood = Mood(mood)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "type": self.type,
            "level": self.level,
            "xp": self.xp,
            "evolution_stage": int(self.evolution_stage),
            **self.stats(),
            "is_sick": self.is_sick,
            "mood": self.mood.value,
            "color": self.color,
            "pattern": self.pattern,
            "is_mutation": self.is_mutation,
            "parent1_id": self.parent1_id,
            "parent2_id": self.parent2_id,
        }

    def __repr__(self) -> str:
        return (
            f"<Pet(id={self.id}, owner_id={self.owner_id}, name={self.name!r}, "
            f"level={self.level}, stage={self.evolution_stage.name})>"
        )
