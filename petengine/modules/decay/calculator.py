"""
Stat decay calculator.

Purpose
-------
Compute a pet's current needs from the time elapsed since each stat was
last processed. Pure and deterministic: the caller supplies `now` and
persists the returned values.

Decay Model
-----------
- Each of hunger, happiness, cleanliness and health has its own watermark
  and interval; one whole interval costs `rate` points.
- Watermarks advance by whole consumed intervals only, so a sub-interval
  remainder carries over and frequent polling never loses or doubles decay.
- Negative elapsed time (clock skew) consumes nothing.
- Health decays only while the pet was sick before this call *and* is
  still sick after the other stats decayed. Otherwise the health
  watermark restarts at `now`.
- "Sick" for health gating means any of hunger/happiness/cleanliness is 0.
  The returned `is_sick` is a different notion: `health == 0`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Protocol

from petengine.core.clock import ensure_utc
from petengine.core.config.errors import ConfigValidationError
from petengine.core.config.manager import ConfigManager
from petengine.domain.models.pet import STAT_MIN
from petengine.modules.shared.formulas import intervals_elapsed


class DecayState(Protocol):
    hunger: int
    happiness: int
    cleanliness: int
    health: int
    last_hunger_decay: datetime
    last_happiness_decay: datetime
    last_cleanliness_decay: datetime
    last_health_decay: datetime


@dataclass(frozen=True)
class StatDecayRule:
    interval_minutes: int
    rate: int = 1

    def __post_init__(self) -> None:
        if self.interval_minutes <= 0:
            raise ConfigValidationError(f"decay interval must be positive, got {self.interval_minutes}")
        if self.rate < 0:
            raise ConfigValidationError(f"decay rate must be non-negative, got {self.rate}")


@dataclass(frozen=True)
class DecaySettings:
    hunger: StatDecayRule = StatDecayRule(30)
    happiness: StatDecayRule = StatDecayRule(60)
    cleanliness: StatDecayRule = StatDecayRule(120)
    health: StatDecayRule = StatDecayRule(60)

    @classmethod
    def from_config(cls, config_manager=ConfigManager) -> "DecaySettings":
        defaults = cls()

        def rule(stat: str) -> StatDecayRule:
            fallback: StatDecayRule = getattr(defaults, stat)
            return StatDecayRule(
                interval_minutes=int(
                    config_manager.get(f"decay.{stat}.interval_minutes", fallback.interval_minutes)
                ),
                rate=int(config_manager.get(f"decay.{stat}.rate", fallback.rate)),
            )

        return cls(
            hunger=rule("hunger"),
            happiness=rule("happiness"),
            cleanliness=rule("cleanliness"),
            health=rule("health"),
        )


@dataclass(frozen=True)
class DecayResult:
    hunger: int
    happiness: int
    cleanliness: int
    health: int
    is_sick: bool
    last_hunger_decay: datetime
    last_happiness_decay: datetime
    last_cleanliness_decay: datetime
    last_health_decay: datetime


def _consume(value: int, last: datetime, now: datetime, rule: StatDecayRule) -> tuple[int, datetime]:
    intervals = intervals_elapsed(last, now, rule.interval_minutes)
    new_value = max(STAT_MIN, value - intervals * rule.rate)
    return new_value, last + timedelta(minutes=intervals * rule.interval_minutes)


def _needs_neglected(hunger: int, happiness: int, cleanliness: int) -> bool:
    return hunger == 0 or happiness == 0 or cleanliness == 0


def compute_decay(pet: DecayState, now: datetime, settings: Optional[DecaySettings] = None) -> DecayResult:
    """
    Decay a pet's stats up to `now`.

    Never raises for well-formed input. Stats above the ceiling are left
    for the caller to clamp; stats never drop below 0.

    Example
    -------
    >>> result = compute_decay(pet, pet.last_hunger_decay + timedelta(minutes=95))
    >>> pet.hunger - result.hunger   # three 30-minute intervals
    3
    """
    settings = settings or DecaySettings()
    now = ensure_utc(now)

    was_sick = _needs_neglected(pet.hunger, pet.happiness, pet.cleanliness)

    hunger, last_hunger = _consume(pet.hunger, ensure_utc(pet.last_hunger_decay), now, settings.hunger)
    happiness, last_happiness = _consume(
        pet.happiness, ensure_utc(pet.last_happiness_decay), now, settings.happiness
    )
    cleanliness, last_cleanliness = _consume(
        pet.cleanliness, ensure_utc(pet.last_cleanliness_decay), now, settings.cleanliness
    )

    is_now_sick = _needs_neglected(hunger, happiness, cleanliness)

    if was_sick and is_now_sick:
        health, last_health = _consume(pet.health, ensure_utc(pet.last_health_decay), now, settings.health)
    else:
        health, last_health = pet.health, now

    return DecayResult(
        hunger=hunger,
        happiness=happiness,
        cleanliness=cleanliness,
        health=health,
        is_sick=health == 0,
        last_hunger_decay=last_hunger,
        last_happiness_decay=last_happiness,
        last_cleanliness_decay=last_cleanliness,
        last_health_decay=last_health,
    )
