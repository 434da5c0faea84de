"""
Care actions and mood.

Each `PetAction` maps to an `ActionEffect` record: stat deltas, coin and
XP rewards, a cooldown, and the pet timestamp field the cooldown reads.
An action without a timestamp field (sleep) has no cooldown.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Mapping, Optional

from petengine.core.clock import ensure_utc
from petengine.core.config.errors import ConfigValidationError
from petengine.core.config.manager import ConfigManager
from petengine.domain.models.pet import STAT_NAMES, Mood, Pet
from petengine.modules.shared.formulas import ceil_seconds


class PetAction(str, Enum):
    FEED = "feed"
    PLAY = "play"
    CLEAN = "clean"
    SLEEP = "sleep"


_TIMESTAMP_FIELDS = {
    PetAction.FEED: "last_fed",
    PetAction.PLAY: "last_played",
    PetAction.CLEAN: "last_cleaned",
    PetAction.SLEEP: None,
}


@dataclass(frozen=True)
class ActionEffect:
    stat_deltas: Mapping[str, int]
    coin_reward: int
    xp_reward: int
    cooldown_minutes: int = 5
    timestamp_field: Optional[str] = None

    def __post_init__(self) -> None:
        unknown = set(self.stat_deltas) - set(STAT_NAMES)
        if unknown:
            raise ConfigValidationError(f"unknown stats in action effect: {sorted(unknown)}")
        if self.coin_reward < 0 or self.xp_reward < 0 or self.cooldown_minutes < 0:
            raise ConfigValidationError("action rewards and cooldowns must be non-negative")


_DEFAULT_EFFECTS = {
    PetAction.FEED: ActionEffect({"hunger": 20}, 5, 5, 5, "last_fed"),
    PetAction.PLAY: ActionEffect({"happiness": 15, "energy": -10}, 10, 10, 5, "last_played"),
    PetAction.CLEAN: ActionEffect({"cleanliness": 25}, 8, 8, 5, "last_cleaned"),
    PetAction.SLEEP: ActionEffect({"energy": 30}, 5, 5, 5, None),
}


@dataclass(frozen=True)
class MoodThresholds:
    sad_below: int = 20
    happy_above: int = 70
    sleeping_below: int = 30


@dataclass(frozen=True)
class ActionSettings:
    effects: Mapping[PetAction, ActionEffect] = field(default_factory=lambda: dict(_DEFAULT_EFFECTS))
    mood: MoodThresholds = MoodThresholds()

    def effect_for(self, action: PetAction | str) -> ActionEffect:
        return self.effects[PetAction(action)]

    @classmethod
    def from_config(cls, config_manager=ConfigManager) -> "ActionSettings":
        effects = {}
        for action in PetAction:
            default = _DEFAULT_EFFECTS[action]
            raw = config_manager.get(f"actions.{action.value}", {}) or {}
            effects[action] = ActionEffect(
                stat_deltas={str(k): int(v) for k, v in (raw.get("stat_deltas") or default.stat_deltas).items()},
                coin_reward=int(raw.get("coin_reward", default.coin_reward)),
                xp_reward=int(raw.get("xp_reward", default.xp_reward)),
                cooldown_minutes=int(raw.get("cooldown_minutes", default.cooldown_minutes)),
                timestamp_field=_TIMESTAMP_FIELDS[action],
            )
        return cls(
            effects=effects,
            mood=MoodThresholds(
                sad_below=int(config_manager.get("mood.sad_below", 20)),
                happy_above=int(config_manager.get("mood.happy_above", 70)),
                sleeping_below=int(config_manager.get("mood.sleeping_below", 30)),
            ),
        )


@dataclass(frozen=True)
class CooldownStatus:
    ready: bool
    remaining_seconds: int = 0


def evaluate_cooldown(last_performed: Optional[datetime], cooldown_minutes: int, now: datetime) -> CooldownStatus:
    """
    Check whether an action is off cooldown.

    Remaining time is rounded up to whole seconds, so a cooldown with 0.2s
    left reports 1.
    """
    if last_performed is None or cooldown_minutes <= 0:
        return CooldownStatus(ready=True)

    ready_at = ensure_utc(last_performed) + timedelta(minutes=cooldown_minutes)
    remaining = (ready_at - ensure_utc(now)).total_seconds()
    if remaining <= 0:
        return CooldownStatus(ready=True)
    return CooldownStatus(ready=False, remaining_seconds=ceil_seconds(remaining))


def calculate_mood(hunger: int, happiness: int, energy: int, thresholds: Optional[MoodThresholds] = None) -> Mood:
    """
    Derive mood from needs, first match wins:

    sad if any need is below `sad_below`; happy if all three are above
    `happy_above`; sleeping if energy is below `sleeping_below`; neutral
    otherwise.
    """
    thresholds = thresholds or MoodThresholds()
    if min(hunger, happiness, energy) < thresholds.sad_below:
        return Mood.SAD
    if min(hunger, happiness, energy) > thresholds.happy_above:
        return Mood.HAPPY
    if energy < thresholds.sleeping_below:
        return Mood.SLEEPING
    return Mood.NEUTRAL


def apply_item_effect(pet: Pet, effect: Mapping[str, int]) -> dict[str, int]:
    """Apply a shop item's stat effect to `pet` (clamped). Returns the touched stats."""
    return pet.apply_stat_deltas(effect)
