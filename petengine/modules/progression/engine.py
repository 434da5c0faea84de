"""
Progression engine: XP, levels and evolution.

`apply_xp` is a pure state transition over (level, xp, stage). Level-ups
loop so a single large award can cross several levels; evolution takes
the highest threshold reached, which may skip intermediate stages.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from petengine.core.config.errors import ConfigValidationError
from petengine.core.config.manager import ConfigManager
from petengine.domain.models.pet import EvolutionStage
from petengine.modules.shared.exceptions import ValidationError


@dataclass(frozen=True)
class ProgressionSettings:
    xp_per_level: int = 100
    child_level: int = 5
    teen_level: int = 10
    adult_level: int = 20

    def __post_init__(self) -> None:
        if self.xp_per_level <= 0:
            raise ConfigValidationError("progression.xp_per_level must be positive")
        if not (0 < self.child_level <= self.teen_level <= self.adult_level):
            raise ConfigValidationError("evolution thresholds must be increasing (child <= teen <= adult)")

    @classmethod
    def from_config(cls, config_manager=ConfigManager) -> "ProgressionSettings":
        return cls(
            xp_per_level=int(config_manager.get("progression.xp_per_level", 100)),
            child_level=int(config_manager.get("progression.evolution_thresholds.child", 5)),
            teen_level=int(config_manager.get("progression.evolution_thresholds.teen", 10)),
            adult_level=int(config_manager.get("progression.evolution_thresholds.adult", 20)),
        )

    def thresholds(self) -> tuple[tuple[int, EvolutionStage], ...]:
        """Evolution thresholds, highest first."""
        return (
            (self.adult_level, EvolutionStage.ADULT),
            (self.teen_level, EvolutionStage.TEEN),
            (self.child_level, EvolutionStage.CHILD),
        )


@dataclass(frozen=True)
class ProgressionResult:
    new_level: int
    new_xp: int
    new_stage: EvolutionStage
    leveled_up: bool
    evolved: bool


def apply_xp(
    level: int,
    xp: int,
    stage: int,
    xp_gain: int,
    settings: Optional[ProgressionSettings] = None,
) -> ProgressionResult:
    """
    Award `xp_gain` experience.

    Examples
    --------
    >>> apply_xp(4, 80, 0, 250)
    ProgressionResult(new_level=7, new_xp=30, new_stage=<EvolutionStage.CHILD: 1>, leveled_up=True, evolved=True)
    >>> apply_xp(19, 99, 0, 1).new_stage
    <EvolutionStage.ADULT: 3>

    Raises
    ------
    ValidationError
        If `xp_gain` is negative.
    """
    if xp_gain < 0:
        raise ValidationError("xp_gain", f"xp_gain must be non-negative, got {xp_gain}")

    settings = settings or ProgressionSettings()
    old_stage = EvolutionStage(stage)

    new_level = level
    new_xp = xp + xp_gain
    while new_xp >= settings.xp_per_level:
        new_level += 1
        new_xp -= settings.xp_per_level

    new_stage = old_stage
    for threshold, target in settings.thresholds():
        if new_level >= threshold and new_stage < target:
            new_stage = target
            break

    return ProgressionResult(
        new_level=new_level,
        new_xp=new_xp,
        new_stage=new_stage,
        leveled_up=new_level > level,
        evolved=new_stage > old_stage,
    )


def xp_to_next_level(xp: int, settings: Optional[ProgressionSettings] = None) -> int:
    settings = settings or ProgressionSettings()
    return settings.xp_per_level - xp
