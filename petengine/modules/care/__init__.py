from petengine.modules.care.actions import (
    ActionEffect,
    ActionSettings,
    CooldownStatus,
    MoodThresholds,
    PetAction,
    apply_item_effect,
    calculate_mood,
    evaluate_cooldown,
)
from petengine.modules.care.service import ActionOutcome, CareService

__all__ = [
    "ActionEffect",
    "ActionSettings",
    "CooldownStatus",
    "MoodThresholds",
    "PetAction",
    "apply_item_effect",
    "calculate_mood",
    "evaluate_cooldown",
    "ActionOutcome",
    "CareService",
]
