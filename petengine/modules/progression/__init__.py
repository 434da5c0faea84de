from petengine.modules.progression.engine import (
    ProgressionResult,
    ProgressionSettings,
    apply_xp,
    xp_to_next_level,
)

__all__ = ["ProgressionResult", "ProgressionSettings", "apply_xp", "xp_to_next_level"]
