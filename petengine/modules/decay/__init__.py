from petengine.modules.decay.calculator import (
    DecayResult,
    DecaySettings,
    DecayState,
    StatDecayRule,
    compute_decay,
)

__all__ = ["DecayResult", "DecaySettings", "DecayState", "StatDecayRule", "compute_decay"]
