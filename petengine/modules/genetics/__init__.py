from petengine.modules.genetics.engine import (
    GeneticsSettings,
    InheritedTraits,
    ParentTraits,
    RandomTraits,
    describe_genetics,
    generate_baby_name,
    generate_random_traits,
    inherit_traits,
)

__all__ = [
    "GeneticsSettings",
    "InheritedTraits",
    "ParentTraits",
    "RandomTraits",
    "describe_genetics",
    "generate_baby_name",
    "generate_random_traits",
    "inherit_traits",
]
