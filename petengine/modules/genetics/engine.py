"""
Genetics / inheritance engine.

Purpose
-------
Decide a bred pet's visible traits from its two parents, roll the rare
mutation, and generate cosmetic baby names.

Inheritance Rules
-----------------
1. Mutation roll (`mutation_chance`, 5% by default): color and pattern are
   drawn from the rare mutation sets, which never overlap the normal palette.
2. Otherwise color and pattern each come from a random parent, and each is
   independently replaced by a random palette entry with
   `natural_variation_chance` (10%).
3. Species (`type`) always comes from one parent, 50/50.

Every random draw goes through the injected `random.Random`, so a seeded
generator reproduces a breeding outcome exactly.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from petengine.core.config.errors import ConfigValidationError
from petengine.core.config.manager import ConfigManager

DEFAULT_COLORS = ("brown", "white", "black", "gray", "golden", "pink", "blue", "purple")
DEFAULT_PATTERNS = ("solid", "spots", "stripes", "patches", "gradient")
DEFAULT_MUTATION_COLORS = ("rainbow", "starry", "crystal", "shadow")
DEFAULT_MUTATION_PATTERNS = ("sparkles", "swirls", "cosmic", "flame")
DEFAULT_NAME_PREFIXES = (
    "Tiny", "Baby", "Little", "Mini", "Sweet", "Cute",
    "Precious", "Lovely", "Fluffy", "Fuzzy", "Soft", "Snuggly",
)
DEFAULT_NAME_SUFFIXES = (
    "Bean", "Puff", "Star", "Moon", "Cloud", "Joy",
    "Love", "Heart", "Angel", "Bud", "Dot", "Pip",
)


class ParentTraits(Protocol):
    color: str
    pattern: str
    type: str


@dataclass(frozen=True)
class GeneticsSettings:
    mutation_chance: float = 0.05
    natural_variation_chance: float = 0.10
    colors: tuple[str, ...] = DEFAULT_COLORS
    patterns: tuple[str, ...] = DEFAULT_PATTERNS
    mutation_colors: tuple[str, ...] = DEFAULT_MUTATION_COLORS
    mutation_patterns: tuple[str, ...] = DEFAULT_MUTATION_PATTERNS
    name_prefixes: tuple[str, ...] = DEFAULT_NAME_PREFIXES
    name_suffixes: tuple[str, ...] = DEFAULT_NAME_SUFFIXES

    def __post_init__(self) -> None:
        for name in ("mutation_chance", "natural_variation_chance"):
            chance = getattr(self, name)
            if not 0.0 <= chance <= 1.0:
                raise ConfigValidationError(f"genetics.{name} must be within [0, 1], got {chance}")
        for name in (
            "colors",
            "patterns",
            "mutation_colors",
            "mutation_patterns",
            "name_prefixes",
            "name_suffixes",
        ):
            if not getattr(self, name):
                raise ConfigValidationError(f"genetics.{name} cannot be empty")
        if set(self.colors) & set(self.mutation_colors):
            raise ConfigValidationError("mutation colors must not overlap the normal palette")
        if set(self.patterns) & set(self.mutation_patterns):
            raise ConfigValidationError("mutation patterns must not overlap the normal palette")

    @classmethod
    def from_config(cls, config_manager=ConfigManager) -> "GeneticsSettings":
        def seq(key: str, fallback: Sequence[str]) -> tuple[str, ...]:
            return tuple(str(item) for item in config_manager.get(f"genetics.{key}", fallback))

        return cls(
            mutation_chance=float(config_manager.get("genetics.mutation_chance", 0.05)),
            natural_variation_chance=float(config_manager.get("genetics.natural_variation_chance", 0.10)),
            colors=seq("colors", DEFAULT_COLORS),
            patterns=seq("patterns", DEFAULT_PATTERNS),
            mutation_colors=seq("mutation_colors", DEFAULT_MUTATION_COLORS),
            mutation_patterns=seq("mutation_patterns", DEFAULT_MUTATION_PATTERNS),
            name_prefixes=seq("name_prefixes", DEFAULT_NAME_PREFIXES),
            name_suffixes=seq("name_suffixes", DEFAULT_NAME_SUFFIXES),
        )


@dataclass(frozen=True)
class InheritedTraits:
    color: str
    pattern: str
    type: str
    is_mutation: bool


@dataclass(frozen=True)
class RandomTraits:
    color: str
    pattern: str


def _either(rng: random.Random, first: str, second: str) -> str:
    return first if rng.random() < 0.5 else second


def inherit_traits(
    parent1: ParentTraits,
    parent2: ParentTraits,
    rng: random.Random,
    settings: Optional[GeneticsSettings] = None,
) -> InheritedTraits:
    """
    Produce a child's traits from two parents.

    `is_mutation` is set only when the mutation roll fired; parents are
    never modified.
    """
    settings = settings or GeneticsSettings()

    is_mutation = rng.random() < settings.mutation_chance
    if is_mutation:
        color = rng.choice(settings.mutation_colors)
        pattern = rng.choice(settings.mutation_patterns)
    else:
        color = _either(rng, parent1.color, parent2.color)
        pattern = _either(rng, parent1.pattern, parent2.pattern)
        if rng.random() < settings.natural_variation_chance:
            color = rng.choice(settings.colors)
        if rng.random() < settings.natural_variation_chance:
            pattern = rng.choice(settings.patterns)

    return InheritedTraits(
        color=color,
        pattern=pattern,
        type=_either(rng, parent1.type, parent2.type),
        is_mutation=is_mutation,
    )


def generate_random_traits(rng: random.Random, settings: Optional[GeneticsSettings] = None) -> RandomTraits:
    """Traits for an adopted (non-bred) pet; never a mutation."""
    settings = settings or GeneticsSettings()
    return RandomTraits(color=rng.choice(settings.colors), pattern=rng.choice(settings.patterns))


def generate_baby_name(rng: random.Random, settings: Optional[GeneticsSettings] = None) -> str:
    """Cosmetic "{prefix} {suffix}" name such as "Tiny Star"."""
    settings = settings or GeneticsSettings()
    return f"{rng.choice(settings.name_prefixes)} {rng.choice(settings.name_suffixes)}"


def describe_genetics(color: str, pattern: str, is_mutation: bool) -> str:
    color_desc = color[:1].upper() + color[1:]
    pattern_desc = pattern[:1].upper() + pattern[1:]
    if is_mutation:
        return f"✨ RARE MUTATION: {color_desc} with {pattern_desc}! ✨"
    return f"{color_desc} {pattern_desc}"
