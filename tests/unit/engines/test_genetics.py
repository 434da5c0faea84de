"""Unit tests for trait inheritance and baby names."""

from __future__ import annotations

import random
from dataclasses import dataclass

import pytest

from petengine.core.config.errors import ConfigValidationError
from petengine.modules.genetics.engine import (
    DEFAULT_COLORS,
    DEFAULT_MUTATION_COLORS,
    DEFAULT_MUTATION_PATTERNS,
    DEFAULT_NAME_PREFIXES,
    DEFAULT_NAME_SUFFIXES,
    DEFAULT_PATTERNS,
    GeneticsSettings,
    describe_genetics,
    generate_baby_name,
    generate_random_traits,
    inherit_traits,
)


@dataclass(frozen=True)
class Parent:
    color: str
    pattern: str
    type: str


MOM = Parent("golden", "spots", "Fluffy")
DAD = Parent("blue", "stripes", "Sparky")


@pytest.mark.unit
class TestInheritTraits:
    def test_mutation_rate_is_close_to_five_percent(self):
        rng = random.Random(42)
        trials = 10_000

        mutations = sum(inherit_traits(MOM, DAD, rng).is_mutation for _ in range(trials))

        assert abs(mutations / trials - 0.05) < 0.01

    def test_mutation_and_normal_sets_never_mix(self):
        rng = random.Random(7)

        for _ in range(5_000):
            traits = inherit_traits(MOM, DAD, rng)
            if traits.is_mutation:
                assert traits.color in DEFAULT_MUTATION_COLORS
                assert traits.pattern in DEFAULT_MUTATION_PATTERNS
            else:
                assert traits.color in DEFAULT_COLORS
                assert traits.pattern in DEFAULT_PATTERNS

    def test_type_always_comes_from_a_parent(self):
        rng = random.Random(3)

        types = {inherit_traits(MOM, DAD, rng).type for _ in range(500)}

        assert types == {"Fluffy", "Sparky"}

    def test_without_variation_traits_come_from_parents(self):
        settings = GeneticsSettings(mutation_chance=0.0, natural_variation_chance=0.0)
        rng = random.Random(11)

        for _ in range(500):
            traits = inherit_traits(MOM, DAD, rng, settings)
            assert traits.color in {"golden", "blue"}
            assert traits.pattern in {"spots", "stripes"}
            assert traits.is_mutation is False

    def test_certain_mutation(self):
        settings = GeneticsSettings(mutation_chance=1.0)

        traits = inherit_traits(MOM, DAD, random.Random(0), settings)

        assert traits.is_mutation is True
        assert traits.color in DEFAULT_MUTATION_COLORS

    def test_same_seed_same_outcome(self):
        first = [inherit_traits(MOM, DAD, random.Random(99)) for _ in range(3)]
        second = [inherit_traits(MOM, DAD, random.Random(99)) for _ in range(3)]

        assert first == second

    def test_parents_are_not_modified(self):
        inherit_traits(MOM, DAD, random.Random(5))

        assert MOM == Parent("golden", "spots", "Fluffy")


@pytest.mark.unit
class TestGeneticsSettings:
    def test_overlapping_mutation_palette_is_rejected(self):
        with pytest.raises(ConfigValidationError):
            GeneticsSettings(mutation_colors=("brown",))

    def test_chance_out_of_range_is_rejected(self):
        with pytest.raises(ConfigValidationError):
            GeneticsSettings(mutation_chance=1.5)

    def test_from_config_uses_yaml_palettes(self, reset_config):
        settings = GeneticsSettings.from_config(reset_config)

        assert settings.colors == DEFAULT_COLORS
        assert settings.mutation_chance == pytest.approx(0.05)


@pytest.mark.unit
class TestNamesAndDescriptions:
    def test_baby_name_is_prefix_and_suffix(self):
        prefix, suffix = generate_baby_name(random.Random(1)).split(" ")

        assert prefix in DEFAULT_NAME_PREFIXES
        assert suffix in DEFAULT_NAME_SUFFIXES

    def test_random_traits_use_normal_palette(self):
        rng = random.Random(2)

        for _ in range(200):
            traits = generate_random_traits(rng)
            assert traits.color in DEFAULT_COLORS
            assert traits.pattern in DEFAULT_PATTERNS

    def test_describe_normal_genetics(self):
        assert describe_genetics("golden", "spots", False) == "Golden Spots"

    def test_describe_mutation(self):
        assert describe_genetics("rainbow", "cosmic", True) == "✨ RARE MUTATION: Rainbow with Cosmic! ✨"
