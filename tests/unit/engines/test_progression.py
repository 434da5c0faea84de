"""Unit tests for XP, level-ups and evolution."""

import pytest

from petengine.core.config.errors import ConfigValidationError
from petengine.domain.models.pet import EvolutionStage
from petengine.modules.progression.engine import ProgressionSettings, apply_xp, xp_to_next_level
from petengine.modules.shared.exceptions import ValidationError


@pytest.mark.unit
class TestApplyXp:
    def test_exact_level_up(self):
        result = apply_xp(1, 0, 0, 100)

        assert result.new_level == 2
        assert result.new_xp == 0
        assert result.new_stage == EvolutionStage.BABY
        assert result.leveled_up is True
        assert result.evolved is False

    def test_large_gain_crosses_several_levels(self):
        result = apply_xp(4, 80, 0, 250)

        assert (result.new_level, result.new_xp) == (7, 30)

    def test_gain_below_threshold(self):
        result = apply_xp(3, 10, 0, 50)

        assert (result.new_level, result.new_xp, result.leveled_up) == (3, 60, False)

    def test_zero_gain_is_a_no_op(self):
        result = apply_xp(8, 42, 1, 0)

        assert (result.new_level, result.new_xp, result.new_stage) == (8, 42, EvolutionStage.CHILD)
        assert not result.leveled_up and not result.evolved

    def test_negative_gain_is_rejected(self):
        with pytest.raises(ValidationError):
            apply_xp(1, 0, 0, -5)


@pytest.mark.unit
class TestEvolution:
    def test_reaching_level_5_evolves_to_child(self):
        result = apply_xp(4, 99, 0, 1)

        assert result.new_level == 5
        assert result.new_stage == EvolutionStage.CHILD
        assert result.evolved is True

    def test_reaching_level_20_jumps_straight_to_adult(self):
        result = apply_xp(19, 99, 0, 1)

        assert result.new_level == 20
        assert result.new_stage == EvolutionStage.ADULT
        assert result.evolved is True

    def test_level_4_to_25_skips_intermediate_stages(self):
        result = apply_xp(4, 0, 0, 2100)

        assert result.new_level == 25
        assert result.new_stage == EvolutionStage.ADULT

    def test_stage_never_decreases(self):
        result = apply_xp(2, 0, EvolutionStage.TEEN, 10)

        assert result.new_stage == EvolutionStage.TEEN
        assert result.evolved is False

    def test_already_at_stage_does_not_evolve_again(self):
        result = apply_xp(11, 99, EvolutionStage.TEEN, 1)

        assert result.new_stage == EvolutionStage.TEEN
        assert result.leveled_up is True
        assert result.evolved is False


@pytest.mark.unit
class TestProgressionSettings:
    def test_custom_xp_per_level(self):
        result = apply_xp(1, 0, 0, 120, ProgressionSettings(xp_per_level=50))

        assert (result.new_level, result.new_xp) == (3, 20)

    def test_thresholds_must_increase(self):
        with pytest.raises(ConfigValidationError):
            ProgressionSettings(child_level=10, teen_level=5)

    def test_from_config_reads_overrides(self, reset_config):
        reset_config.set_override("progression.xp_per_level", 200)

        settings = ProgressionSettings.from_config(reset_config)

        assert settings.xp_per_level == 200
        assert settings.adult_level == 20

    def test_xp_to_next_level(self):
        assert xp_to_next_level(30) == 70
