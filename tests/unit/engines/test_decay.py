"""
Unit tests for the stat decay calculator.

Covers interval consumption, remainder carry-over, clock skew, clamping,
health gating and composability of repeated decay calls.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone

import pytest

from petengine.modules.decay.calculator import DecayResult, DecaySettings, StatDecayRule, compute_decay
from petengine.core.config.errors import ConfigValidationError

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@dataclass(frozen=True)
class State:
    hunger: int = 50
    happiness: int = 50
    cleanliness: int = 50
    health: int = 100
    last_hunger_decay: datetime = T0
    last_happiness_decay: datetime = T0
    last_cleanliness_decay: datetime = T0
    last_health_decay: datetime = T0


def advance(state: State, result: DecayResult) -> State:
    return replace(
        state,
        hunger=result.hunger,
        happiness=result.happiness,
        cleanliness=result.cleanliness,
        health=result.health,
        last_hunger_decay=result.last_hunger_decay,
        last_happiness_decay=result.last_happiness_decay,
        last_cleanliness_decay=result.last_cleanliness_decay,
        last_health_decay=result.last_health_decay,
    )


@pytest.mark.unit
class TestIntervals:
    def test_each_stat_uses_its_own_interval(self):
        result = compute_decay(State(), T0 + timedelta(hours=2))

        assert result.hunger == 46  # 4 x 30 min
        assert result.happiness == 48  # 2 x 60 min
        assert result.cleanliness == 49  # 1 x 120 min

    def test_partial_interval_carries_over(self):
        result = compute_decay(State(), T0 + timedelta(minutes=45))

        assert result.hunger == 49
        assert result.last_hunger_decay == T0 + timedelta(minutes=30)
        assert result.happiness == 50
        assert result.last_happiness_decay == T0

    def test_no_time_elapsed_changes_nothing(self):
        result = compute_decay(State(), T0)

        assert (result.hunger, result.happiness, result.cleanliness, result.health) == (50, 50, 50, 100)
        assert result.last_hunger_decay == T0

    def test_negative_elapsed_time_yields_no_decay(self):
        result = compute_decay(State(), T0 - timedelta(hours=5))

        assert (result.hunger, result.happiness, result.cleanliness) == (50, 50, 50)
        assert result.last_hunger_decay == T0
        assert result.last_cleanliness_decay == T0

    def test_naive_now_is_treated_as_utc(self):
        result = compute_decay(State(), datetime(2024, 3, 1, 13, 0))

        assert result.hunger == 48

    def test_settings_override_intervals(self):
        settings = DecaySettings(hunger=StatDecayRule(10, rate=2))

        result = compute_decay(State(), T0 + timedelta(minutes=30), settings)

        assert result.hunger == 44

    def test_non_positive_interval_is_rejected(self):
        with pytest.raises(ConfigValidationError):
            StatDecayRule(0)


@pytest.mark.unit
class TestClamping:
    @pytest.mark.parametrize("years", [1, 50])
    def test_stats_never_drop_below_zero(self, years):
        result = compute_decay(State(hunger=3, happiness=0, cleanliness=1, health=7), T0 + timedelta(days=365 * years))

        assert result.hunger == 0
        assert result.happiness == 0
        assert result.cleanliness == 0
        assert result.health == 0
        assert result.is_sick is True


@pytest.mark.unit
class TestHealthGating:
    def test_healthy_pet_keeps_health_and_resets_watermark(self):
        now = T0 + timedelta(hours=10)

        result = compute_decay(State(hunger=90, happiness=90, cleanliness=90), now)

        assert result.health == 100
        assert result.last_health_decay == now

    def test_pet_that_just_became_sick_loses_no_health(self):
        now = T0 + timedelta(minutes=30)

        result = compute_decay(State(hunger=1, health=80), now)

        assert result.hunger == 0
        assert result.health == 80
        assert result.last_health_decay == now

    def test_pet_sick_across_the_call_loses_health(self):
        result = compute_decay(State(hunger=0, health=80), T0 + timedelta(hours=3, minutes=20))

        assert result.health == 77
        assert result.last_health_decay == T0 + timedelta(hours=3)

    def test_is_sick_reports_zero_health_only(self):
        result = compute_decay(State(hunger=0, health=50), T0 + timedelta(minutes=10))

        assert result.hunger == 0
        assert result.is_sick is False


@pytest.mark.unit
class TestComposability:
    @pytest.mark.parametrize(
        "first_minutes, second_minutes",
        [(0, 0), (15, 95), (29, 31), (61, 600), (119, 121), (1000, 1441)],
    )
    def test_two_steps_equal_one_step_for_healthy_pet(self, first_minutes, second_minutes):
        start = State(hunger=80, happiness=70, cleanliness=60, health=90)
        now1 = T0 + timedelta(minutes=first_minutes)
        now2 = T0 + timedelta(minutes=second_minutes)

        stepped = compute_decay(advance(start, compute_decay(start, now1)), now2)
        direct = compute_decay(start, now2)

        assert stepped == direct

    @pytest.mark.parametrize("first_minutes, second_minutes", [(45, 200), (59, 61), (300, 900)])
    def test_two_steps_equal_one_step_for_sick_pet(self, first_minutes, second_minutes):
        start = State(hunger=0, happiness=40, cleanliness=40, health=90)
        now1 = T0 + timedelta(minutes=first_minutes)
        now2 = T0 + timedelta(minutes=second_minutes)

        stepped = compute_decay(advance(start, compute_decay(start, now1)), now2)
        direct = compute_decay(start, now2)

        assert stepped == direct

    def test_repeated_reads_at_same_instant_are_idempotent(self):
        now = T0 + timedelta(minutes=125)
        once = compute_decay(State(), now)

        twice = compute_decay(advance(State(), once), now)

        assert (twice.hunger, twice.happiness, twice.cleanliness) == (once.hunger, once.happiness, once.cleanliness)
