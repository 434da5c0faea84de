"""
Unit tests for the Pet aggregate.

Covers stat validation and clamping, progression application, decay
application and the domain events each transition records.
"""

from datetime import datetime, timedelta, timezone

import pytest

from petengine.domain.models.base import DomainValidationError
from petengine.domain.models.pet import EvolutionStage, Mood, Pet, PetGenetics
from petengine.modules.decay.calculator import DecayResult
from petengine.modules.progression.engine import apply_xp

START = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


def decay_result(pet, *, at=None, **stats):
    at = at or pet.last_hunger_decay
    values = {name: getattr(pet, name) for name in ("hunger", "happiness", "cleanliness", "health")}
    values.update(stats)
    return DecayResult(
        is_sick=values["health"] == 0,
        last_hunger_decay=at,
        last_happiness_decay=at,
        last_cleanliness_decay=at,
        last_health_decay=at,
        **values,
    )


@pytest.mark.unit
@pytest.mark.domain
class TestPetConstruction:
    def test_defaults(self, pet_factory):
        pet = pet_factory()

        assert pet.level == 1
        assert pet.xp == 0
        assert pet.evolution_stage is EvolutionStage.BABY
        assert pet.stats() == {"hunger": 100, "happiness": 100, "cleanliness": 100, "energy": 100, "health": 100}
        assert pet.is_sick is False
        assert pet.mood is Mood.HAPPY

    def test_watermarks_start_at_creation(self, pet_factory):
        pet = pet_factory()

        assert pet.watermarks.hunger == START
        assert pet.last_health_decay == START

    def test_naive_creation_time_is_utc(self, pet_factory):
        pet = pet_factory(created_at=datetime(2024, 3, 1, 8, 0))

        assert pet.created_at.tzinfo is timezone.utc

    @pytest.mark.parametrize("stat", ["hunger", "happiness", "cleanliness", "energy", "health"])
    def test_out_of_range_stat_is_rejected(self, pet_factory, stat):
        with pytest.raises(DomainValidationError):
            pet_factory(**{stat: 101})

    def test_zero_health_is_sick(self, pet_factory):
        assert pet_factory(health=0).is_sick is True

    def test_genetics_need_both_parents(self):
        with pytest.raises(DomainValidationError):
            PetGenetics(color="brown", pattern="solid", parent1_id=1)

    def test_empty_name_is_rejected(self):
        with pytest.raises(DomainValidationError):
            Pet(1, 1, "", "Fluffy", PetGenetics("brown", "solid"), START)


@pytest.mark.unit
@pytest.mark.domain
class TestProgression:
    def test_level_up_records_event(self, pet_factory):
        pet = pet_factory(xp=90)

        pet.apply_progression(apply_xp(pet.level, pet.xp, pet.evolution_stage, 20), xp_gained=20)

        assert pet.level == 2
        assert pet.xp == 10
        assert [event.event_name for event in pet.get_pending_events()] == ["pet.leveled_up"]
        assert pet.get_pending_events()[0].payload["xp_gained"] == 20

    def test_evolution_records_both_events(self, pet_factory):
        pet = pet_factory(level=4, xp=99)

        pet.apply_progression(apply_xp(pet.level, pet.xp, pet.evolution_stage, 1), xp_gained=1)

        names = [event.event_name for event in pet.clear_domain_events()]
        assert names == ["pet.leveled_up", "pet.evolved"]
        assert pet.evolution_stage is EvolutionStage.CHILD
        assert pet.get_pending_events() == []

    def test_stage_never_decreases(self, pet_factory):
        pet = pet_factory(level=12, evolution_stage=EvolutionStage.TEEN)
        stale = apply_xp(1, 0, EvolutionStage.BABY, 0)

        with pytest.raises(DomainValidationError):
            pet.apply_progression(stale, xp_gained=0)
        assert pet.evolution_stage is EvolutionStage.TEEN


@pytest.mark.unit
@pytest.mark.domain
class TestDecayApplication:
    def test_health_reaching_zero_records_sickness(self, pet_factory):
        pet = pet_factory(health=5)

        pet.apply_decay(decay_result(pet, health=0, at=START + timedelta(hours=1)))

        assert pet.is_sick is True
        assert [event.event_name for event in pet.get_pending_events()] == ["pet.became_sick"]

    def test_already_sick_pet_records_no_new_event(self, pet_factory):
        pet = pet_factory(health=0)

        pet.apply_decay(decay_result(pet, health=0))

        assert pet.get_pending_events() == []

    def test_watermarks_never_move_backward(self, pet_factory):
        pet = pet_factory()
        later = START + timedelta(hours=2)
        pet.apply_decay(decay_result(pet, at=later))

        pet.apply_decay(decay_result(pet, at=START))

        assert pet.last_hunger_decay == later
        assert pet.last_health_decay == later


@pytest.mark.unit
@pytest.mark.domain
class TestStatChanges:
    def test_deltas_are_clamped(self, pet_factory):
        pet = pet_factory(hunger=90, energy=5)

        changed = pet.apply_stat_deltas({"hunger": 20, "energy": -10})

        assert changed == {"hunger": 100, "energy": 0}

    def test_healing_clears_sickness(self, pet_factory):
        pet = pet_factory(health=0)

        pet.apply_stat_deltas({"health": 30})

        assert pet.is_sick is False

    def test_unknown_stat_is_rejected(self, pet_factory):
        with pytest.raises(DomainValidationError):
            pet_factory().apply_stat_deltas({"charm": 1})

    def test_record_action_sets_timestamp(self, pet_factory):
        pet = pet_factory()

        pet.record_action("last_fed", START)

        assert pet.last_fed == START

    def test_record_action_rejects_unknown_field(self, pet_factory):
        with pytest.raises(DomainValidationError):
            pet_factory().record_action("last_slept", START)

    def test_to_dict_flattens_genetics(self, pet_factory):
        data = pet_factory(color="golden", pattern="spots").to_dict()

        assert data["color"] == "golden"
        assert data["pattern"] == "spots"
        assert data["mood"] == "happy"
        assert data["parent1_id"] is None
