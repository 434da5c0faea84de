"""Unit tests for CareService.perform_action."""

from datetime import timedelta

import pytest

from petengine.domain.models.challenge import ChallengeType
from petengine.domain.models.pet import Mood
from petengine.modules.care.actions import PetAction
from petengine.modules.shared.exceptions import CooldownActiveError, NotFoundError, ValidationError


@pytest.mark.unit
@pytest.mark.service
class TestPerformAction:
    @pytest.mark.asyncio
    async def test_feed_applies_effect_and_rewards(self, care_service, pet_repository, pet_factory, wallet, clock):
        pet = await pet_repository.save(pet_factory(hunger=50))

        outcome = await care_service.perform_action(1, pet.id, "feed")

        assert outcome.action is PetAction.FEED
        assert outcome.pet.hunger == 70
        assert outcome.pet.last_fed == clock.now()
        assert outcome.pet.xp == 5
        assert outcome.coins_earned == 5
        assert outcome.new_balance == 5 == await wallet.balance(1)

    @pytest.mark.asyncio
    async def test_decay_happens_before_the_action(self, care_service, pet_repository, pet_factory, clock):
        pet = await pet_repository.save(pet_factory(hunger=50))
        clock.advance(hours=2)

        outcome = await care_service.perform_action(1, pet.id, PetAction.FEED)

        assert outcome.pet.hunger == 66

    @pytest.mark.asyncio
    async def test_play_trades_energy_for_happiness(self, care_service, pet_repository, pet_factory):
        pet = await pet_repository.save(pet_factory(happiness=60, energy=60))

        outcome = await care_service.perform_action(1, pet.id, "play")

        assert outcome.pet.happiness == 75
        assert outcome.pet.energy == 50

    @pytest.mark.asyncio
    async def test_mood_is_recomputed(self, care_service, pet_repository, pet_factory):
        pet = await pet_repository.save(pet_factory(hunger=100, happiness=100, energy=20, mood=Mood.SAD))

        outcome = await care_service.perform_action(1, pet.id, "sleep")

        assert outcome.pet.energy == 50
        assert outcome.pet.mood is Mood.NEUTRAL

    @pytest.mark.asyncio
    async def test_level_up_is_published(self, care_service, pet_repository, pet_factory, published):
        pet = await pet_repository.save(pet_factory(xp=95))

        outcome = await care_service.perform_action(1, pet.id, "feed")

        assert outcome.progression.leveled_up is True
        assert "pet.leveled_up" in published.names()
        assert published.payloads("pet.action_performed")[0]["action"] == "feed"

    @pytest.mark.asyncio
    async def test_unknown_action(self, care_service, pet_repository, pet_factory):
        pet = await pet_repository.save(pet_factory())

        with pytest.raises(ValidationError):
            await care_service.perform_action(1, pet.id, "dance")

    @pytest.mark.asyncio
    async def test_pet_of_another_owner(self, care_service, pet_repository, pet_factory):
        pet = await pet_repository.save(pet_factory(owner_id=2))

        with pytest.raises(NotFoundError):
            await care_service.perform_action(1, pet.id, "feed")


@pytest.mark.unit
@pytest.mark.service
class TestCooldowns:
    @pytest.mark.asyncio
    async def test_repeat_within_cooldown_is_refused(self, care_service, pet_repository, pet_factory, wallet, clock):
        pet = await pet_repository.save(pet_factory(hunger=10))
        await care_service.perform_action(1, pet.id, "feed")
        clock.advance(minutes=2)

        with pytest.raises(CooldownActiveError) as exc_info:
            await care_service.perform_action(1, pet.id, "feed")

        assert exc_info.value.remaining_seconds == 180
        assert (await pet_repository.get(pet.id)).hunger == 30
        assert await wallet.balance(1) == 5

    @pytest.mark.asyncio
    async def test_refused_action_still_publishes_sickness(
        self, care_service, pet_repository, pet_factory, clock, published
    ):
        played_at = clock.now() + timedelta(minutes=58)
        pet = await pet_repository.save(pet_factory(cleanliness=0, health=1, last_played=played_at))
        clock.advance(hours=1)

        with pytest.raises(CooldownActiveError):
            await care_service.perform_action(1, pet.id, "play")

        assert "pet.became_sick" in published.names()
        assert (await pet_repository.get(pet.id)).is_sick is True

    @pytest.mark.asyncio
    async def test_allowed_after_cooldown(self, care_service, pet_repository, pet_factory, clock):
        pet = await pet_repository.save(pet_factory(hunger=10))
        await care_service.perform_action(1, pet.id, "feed")
        clock.advance(minutes=5)

        outcome = await care_service.perform_action(1, pet.id, "feed")

        assert outcome.pet.hunger == 50

    @pytest.mark.asyncio
    async def test_sleep_has_no_cooldown(self, care_service, pet_repository, pet_factory):
        pet = await pet_repository.save(pet_factory(energy=10))

        await care_service.perform_action(1, pet.id, "sleep")
        outcome = await care_service.perform_action(1, pet.id, "sleep")

        assert outcome.pet.energy == 70

    @pytest.mark.asyncio
    async def test_get_cooldowns(self, care_service, pet_repository, pet_factory, clock):
        pet = await pet_repository.save(pet_factory())
        await care_service.perform_action(1, pet.id, "clean")
        clock.advance(minutes=1)

        statuses = await care_service.get_cooldowns(1, pet.id)

        assert statuses["clean"].ready is False
        assert statuses["clean"].remaining_seconds == 240
        assert statuses["feed"].ready is True
        assert statuses["sleep"].ready is True


@pytest.mark.unit
@pytest.mark.service
class TestChallengeProgress:
    @pytest.mark.asyncio
    async def test_actions_count_towards_challenges(self, care_service, challenge_service, pet_repository, pet_factory, clock):
        pet = await pet_repository.save(pet_factory(hunger=0))
        await challenge_service.get_daily_challenges(1)

        for _ in range(3):
            await care_service.perform_action(1, pet.id, "feed")
            clock.advance(minutes=5)

        feed = next(c for c in await challenge_service.get_daily_challenges(1) if c.type is ChallengeType.FEED)
        assert feed.progress == 3
        assert feed.completed is True

    @pytest.mark.asyncio
    async def test_gauges_report_current_stat(self, care_service, challenge_service, pet_repository, pet_factory):
        pet = await pet_repository.save(pet_factory(happiness=90))
        await challenge_service.get_daily_challenges(1)

        outcome = await care_service.perform_action(1, pet.id, "play")

        happiness = next(c for c in outcome.updated_challenges if c.type is ChallengeType.HAPPINESS)
        assert happiness.progress == 100
        assert happiness.completed is True
