"""
Unit tests for BreedingService.

Walks a breeding through its lifecycle: start (fee, validation),
incubation completion into an egg, and hatching into a pet.
"""

from datetime import timedelta

import pytest

from petengine.domain.models.breeding import BreedingStatus
from petengine.modules.genetics.engine import DEFAULT_COLORS, DEFAULT_MUTATION_COLORS
from petengine.modules.shared.exceptions import (
    InsufficientResourcesError,
    InvalidOperationError,
    MaxPetsReachedError,
    NotFoundError,
)


async def two_parents(pet_service, owner_id=1):
    mom = await pet_service.create_pet(owner_id, "Mom", pet_type="Fluffy")
    dad = await pet_service.create_pet(owner_id, "Dad", pet_type="Sparky")
    return mom, dad


@pytest.mark.unit
@pytest.mark.service
class TestStartBreeding:
    @pytest.mark.asyncio
    async def test_start_debits_fee(self, breeding_service, pet_service, wallet, clock, published):
        mom, dad = await two_parents(pet_service)
        wallet.credit_now(1, 500)

        record = await breeding_service.start_breeding(1, mom.id, dad.id)

        assert record.status is BreedingStatus.INCUBATING
        assert record.ready_at == clock.now() + timedelta(hours=24)
        assert record.paid_with_coins is True
        assert await wallet.balance(1) == 300
        assert published.payloads("breeding.started")[0]["breeding_id"] == record.id

    @pytest.mark.asyncio
    async def test_without_coins_nothing_is_debited(self, breeding_service, pet_service, wallet):
        mom, dad = await two_parents(pet_service)

        record = await breeding_service.start_breeding(1, mom.id, dad.id, pay_with_coins=False)

        assert record.paid_with_coins is False
        assert await wallet.balance(1) == 0

    @pytest.mark.asyncio
    async def test_insufficient_coins(self, breeding_service, pet_service, wallet):
        mom, dad = await two_parents(pet_service)
        wallet.credit_now(1, 150)

        with pytest.raises(InsufficientResourcesError):
            await breeding_service.start_breeding(1, mom.id, dad.id)
        assert await breeding_service.list_records(1) == []

    @pytest.mark.asyncio
    async def test_pet_cannot_breed_with_itself(self, breeding_service, pet_service):
        mom, _ = await two_parents(pet_service)

        with pytest.raises(InvalidOperationError):
            await breeding_service.start_breeding(1, mom.id, mom.id, pay_with_coins=False)

    @pytest.mark.asyncio
    async def test_parents_must_be_owned(self, breeding_service, pet_service):
        mom, _ = await two_parents(pet_service, owner_id=1)
        stranger = await pet_service.create_pet(2, "Stranger")

        with pytest.raises(NotFoundError):
            await breeding_service.start_breeding(1, mom.id, stranger.id, pay_with_coins=False)


@pytest.mark.unit
@pytest.mark.service
class TestIncubation:
    @pytest.mark.asyncio
    async def test_nothing_is_ready_early(self, breeding_service, pet_service, clock):
        mom, dad = await two_parents(pet_service)
        await breeding_service.start_breeding(1, mom.id, dad.id, pay_with_coins=False)
        clock.advance(hours=23)

        assert await breeding_service.complete_ready_breedings() == []

    @pytest.mark.asyncio
    async def test_ready_breeding_yields_egg(self, breeding_service, pet_service, clock, published):
        mom, dad = await two_parents(pet_service)
        record = await breeding_service.start_breeding(1, mom.id, dad.id, pay_with_coins=False)
        clock.advance(hours=24)

        (egg,) = await breeding_service.complete_ready_breedings()

        assert egg.breeding_id == record.id
        assert egg.type in {"Fluffy", "Sparky"}
        assert egg.color in DEFAULT_COLORS + DEFAULT_MUTATION_COLORS
        assert (egg.parent1_id, egg.parent2_id) == (mom.id, dad.id)
        assert len(egg.name.split(" ")) == 2
        (stored,) = await breeding_service.list_records(1)
        assert stored.status is BreedingStatus.READY
        assert stored.egg_id == egg.id
        assert "breeding.egg_ready" in published.names()

    @pytest.mark.asyncio
    async def test_completion_is_idempotent(self, breeding_service, pet_service, clock):
        mom, dad = await two_parents(pet_service)
        await breeding_service.start_breeding(1, mom.id, dad.id, pay_with_coins=False)
        clock.advance(hours=30)

        await breeding_service.complete_ready_breedings()

        assert await breeding_service.complete_ready_breedings() == []
        assert len(await breeding_service.list_eggs(1)) == 1


@pytest.mark.unit
@pytest.mark.service
class TestHatching:
    @pytest.mark.asyncio
    async def test_hatch_creates_pet_with_lineage(self, breeding_service, pet_service, clock, published):
        mom, dad = await two_parents(pet_service)
        await breeding_service.start_breeding(1, mom.id, dad.id, pay_with_coins=False)
        clock.advance(hours=24)
        (egg,) = await breeding_service.complete_ready_breedings()

        hatched_egg, pet = await breeding_service.hatch_egg(1, egg.id)

        assert hatched_egg == egg
        assert pet.name == egg.name
        assert pet.color == egg.color
        assert pet.parent1_id == mom.id
        assert pet.parent2_id == dad.id
        assert pet.level == 1
        assert await breeding_service.list_eggs(1) == []
        (record,) = await breeding_service.list_records(1)
        assert record.status is BreedingStatus.HATCHED
        assert record.hatched_at == clock.now()
        assert "egg.hatched" in published.names()
        assert len(await pet_service.list_pets(1)) == 3

    @pytest.mark.asyncio
    async def test_cannot_hatch_someone_elses_egg(self, breeding_service, pet_service, clock):
        mom, dad = await two_parents(pet_service)
        await breeding_service.start_breeding(1, mom.id, dad.id, pay_with_coins=False)
        clock.advance(hours=24)
        (egg,) = await breeding_service.complete_ready_breedings()

        with pytest.raises(NotFoundError):
            await breeding_service.hatch_egg(2, egg.id)

    @pytest.mark.asyncio
    async def test_full_roster_keeps_the_egg(self, breeding_service, pet_service, clock, reset_config):
        mom, dad = await two_parents(pet_service)
        await breeding_service.start_breeding(1, mom.id, dad.id, pay_with_coins=False)
        clock.advance(hours=24)
        (egg,) = await breeding_service.complete_ready_breedings()
        reset_config.set_override("pets.max_per_owner", 2)

        with pytest.raises(MaxPetsReachedError):
            await breeding_service.hatch_egg(1, egg.id)
        assert await breeding_service.list_eggs(1) == [egg]
