"""
Breeding Service

Purpose
-------
Breed two owned pets into an egg and hatch it into a new pet.

Lifecycle
---------
INCUBATING --(ready_at passed, complete_ready_breedings)--> READY
READY --(hatch_egg)--> HATCHED

Egg traits come from the genetics engine when incubation completes, so
the parents' traits at that moment are what count.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, List, Optional, Tuple

from petengine.core.logging.logger import get_logger
from petengine.domain.models.breeding import BreedingRecord, BreedingStatus, Egg
from petengine.domain.models.pet import Pet, PetGenetics
from petengine.modules.genetics.engine import GeneticsSettings, generate_baby_name, inherit_traits
from petengine.modules.shared.base_service import BaseService
from petengine.modules.shared.exceptions import InvalidOperationError, NotFoundError

if TYPE_CHECKING:
    from logging import Logger

    from petengine.core.clock import Clock
    from petengine.core.config.manager import ConfigManager
    from petengine.core.event.bus import EventBus
    from petengine.modules.breeding.repository import BreedingRepository
    from petengine.modules.economy.wallet import Wallet
    from petengine.modules.pets.service import PetService


class BreedingService(BaseService):
    """
    Public Methods
    --------------
    - start_breeding() -> Pay and start incubating an egg from two owned pets
    - complete_ready_breedings() -> Turn finished incubations into eggs
    - hatch_egg() -> Hatch an owned egg into a new pet
    - list_records() / list_eggs() -> Owner views
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        repository: BreedingRepository,
        pet_service: PetService,
        wallet: Wallet,
        clock: Clock,
        rng: Optional[random.Random] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger or get_logger(__name__))
        self._repo = repository
        self._pets = pet_service
        self._wallet = wallet
        self._clock = clock
        self._rng = rng or random.Random()
        self._genetics = GeneticsSettings.from_config(config_manager)

    @property
    def cost_coins(self) -> int:
        return int(self.get_config("breeding.cost_coins", 200))

    @property
    def incubation(self) -> timedelta:
        return timedelta(hours=float(self.get_config("breeding.incubation_hours", 24)))

    async def start_breeding(
        self,
        owner_id: int,
        parent1_id: int,
        parent2_id: int,
        pay_with_coins: bool = True,
    ) -> BreedingRecord:
        """
        Raises:
            InvalidOperationError: Same pet given twice
            NotFoundError: A parent is missing or owned by someone else
            InsufficientResourcesError: Not enough coins for the breeding fee
        """
        if parent1_id == parent2_id:
            raise InvalidOperationError("breed", "a pet cannot breed with itself")

        await self._pets.load_owned(owner_id, parent1_id)
        await self._pets.load_owned(owner_id, parent2_id)

        if pay_with_coins:
            await self._wallet.debit(owner_id, self.cost_coins)

        now = self._clock.now()
        record = BreedingRecord(
            id=self._repo.next_id(),
            owner_id=owner_id,
            parent1_id=parent1_id,
            parent2_id=parent2_id,
            started_at=now,
            ready_at=now + self.incubation,
            paid_with_coins=pay_with_coins,
        )
        await self._repo.save_record(record)

        self.log_operation(
            "start_breeding",
            user_id=owner_id,
            breeding_id=record.id,
            parent1_id=parent1_id,
            parent2_id=parent2_id,
            paid_with_coins=pay_with_coins,
        )
        await self.emit_event(
            "breeding.started",
            {
                "breeding_id": record.id,
                "owner_id": owner_id,
                "parent1_id": parent1_id,
                "parent2_id": parent2_id,
                "ready_at": record.ready_at.isoformat(),
            },
        )
        return record

    async def complete_ready_breedings(self, now: Optional[datetime] = None) -> List[Egg]:
        """
        Create eggs for every incubation whose `ready_at` has passed.

        Records whose parents no longer exist stay incubating.
        """
        now = now or self._clock.now()
        eggs: List[Egg] = []

        for record in await self._repo.list_incubating():
            if not record.is_ready(now):
                continue
            try:
                parent1 = await self._pets.load_owned(record.owner_id, record.parent1_id)
                parent2 = await self._pets.load_owned(record.owner_id, record.parent2_id)
            except NotFoundError:
                self.log.warning(
                    "Breeding parents missing; leaving record incubating",
                    extra={"breeding_id": record.id, "user_id": record.owner_id},
                )
                continue

            traits = inherit_traits(parent1, parent2, self._rng, self._genetics)
            egg = Egg(
                id=self._repo.next_id(),
                owner_id=record.owner_id,
                breeding_id=record.id,
                name=generate_baby_name(self._rng, self._genetics),
                type=traits.type,
                color=traits.color,
                pattern=traits.pattern,
                is_mutation=traits.is_mutation,
                parent1_id=record.parent1_id,
                parent2_id=record.parent2_id,
                created_at=now,
            )
            await self._repo.add_egg(egg)

            record.advance(BreedingStatus.INCUBATING)
            record.egg_id = egg.id
            await self._repo.save_record(record)
            eggs.append(egg)

            await self.emit_event(
                "breeding.egg_ready",
                {
                    "breeding_id": record.id,
                    "egg_id": egg.id,
                    "owner_id": record.owner_id,
                    "is_mutation": egg.is_mutation,
                },
            )

        if eggs:
            self.log_operation("complete_ready_breedings", eggs_created=len(eggs))
        return eggs

    async def hatch_egg(self, owner_id: int, egg_id: int) -> Tuple[Egg, Pet]:
        """
        Raises:
            NotFoundError: Egg missing or owned by someone else
            MaxPetsReachedError: The owner has no room for another pet
        """
        egg = await self._repo.get_egg(egg_id)
        if egg is None or egg.owner_id != owner_id:
            raise NotFoundError("Egg", egg_id)

        now = self._clock.now()
        pet = Pet(
            pet_id=self._pets.next_pet_id(),
            owner_id=owner_id,
            name=egg.name,
            pet_type=egg.type,
            genetics=PetGenetics(
                color=egg.color,
                pattern=egg.pattern,
                is_mutation=egg.is_mutation,
                parent1_id=egg.parent1_id,
                parent2_id=egg.parent2_id,
            ),
            created_at=now,
        )
        await self._pets.add_pet(pet)

        record = await self._repo.find_record_by_egg(egg_id)
        if record is not None:
            record.advance(BreedingStatus.READY)
            record.hatched_at = now
            await self._repo.save_record(record)
        await self._repo.remove_egg(egg_id)

        self.log_operation("hatch_egg", user_id=owner_id, egg_id=egg_id, pet_id=pet.id)
        await self.emit_event(
            "egg.hatched",
            {"egg_id": egg_id, "pet_id": pet.id, "owner_id": owner_id, "is_mutation": pet.is_mutation},
        )
        return egg, pet

    async def list_records(self, owner_id: int) -> List[BreedingRecord]:
        return await self._repo.list_records(owner_id)

    async def list_eggs(self, owner_id: int) -> List[Egg]:
        return await self._repo.list_eggs(owner_id)
