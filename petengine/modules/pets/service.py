"""
Pet Service

Purpose
-------
Adopting pets and reading them back with decay and mood brought up to date.

Domain
------
- Enforce the per-owner pet limit
- Roll starting stats and genetics for adopted pets
- Apply elapsed decay and recompute mood on every read
- Enforce ownership
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, List, Optional

from petengine.core.logging.logger import get_logger
from petengine.domain.models.pet import Pet, PetGenetics
from petengine.modules.care.actions import ActionSettings, calculate_mood
from petengine.modules.decay.calculator import DecaySettings, compute_decay
from petengine.modules.genetics.engine import GeneticsSettings, generate_random_traits
from petengine.modules.shared.base_service import BaseService
from petengine.modules.shared.exceptions import MaxPetsReachedError, NotFoundError

if TYPE_CHECKING:
    from logging import Logger

    from petengine.core.clock import Clock
    from petengine.core.config.manager import ConfigManager
    from petengine.core.event.bus import EventBus
    from petengine.modules.pets.repository import PetRepository


class PetService(BaseService):
    """
    Public Methods
    --------------
    - create_pet() -> Adopt a new pet with random stats and traits
    - get_pet() -> Fetch an owned pet with decay applied
    - list_pets() -> All of an owner's pets with decay applied
    - refresh() -> Apply decay and mood to an already loaded pet
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        pets: PetRepository,
        clock: Clock,
        rng: Optional[random.Random] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger or get_logger(__name__))
        self._pets = pets
        self._clock = clock
        self._rng = rng or random.Random()
        self._decay = DecaySettings.from_config(config_manager)
        self._actions = ActionSettings.from_config(config_manager)
        self._genetics = GeneticsSettings.from_config(config_manager)

    @property
    def max_pets(self) -> int:
        return int(self.get_config("pets.max_per_owner", 20))

    async def create_pet(self, owner_id: int, name: str, pet_type: Optional[str] = None) -> Pet:
        """
        Adopt a pet.

        Starting needs are rolled uniformly in
        [`pets.starting_stat_min`, `pets.starting_stat_max`]; health starts
        full. Genetics come from the normal palette with no mutation.

        Raises:
            ValidationError: If owner_id is not positive
            MaxPetsReachedError: If the owner already has `pets.max_per_owner` pets
        """
        self.validate_positive_int(owner_id, "owner_id")
        owned = await self._pets.count_by_owner(owner_id)
        if owned >= self.max_pets:
            raise MaxPetsReachedError(owner_id, self.max_pets)

        low = int(self.get_config("pets.starting_stat_min", 60))
        high = int(self.get_config("pets.starting_stat_max", 100))
        traits = generate_random_traits(self._rng, self._genetics)
        now = self._clock.now()

        pet = Pet(
            pet_id=self._pets.next_id(),
            owner_id=owner_id,
            name=name,
            pet_type=pet_type or self.get_config("pets.default_type", "Fluffy"),
            genetics=PetGenetics(color=traits.color, pattern=traits.pattern),
            created_at=now,
            hunger=self._rng.randint(low, high),
            happiness=self._rng.randint(low, high),
            cleanliness=self._rng.randint(low, high),
            energy=self._rng.randint(low, high),
        )
        pet.set_mood(calculate_mood(pet.hunger, pet.happiness, pet.energy, self._actions.mood))
        await self._pets.save(pet)

        self.log_operation("create_pet", user_id=owner_id, pet_id=pet.id, pet_type=pet.type)
        await self.emit_event(
            "pet.created",
            {"pet_id": pet.id, "owner_id": owner_id, "type": pet.type, "color": pet.color, "pattern": pet.pattern},
        )
        return pet

    async def add_pet(self, pet: Pet) -> Pet:
        """Store an already built pet (hatching). Enforces the per-owner limit."""
        owned = await self._pets.count_by_owner(pet.owner_id)
        if owned >= self.max_pets:
            raise MaxPetsReachedError(pet.owner_id, self.max_pets)
        await self._pets.save(pet)
        await self.emit_event("pet.created", {"pet_id": pet.id, "owner_id": pet.owner_id, "type": pet.type})
        return pet

    def next_pet_id(self) -> int:
        return self._pets.next_id()

    async def load_owned(self, owner_id: int, pet_id: int) -> Pet:
        """
        Fetch an owned pet without applying decay.

        A pet owned by someone else is reported as missing.
        """
        pet = await self._pets.get(pet_id)
        if pet is None or not pet.is_owned_by(owner_id):
            raise NotFoundError("Pet", pet_id)
        return pet

    async def refresh(self, pet: Pet) -> Pet:
        """Apply elapsed decay, recompute mood, persist, and publish pending domain events."""
        pet.apply_decay(compute_decay(pet, self._clock.now(), self._decay))
        pet.set_mood(calculate_mood(pet.hunger, pet.happiness, pet.energy, self._actions.mood))
        await self._pets.save(pet)
        await self.publish_domain_events(pet)
        return pet

    async def get_pet(self, owner_id: int, pet_id: int) -> Pet:
        """
        Raises:
            NotFoundError: If the pet does not exist or belongs to another owner
        """
        return await self.refresh(await self.load_owned(owner_id, pet_id))

    async def list_pets(self, owner_id: int) -> List[Pet]:
        return [await self.refresh(pet) for pet in await self._pets.list_by_owner(owner_id)]

    async def save(self, pet: Pet) -> Pet:
        return await self._pets.save(pet)
