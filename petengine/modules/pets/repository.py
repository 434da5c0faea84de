"""Pet storage seam and its in-memory implementation."""

from __future__ import annotations

import itertools
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from petengine.domain.models.pet import Pet


class PetRepository(ABC):
    @abstractmethod
    def next_id(self) -> int:
        ...

    @abstractmethod
    async def get(self, pet_id: int) -> Optional[Pet]:
        ...

    @abstractmethod
    async def list_by_owner(self, owner_id: int) -> List[Pet]:
        ...

    @abstractmethod
    async def count_by_owner(self, owner_id: int) -> int:
        ...

    @abstractmethod
    async def save(self, pet: Pet) -> Pet:
        """Insert or replace."""

    @abstractmethod
    async def list_all(self) -> List[Pet]:
        ...


class InMemoryPetRepository(PetRepository):
    def __init__(self) -> None:
        self._pets: Dict[int, Pet] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            return next(self._ids)

    async def get(self, pet_id: int) -> Optional[Pet]:
        return self._pets.get(pet_id)

    async def list_by_owner(self, owner_id: int) -> List[Pet]:
        return sorted(
            (pet for pet in self._pets.values() if pet.owner_id == owner_id),
            key=lambda pet: pet.id,
        )

    async def count_by_owner(self, owner_id: int) -> int:
        return sum(1 for pet in self._pets.values() if pet.owner_id == owner_id)

    async def save(self, pet: Pet) -> Pet:
        with self._lock:
            self._pets[pet.id] = pet
        return pet

    async def list_all(self) -> List[Pet]:
        return sorted(self._pets.values(), key=lambda pet: pet.id)
