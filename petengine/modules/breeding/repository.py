"""Breeding record and egg storage."""

from __future__ import annotations

import itertools
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, List, Optional

from petengine.domain.models.breeding import BreedingRecord, BreedingStatus, Egg


class BreedingRepository(ABC):
    @abstractmethod
    def next_id(self) -> int:
        ...

    @abstractmethod
    async def save_record(self, record: BreedingRecord) -> BreedingRecord:
        ...

    @abstractmethod
    async def get_record(self, record_id: int) -> Optional[BreedingRecord]:
        ...

    @abstractmethod
    async def list_records(self, owner_id: int) -> List[BreedingRecord]:
        ...

    @abstractmethod
    async def list_incubating(self) -> List[BreedingRecord]:
        ...

    @abstractmethod
    async def find_record_by_egg(self, egg_id: int) -> Optional[BreedingRecord]:
        ...

    @abstractmethod
    async def add_egg(self, egg: Egg) -> Egg:
        ...

    @abstractmethod
    async def get_egg(self, egg_id: int) -> Optional[Egg]:
        ...

    @abstractmethod
    async def list_eggs(self, owner_id: int) -> List[Egg]:
        ...

    @abstractmethod
    async def remove_egg(self, egg_id: int) -> None:
        ...


class InMemoryBreedingRepository(BreedingRepository):
    def __init__(self) -> None:
        self._records: Dict[int, BreedingRecord] = {}
        self._eggs: Dict[int, Egg] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            return next(self._ids)

    async def save_record(self, record: BreedingRecord) -> BreedingRecord:
        with self._lock:
            self._records[record.id] = replace(record)
        return record

    async def get_record(self, record_id: int) -> Optional[BreedingRecord]:
        record = self._records.get(record_id)
        return replace(record) if record else None

    async def list_records(self, owner_id: int) -> List[BreedingRecord]:
        return [replace(r) for r in sorted(self._records.values(), key=lambda r: r.id) if r.owner_id == owner_id]

    async def list_incubating(self) -> List[BreedingRecord]:
        return [
            replace(r)
            for r in sorted(self._records.values(), key=lambda r: r.id)
            if r.status is BreedingStatus.INCUBATING
        ]

    async def find_record_by_egg(self, egg_id: int) -> Optional[BreedingRecord]:
        for record in self._records.values():
            if record.egg_id == egg_id:
                return replace(record)
        return None

    async def add_egg(self, egg: Egg) -> Egg:
        with self._lock:
            self._eggs[egg.id] = egg
        return egg

    async def get_egg(self, egg_id: int) -> Optional[Egg]:
        return self._eggs.get(egg_id)

    async def list_eggs(self, owner_id: int) -> List[Egg]:
        return sorted((egg for egg in self._eggs.values() if egg.owner_id == owner_id), key=lambda egg: egg.id)

    async def remove_egg(self, egg_id: int) -> None:
        with self._lock:
            self._eggs.pop(egg_id, None)
