"""
Breeding domain models: the incubation record and the egg it yields.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from petengine.domain.models.base import DomainValidationError


class BreedingStatus(str, Enum):
    INCUBATING = "incubating"
    READY = "ready"
    HATCHED = "hatched"


_NEXT_STATUS = {
    BreedingStatus.INCUBATING: BreedingStatus.READY,
    BreedingStatus.READY: BreedingStatus.HATCHED,
}


@dataclass
class BreedingRecord:
    id: int
    owner_id: int
    parent1_id: int
    parent2_id: int
    started_at: datetime
    ready_at: datetime
    status: BreedingStatus = BreedingStatus.INCUBATING
    paid_with_coins: bool = True
    egg_id: Optional[int] = None
    hatched_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.parent1_id == self.parent2_id:
            raise DomainValidationError("a pet cannot breed with itself", field="parent2_id")
        if self.ready_at < self.started_at:
            raise DomainValidationError("ready_at precedes started_at", field="ready_at")

    def is_ready(self, now: datetime) -> bool:
        return self.status is BreedingStatus.INCUBATING and now >= self.ready_at

    def advance(self, expected: BreedingStatus) -> None:
        """Move to the next status; `expected` guards against skipped steps."""
        if self.status is not expected or self.status not in _NEXT_STATUS:
            raise DomainValidationError(
                f"cannot advance breeding {self.id} from {self.status.value}",
                field="status",
            )
        self.status = _NEXT_STATUS[self.status]


@dataclass(frozen=True)
class Egg:
    id: int
    owner_id: int
    breeding_id: int
    name: str
    type: str
    color: str
    pattern: str
    is_mutation: bool
    parent1_id: int
    parent2_id: int
    created_at: datetime
