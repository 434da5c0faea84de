"""
Challenge domain models.

A `ChallengeTemplate` is seeded once and never changes. A `UserChallenge`
is the per-user, per-day instance that accumulates progress, completes
once, and is claimed at most once.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from petengine.domain.models.base import (
    DomainValidationError,
    validate_non_negative,
    validate_positive,
)


class ChallengeType(str, Enum):
    FEED = "feed"
    PLAY = "play"
    CLEAN = "clean"
    SLEEP = "sleep"
    HAPPINESS = "happiness"
    HEALTH = "health"
    ENERGY = "energy"

    @property
    def is_cumulative(self) -> bool:
        """Cumulative types count actions; gauge types track a stat's latest value."""
        return self in _CUMULATIVE_TYPES


_CUMULATIVE_TYPES = frozenset(
    {ChallengeType.FEED, ChallengeType.PLAY, ChallengeType.CLEAN, ChallengeType.SLEEP}
)


@dataclass(frozen=True)
class ChallengeTemplate:
    id: int
    type: ChallengeType
    target: int
    coin_reward: int
    xp_reward: int
    name: str = ""
    description: str = ""

    def __post_init__(self) -> None:
        validate_positive(self.target, "target")
        validate_non_negative(self.coin_reward, "coin_reward")
        validate_non_negative(self.xp_reward, "xp_reward")
        if not isinstance(self.type, ChallengeType):
            object.__setattr__(self, "type", ChallengeType(self.type))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChallengeTemplate":
        return cls(
            id=int(data["id"]),
            type=ChallengeType(data["type"]),
            target=int(data["target"]),
            coin_reward=int(data.get("coin_reward", 0)),
            xp_reward=int(data.get("xp_reward", 0)),
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
        )


@dataclass
class UserChallenge:
    """
    Per-day challenge instance.

    `completed` and `claimed` are one-way flags. Progress never exceeds the
    template target.
    """

    id: int
    user_id: int
    challenge: ChallengeTemplate
    day_key: str
    assigned_at: datetime
    progress: int = 0
    completed: bool = False
    completed_at: Optional[datetime] = None
    claimed: bool = False
    claimed_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        validate_non_negative(self.progress, "progress")
        if self.progress > self.challenge.target:
            raise DomainValidationError(
                f"progress {self.progress} exceeds target {self.challenge.target}",
                field="progress",
            )
        if self.claimed and not self.completed:
            raise DomainValidationError("a claimed challenge must be completed", field="claimed")

    @property
    def type(self) -> ChallengeType:
        return self.challenge.type

    @property
    def target(self) -> int:
        return self.challenge.target

    @property
    def is_claimable(self) -> bool:
        return self.completed and not self.claimed

    def mark_claimed(self, now: datetime) -> None:
        if not self.completed:
            raise DomainValidationError("challenge is not completed", field="completed")
        if self.claimed:
            raise DomainValidationError("challenge already claimed", field="claimed")
        self.claimed = True
        self.claimed_at = now

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "challenge_id": self.challenge.id,
            "name": self.challenge.name,
            "type": self.challenge.type.value,
            "target": self.challenge.target,
            "progress": self.progress,
            "completed": self.completed,
            "claimed": self.claimed,
            "coin_reward": self.challenge.coin_reward,
            "xp_reward": self.challenge.xp_reward,
            "day_key": self.day_key,
        }


@dataclass(frozen=True)
class ClaimReceipt:
    """Outcome of a successful claim."""

    user_challenge_id: int
    user_id: int
    coins_awarded: int
    xp_reward: int
    new_balance: int
    claimed_at: datetime
