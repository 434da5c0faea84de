"""
Challenge storage.

`ChallengeRepository` is the storage seam for templates and per-day
instances. `claim()` is the one operation that must be atomic: it flips
`claimed` only when the instance is completed and unclaimed, and credits
the coin reward in the same atomic unit, so concurrent claims pay out
exactly once.
"""

from __future__ import annotations

import itertools
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Sequence

from petengine.domain.models.challenge import ChallengeTemplate, ClaimReceipt, UserChallenge
from petengine.modules.economy.wallet import InMemoryWallet
from petengine.modules.shared.exceptions import (
    ChallengeAlreadyClaimedError,
    ChallengeNotCompletedError,
    NotFoundError,
)


class ChallengeRepository(ABC):
    @abstractmethod
    async def list_templates(self) -> List[ChallengeTemplate]:
        ...

    @abstractmethod
    async def get_for_day(self, user_id: int, day_key: str) -> List[UserChallenge]:
        ...

    @abstractmethod
    async def add_instances(
        self,
        user_id: int,
        templates: Sequence[ChallengeTemplate],
        day_key: str,
        now: datetime,
        count: int,
    ) -> List[UserChallenge]:
        """
        Create fresh instances until the user holds `count` for the day.

        Templates already assigned for the day are skipped. Checking the
        existing rows and inserting new ones is one atomic step, so
        concurrent top-ups never push the day past `count`.
        """

    @abstractmethod
    async def save_progress(self, challenges: Iterable[UserChallenge]) -> None:
        """Persist progress/completion. Never un-completes or touches claim state."""

    @abstractmethod
    async def claim(self, user_id: int, user_challenge_id: int, now: datetime) -> ClaimReceipt:
        """
        Atomically mark a completed challenge as claimed and credit its coins.

        Raises
        ------
        NotFoundError
            No such challenge for this user.
        ChallengeNotCompletedError
            The challenge is not completed yet.
        ChallengeAlreadyClaimedError
            The reward was already claimed.
        """


class InMemoryChallengeRepository(ChallengeRepository):
    """
    Dict-backed repository.

    All reads return copies so callers never mutate stored state without
    going through `save_progress` or `claim`.
    """

    def __init__(self, templates: Iterable[ChallengeTemplate], wallet: InMemoryWallet) -> None:
        self._templates: Dict[int, ChallengeTemplate] = {template.id: template for template in templates}
        self._instances: Dict[int, UserChallenge] = {}
        self._wallet = wallet
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    async def list_templates(self) -> List[ChallengeTemplate]:
        return sorted(self._templates.values(), key=lambda template: template.id)

    async def get_for_day(self, user_id: int, day_key: str) -> List[UserChallenge]:
        with self._lock:
            return [
                replace(instance)
                for instance in sorted(self._instances.values(), key=lambda item: item.id)
                if instance.user_id == user_id and instance.day_key == day_key
            ]

    async def add_instances(
        self,
        user_id: int,
        templates: Sequence[ChallengeTemplate],
        day_key: str,
        now: datetime,
        count: int,
    ) -> List[UserChallenge]:
        created: List[UserChallenge] = []
        with self._lock:
            taken = {
                instance.challenge.id
                for instance in self._instances.values()
                if instance.user_id == user_id and instance.day_key == day_key
            }
            room = count - len(taken)
            for template in templates:
                if len(created) >= room:
                    break
                if template.id in taken:
                    continue
                instance = UserChallenge(
                    id=next(self._ids),
                    user_id=user_id,
                    challenge=template,
                    day_key=day_key,
                    assigned_at=now,
                )
                self._instances[instance.id] = instance
                taken.add(template.id)
                created.append(replace(instance))
        return created

    async def save_progress(self, challenges: Iterable[UserChallenge]) -> None:
        with self._lock:
            for challenge in challenges:
                stored = self._instances.get(challenge.id)
                if stored is None or stored.completed:
                    continue
                stored.progress = challenge.progress
                if challenge.completed:
                    stored.completed = True
                    stored.completed_at = challenge.completed_at

    async def claim(self, user_id: int, user_challenge_id: int, now: datetime) -> ClaimReceipt:
        with self._lock:
            stored = self._instances.get(user_challenge_id)
            if stored is None or stored.user_id != user_id:
                raise NotFoundError("Challenge", user_challenge_id)
            if not stored.completed:
                raise ChallengeNotCompletedError(user_challenge_id)
            if stored.claimed:
                raise ChallengeAlreadyClaimedError(user_challenge_id)

            stored.mark_claimed(now)
            new_balance = self._wallet.credit_now(user_id, stored.challenge.coin_reward)

            return ClaimReceipt(
                user_challenge_id=stored.id,
                user_id=user_id,
                coins_awarded=stored.challenge.coin_reward,
                xp_reward=stored.challenge.xp_reward,
                new_balance=new_balance,
                claimed_at=now,
            )
