"""
Challenge Service

Purpose
-------
Daily challenge lifecycle: top-up assignment, activity tracking and
reward claims.

Domain
------
- Assign `challenges.daily_count` templates per user per day (idempotent)
- Route activity events into the pure tracker and persist changes
- Claim rewards exactly once; coins are credited by the repository in
  the same atomic unit as the claim flag
- Optionally grant the challenge XP to one of the user's pets

The day boundary comes from an injected `DayKeyPolicy` (UTC by default).
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Union

from petengine.core.clock import utc_day_key
from petengine.core.logging.logger import get_logger
from petengine.domain.models.challenge import ChallengeType, ClaimReceipt, UserChallenge
from petengine.modules.challenges.assignment import ChallengeSettings, select_templates_to_assign
from petengine.modules.challenges.tracker import update_progress
from petengine.modules.progression.engine import ProgressionResult, ProgressionSettings, apply_xp
from petengine.modules.shared.base_service import BaseService
from petengine.modules.shared.exceptions import PetEngineException

if TYPE_CHECKING:
    from logging import Logger

    from petengine.core.clock import Clock, DayKeyPolicy
    from petengine.core.config.manager import ConfigManager
    from petengine.core.event.bus import EventBus
    from petengine.modules.challenges.repository import ChallengeRepository
    from petengine.modules.pets.service import PetService


@dataclass(frozen=True)
class ChallengeClaimResult:
    receipt: ClaimReceipt
    pet_id: Optional[int] = None
    progression: Optional[ProgressionResult] = None


class ChallengeService(BaseService):
    """
    Public Methods
    --------------
    - get_daily_challenges() -> Today's challenges, topped up to the daily count
    - record_activity() -> Feed an activity into today's challenges
    - claim_reward() -> Claim a completed challenge exactly once
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        repository: ChallengeRepository,
        clock: Clock,
        pet_service: Optional[PetService] = None,
        rng: Optional[random.Random] = None,
        day_key_policy: DayKeyPolicy = utc_day_key,
        logger: Optional[Logger] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger or get_logger(__name__))
        self._repo = repository
        self._clock = clock
        self._pets = pet_service
        self._rng = rng or random.Random()
        self._day_key = day_key_policy
        self._settings = ChallengeSettings.from_config(config_manager)
        self._progression = ProgressionSettings.from_config(config_manager)

    def today(self) -> str:
        return self._day_key(self._clock.now())

    async def get_daily_challenges(self, user_id: int) -> List[UserChallenge]:
        """
        Return today's challenges, assigning new ones up to the daily count.

        Calling this repeatedly on the same day never resets progress or
        assigns more than the daily count.
        """
        self.validate_positive_int(user_id, "user_id")
        now = self._clock.now()
        day_key = self._day_key(now)

        current = await self._repo.get_for_day(user_id, day_key)
        templates = select_templates_to_assign(
            await self._repo.list_templates(),
            current,
            self._rng,
            count=self._settings.daily_count,
        )
        if not templates:
            return current

        created = await self._repo.add_instances(
            user_id, templates, day_key, now, count=self._settings.daily_count
        )
        if created:
            self.log_operation(
                "assign_daily_challenges",
                user_id=user_id,
                day_key=day_key,
                challenge_ids=[challenge.challenge.id for challenge in created],
            )
            await self.emit_event(
                "challenge.assigned",
                {
                    "user_id": user_id,
                    "day_key": day_key,
                    "user_challenge_ids": [challenge.id for challenge in created],
                },
            )
        return await self._repo.get_for_day(user_id, day_key)

    async def record_activity(
        self,
        user_id: int,
        challenge_type: Union[ChallengeType, str],
        amount: int,
    ) -> List[UserChallenge]:
        """
        Apply an activity to today's matching challenges.

        Returns the challenges that changed. Only challenges already assigned
        for today are tracked.

        Raises:
            ValidationError: If amount is negative
        """
        now = self._clock.now()
        day_key = self._day_key(now)
        active = await self._repo.get_for_day(user_id, day_key)
        already_done = {challenge.id for challenge in active if challenge.completed}

        changed = update_progress(active, challenge_type, amount, now, day_key)
        if not changed:
            return changed

        await self._repo.save_progress(changed)

        for challenge in changed:
            if challenge.completed and challenge.id not in already_done:
                self.log.info(
                    "Challenge completed",
                    extra={"user_id": user_id, "user_challenge_id": challenge.id, "type": challenge.type.value},
                )
                await self.emit_event(
                    "challenge.completed",
                    {
                        "user_id": user_id,
                        "user_challenge_id": challenge.id,
                        "challenge_id": challenge.challenge.id,
                        "type": challenge.type.value,
                    },
                )
        return changed

    async def claim_reward(
        self,
        user_id: int,
        user_challenge_id: int,
        pet_id: Optional[int] = None,
    ) -> ChallengeClaimResult:
        """
        Claim a completed challenge.

        Coins are credited atomically with the claim. When `pet_id` is given
        the challenge XP goes to that pet after the claim succeeds; an
        unknown pet is rejected before anything is claimed.

        Raises:
            NotFoundError: Unknown challenge, or a pet the user does not own
            ChallengeNotCompletedError: Challenge not completed yet
            ChallengeAlreadyClaimedError: Reward already claimed
        """
        pet = None
        if pet_id is not None and self._pets is not None:
            pet = await self._pets.load_owned(user_id, pet_id)

        try:
            receipt = await self._repo.claim(user_id, user_challenge_id, self._clock.now())
        except PetEngineException as exc:
            self.log.info(
                "Challenge claim rejected",
                extra={
                    "user_id": user_id,
                    "user_challenge_id": user_challenge_id,
                    "reason": type(exc).__name__,
                },
            )
            raise

        progression = None
        if pet is not None and receipt.xp_reward > 0:
            progression = apply_xp(pet.level, pet.xp, pet.evolution_stage, receipt.xp_reward, self._progression)
            pet.apply_progression(progression, xp_gained=receipt.xp_reward)
            await self._pets.save(pet)
            await self.publish_domain_events(pet)

        self.log_operation(
            "claim_challenge_reward",
            user_id=user_id,
            user_challenge_id=user_challenge_id,
            coins_awarded=receipt.coins_awarded,
            pet_id=pet_id,
        )
        await self.emit_event(
            "challenge.claimed",
            {
                "user_id": user_id,
                "user_challenge_id": user_challenge_id,
                "coins_awarded": receipt.coins_awarded,
                "xp_reward": receipt.xp_reward,
                "new_balance": receipt.new_balance,
                "pet_id": pet_id,
            },
        )
        return ChallengeClaimResult(receipt=receipt, pet_id=pet_id, progression=progression)
