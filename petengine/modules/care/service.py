"""
Care Service

Purpose
-------
Performs care actions (feed, play, clean, sleep) on an owned pet.

Order of operations per action:
  1. Apply elapsed decay
  2. Check the action cooldown
  3. Apply stat deltas and stamp the action timestamp
  4. Award XP through the progression engine
  5. Credit coins (capped)
  6. Track challenges: the action itself, then the happiness, health and
     energy gauges
  7. Publish events
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Union

from petengine.core.logging.logger import LogContext, get_logger
from petengine.domain.models.challenge import ChallengeType, UserChallenge
from petengine.domain.models.pet import Pet
from petengine.modules.care.actions import (
    ActionSettings,
    CooldownStatus,
    PetAction,
    calculate_mood,
    evaluate_cooldown,
)
from petengine.modules.decay.calculator import DecaySettings, compute_decay
from petengine.modules.progression.engine import ProgressionResult, ProgressionSettings, apply_xp
from petengine.modules.shared.base_service import BaseService
from petengine.modules.shared.exceptions import CooldownActiveError, ValidationError

if TYPE_CHECKING:
    from logging import Logger

    from petengine.core.clock import Clock
    from petengine.core.config.manager import ConfigManager
    from petengine.core.event.bus import EventBus
    from petengine.modules.challenges.service import ChallengeService
    from petengine.modules.economy.wallet import Wallet
    from petengine.modules.pets.service import PetService

_GAUGES = (ChallengeType.HAPPINESS, ChallengeType.HEALTH, ChallengeType.ENERGY)


@dataclass(frozen=True)
class ActionOutcome:
    pet: Pet
    action: PetAction
    coins_earned: int
    new_balance: int
    progression: ProgressionResult
    updated_challenges: List[UserChallenge] = field(default_factory=list)


class CareService(BaseService):
    """
    Public Methods
    --------------
    - perform_action() -> Apply a care action to an owned pet
    - get_cooldowns() -> Cooldown status of every action for a pet
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        pet_service: PetService,
        wallet: Wallet,
        clock: Clock,
        challenge_service: Optional[ChallengeService] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger or get_logger(__name__))
        self._pets = pet_service
        self._wallet = wallet
        self._clock = clock
        self._challenges = challenge_service
        self._actions = ActionSettings.from_config(config_manager)
        self._decay = DecaySettings.from_config(config_manager)
        self._progression = ProgressionSettings.from_config(config_manager)

    @staticmethod
    def _parse_action(action: Union[PetAction, str]) -> PetAction:
        try:
            return PetAction(action)
        except ValueError:
            raise ValidationError("action", f"unknown care action '{action}'") from None

    async def get_cooldowns(self, owner_id: int, pet_id: int) -> Dict[str, CooldownStatus]:
        pet = await self._pets.load_owned(owner_id, pet_id)
        now = self._clock.now()
        statuses: Dict[str, CooldownStatus] = {}
        for action in PetAction:
            effect = self._actions.effect_for(action)
            last = getattr(pet, effect.timestamp_field) if effect.timestamp_field else None
            statuses[action.value] = evaluate_cooldown(last, effect.cooldown_minutes, now)
        return statuses

    async def perform_action(self, owner_id: int, pet_id: int, action: Union[PetAction, str]) -> ActionOutcome:
        """
        Raises:
            ValidationError: Unknown action
            NotFoundError: Pet missing or owned by someone else
            CooldownActiveError: The action was performed too recently
        """
        action = self._parse_action(action)
        effect = self._actions.effect_for(action)

        with LogContext(user_id=owner_id, pet_id=pet_id, operation=f"care.{action.value}"):
            pet = await self._pets.load_owned(owner_id, pet_id)
            now = self._clock.now()

            pet.apply_decay(compute_decay(pet, now, self._decay))

            if effect.timestamp_field:
                status = evaluate_cooldown(getattr(pet, effect.timestamp_field), effect.cooldown_minutes, now)
                if not status.ready:
                    # Decay already happened; keep it even though the action is refused
                    await self._pets.save(pet)
                    await self.publish_domain_events(pet)
                    raise CooldownActiveError(action.value, status.remaining_seconds)

            pet.apply_stat_deltas(effect.stat_deltas)
            if effect.timestamp_field:
                pet.record_action(effect.timestamp_field, now)

            progression = apply_xp(pet.level, pet.xp, pet.evolution_stage, effect.xp_reward, self._progression)
            pet.apply_progression(progression, xp_gained=effect.xp_reward)
            pet.set_mood(calculate_mood(pet.hunger, pet.happiness, pet.energy, self._actions.mood))
            await self._pets.save(pet)

            new_balance = await self._wallet.credit(owner_id, effect.coin_reward)

            updated: List[UserChallenge] = []
            if self._challenges is not None:
                updated.extend(await self._challenges.record_activity(owner_id, action.value, 1))
                for gauge in _GAUGES:
                    updated.extend(
                        await self._challenges.record_activity(owner_id, gauge, getattr(pet, gauge.value))
                    )

            self.log_operation(
                "perform_action",
                action=action.value,
                coins_earned=effect.coin_reward,
                xp_gained=effect.xp_reward,
                level=pet.level,
            )
            await self.publish_domain_events(pet)
            await self.emit_event(
                "pet.action_performed",
                {
                    "pet_id": pet.id,
                    "owner_id": owner_id,
                    "action": action.value,
                    "coins_earned": effect.coin_reward,
                    "xp_gained": effect.xp_reward,
                    "stats": pet.stats(),
                },
            )

        return ActionOutcome(
            pet=pet,
            action=action,
            coins_earned=effect.coin_reward,
            new_balance=new_balance,
            progression=progression,
            updated_challenges=updated,
        )
