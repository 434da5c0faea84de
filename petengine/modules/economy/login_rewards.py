"""
Daily login rewards.

A claim is allowed once per `claim_interval_hours`. Claiming again less than
`streak_window_hours` after the previous claim extends the streak; a gap
of the full window or more restarts it at 1. Reward: `base + min(streak * step, bonus_cap)`.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Dict, Optional

from petengine.core.clock import ensure_utc
from petengine.core.logging.logger import get_logger
from petengine.modules.economy.settings import EconomySettings
from petengine.modules.shared.base_service import BaseService
from petengine.modules.shared.exceptions import CooldownActiveError
from petengine.modules.shared.formulas import ceil_seconds, login_streak_reward

if TYPE_CHECKING:
    from logging import Logger

    from petengine.core.clock import Clock
    from petengine.core.config.manager import ConfigManager
    from petengine.core.event.bus import EventBus
    from petengine.modules.economy.wallet import Wallet


@dataclass(frozen=True)
class LoginState:
    last_claim: Optional[datetime] = None
    streak: int = 0


@dataclass(frozen=True)
class LoginReward:
    coins: int
    streak: int
    claimed_at: datetime


def remaining_cooldown_seconds(
    last_claim: Optional[datetime],
    now: datetime,
    settings: Optional[EconomySettings] = None,
) -> int:
    """Seconds until the next claim is allowed (0 when it already is)."""
    if last_claim is None:
        return 0
    settings = settings or EconomySettings()
    remaining = timedelta(hours=settings.login_claim_interval_hours) - (ensure_utc(now) - ensure_utc(last_claim))
    return ceil_seconds(remaining.total_seconds())


def compute_login_reward(
    last_claim: Optional[datetime],
    streak: int,
    now: datetime,
    settings: Optional[EconomySettings] = None,
) -> LoginReward:
    """
    Work out the next login reward.

    Raises
    ------
    CooldownActiveError
        If the previous claim is more recent than the claim interval.
    """
    settings = settings or EconomySettings()
    now = ensure_utc(now)

    if last_claim is None:
        new_streak = 1
    else:
        elapsed = now - ensure_utc(last_claim)
        if elapsed < timedelta(hours=settings.login_claim_interval_hours):
            raise CooldownActiveError("daily_login", remaining_cooldown_seconds(last_claim, now, settings))
        if elapsed < timedelta(hours=settings.login_streak_window_hours):
            new_streak = streak + 1
        else:
            new_streak = 1

    coins = login_streak_reward(
        new_streak,
        settings.login_base_coins,
        settings.login_streak_step_coins,
        settings.login_streak_bonus_cap,
    )
    return LoginReward(coins=coins, streak=new_streak, claimed_at=now)


class LoginStateStore(ABC):
    @abstractmethod
    async def get(self, user_id: int) -> LoginState:
        ...

    @abstractmethod
    async def compare_and_set(self, user_id: int, expected: LoginState, new: LoginState) -> bool:
        """Store `new` only if the current state still equals `expected`."""


class InMemoryLoginStateStore(LoginStateStore):
    def __init__(self) -> None:
        self._states: Dict[int, LoginState] = {}
        self._lock = threading.Lock()

    async def get(self, user_id: int) -> LoginState:
        return self._states.get(user_id, LoginState())

    async def compare_and_set(self, user_id: int, expected: LoginState, new: LoginState) -> bool:
        with self._lock:
            if self._states.get(user_id, LoginState()) != expected:
                return False
            self._states[user_id] = new
            return True


class LoginRewardService(BaseService):
    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        wallet: Wallet,
        clock: Clock,
        store: Optional[LoginStateStore] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger or get_logger(__name__))
        self._wallet = wallet
        self._clock = clock
        self._store = store or InMemoryLoginStateStore()
        self._settings = EconomySettings.from_config(config_manager)

    async def get_state(self, user_id: int) -> LoginState:
        return await self._store.get(user_id)

    async def claim(self, user_id: int) -> tuple[LoginReward, int]:
        """
        Claim today's login reward. Returns the reward and the new balance.

        A first claim opens the wallet with `economy.starting_coins` unless
        the user already has one.

        Raises:
            CooldownActiveError: Already claimed within the claim interval
        """
        state = await self._store.get(user_id)
        reward = compute_login_reward(state.last_claim, state.streak, self._clock.now(), self._settings)

        if not await self._store.compare_and_set(
            user_id, state, LoginState(last_claim=reward.claimed_at, streak=reward.streak)
        ):
            # Lost a race with a concurrent claim; its timestamp now blocks this one
            current = await self._store.get(user_id)
            raise CooldownActiveError(
                "daily_login", remaining_cooldown_seconds(current.last_claim, self._clock.now(), self._settings)
            )

        if state.last_claim is None:
            await self._wallet.open_account(user_id, self._settings.starting_coins)
        new_balance = await self._wallet.credit(user_id, reward.coins)

        self.log_operation("claim_daily_reward", user_id=user_id, streak=reward.streak, coins=reward.coins)
        await self.emit_event(
            "economy.daily_reward_claimed",
            {"user_id": user_id, "coins": reward.coins, "streak": reward.streak, "new_balance": new_balance},
        )
        return reward, new_balance
