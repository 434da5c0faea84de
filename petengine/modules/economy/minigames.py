"""
Mini-game payouts.

Scores run 0..`max_score`; the payout is linear between the game's coin
range and floored. Each game has its own cooldown per user. Cooldown
stamps and session history live in a `MiniGameStore`.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Deque, Dict, List, Optional, Tuple

from petengine.core.logging.logger import get_logger
from petengine.modules.care.actions import CooldownStatus, evaluate_cooldown
from petengine.modules.economy.settings import EconomySettings, MiniGameSpec
from petengine.modules.shared.base_service import BaseService
from petengine.modules.shared.exceptions import CooldownActiveError, NotFoundError
from petengine.modules.shared.formulas import score_to_coins

if TYPE_CHECKING:
    from logging import Logger

    from petengine.core.clock import Clock
    from petengine.core.config.manager import ConfigManager
    from petengine.core.event.bus import EventBus
    from petengine.modules.economy.wallet import Wallet


@dataclass(frozen=True)
class GameSession:
    user_id: int
    game_id: str
    score: int
    coins_earned: int
    new_balance: int
    played_at: datetime


class MiniGameStore(ABC):
    @abstractmethod
    async def start_play(self, user_id: int, game_id: str, now: datetime, cooldown_minutes: int) -> CooldownStatus:
        """Check the game's cooldown and, when ready, stamp `now` as the last play in one step."""

    @abstractmethod
    async def record(self, session: GameSession) -> None:
        ...

    @abstractmethod
    async def sessions(self, user_id: int) -> List[GameSession]:
        """The user's stored sessions, newest first."""


class InMemoryMiniGameStore(MiniGameStore):
    """Keeps the last `history_limit` sessions per user."""

    def __init__(self, history_limit: int = 50) -> None:
        self._last_played: Dict[Tuple[int, str], datetime] = {}
        self._history: Dict[int, Deque[GameSession]] = {}
        self._history_limit = history_limit
        self._lock = threading.Lock()

    async def start_play(self, user_id: int, game_id: str, now: datetime, cooldown_minutes: int) -> CooldownStatus:
        with self._lock:
            status = evaluate_cooldown(self._last_played.get((user_id, game_id)), cooldown_minutes, now)
            if status.ready:
                self._last_played[(user_id, game_id)] = now
            return status

    async def record(self, session: GameSession) -> None:
        with self._lock:
            history = self._history.setdefault(session.user_id, deque(maxlen=self._history_limit))
            history.append(session)

    async def sessions(self, user_id: int) -> List[GameSession]:
        with self._lock:
            found = list(self._history.get(user_id, ()))
        return sorted(found, key=lambda session: session.played_at, reverse=True)


class MiniGameService(BaseService):
    """
    Public Methods
    --------------
    - list_games() -> Configured games
    - play() -> Record a finished game and pay out coins
    - sessions() -> A user's past sessions, newest first
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        wallet: Wallet,
        clock: Clock,
        store: Optional[MiniGameStore] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger or get_logger(__name__))
        self._wallet = wallet
        self._clock = clock
        self._settings = EconomySettings.from_config(config_manager)
        self._store = store or InMemoryMiniGameStore()

    def list_games(self) -> List[MiniGameSpec]:
        return list(self._settings.minigames.values())

    async def play(self, user_id: int, game_id: str, score: int) -> GameSession:
        """
        Raises:
            NotFoundError: Unknown game
            ValidationError: Score outside [0, max_score]
            CooldownActiveError: Game played too recently
        """
        game = self._settings.minigames.get(game_id)
        if game is None:
            raise NotFoundError("MiniGame", game_id)
        self.validate_range(score, "score", 0, self._settings.minigame_max_score)

        now = self._clock.now()
        status = await self._store.start_play(user_id, game_id, now, game.cooldown_minutes)
        if not status.ready:
            raise CooldownActiveError(game_id, status.remaining_seconds)

        potential = score_to_coins(score, self._settings.minigame_max_score, game.min_coins, game.max_coins)
        before = await self._wallet.balance(user_id)
        new_balance = await self._wallet.credit(user_id, potential)

        session = GameSession(
            user_id=user_id,
            game_id=game_id,
            score=score,
            coins_earned=max(0, new_balance - before),
            new_balance=new_balance,
            played_at=now,
        )
        await self._store.record(session)

        self.log_operation("play_minigame", user_id=user_id, game_id=game_id, score=score, coins=session.coins_earned)
        await self.emit_event(
            "economy.minigame_played",
            {
                "user_id": user_id,
                "game_id": game_id,
                "score": score,
                "coins_earned": session.coins_earned,
                "new_balance": new_balance,
            },
        )
        return session

    async def sessions(self, user_id: int, game_id: Optional[str] = None) -> List[GameSession]:
        found = await self._store.sessions(user_id)
        return [session for session in found if game_id is None or session.game_id == game_id]
