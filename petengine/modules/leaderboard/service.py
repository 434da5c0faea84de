"""
Leaderboard Service

Categories
----------
- highest_level: each owner's highest-level pet
- most_pets: number of pets per owner
- total_coins: wallet balance
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional

from petengine.core.logging.logger import get_logger
from petengine.modules.leaderboard.ranking import Leaderboard, LeaderboardEntry, rank_entries
from petengine.modules.shared.base_service import BaseService
from petengine.modules.shared.exceptions import ValidationError

if TYPE_CHECKING:
    from logging import Logger

    from petengine.core.config.manager import ConfigManager
    from petengine.core.event.bus import EventBus
    from petengine.domain.models.pet import Pet
    from petengine.modules.economy.wallet import Wallet
    from petengine.modules.pets.repository import PetRepository

CATEGORIES = ("highest_level", "most_pets", "total_coins")


class LeaderboardService(BaseService):
    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        pets: PetRepository,
        wallet: Wallet,
        logger: Optional[Logger] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger or get_logger(__name__))
        self._pets = pets
        self._wallet = wallet

    @property
    def limit(self) -> int:
        return int(self.get_config("leaderboard.limit", 50))

    async def get_leaderboard(self, category: str, current_user_id: Optional[int] = None) -> Leaderboard:
        """
        Raises:
            ValidationError: Unknown category
        """
        if category == "highest_level":
            entries = self._highest_level(await self._pets.list_all())
        elif category == "most_pets":
            entries = self._most_pets(await self._pets.list_all())
        elif category == "total_coins":
            balances = await self._wallet.all_balances()
            entries = [LeaderboardEntry(user_id=user_id, value=coins) for user_id, coins in balances.items()]
        else:
            raise ValidationError("category", f"unknown leaderboard category '{category}', expected one of {CATEGORIES}")

        board = rank_entries(entries, current_user_id, limit=self.limit, category=category)
        self.log.debug(
            "Leaderboard computed",
            extra={"category": category, "size": len(board.entries), "current_user_rank": board.current_user_rank},
        )
        return board

    @staticmethod
    def _highest_level(pets: List[Pet]) -> List[LeaderboardEntry]:
        best: Dict[int, Pet] = {}
        for pet in pets:
            current = best.get(pet.owner_id)
            if current is None or pet.level > current.level:
                best[pet.owner_id] = pet
        return [
            LeaderboardEntry(user_id=owner_id, value=pet.level, extra={"pet_id": pet.id, "pet_name": pet.name})
            for owner_id, pet in best.items()
        ]

    @staticmethod
    def _most_pets(pets: List[Pet]) -> List[LeaderboardEntry]:
        counts: Dict[int, int] = {}
        for pet in pets:
            counts[pet.owner_id] = counts.get(pet.owner_id, 0) + 1
        return [LeaderboardEntry(user_id=owner_id, value=count) for owner_id, count in counts.items()]
