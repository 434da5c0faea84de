"""Unit tests for LeaderboardService categories."""

import pytest

from petengine.core.config.manager import ConfigManager
from petengine.modules.leaderboard.service import LeaderboardService
from petengine.modules.shared.exceptions import ValidationError


@pytest.fixture
def leaderboard_service(event_bus, pet_repository, wallet):
    return LeaderboardService(ConfigManager, event_bus, pet_repository, wallet)


@pytest.mark.unit
@pytest.mark.service
class TestLeaderboards:
    @pytest.mark.asyncio
    async def test_highest_level_uses_best_pet(self, leaderboard_service, pet_repository, pet_factory):
        for pet in (pet_factory(pet_id=1, owner_id=1, level=3), pet_factory(pet_id=2, owner_id=1, level=9)):
            await pet_repository.save(pet)
        await pet_repository.save(pet_factory(pet_id=3, owner_id=2, level=12))

        board = await leaderboard_service.get_leaderboard("highest_level", current_user_id=1)

        assert [(entry.user_id, entry.value) for entry in board.entries] == [(2, 12), (1, 9)]
        assert board.entries[1].extra["pet_id"] == 2
        assert board.current_user_rank == 2

    @pytest.mark.asyncio
    async def test_most_pets(self, leaderboard_service, pet_repository, pet_factory):
        for pet_id, owner_id in ((1, 1), (2, 3), (3, 3), (4, 2), (5, 3)):
            await pet_repository.save(pet_factory(pet_id=pet_id, owner_id=owner_id))

        board = await leaderboard_service.get_leaderboard("most_pets")

        assert [(entry.user_id, entry.value) for entry in board.entries][0] == (3, 3)
        assert board.current_user_rank is None

    @pytest.mark.asyncio
    async def test_total_coins(self, leaderboard_service, wallet):
        wallet.credit_now(1, 300)
        wallet.credit_now(2, 50)
        wallet.credit_now(3, 900)

        board = await leaderboard_service.get_leaderboard("total_coins", current_user_id=2)

        assert [entry.user_id for entry in board.entries] == [3, 1, 2]
        assert [entry.rank for entry in board.entries] == [1, 2, 3]
        assert board.current_user_rank == 3

    @pytest.mark.asyncio
    async def test_limit_from_config(self, leaderboard_service, wallet, reset_config):
        for user_id in range(1, 6):
            wallet.credit_now(user_id, user_id * 10)
        reset_config.set_override("leaderboard.limit", 2)

        board = await leaderboard_service.get_leaderboard("total_coins", current_user_id=1)

        assert len(board.entries) == 2
        assert board.current_user_rank == 5

    @pytest.mark.asyncio
    async def test_unknown_category(self, leaderboard_service):
        with pytest.raises(ValidationError):
            await leaderboard_service.get_leaderboard("fastest")
