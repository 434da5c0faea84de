"""Unit tests for leaderboard ranking."""

import pytest

from petengine.modules.leaderboard.ranking import LeaderboardEntry, rank_entries


def entries(*pairs):
    return [LeaderboardEntry(user_id=user_id, value=value) for user_id, value in pairs]


@pytest.mark.unit
class TestRankEntries:
    def test_sorted_highest_first(self):
        board = rank_entries(entries((1, 10), (2, 30), (3, 20)), category="total_coins")

        assert [entry.user_id for entry in board.entries] == [2, 3, 1]
        assert [entry.rank for entry in board.entries] == [1, 2, 3]
        assert board.category == "total_coins"

    def test_ties_keep_input_order(self):
        board = rank_entries(entries((5, 10), (4, 10)))

        assert [entry.user_id for entry in board.entries] == [5, 4]

    def test_limit_truncates_but_rank_uses_full_order(self):
        board = rank_entries(entries((1, 3), (2, 2), (3, 1)), current_user_id=3, limit=2)

        assert len(board.entries) == 2
        assert board.current_user_rank == 3

    def test_missing_user_has_no_rank(self):
        assert rank_entries(entries((1, 3)), current_user_id=99).current_user_rank is None

    def test_empty(self):
        board = rank_entries([])

        assert board.entries == []
        assert board.current_user_rank is None
