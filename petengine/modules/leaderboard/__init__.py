from petengine.modules.leaderboard.ranking import Leaderboard, LeaderboardEntry, RankedEntry, rank_entries
from petengine.modules.leaderboard.service import CATEGORIES, LeaderboardService

__all__ = ["Leaderboard", "LeaderboardEntry", "RankedEntry", "rank_entries", "CATEGORIES", "LeaderboardService"]
