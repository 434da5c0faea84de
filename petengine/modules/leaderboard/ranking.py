"""Pure leaderboard ranking."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: int
    value: int
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    user_id: int
    value: int
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Leaderboard:
    category: str
    entries: List[RankedEntry]
    current_user_rank: Optional[int]


def rank_entries(
    entries: Sequence[LeaderboardEntry],
    current_user_id: Optional[int] = None,
    limit: int = 50,
    category: str = "",
) -> Leaderboard:
    """
    Sort by value (highest first) and number the top `limit` entries.

    Ties keep their input order and get consecutive ranks. The current
    user's rank comes from the full ordering, so a user outside the top
    `limit` still gets a rank; a user with no entry gets None.
    """
    ordered = sorted(entries, key=lambda entry: entry.value, reverse=True)
    ranked = [
        RankedEntry(rank=index + 1, user_id=entry.user_id, value=entry.value, extra=dict(entry.extra))
        for index, entry in enumerate(ordered[:limit])
    ]

    current_rank = None
    if current_user_id is not None:
        for index, entry in enumerate(ordered):
            if entry.user_id == current_user_id:
                current_rank = index + 1
                break

    return Leaderboard(category=category, entries=ranked, current_user_rank=current_rank)
