"""Daily challenges: assignment, progress tracking and exactly-once claims."""

from petengine.modules.challenges.assignment import ChallengeSettings, select_templates_to_assign
from petengine.modules.challenges.repository import ChallengeRepository, InMemoryChallengeRepository
from petengine.modules.challenges.service import ChallengeClaimResult, ChallengeService
from petengine.modules.challenges.sql_repository import SqlChallengeRepository
from petengine.modules.challenges.tracker import update_progress

__all__ = [
    "ChallengeSettings",
    "select_templates_to_assign",
    "ChallengeRepository",
    "InMemoryChallengeRepository",
    "SqlChallengeRepository",
    "ChallengeService",
    "ChallengeClaimResult",
    "update_progress",
]
