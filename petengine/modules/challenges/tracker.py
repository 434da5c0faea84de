"""
Challenge progress tracker.

Applies one activity event to a user's challenges for the current day.

- Cumulative types (feed, play, clean, sleep) add `amount` to progress.
- Gauge types (happiness, health, energy) overwrite progress with the
  stat's current value, so "reach 100 happiness" needs the stat to *be*
  100 at some point; 60 then 40 leaves progress at 40.
- Progress is capped at the target. Completion is stamped once and
  completed challenges are never touched again.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Union

from petengine.domain.models.challenge import ChallengeType, UserChallenge
from petengine.modules.shared.exceptions import ValidationError


def update_progress(
    active: Iterable[UserChallenge],
    challenge_type: Union[ChallengeType, str],
    amount: int,
    now: datetime,
    day_key: str,
) -> List[UserChallenge]:
    """
    Apply an activity to today's matching challenges, in place.

    Returns
    -------
    List[UserChallenge]
        The challenges whose progress or completion changed.

    Raises
    ------
    ValidationError
        If `amount` is negative.
    """
    if amount < 0:
        raise ValidationError("amount", f"progress amount must be non-negative, got {amount}")

    challenge_type = ChallengeType(challenge_type)
    changed: List[UserChallenge] = []

    for challenge in active:
        if challenge.type is not challenge_type or challenge.completed or challenge.day_key != day_key:
            continue

        if challenge_type.is_cumulative:
            progress = min(challenge.progress + amount, challenge.target)
        else:
            progress = min(amount, challenge.target)

        touched = progress != challenge.progress
        challenge.progress = progress

        if progress >= challenge.target:
            challenge.completed = True
            challenge.completed_at = now
            touched = True

        if touched:
            changed.append(challenge)

    return changed
