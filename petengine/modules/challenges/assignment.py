"""
Daily challenge assignment.

Every user holds `daily_count` challenge instances per day. Topping up is
idempotent: templates already assigned today are excluded and existing
instances are never reset.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from petengine.core.config.errors import ConfigValidationError
from petengine.core.config.manager import ConfigManager
from petengine.domain.models.challenge import ChallengeTemplate, UserChallenge


@dataclass(frozen=True)
class ChallengeSettings:
    daily_count: int = 3
    templates: tuple[ChallengeTemplate, ...] = ()

    def __post_init__(self) -> None:
        if self.daily_count <= 0:
            raise ConfigValidationError("challenges.daily_count must be positive")
        ids = [template.id for template in self.templates]
        if len(ids) != len(set(ids)):
            raise ConfigValidationError("challenge template ids must be unique")

    @classmethod
    def from_config(cls, config_manager=ConfigManager) -> "ChallengeSettings":
        raw_templates = config_manager.get("challenges.templates", []) or []
        return cls(
            daily_count=int(config_manager.get("challenges.daily_count", 3)),
            templates=tuple(ChallengeTemplate.from_dict(raw) for raw in raw_templates),
        )


def select_templates_to_assign(
    templates: Sequence[ChallengeTemplate],
    assigned_today: Iterable[UserChallenge],
    rng: random.Random,
    count: int = 3,
) -> List[ChallengeTemplate]:
    """
    Pick templates to top today's set up to `count`.

    Returns an empty list when the user already has `count` or more. When
    fewer unassigned templates remain than needed, all of them are returned.
    """
    assigned = list(assigned_today)
    needed = count - len(assigned)
    if needed <= 0:
        return []

    taken = {challenge.challenge.id for challenge in assigned}
    candidates = [template for template in templates if template.id not in taken]
    rng.shuffle(candidates)
    return candidates[:needed]
