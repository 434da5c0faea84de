"""Unit tests for challenge progress tracking and daily assignment."""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pytest

from petengine.core.config.errors import ConfigValidationError
from petengine.domain.models.challenge import ChallengeTemplate, ChallengeType, UserChallenge
from petengine.modules.challenges.assignment import ChallengeSettings, select_templates_to_assign
from petengine.modules.challenges.tracker import update_progress
from petengine.modules.shared.exceptions import ValidationError

NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)
TODAY = "2024-03-01"


def instance(instance_id: int, challenge_type: str, target: int, day_key: str = TODAY, **fields) -> UserChallenge:
    template = ChallengeTemplate(id=instance_id, type=ChallengeType(challenge_type), target=target, coin_reward=50, xp_reward=30)
    return UserChallenge(id=instance_id, user_id=1, challenge=template, day_key=day_key, assigned_at=NOW, **fields)


@pytest.mark.unit
class TestCumulativeProgress:
    def test_feed_challenge_completes_at_target(self):
        feed = instance(1, "feed", 5)

        for _ in range(3):
            update_progress([feed], "feed", 2, NOW, TODAY)

        assert feed.progress == 5
        assert feed.completed is True
        assert feed.completed_at == NOW

    def test_progress_is_capped_at_target(self):
        feed = instance(1, "feed", 5)

        update_progress([feed], ChallengeType.FEED, 50, NOW, TODAY)

        assert feed.progress == 5

    def test_returns_only_changed_challenges(self):
        feed = instance(1, "feed", 5)
        play = instance(2, "play", 5)

        changed = update_progress([feed, play], "feed", 1, NOW, TODAY)

        assert changed == [feed]
        assert play.progress == 0

    def test_zero_amount_changes_nothing(self):
        feed = instance(1, "feed", 5, progress=2)

        assert update_progress([feed], "feed", 0, NOW, TODAY) == []


@pytest.mark.unit
class TestGaugeProgress:
    def test_gauge_overwrites_instead_of_adding(self):
        happiness = instance(1, "happiness", 100)

        update_progress([happiness], "happiness", 60, NOW, TODAY)
        update_progress([happiness], "happiness", 40, NOW, TODAY)

        assert happiness.progress == 40
        assert happiness.completed is False

    def test_gauge_completes_when_value_reaches_target(self):
        energy = instance(1, "energy", 100)

        update_progress([energy], "energy", 100, NOW, TODAY)

        assert energy.completed is True


@pytest.mark.unit
class TestCandidateFiltering:
    def test_completed_challenges_are_never_touched(self):
        earlier = NOW - timedelta(hours=1)
        happiness = instance(1, "happiness", 80, progress=80, completed=True, completed_at=earlier)

        changed = update_progress([happiness], "happiness", 10, NOW, TODAY)

        assert changed == []
        assert happiness.progress == 80
        assert happiness.completed_at == earlier

    def test_other_days_are_ignored(self):
        yesterday = instance(1, "feed", 5, day_key="2024-02-29")

        update_progress([yesterday], "feed", 3, NOW, TODAY)

        assert yesterday.progress == 0

    def test_negative_amount_is_rejected(self):
        with pytest.raises(ValidationError):
            update_progress([instance(1, "feed", 5)], "feed", -1, NOW, TODAY)

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValueError):
            update_progress([], "dance", 1, NOW, TODAY)


@pytest.mark.unit
class TestAssignment:
    TEMPLATES = [
        ChallengeTemplate(id=i, type=ChallengeType.FEED, target=3, coin_reward=10, xp_reward=5) for i in range(1, 10)
    ]

    def test_tops_up_to_count(self):
        picked = select_templates_to_assign(self.TEMPLATES, [], random.Random(1), count=3)

        assert len(picked) == 3
        assert len({template.id for template in picked}) == 3

    def test_excludes_templates_already_assigned_today(self):
        existing = [instance(4, "feed", 3)]

        picked = select_templates_to_assign(self.TEMPLATES, existing, random.Random(1), count=3)

        assert len(picked) == 2
        assert 4 not in {template.id for template in picked}

    def test_full_day_needs_nothing(self):
        existing = [instance(i, "feed", 3) for i in (1, 2, 3)]

        assert select_templates_to_assign(self.TEMPLATES, existing, random.Random(1)) == []

    def test_fewer_templates_than_needed(self):
        picked = select_templates_to_assign(self.TEMPLATES[:2], [], random.Random(1), count=3)

        assert len(picked) == 2

    def test_settings_reject_duplicate_template_ids(self):
        template = self.TEMPLATES[0]

        with pytest.raises(ConfigValidationError):
            ChallengeSettings(templates=(template, template))

    def test_settings_load_seeded_templates(self, reset_config):
        settings = ChallengeSettings.from_config(reset_config)

        assert settings.daily_count == 3
        assert len(settings.templates) == 9
