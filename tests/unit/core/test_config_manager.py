"""Unit tests for ConfigManager YAML defaults and overrides."""

import pytest

from petengine.core.config.errors import ConfigWriteError
from petengine.core.config.manager import ConfigManager


@pytest.mark.unit
class TestReads:
    def test_bundled_defaults_are_loaded(self, reset_config):
        assert reset_config.get("progression.xp_per_level") == 100
        assert reset_config.get("challenges.daily_count") == 3
        assert reset_config.get("decay.hunger.interval_minutes") == 30

    def test_missing_key_returns_default(self, reset_config):
        assert reset_config.get("nope.not.here", 7) == 7

    def test_reads_return_copies(self, reset_config):
        templates = reset_config.get("challenges.templates")
        templates.clear()

        assert len(reset_config.get("challenges.templates")) == 9

    def test_get_section(self, reset_config):
        assert "xp_per_level" in reset_config.get_section("progression")
        assert reset_config.get_section("progression.xp_per_level") == {}

    def test_metrics_count_hits_and_misses(self, reset_config):
        reset_config.get("progression.xp_per_level")
        reset_config.get("missing.key")

        metrics = reset_config.get_metrics()
        assert metrics["hits"] >= 1
        assert metrics["misses"] >= 1
        assert metrics["initialized"] is True


@pytest.mark.unit
class TestOverrides:
    def test_override_wins_over_default(self, reset_config):
        reset_config.set_override("economy.max_coins", 9999)

        assert reset_config.get("economy.max_coins") == 9999
        assert reset_config.get_metrics()["override_keys"] == ["economy.max_coins"]

    def test_clear_overrides_restores_default(self, reset_config):
        original = reset_config.get("economy.max_coins")
        reset_config.set_override("economy.max_coins", 1)

        reset_config.clear_overrides()

        assert reset_config.get("economy.max_coins") == original

    def test_validator_can_block_write(self, reset_config, monkeypatch):
        monkeypatch.setattr(ConfigManager, "_validators", {})

        def positive(value):
            if value <= 0:
                raise ValueError("must be positive")
            return value

        reset_config.register_validator("progression.xp_per_level", positive)

        with pytest.raises(ConfigWriteError):
            reset_config.set_override("progression.xp_per_level", 0)
        assert reset_config.get("progression.xp_per_level") == 100

    def test_overlay_directory_is_merged(self, reset_config, tmp_path):
        (tmp_path / "balance.yaml").write_text("progression:\n  xp_per_level: 250\n", encoding="utf-8")

        reset_config.initialize(extra_dirs=[tmp_path])

        assert reset_config.get("progression.xp_per_level") == 250
        assert reset_config.get("progression.evolution_thresholds.child") == 5
