"""
Tests for Analytics Configuration

Validates defaults, YAML overrides and immutability.
"""

import pytest
from pydantic import ValidationError

from rinkflow.config import DEFAULT_CONFIG, AnalyticsConfig, load_config


class TestDefaults:
    """Tests for built-in defaults."""

    def test_rink_geometry(self):
        """Default rink uses NHL feet."""
        assert DEFAULT_CONFIG.rink.goal_x == 89.0
        assert DEFAULT_CONFIG.rink.blue_line_x == 25.0
        assert DEFAULT_CONFIG.rink.period_seconds == 1200

    def test_thresholds(self):
        """Sequence and chemistry thresholds match documented values."""
        assert DEFAULT_CONFIG.sequences.lookback_events == 20
        assert DEFAULT_CONFIG.sequences.rush_seconds == 8
        assert DEFAULT_CONFIG.sequences.cycle_seconds == 15
        assert DEFAULT_CONFIG.chemistry.min_overlap_seconds == 5
        assert DEFAULT_CONFIG.evolution.min_shots == 3

    def test_league_zone_distribution_sums_to_100(self):
        """League zone shares are a full distribution."""
        assert sum(DEFAULT_CONFIG.league.zone_distribution.values()) == pytest.approx(100.0)

    def test_config_is_frozen(self):
        """Config sections cannot be mutated in place."""
        with pytest.raises(ValidationError):
            DEFAULT_CONFIG.rink.goal_x = 90.0


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_uses_defaults(self, tmp_path):
        """A missing file falls back to defaults."""
        config = load_config(tmp_path / "missing.yaml")
        assert config == DEFAULT_CONFIG

    def test_partial_override(self, tmp_path):
        """Keys left out of the file keep their defaults."""
        path = tmp_path / "analytics.yaml"
        path.write_text("sequences:\n  rush_seconds: 6\nchemistry:\n  min_overlap_seconds: 10\n")

        config = load_config(path)

        assert isinstance(config, AnalyticsConfig)
        assert config.sequences.rush_seconds == 6
        assert config.sequences.cycle_seconds == 15
        assert config.chemistry.min_overlap_seconds == 10
        assert config.rink == DEFAULT_CONFIG.rink

    def test_empty_file(self, tmp_path):
        """An empty YAML document is all defaults."""
        path = tmp_path / "analytics.yaml"
        path.write_text("")
        assert load_config(path) == DEFAULT_CONFIG

    def test_bundled_file_matches_defaults(self):
        """The shipped config/analytics.yaml restates the defaults."""
        from pathlib import Path

        bundled = Path(__file__).resolve().parents[1] / "config" / "analytics.yaml"
        assert load_config(bundled) == DEFAULT_CONFIG
