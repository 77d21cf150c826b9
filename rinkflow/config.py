"""
Analytics Configuration

Tunable thresholds and league baselines shared by every processor and aggregator.

All sections are frozen pydantic models so a single AnalyticsConfig instance can be
handed to every analysis call without risk of one caller mutating another's view.
Overrides come from YAML (config/analytics.yaml by default).
"""

from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field


class _Section(BaseModel):
    """Base for immutable config sections."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class RinkConfig(_Section):
    """Rink geometry in NHL feet (center ice at the origin)."""

    goal_x: float = 89.0
    blue_line_x: float = 25.0
    deep_zone_x: float = 75.0  # "last defensive touch" line for attack style
    min_x: float = -100.0
    max_x: float = 100.0
    min_y: float = -42.5
    max_y: float = 42.5
    period_seconds: int = 1200


class ShotQualityConfig(_Section):
    """Shot danger and late-game thresholds."""

    high_danger_distance: float = 25.0
    high_danger_lateral: float = 20.0
    late_game_period: int = 3
    late_game_seconds: int = 300


class SequenceConfig(_Section):
    """Attack sequence reconstruction and archetype thresholds."""

    lookback_events: int = 20
    rebound_lookback_events: int = 5
    rebound_window_seconds: int = 3
    rush_seconds: int = 8
    cycle_seconds: int = 15
    quick_transition_seconds: int = 5
    oddman_max_waypoints: int = 3
    breakaway_distance: float = 10.0
    net_front_distance: float = 15.0
    point_shot_x: float = 60.0
    cycle_low_y: float = 15.0
    default_shot_distance: float = 30.0
    fingerprint_cycle_min_seconds: int = 10


class ZoneEntryConfig(_Section):
    """Zone entry classification and outcome windows."""

    quick_shot_seconds: int = 3
    stall_seconds: int = 5
    sustain_lookahead_events: int = 4
    exit_lookahead_events: int = 3
    follow_up_shot_seconds: int = 5
    follow_up_lookahead_events: int = 9


class ChemistryConfig(_Section):
    """Pair chemistry weights and sample thresholds."""

    min_overlap_seconds: int = 5
    offensive_weight: float = 0.4
    support_weight: float = 0.3
    defensive_weight: float = 0.3
    shots_per_minute_scale: float = 10.0
    against_per_minute_scale: float = 15.0
    matrix_min_sample: int = 5
    extremes_min_sample: int = 10


class EvolutionConfig(_Section):
    """Behavioural change detection thresholds (percent change)."""

    min_shots: int = 3
    minor_change: float = 10.0
    moderate_change: float = 15.0
    major_change: float = 25.0
    meaningful_floor: float = 0.1
    change_cap: float = 100.0
    low_confidence_games: int = 5
    medium_confidence_games: int = 10


class FingerprintBaseline(_Section):
    """League-average play-style fingerprint (percent / 0-100 scores)."""

    rush_tendency: float = 25.0
    cycle_tendency: float = 30.0
    point_focus: float = 20.0
    net_front_presence: float = 15.0
    transition_speed: float = 50.0
    entry_aggression: float = 55.0


class LeagueAverages(_Section):
    """League reference values used for deviation and profile scoring."""

    fingerprint: FingerprintBaseline = Field(default_factory=FingerprintBaseline)
    zone_distribution: dict[str, float] = Field(
        default_factory=lambda: {
            "high-slot": 22.0,
            "low-slot": 18.0,
            "point": 25.0,
            "left-boards": 15.0,
            "right-boards": 15.0,
            "behind-net": 5.0,
        }
    )
    high_danger_pct: float = 28.0
    avg_shot_distance: float = 32.0
    avg_time_to_shot: float = 7.5
    controlled_entry_pct: float = 52.0
    shooting_pct: float = 10.5
    shot_efficiency: float = 5.0


class AnalyticsConfig(_Section):
    """Complete analytics configuration."""

    rink: RinkConfig = Field(default_factory=RinkConfig)
    shot_quality: ShotQualityConfig = Field(default_factory=ShotQualityConfig)
    sequences: SequenceConfig = Field(default_factory=SequenceConfig)
    zone_entries: ZoneEntryConfig = Field(default_factory=ZoneEntryConfig)
    chemistry: ChemistryConfig = Field(default_factory=ChemistryConfig)
    evolution: EvolutionConfig = Field(default_factory=EvolutionConfig)
    league: LeagueAverages = Field(default_factory=LeagueAverages)


DEFAULT_CONFIG = AnalyticsConfig()


def load_config(config_path: str | Path | None = None) -> AnalyticsConfig:
    """
    Load analytics configuration from a YAML file.

    Sections and keys missing from the file keep their defaults.

    Args:
        config_path: Path to YAML file (defaults to config/analytics.yaml)

    Returns:
        Frozen AnalyticsConfig
    """
    if config_path is None:
        config_path = Path("config/analytics.yaml")
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        logger.warning(f"Analytics config not found at {config_path}, using defaults")
        return DEFAULT_CONFIG

    with open(config_path) as f:
        raw: dict[str, Any] = yaml.safe_load(f) or {}

    config = AnalyticsConfig.model_validate(raw)
    logger.debug(f"Loaded analytics config from {config_path}")
    return config
