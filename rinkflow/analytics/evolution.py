"""
Behavioral Evolution Analytics

Detects meaningful shifts in shot-selection behaviour between a recent
window of games and a baseline (the window before it, or the rest of the
season).

Features:
- Window profiles built from decision quality metrics
- Percent-change detection with minor / moderate / major significance
- Overall trend (improving, declining, stable, mixed) with confidence
- Team-wide evolution across a roster
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Sequence

from loguru import logger

from rinkflow.analytics.decision_quality import compute_decision_quality_metrics
from rinkflow.config import DEFAULT_CONFIG, AnalyticsConfig, EvolutionConfig
from rinkflow.models.timeline import GameRecord


class WindowMode(str, Enum):
    """Baseline to compare the recent window against."""

    PREVIOUS = "previous"  # the window_size games before the recent window
    SEASON = "season"  # every game before the recent window


class Significance(str, Enum):
    MAJOR = "major"
    MODERATE = "moderate"
    MINOR = "minor"


class Trend(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"
    MIXED = "mixed"


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


SIGNIFICANCE_ORDER = {Significance.MAJOR: 0, Significance.MODERATE: 1, Significance.MINOR: 2}

METRIC_LABELS = {
    "high_danger_pct": "High-Danger Shot %",
    "avg_shot_distance": "Avg Shot Distance",
    "shooting_pct": "Shooting %",
    "rush_pct": "Rush Attack %",
    "cycle_pct": "Cycle Attack %",
    "shot_patience": "Shot Patience",
}

# True = higher is better, False = lower is better, None = style metric with no sign
HIGHER_IS_BETTER: dict[str, bool | None] = {
    "high_danger_pct": True,
    "avg_shot_distance": False,
    "shooting_pct": True,
    "rush_pct": None,
    "cycle_pct": None,
    "shot_patience": True,
}

COMPARED_METRICS = tuple(METRIC_LABELS)


@dataclass
class BehaviorProfile:
    """Shot-selection profile over a window of games."""

    games_played: int = 0
    total_shots: int = 0
    high_danger_pct: float = 0.0
    avg_shot_distance: float = 0.0
    shooting_pct: float = 0.0
    rush_pct: float = 0.0
    cycle_pct: float = 0.0
    shot_patience: float = 0.0


@dataclass
class BehaviorChange:
    metric: str
    metric_label: str
    previous_value: float
    current_value: float
    absolute_change: float
    change_percent: float
    direction: str  # up, down
    significance: Significance
    is_positive: bool | None  # None for style metrics
    interpretation: str


@dataclass
class BehavioralEvolution:
    team_id: int
    player_id: int | None
    window_size: int
    mode: WindowMode
    current_window_games: int
    previous_window_games: int
    current_profile: BehaviorProfile
    previous_profile: BehaviorProfile
    season_profile: BehaviorProfile
    significant_changes: list[BehaviorChange] = field(default_factory=list)
    overall_trend: Trend = Trend.STABLE
    trend_confidence: Confidence = Confidence.LOW
    summary: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class WindowSpan:
    start_date: str
    end_date: str
    games: int


@dataclass
class PlayerEvolution:
    player_id: int
    player_name: str
    changes: list[BehaviorChange]
    trend: Trend


@dataclass
class TeamEvolution:
    team_id: int
    current_window: WindowSpan
    previous_window: WindowSpan
    structural_changes: list[BehaviorChange]
    player_changes: list[PlayerEvolution]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def split_windows(
    games: Sequence[GameRecord],
    window_size: int,
    mode: WindowMode = WindowMode.PREVIOUS,
) -> tuple[list[GameRecord], list[GameRecord]]:
    """Return (current, previous) windows from chronologically ordered games."""
    total = len(games)
    current = list(games[max(0, total - window_size):])
    baseline_end = total - len(current)
    if mode == WindowMode.SEASON:
        previous = list(games[:baseline_end])
    else:
        previous = list(games[max(0, baseline_end - window_size):baseline_end])
    return current, previous


def build_profile(
    games: Sequence[GameRecord],
    team_id: int,
    player_id: int | None = None,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> BehaviorProfile:
    metrics = compute_decision_quality_metrics(games, team_id, player_id, config)
    return BehaviorProfile(
        games_played=len(games),
        total_shots=metrics.overall.total_shots,
        high_danger_pct=metrics.overall.high_danger_pct,
        avg_shot_distance=metrics.overall.avg_shot_distance,
        shooting_pct=metrics.overall.shooting_pct,
        rush_pct=metrics.attack_style.rush_pct,
        cycle_pct=metrics.attack_style.cycle_pct,
        shot_patience=metrics.indicators.shot_patience,
    )


def percent_change(
    previous: float,
    current: float,
    settings: EvolutionConfig = DEFAULT_CONFIG.evolution,
) -> float | None:
    """Capped percent change; None when both values are too small to compare."""
    floor = settings.meaningful_floor
    cap = settings.change_cap
    if abs(previous) < floor and abs(current) < floor:
        return None
    if abs(previous) < floor:
        if current > 0:
            return cap
        if current < 0:
            return -cap
        return 0.0
    change = (current - previous) / abs(previous) * 100
    return max(-cap, min(cap, change))


def classify_significance(
    change: float,
    settings: EvolutionConfig = DEFAULT_CONFIG.evolution,
) -> Significance | None:
    magnitude = abs(change)
    if magnitude >= settings.major_change:
        return Significance.MAJOR
    if magnitude >= settings.moderate_change:
        return Significance.MODERATE
    if magnitude >= settings.minor_change:
        return Significance.MINOR
    return None


def _format_value(metric: str, value: float) -> str:
    if metric == "avg_shot_distance":
        return f"{value:.1f} ft"
    if metric == "shot_patience":
        return f"{value:.0f}"
    return f"{value:.1f}%"


def compare_profiles(
    previous: BehaviorProfile,
    current: BehaviorProfile,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> list[BehaviorChange]:
    """
    Significant metric changes between two windows.

    Args:
        previous: Baseline window profile
        current: Recent window profile
        config: Analytics configuration

    Returns:
        Changes sorted by significance, then by size of change; empty when
        either window has too few shots
    """
    settings = config.evolution
    if previous.total_shots < settings.min_shots or current.total_shots < settings.min_shots:
        return []

    changes = []
    for metric in COMPARED_METRICS:
        previous_value = getattr(previous, metric)
        current_value = getattr(current, metric)
        change = percent_change(previous_value, current_value, settings)
        if change is None:
            continue
        significance = classify_significance(change, settings)
        if significance is None:
            continue

        direction = "up" if change > 0 else "down"
        higher_is_better = HIGHER_IS_BETTER[metric]
        if higher_is_better is None:
            is_positive = None
            quality = "style shift"
        else:
            is_positive = (direction == "up") == higher_is_better
            quality = "positive trend" if is_positive else "concerning trend"

        label = METRIC_LABELS[metric]
        verb = "increased" if direction == "up" else "decreased"
        changes.append(
            BehaviorChange(
                metric=metric,
                metric_label=label,
                previous_value=previous_value,
                current_value=current_value,
                absolute_change=current_value - previous_value,
                change_percent=change,
                direction=direction,
                significance=significance,
                is_positive=is_positive,
                interpretation=(
                    f"{label} {verb} from {_format_value(metric, previous_value)}"
                    f" to {_format_value(metric, current_value)} ({quality})"
                ),
            )
        )

    changes.sort(key=lambda c: (SIGNIFICANCE_ORDER[c.significance], -abs(c.change_percent)))
    return changes


def determine_trend(changes: Sequence[BehaviorChange]) -> Trend:
    """Net significance-weighted score: major counts 2, moderate 1, minor 0."""
    score = 0
    has_positive = False
    has_negative = False
    for change in changes:
        if change.significance == Significance.MINOR or change.is_positive is None:
            continue
        weight = 2 if change.significance == Significance.MAJOR else 1
        if change.is_positive:
            has_positive = True
            score += weight
        else:
            has_negative = True
            score -= weight

    if has_positive and has_negative and abs(score) < 2:
        return Trend.MIXED
    if score >= 2:
        return Trend.IMPROVING
    if score <= -2:
        return Trend.DECLINING
    return Trend.STABLE


def determine_confidence(
    current: BehaviorProfile,
    previous: BehaviorProfile,
    settings: EvolutionConfig = DEFAULT_CONFIG.evolution,
) -> Confidence:
    fewest_games = min(current.games_played, previous.games_played)
    if fewest_games < settings.low_confidence_games:
        return Confidence.LOW
    if fewest_games < settings.medium_confidence_games:
        return Confidence.MEDIUM
    return Confidence.HIGH


def summarize(trend: Trend, changes: Sequence[BehaviorChange], confidence: Confidence) -> str:
    major = [change for change in changes if change.significance == Significance.MAJOR]
    if confidence == Confidence.LOW:
        return "Limited data: need more games for reliable trend analysis."
    if not changes or trend == Trend.STABLE:
        return "No significant behavioral changes detected between windows."
    if trend == Trend.MIXED:
        return f"Mixed signals: {len(major)} major change(s) across different metrics."

    trend_text = "showing improvement" if trend == Trend.IMPROVING else "showing decline"
    if major:
        labels = ", ".join(change.metric_label for change in major)
        return f"Overall {trend_text} with {len(major)} major change(s): {labels}."
    return f"Overall {trend_text} based on moderate changes across multiple metrics."


def compute_behavioral_evolution(
    games: Sequence[GameRecord],
    team_id: int,
    player_id: int | None = None,
    window_size: int = 10,
    mode: WindowMode = WindowMode.PREVIOUS,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> BehavioralEvolution:
    """
    Compare the most recent window of games against a baseline.

    Args:
        games: Chronologically ordered game records
        team_id: Team ID
        player_id: Track one player instead of the team (optional)
        window_size: Games in the recent window
        mode: Baseline selection (previous window or rest of season)
        config: Analytics configuration

    Returns:
        BehavioralEvolution
    """
    current_games, previous_games = split_windows(games, window_size, mode)
    current = build_profile(current_games, team_id, player_id, config)
    previous = build_profile(previous_games, team_id, player_id, config)
    season = build_profile(games, team_id, player_id, config)

    changes = compare_profiles(previous, current, config)
    trend = determine_trend(changes)
    confidence = determine_confidence(current, previous, config.evolution)

    logger.debug(
        f"Evolution for team {team_id} player {player_id}: {len(changes)} changes, trend {trend.value}"
    )

    return BehavioralEvolution(
        team_id=team_id,
        player_id=player_id,
        window_size=window_size,
        mode=mode,
        current_window_games=len(current_games),
        previous_window_games=len(previous_games),
        current_profile=current,
        previous_profile=previous,
        season_profile=season,
        significant_changes=changes,
        overall_trend=trend,
        trend_confidence=confidence,
        summary=summarize(trend, changes, confidence),
    )


def _span(games: Sequence[GameRecord]) -> WindowSpan:
    if not games:
        return WindowSpan(start_date="Unknown", end_date="Unknown", games=0)
    return WindowSpan(
        start_date=games[0].game_date or "Unknown",
        end_date=games[-1].game_date or "Unknown",
        games=len(games),
    )


def compute_team_evolution(
    games: Sequence[GameRecord],
    team_id: int,
    player_ids: Sequence[int],
    player_names: dict[int, str] | None = None,
    window_size: int = 10,
    mode: WindowMode = WindowMode.PREVIOUS,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> TeamEvolution:
    """Team-level structural changes plus per-player changes, busiest players first."""
    player_names = player_names or {}
    current_games, previous_games = split_windows(games, window_size, mode)

    structural = compare_profiles(
        build_profile(previous_games, team_id, config=config),
        build_profile(current_games, team_id, config=config),
        config,
    )

    players = []
    for player_id in player_ids:
        changes = compare_profiles(
            build_profile(previous_games, team_id, player_id, config),
            build_profile(current_games, team_id, player_id, config),
            config,
        )
        players.append(
            PlayerEvolution(
                player_id=player_id,
                player_name=player_names.get(player_id, f"Player {player_id}"),
                changes=changes,
                trend=determine_trend(changes),
            )
        )
    players.sort(
        key=lambda p: sum(1 for c in p.changes if c.significance != Significance.MINOR),
        reverse=True,
    )

    return TeamEvolution(
        team_id=team_id,
        current_window=_span(current_games),
        previous_window=_span(previous_games),
        structural_changes=structural,
        player_changes=players,
    )


def players_with_major_changes(evolution: TeamEvolution) -> list[PlayerEvolution]:
    """Players with at least one major change, keeping only the major ones."""
    flagged = []
    for player in evolution.player_changes:
        major = [c for c in player.changes if c.significance == Significance.MAJOR]
        if major:
            flagged.append(
                PlayerEvolution(
                    player_id=player.player_id,
                    player_name=player.player_name,
                    changes=major,
                    trend=player.trend,
                )
            )
    return flagged
