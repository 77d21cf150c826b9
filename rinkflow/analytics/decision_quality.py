"""
Decision Quality Analytics

Shot-selection quality split by game state, late-game pressure and attack style.

Features:
- Overall, tied / leading / trailing and late-game shot metrics
- Rush vs cycle inference from time since the last deep-zone touch
- Decision indicators (shot patience, situational awareness, late-game poise)
- Window-to-window comparison and range validation
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Iterable, Sequence

from loguru import logger

from rinkflow.config import DEFAULT_CONFIG, AnalyticsConfig
from rinkflow.models.timeline import GameRecord
from rinkflow.processors.game_state import GameState
from rinkflow.processors.rink import clamp, parse_clock, round_half_up
from rinkflow.processors.shot_context import ShotWithContext, enrich_shots_with_context


class AttackStyle(str, Enum):
    RUSH = "rush"
    CYCLE = "cycle"
    OTHER = "other"


@dataclass
class ShotMetrics:
    """Shot-selection metrics for one partition of shots."""

    total_shots: int = 0
    goals: int = 0
    high_danger_shots: int = 0
    high_danger_pct: float = 0.0
    avg_shot_distance: float = 0.0
    shooting_pct: float = 0.0

    @classmethod
    def from_shots(cls, shots: Sequence[ShotWithContext]) -> "ShotMetrics":
        if not shots:
            return cls()
        total = len(shots)
        goals = sum(1 for shot in shots if shot.is_goal)
        high_danger = sum(1 for shot in shots if shot.is_high_danger)
        distances = [shot.distance_from_goal for shot in shots if shot.distance_from_goal is not None]
        return cls(
            total_shots=total,
            goals=goals,
            high_danger_shots=high_danger,
            high_danger_pct=high_danger / total * 100,
            avg_shot_distance=sum(distances) / len(distances) if distances else 0.0,
            shooting_pct=goals / total * 100,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_shots": self.total_shots,
            "goals": self.goals,
            "high_danger_shots": self.high_danger_shots,
            "high_danger_pct": round(self.high_danger_pct, 1),
            "avg_shot_distance": round(self.avg_shot_distance, 1),
            "shooting_pct": round(self.shooting_pct, 1),
        }


@dataclass
class AttackStyleBreakdown:
    rush_shots: int = 0
    cycle_shots: int = 0
    other_shots: int = 0

    @property
    def total(self) -> int:
        return self.rush_shots + self.cycle_shots + self.other_shots

    @property
    def rush_pct(self) -> float:
        return self.rush_shots / self.total * 100 if self.total else 0.0

    @property
    def cycle_pct(self) -> float:
        return self.cycle_shots / self.total * 100 if self.total else 0.0

    @property
    def other_pct(self) -> float:
        return self.other_shots / self.total * 100 if self.total else 0.0

    def record(self, style: AttackStyle) -> None:
        if style == AttackStyle.RUSH:
            self.rush_shots += 1
        elif style == AttackStyle.CYCLE:
            self.cycle_shots += 1
        else:
            self.other_shots += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "rush_shots": self.rush_shots,
            "cycle_shots": self.cycle_shots,
            "other_shots": self.other_shots,
            "rush_pct": round(self.rush_pct, 1),
            "cycle_pct": round(self.cycle_pct, 1),
            "other_pct": round(self.other_pct, 1),
        }


@dataclass
class DecisionIndicators:
    shot_patience: int = 0  # 0-100, higher = more selective
    situational_awareness: int = 50  # 0-100, more aggressive when trailing
    late_game_poise: int = 50  # 0-100, holds shot quality late

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DecisionQualityMetrics:
    """Shot-selection quality for a team or one player over a set of games."""

    team_id: int
    player_id: int | None = None
    games_analyzed: int = 0
    overall: ShotMetrics = field(default_factory=ShotMetrics)
    by_game_state: dict[GameState, ShotMetrics] = field(
        default_factory=lambda: {state: ShotMetrics() for state in GameState}
    )
    late_game: ShotMetrics = field(default_factory=ShotMetrics)
    attack_style: AttackStyleBreakdown = field(default_factory=AttackStyleBreakdown)
    indicators: DecisionIndicators = field(default_factory=DecisionIndicators)

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "player_id": self.player_id,
            "games_analyzed": self.games_analyzed,
            "overall": self.overall.to_dict(),
            "by_game_state": {
                state.value: metrics.to_dict() for state, metrics in self.by_game_state.items()
            },
            "late_game": self.late_game.to_dict(),
            "attack_style": self.attack_style.to_dict(),
            "indicators": self.indicators.to_dict(),
        }


@dataclass
class DecisionComparison:
    high_danger_pct_change: float
    avg_distance_change: float
    rush_pct_change: float
    overall_trend: str  # improving, declining, stable

    def to_dict(self) -> dict[str, Any]:
        return {
            "high_danger_pct_change": round(self.high_danger_pct_change, 1),
            "avg_distance_change": round(self.avg_distance_change, 1),
            "rush_pct_change": round(self.rush_pct_change, 1),
            "overall_trend": self.overall_trend,
        }


@dataclass
class MetricsValidation:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def classify_attack_style(
    shot: ShotWithContext,
    game: GameRecord,
    team_id: int,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> AttackStyle:
    """
    Infer rush vs cycle from the time since the team's last deep-zone touch.

    Walks the shot's period in event order up to the shot clock and keeps the
    last own event beyond the deep-zone line (either end). Events sharing the
    shot clock count even when listed after the shot; the walk stops at the
    first event past the shot clock.
    """
    shot_seconds = parse_clock(shot.time_in_period)
    deep_line = config.rink.deep_zone_x
    last_touch: int | None = None
    for event in game.events:
        if event.period != shot.period:
            continue
        event_seconds = parse_clock(event.time_in_period)
        if event_seconds > shot_seconds:
            break
        if event.team_id == team_id and event.x_coord is not None and abs(event.x_coord) > deep_line:
            last_touch = event_seconds

    if last_touch is None:
        return AttackStyle.OTHER
    since_touch = shot_seconds - last_touch
    if since_touch <= config.sequences.rush_seconds:
        return AttackStyle.RUSH
    if since_touch >= config.sequences.cycle_seconds:
        return AttackStyle.CYCLE
    return AttackStyle.OTHER


def calculate_decision_indicators(
    overall: ShotMetrics,
    by_game_state: dict[GameState, ShotMetrics],
    late_game: ShotMetrics,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> DecisionIndicators:
    """Turn partition metrics into 0-100 indicators (50 = neutral adjustment)."""
    league_high_danger = config.league.high_danger_pct
    patience = clamp(overall.high_danger_pct / league_high_danger * 50)
    awareness = clamp(
        50
        + by_game_state[GameState.TRAILING].high_danger_pct
        - by_game_state[GameState.LEADING].high_danger_pct
    )
    poise = clamp(50 + late_game.high_danger_pct - overall.high_danger_pct)
    return DecisionIndicators(
        shot_patience=round_half_up(patience),
        situational_awareness=round_half_up(awareness),
        late_game_poise=round_half_up(poise),
    )


def compute_decision_quality_metrics(
    games: Iterable[GameRecord],
    team_id: int,
    player_id: int | None = None,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> DecisionQualityMetrics:
    """
    Compute decision quality metrics across games.

    Args:
        games: Game records
        team_id: Team to analyze
        player_id: Restrict to one shooter (optional)
        config: Analytics configuration

    Returns:
        DecisionQualityMetrics
    """
    shots: list[ShotWithContext] = []
    styles = AttackStyleBreakdown()
    games_analyzed = 0

    for game in games:
        games_analyzed += 1
        game_shots = enrich_shots_with_context(game, team_id, player_id, config)
        for shot in game_shots:
            styles.record(classify_attack_style(shot, game, team_id, config))
        shots.extend(game_shots)

    by_game_state = {
        state: ShotMetrics.from_shots([shot for shot in shots if shot.game_state == state])
        for state in GameState
    }
    overall = ShotMetrics.from_shots(shots)
    late_game = ShotMetrics.from_shots([shot for shot in shots if shot.is_late_game])

    logger.debug(f"Decision metrics for team {team_id}: {len(shots)} shots over {games_analyzed} games")

    return DecisionQualityMetrics(
        team_id=team_id,
        player_id=player_id,
        games_analyzed=games_analyzed,
        overall=overall,
        by_game_state=by_game_state,
        late_game=late_game,
        attack_style=styles,
        indicators=calculate_decision_indicators(overall, by_game_state, late_game, config),
    )


def compare_decision_metrics(
    current: DecisionQualityMetrics,
    previous: DecisionQualityMetrics,
    threshold: float = 2.0,
) -> DecisionComparison:
    """Compare two windows; more high-danger shots and shorter distance count as improvement."""
    high_danger_change = current.overall.high_danger_pct - previous.overall.high_danger_pct
    distance_change = current.overall.avg_shot_distance - previous.overall.avg_shot_distance
    rush_change = current.attack_style.rush_pct - previous.attack_style.rush_pct

    score = 0
    if high_danger_change > threshold:
        score += 1
    elif high_danger_change < -threshold:
        score -= 1
    if distance_change < -threshold:
        score += 1
    elif distance_change > threshold:
        score -= 1

    if score > 0:
        trend = "improving"
    elif score < 0:
        trend = "declining"
    else:
        trend = "stable"

    return DecisionComparison(
        high_danger_pct_change=high_danger_change,
        avg_distance_change=distance_change,
        rush_pct_change=rush_change,
        overall_trend=trend,
    )


def validate_decision_metrics(metrics: DecisionQualityMetrics) -> MetricsValidation:
    """Range-check percentages and indicators; flag implausible but legal values."""
    errors = []
    warnings = []

    percentages = {
        "high_danger_pct": metrics.overall.high_danger_pct,
        "shooting_pct": metrics.overall.shooting_pct,
        "rush_pct": metrics.attack_style.rush_pct,
        "cycle_pct": metrics.attack_style.cycle_pct,
    }
    for name, value in percentages.items():
        if value < 0 or value > 100:
            errors.append(f"{name} ({value:.1f}%) is outside valid range 0-100%")

    distance = metrics.overall.avg_shot_distance
    if distance < 0 or distance > 200:
        errors.append(f"avg_shot_distance ({distance:.1f}ft) is outside valid range 0-200ft")

    for name, value in metrics.indicators.to_dict().items():
        if value < 0 or value > 100:
            errors.append(f"{name} ({value}) is outside valid range 0-100")

    if metrics.overall.shooting_pct > 25:
        warnings.append(
            f"Shooting percentage ({metrics.overall.shooting_pct:.1f}%) is unusually high (typical: 5-15%)"
        )
    if metrics.overall.high_danger_pct > 60:
        warnings.append(
            f"High-danger shot percentage ({metrics.overall.high_danger_pct:.1f}%) is unusually high"
            " (typical: 20-40%)"
        )

    for warning in warnings:
        logger.warning(warning)

    return MetricsValidation(is_valid=not errors, errors=errors, warnings=warnings)
