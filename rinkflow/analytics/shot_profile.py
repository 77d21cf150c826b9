"""
Shot Profile Analytics

Shot-location driven attack profile built from direct measurements rather
than archetype shares.

Features:
- Shot location extraction with danger and distance
- Half-rink shot density map (5x8 grid)
- Shot zone distribution vs league averages
- Direct attack metrics and a 4-axis attack profile
- Per-game metrics, rolling windows and inflection point detection
"""

import math
from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Iterable, Sequence

import numpy as np

from rinkflow.config import DEFAULT_CONFIG, AnalyticsConfig
from rinkflow.models.timeline import GameRecord
from rinkflow.processors.attack_sequences import (
    AttackSequence,
    SequenceResult,
    build_attack_sequences,
    classify_shot_result,
)
from rinkflow.processors.rink import clamp, distance_from_goal, is_high_danger, round_half_up
from rinkflow.processors.zone_transitions import EntryType, ZoneEntry

DENSITY_GRID_WIDTH = 5
DENSITY_GRID_HEIGHT = 8


class ShotZone(str, Enum):
    HIGH_SLOT = "high-slot"
    LOW_SLOT = "low-slot"
    POINT = "point"
    LEFT_BOARDS = "left-boards"
    RIGHT_BOARDS = "right-boards"
    BEHIND_NET = "behind-net"


class AttackProfileStyle(str, Enum):
    SPEED = "Speed"
    CYCLE = "Cycle"
    PERIMETER = "Perimeter"
    SLOT_FOCUSED = "Slot-Focused"
    BALANCED = "Balanced"


@dataclass(frozen=True)
class ShotLocation:
    """A located shot attempt."""

    game_id: int
    game_date: str
    period: int
    time_in_period: str
    player_id: int | None
    shot_type: str | None
    x: float
    y: float
    result: SequenceResult
    distance_from_goal: float
    is_high_danger: bool


@dataclass
class ShotDensityCell:
    grid_x: int
    grid_y: int
    center_x: float
    center_y: float
    shot_count: int = 0
    goal_count: int = 0
    shot_pct: float = 0.0
    density: float = 0.0  # 0-1, relative to the busiest cell


@dataclass
class ShotDensityMap:
    cells: list[ShotDensityCell]
    grid_width: int
    grid_height: int
    total_shots: int
    max_density: int

    def to_numpy(self, metric: str = "density") -> np.ndarray:
        """Cell metric as a (grid_height, grid_width) array."""
        grid = np.zeros((self.grid_height, self.grid_width))
        for cell in self.cells:
            grid[cell.grid_y, cell.grid_x] = getattr(cell, metric)
        return grid


@dataclass
class ShotZoneDistribution:
    zone: ShotZone
    shot_count: int
    goal_count: int
    percentage: float
    league_avg_pct: float
    deviation: float


@dataclass
class AttackMetrics:
    high_danger_shot_pct: float
    avg_shot_distance: float
    avg_time_to_shot: float
    controlled_entry_pct: float
    shooting_pct: float  # goals / shots on goal
    shot_efficiency: float  # goals / all attempts
    conversion_rate: float  # goals / entries
    vs_league_avg: dict[str, float] = field(default_factory=dict)


@dataclass
class AttackProfile:
    """Four 0-100 axes where 50 is league average."""

    team_id: int
    player_id: int | None
    sample_games: int
    danger_zone_focus: int
    attack_speed: int
    entry_control: int
    shooting_depth: int
    primary_style: AttackProfileStyle
    style_strength: int


@dataclass
class GameMetrics:
    game_id: int
    game_date: str
    opponent_team_id: int
    is_home: bool
    total_shots: int
    goals: int
    high_danger_shots: int
    avg_shot_distance: float
    avg_time_to_shot: float
    controlled_entries: int
    total_entries: int
    high_danger_pct: float
    controlled_entry_pct: float
    shooting_pct: float


@dataclass
class TrendWindow:
    start_date: str
    end_date: str
    game_count: int
    high_danger_pct: float
    avg_time_to_shot: float
    controlled_entry_pct: float
    avg_shot_distance: float
    shooting_pct: float


TREND_METRICS = (
    "high_danger_pct",
    "avg_time_to_shot",
    "controlled_entry_pct",
    "avg_shot_distance",
    "shooting_pct",
)


@dataclass
class InflectionPoint:
    date: str
    metric: str
    change: float  # percent
    direction: str  # up, down


@dataclass
class SeasonTrend:
    team_id: int
    season: str
    game_metrics: list[GameMetrics]
    windows: list[TrendWindow]
    inflection_points: list[InflectionPoint]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ShotProfileReport:
    """Shot-location attack analytics for a team or player."""

    shots: list[ShotLocation]
    density_map: ShotDensityMap
    zone_distribution: list[ShotZoneDistribution]
    metrics: AttackMetrics
    profile: AttackProfile
    total_shots: int
    total_goals: int
    games_analyzed: int

    def to_dict(self, include_shots: bool = False) -> dict[str, Any]:
        data = asdict(self)
        if not include_shots:
            data.pop("shots")
        return data


def classify_shot_zone(x: float, y: float) -> ShotZone:
    """Shot zone from coordinates normalized to the attacked end."""
    abs_x = abs(x)
    abs_y = abs(y)
    if abs_x > 89:
        return ShotZone.BEHIND_NET
    if abs_x < 55:
        return ShotZone.POINT
    if abs_y < 15:
        return ShotZone.HIGH_SLOT if abs_x >= 75 else ShotZone.LOW_SLOT
    return ShotZone.LEFT_BOARDS if y > 0 else ShotZone.RIGHT_BOARDS


def extract_shot_locations(
    games: Iterable[GameRecord],
    team_id: int,
    player_id: int | None = None,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> list[ShotLocation]:
    """Located shots for a team or shooter; shots without coordinates are skipped."""
    locations = []
    for game in games:
        for shot in game.team_shots(team_id, player_id):
            if not shot.has_coordinates:
                continue
            locations.append(
                ShotLocation(
                    game_id=game.game_id,
                    game_date=game.game_date,
                    period=shot.period,
                    time_in_period=shot.time_in_period,
                    player_id=shot.shooting_player_id,
                    shot_type=shot.shot_type,
                    x=shot.x_coord,
                    y=shot.y_coord,
                    result=classify_shot_result(shot.result),
                    distance_from_goal=distance_from_goal(shot.x_coord, shot.y_coord, config.rink),
                    is_high_danger=is_high_danger(
                        shot.x_coord, shot.y_coord, config.shot_quality, config.rink
                    ),
                )
            )
    return locations


def compute_shot_density_map(shots: Sequence[ShotLocation]) -> ShotDensityMap:
    """
    Bin shots into a half-rink grid.

    Shots in the negative half are mirrored through center ice so both ends
    share one attacking frame.
    """
    cell_width = 100 / DENSITY_GRID_WIDTH
    cell_height = 85 / DENSITY_GRID_HEIGHT

    counts = np.zeros((DENSITY_GRID_WIDTH, DENSITY_GRID_HEIGHT), dtype=int)
    goals = np.zeros((DENSITY_GRID_WIDTH, DENSITY_GRID_HEIGHT), dtype=int)
    for shot in shots:
        norm_x = abs(shot.x)
        norm_y = -shot.y if shot.x < 0 else shot.y
        grid_x = min(DENSITY_GRID_WIDTH - 1, max(0, math.floor(norm_x / cell_width)))
        grid_y = min(DENSITY_GRID_HEIGHT - 1, max(0, math.floor((norm_y + 42.5) / cell_height)))
        counts[grid_x, grid_y] += 1
        if shot.result == SequenceResult.GOAL:
            goals[grid_x, grid_y] += 1

    max_density = max(1, int(counts.max()))
    cells = []
    for grid_x in range(DENSITY_GRID_WIDTH):
        for grid_y in range(DENSITY_GRID_HEIGHT):
            shot_count = int(counts[grid_x, grid_y])
            goal_count = int(goals[grid_x, grid_y])
            cells.append(
                ShotDensityCell(
                    grid_x=grid_x,
                    grid_y=grid_y,
                    center_x=grid_x * cell_width + cell_width / 2,
                    center_y=-42.5 + (grid_y + 0.5) * cell_height,
                    shot_count=shot_count,
                    goal_count=goal_count,
                    shot_pct=goal_count / shot_count * 100 if shot_count else 0.0,
                    density=shot_count / max_density,
                )
            )

    return ShotDensityMap(
        cells=cells,
        grid_width=DENSITY_GRID_WIDTH,
        grid_height=DENSITY_GRID_HEIGHT,
        total_shots=len(shots),
        max_density=max_density,
    )


def compute_zone_distribution(
    shots: Sequence[ShotLocation],
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> list[ShotZoneDistribution]:
    """Share of shots per zone; percentages sum to 100 unless there are no shots."""
    counts = {zone: [0, 0] for zone in ShotZone}
    for shot in shots:
        zone = classify_shot_zone(shot.x, shot.y)
        counts[zone][0] += 1
        if shot.result == SequenceResult.GOAL:
            counts[zone][1] += 1

    total = len(shots) or 1
    league = config.league.zone_distribution
    distribution = []
    for zone in ShotZone:
        shot_count, goal_count = counts[zone]
        percentage = shot_count / total * 100
        league_pct = league.get(zone.value, 0.0)
        distribution.append(
            ShotZoneDistribution(
                zone=zone,
                shot_count=shot_count,
                goal_count=goal_count,
                percentage=percentage,
                league_avg_pct=league_pct,
                deviation=percentage - league_pct,
            )
        )
    return distribution


def calculate_attack_metrics(
    shots: Sequence[ShotLocation],
    sequences: Sequence[AttackSequence],
    zone_entries: Sequence[ZoneEntry],
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> AttackMetrics:
    """
    Direct attack metrics from shots, sequences and entries.

    Args:
        shots: Located shots
        sequences: Attack sequences (timing)
        zone_entries: Zone entries (entry control)
        config: Analytics configuration

    Returns:
        AttackMetrics with deltas against league averages
    """
    league = config.league
    total_shots = len(shots) or 1
    goals = sum(1 for shot in shots if shot.result == SequenceResult.GOAL)
    high_danger = sum(1 for shot in shots if shot.is_high_danger)
    on_goal = (
        sum(1 for shot in shots if shot.result in (SequenceResult.GOAL, SequenceResult.SAVE)) or 1
    )

    avg_distance = (
        sum(shot.distance_from_goal for shot in shots) / total_shots
        if shots
        else config.sequences.default_shot_distance
    )
    avg_time = (
        sum(seq.duration_seconds for seq in sequences) / len(sequences)
        if sequences
        else league.avg_time_to_shot
    )
    controlled = sum(1 for entry in zone_entries if entry.entry_type == EntryType.CONTROLLED)
    total_entries = len(zone_entries) or 1

    metrics = AttackMetrics(
        high_danger_shot_pct=high_danger / total_shots * 100,
        avg_shot_distance=avg_distance,
        avg_time_to_shot=avg_time,
        controlled_entry_pct=controlled / total_entries * 100,
        shooting_pct=goals / on_goal * 100,
        shot_efficiency=goals / total_shots * 100,
        conversion_rate=goals / total_entries * 100,
    )
    metrics.vs_league_avg = {
        "high_danger_shot_pct": metrics.high_danger_shot_pct - league.high_danger_pct,
        "avg_shot_distance": metrics.avg_shot_distance - league.avg_shot_distance,
        "avg_time_to_shot": metrics.avg_time_to_shot - league.avg_time_to_shot,
        "controlled_entry_pct": metrics.controlled_entry_pct - league.controlled_entry_pct,
        "shooting_pct": metrics.shooting_pct - league.shooting_pct,
        "shot_efficiency": metrics.shot_efficiency - league.shot_efficiency,
    }
    return metrics


def calculate_attack_profile(
    metrics: AttackMetrics,
    team_id: int,
    player_id: int | None = None,
    sample_games: int = 0,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> AttackProfile:
    """Scale metrics onto four axes and name the dominant tendency."""
    league = config.league
    danger = clamp(50 + (metrics.high_danger_shot_pct - league.high_danger_pct) * 2)
    speed = clamp(50 - (metrics.avg_time_to_shot - league.avg_time_to_shot) * 5)
    entry = clamp(50 + (metrics.controlled_entry_pct - league.controlled_entry_pct) * 1.5)
    depth = clamp(50 - (metrics.avg_shot_distance - league.avg_shot_distance) * 2)

    axes = [
        (AttackProfileStyle.SPEED, speed),
        (AttackProfileStyle.CYCLE, 100 - speed),
        (AttackProfileStyle.PERIMETER, 100 - depth),
        (AttackProfileStyle.SLOT_FOCUSED, danger),
    ]
    axes.sort(key=lambda axis: axis[1], reverse=True)
    strength = min(100, round_half_up((axes[0][1] - axes[1][1]) / 2 + 30))

    return AttackProfile(
        team_id=team_id,
        player_id=player_id,
        sample_games=sample_games,
        danger_zone_focus=round_half_up(danger),
        attack_speed=round_half_up(speed),
        entry_control=round_half_up(entry),
        shooting_depth=round_half_up(depth),
        primary_style=axes[0][0] if strength > 40 else AttackProfileStyle.BALANCED,
        style_strength=strength,
    )


def calculate_game_metrics(
    game: GameRecord,
    team_id: int,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> GameMetrics:
    """Single-game shot and entry metrics for trend building."""
    shots = extract_shot_locations([game], team_id, config=config)
    sequences = build_attack_sequences(game, team_id, config=config)

    with_entry = [seq for seq in sequences if seq.zone_entry is not None]
    controlled = sum(1 for seq in with_entry if seq.zone_entry.entry_type == EntryType.CONTROLLED)
    total_shots = len(shots) or 1
    goals = sum(1 for shot in shots if shot.result == SequenceResult.GOAL)
    high_danger = sum(1 for shot in shots if shot.is_high_danger)

    return GameMetrics(
        game_id=game.game_id,
        game_date=game.game_date,
        opponent_team_id=game.opponent_of(team_id),
        is_home=game.is_home(team_id),
        total_shots=len(shots),
        goals=goals,
        high_danger_shots=high_danger,
        avg_shot_distance=(
            sum(shot.distance_from_goal for shot in shots) / total_shots
            if shots
            else config.sequences.default_shot_distance
        ),
        avg_time_to_shot=(
            sum(seq.duration_seconds for seq in sequences) / len(sequences)
            if sequences
            else config.league.avg_time_to_shot
        ),
        controlled_entries=controlled,
        total_entries=len(with_entry),
        high_danger_pct=high_danger / total_shots * 100,
        controlled_entry_pct=controlled / len(with_entry) * 100 if with_entry else 50.0,
        shooting_pct=goals / total_shots * 100,
    )


def calculate_rolling_averages(
    game_metrics: Sequence[GameMetrics],
    window_size: int = 5,
) -> list[TrendWindow]:
    """Trailing windows of window_size games; empty when there are fewer games."""
    if len(game_metrics) < window_size:
        return []

    windows = []
    for end in range(window_size - 1, len(game_metrics)):
        window = game_metrics[end - window_size + 1 : end + 1]
        averages = {
            metric: sum(getattr(game, metric) for game in window) / window_size
            for metric in TREND_METRICS
        }
        windows.append(
            TrendWindow(
                start_date=window[0].game_date,
                end_date=window[-1].game_date,
                game_count=window_size,
                **averages,
            )
        )
    return windows


def detect_inflection_points(
    windows: Sequence[TrendWindow],
    threshold: float = 0.15,
) -> list[InflectionPoint]:
    """Window-over-window relative changes at or above threshold."""
    inflections = []
    for index in range(1, len(windows)):
        previous = windows[index - 1]
        current = windows[index]
        for metric in TREND_METRICS:
            previous_value = getattr(previous, metric)
            if previous_value == 0:
                continue
            change = (getattr(current, metric) - previous_value) / previous_value
            if abs(change) >= threshold:
                inflections.append(
                    InflectionPoint(
                        date=current.end_date,
                        metric=metric,
                        change=change * 100,
                        direction="up" if change > 0 else "down",
                    )
                )
    return inflections


def _game_day(game: GameMetrics) -> date:
    try:
        return date.fromisoformat(game.game_date[:10])
    except ValueError:
        return date.min


def build_season_trend(
    game_metrics: Sequence[GameMetrics],
    team_id: int,
    season: str,
    window_size: int = 5,
) -> SeasonTrend:
    """Sort games by date, then roll windows and flag inflections."""
    ordered = sorted(game_metrics, key=_game_day)
    windows = calculate_rolling_averages(ordered, window_size)
    return SeasonTrend(
        team_id=team_id,
        season=season,
        game_metrics=ordered,
        windows=windows,
        inflection_points=detect_inflection_points(windows),
    )


def compute_shot_profile(
    games: Sequence[GameRecord],
    team_id: int,
    player_id: int | None = None,
    zone_entries: Sequence[ZoneEntry] = (),
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> ShotProfileReport:
    """
    Full shot-location attack profile.

    Args:
        games: Game records
        team_id: Team ID
        player_id: Restrict to one shooter (optional)
        zone_entries: Zone entries for entry control
        config: Analytics configuration

    Returns:
        ShotProfileReport
    """
    shots = extract_shot_locations(games, team_id, player_id, config)
    sequences: list[AttackSequence] = []
    for game in games:
        sequences.extend(build_attack_sequences(game, team_id, player_id, config))

    metrics = calculate_attack_metrics(shots, sequences, zone_entries, config)
    return ShotProfileReport(
        shots=shots,
        density_map=compute_shot_density_map(shots),
        zone_distribution=compute_zone_distribution(shots, config),
        metrics=metrics,
        profile=calculate_attack_profile(metrics, team_id, player_id, len(games), config),
        total_shots=len(shots),
        total_goals=sum(1 for shot in shots if shot.result == SequenceResult.GOAL),
        games_analyzed=len(games),
    )
