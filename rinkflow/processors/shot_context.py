"""
Shot Context Enricher

Attaches game state, shot danger and clock context to each shot a team takes.
"""

from dataclasses import asdict, dataclass
from typing import Any

from loguru import logger

from rinkflow.config import DEFAULT_CONFIG, AnalyticsConfig
from rinkflow.models.timeline import GameRecord, ShotEvent
from rinkflow.processors.game_state import GameState, ScoreTimeline
from rinkflow.processors.rink import distance_from_goal, is_high_danger, parse_clock


@dataclass(frozen=True)
class ShotWithContext:
    """A shot plus the situation it was taken in."""

    game_id: int
    event_id: int
    period: int
    time_in_period: str
    team_id: int | None
    shooting_player_id: int | None
    result: str
    shot_type: str | None
    x_coord: float | None
    y_coord: float | None

    game_state: GameState
    goal_differential: int
    distance_from_goal: float | None  # None when the shot has no location
    is_high_danger: bool
    period_time_remaining: int  # seconds
    is_late_game: bool

    @property
    def is_goal(self) -> bool:
        return self.result == "goal"

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if self.distance_from_goal is not None:
            data["distance_from_goal"] = round(self.distance_from_goal, 2)
        return data


def enrich_shot(
    shot: ShotEvent,
    game_id: int,
    timeline: ScoreTimeline,
    team_id: int,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> ShotWithContext:
    """Build the context record for a single shot."""
    snapshot = timeline.state_for(team_id, shot.period, shot.time_in_period)
    remaining = config.rink.period_seconds - parse_clock(shot.time_in_period)

    distance = None
    high_danger = False
    if shot.has_coordinates:
        distance = distance_from_goal(shot.x_coord, shot.y_coord, config.rink)
        high_danger = is_high_danger(shot.x_coord, shot.y_coord, config.shot_quality, config.rink)

    return ShotWithContext(
        game_id=game_id,
        event_id=shot.event_id,
        period=shot.period,
        time_in_period=shot.time_in_period,
        team_id=shot.team_id,
        shooting_player_id=shot.shooting_player_id,
        result=shot.result,
        shot_type=shot.shot_type,
        x_coord=shot.x_coord,
        y_coord=shot.y_coord,
        game_state=snapshot.state,
        goal_differential=snapshot.goal_differential,
        distance_from_goal=distance,
        is_high_danger=high_danger,
        period_time_remaining=remaining,
        is_late_game=(
            shot.period >= config.shot_quality.late_game_period
            and remaining <= config.shot_quality.late_game_seconds
        ),
    )


def enrich_shots_with_context(
    game: GameRecord,
    team_id: int,
    player_id: int | None = None,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> list[ShotWithContext]:
    """
    Enrich every shot a team took in a game.

    Args:
        game: Game record with events and shots
        team_id: Shooting team
        player_id: Restrict to one shooter (optional)
        config: Analytics configuration

    Returns:
        One ShotWithContext per matching shot, in shot order
    """
    timeline = ScoreTimeline.from_events(game.events, game.home_team_id)
    shots = game.team_shots(team_id, player_id)
    enriched = [enrich_shot(shot, game.game_id, timeline, team_id, config) for shot in shots]
    logger.debug(f"Game {game.game_id}: enriched {len(enriched)} shots for team {team_id}")
    return enriched
