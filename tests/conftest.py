"""
Pytest Configuration and Fixtures

Shared fixtures and game-record builders for the rinkflow test suite.
"""

import json
from pathlib import Path
from typing import Any

import pytest

from rinkflow.config import DEFAULT_CONFIG, AnalyticsConfig
from rinkflow.models.timeline import (
    SHOT_ATTEMPT_TYPES,
    GameRecord,
    Shift,
    ShotEvent,
    TimelineEvent,
)
from rinkflow.processors.attack_sequences import (
    AttackOrigin,
    AttackOutcome,
    AttackSequence,
    AttackWaypoint,
    PlayArchetype,
    SequenceResult,
    TriggerEvent,
)
from rinkflow.processors.rink import AttackZone

HOME_TEAM = 22
AWAY_TEAM = 10


def build_event(
    event_id: int,
    type_key: str,
    team_id: int | None = None,
    x: float | None = None,
    y: float | None = None,
    clock: str = "00:00",
    period: int = 1,
    player_id: int | None = None,
) -> TimelineEvent:
    return TimelineEvent(
        event_id=event_id,
        type_key=type_key,
        team_id=team_id,
        x_coord=x,
        y_coord=y,
        time_in_period=clock,
        period=period,
        player_id=player_id,
    )


def shot_from(
    event: TimelineEvent,
    home_on_ice: tuple[int, ...] = (),
    away_on_ice: tuple[int, ...] = (),
) -> ShotEvent:
    """Shot record mirroring a shot-attempt event."""
    return ShotEvent(
        event_id=event.event_id,
        period=event.period,
        time_in_period=event.time_in_period,
        type_key=event.type_key,
        team_id=event.team_id,
        x_coord=event.x_coord,
        y_coord=event.y_coord,
        player_id=event.player_id,
        shooting_player_id=event.player_id,
        home_players_on_ice=home_on_ice,
        away_players_on_ice=away_on_ice,
    )


def build_game(
    events: list[TimelineEvent],
    shots: list[ShotEvent] | None = None,
    shifts: list[Shift] | None = None,
    game_id: int = 2023020001,
    game_date: str = "2023-10-10",
    home_team_id: int = HOME_TEAM,
    away_team_id: int = AWAY_TEAM,
) -> GameRecord:
    """Game record; shots default to every shot-attempt event."""
    if shots is None:
        shots = [shot_from(event) for event in events if event.type_key in SHOT_ATTEMPT_TYPES]
    return GameRecord(
        game_id=game_id,
        game_date=game_date,
        home_team_id=home_team_id,
        away_team_id=away_team_id,
        events=tuple(events),
        shots=tuple(shots),
        shifts=tuple(shifts or ()),
    )


@pytest.fixture
def config() -> AnalyticsConfig:
    return DEFAULT_CONFIG


@pytest.fixture
def make_event():
    """Factory for timeline events."""
    return build_event


@pytest.fixture
def make_shot():
    """Factory for shot records mirroring an event."""
    return shot_from


@pytest.fixture
def make_game():
    """Factory for game records."""
    return build_game


@pytest.fixture
def sample_game() -> GameRecord:
    """
    A short scripted game; the home team (22) attacks toward positive x.

    Home: faceoff win, neutral-zone takeaway, entry with a quick shot (save),
    then a goal after an opponent giveaway. Away: one shot on goal late in
    the third, trailing 0-1.
    """
    events = [
        build_event(1, "faceoff", HOME_TEAM, 0, 0, "00:00", player_id=97),
        build_event(2, "takeaway", HOME_TEAM, -10, 5, "00:03", player_id=29),
        build_event(3, "shot-on-goal", HOME_TEAM, 80, 5, "00:06", player_id=97),
        build_event(4, "hit", AWAY_TEAM, -60, 10, "00:20", player_id=34),
        build_event(5, "giveaway", AWAY_TEAM, -70, -5, "00:30", player_id=34),
        build_event(6, "takeaway", HOME_TEAM, 70, -5, "00:31", player_id=29),
        build_event(7, "goal", HOME_TEAM, 82, 3, "00:34", player_id=29),
        build_event(8, "faceoff", AWAY_TEAM, 0, 0, "00:34", player_id=34),
        build_event(9, "shot-on-goal", AWAY_TEAM, -60, 30, "16:00", period=3, player_id=34),
    ]
    shots = [
        shot_from(events[2], home_on_ice=(97, 29), away_on_ice=(34, 16)),
        shot_from(events[6], home_on_ice=(97, 29), away_on_ice=(34, 16)),
        shot_from(events[8], home_on_ice=(97, 29), away_on_ice=(34, 16)),
    ]
    return build_game(events, shots)


@pytest.fixture
def sample_game_json(sample_game: GameRecord) -> list[dict[str, Any]]:
    """The sample game in the feed's camelCase JSON form."""
    return [json.loads(sample_game.model_dump_json(by_alias=True))]


@pytest.fixture
def games_file(tmp_path: Path, sample_game_json: list[dict[str, Any]]) -> Path:
    path = tmp_path / "games.json"
    path.write_text(json.dumps(sample_game_json))
    return path


def build_sequence(
    archetype: PlayArchetype,
    result: SequenceResult = SequenceResult.SAVE,
    origin: tuple[float | None, float | None] = (0.0, 0.0),
    end: tuple[float | None, float | None] = (80.0, 0.0),
    waypoints: tuple[tuple[float, float, str], ...] = (),
    duration: int = 5,
    period: int = 1,
) -> AttackSequence:
    """Attack sequence with only the fields aggregators read filled in."""
    return AttackSequence(
        sequence_id="seq-test",
        game_id=1,
        team_id=HOME_TEAM,
        player_id=None,
        period=period,
        start_time="00:00",
        end_time="00:05",
        duration_seconds=duration,
        origin=AttackOrigin(AttackZone.NEUTRAL, origin[0], origin[1], TriggerEvent.FACEOFF, "00:00"),
        waypoints=tuple(AttackWaypoint(x, y, kind, "00:00") for x, y, kind in waypoints),
        zone_entry=None,
        outcome=AttackOutcome(result, end[0], end[1]),
        archetype=archetype,
        is_rebound=False,
    )


@pytest.fixture
def make_sequence():
    """Factory for hand-built attack sequences."""
    return build_sequence
