"""
Event Timeline Model

Pydantic models for the per-game event stream consumed by every analysis.

Records are immutable once constructed. Keys may be supplied in the feed's
camelCase form (eventId, timeInPeriod, xCoord, ...) or as snake_case names.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class EventType(str, Enum):
    """Play-by-play event type keys."""

    GOAL = "goal"
    SHOT_ON_GOAL = "shot-on-goal"
    MISSED_SHOT = "missed-shot"
    BLOCKED_SHOT = "blocked-shot"
    FACEOFF = "faceoff"
    TAKEAWAY = "takeaway"
    GIVEAWAY = "giveaway"
    HIT = "hit"
    STOPPAGE = "stoppage"
    PENALTY = "penalty"
    PERIOD_START = "period-start"
    PERIOD_END = "period-end"


SHOT_ATTEMPT_TYPES = frozenset(
    {
        EventType.GOAL.value,
        EventType.SHOT_ON_GOAL.value,
        EventType.MISSED_SHOT.value,
        EventType.BLOCKED_SHOT.value,
    }
)


class _Record(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


def _is_clock(value: str) -> bool:
    parts = value.split(":")
    if len(parts) > 2:
        return False
    return all(part.isdigit() for part in parts if part)


class TimelineEvent(_Record):
    """A single timestamped, optionally located game event."""

    event_id: int
    period: int = 1
    time_in_period: str = "00:00"  # elapsed MM:SS
    type_key: str
    team_id: int | None = None
    x_coord: float | None = None
    y_coord: float | None = None
    player_id: int | None = None

    @field_validator("time_in_period", mode="before")
    @classmethod
    def _default_bad_clock(cls, value: Any) -> Any:
        """Null or unparseable clocks read as the start of the period."""
        if not isinstance(value, str) or not _is_clock(value):
            return "00:00"
        return value

    @field_validator("x_coord", "y_coord", mode="before")
    @classmethod
    def _default_bad_coordinate(cls, value: Any) -> Any:
        """Coordinate strings that are not numbers read as 0."""
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return 0.0
        return value

    @property
    def has_coordinates(self) -> bool:
        return self.x_coord is not None and self.y_coord is not None

    @property
    def is_shot_attempt(self) -> bool:
        return self.type_key in SHOT_ATTEMPT_TYPES


class ShotEvent(TimelineEvent):
    """Shot attempt with shooter and on-ice context."""

    type_key: str = ""
    result: str = ""
    shooting_player_id: int | None = None
    shot_type: str | None = None
    home_players_on_ice: tuple[int, ...] = ()
    away_players_on_ice: tuple[int, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _fill_result_and_type(cls, data: Any) -> Any:
        """Mirror result and type key when only one is supplied."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        type_key = data.get("type_key", data.get("typeKey"))
        result = data.get("result")
        if not result and type_key:
            data["result"] = type_key
        elif result and not type_key:
            data["type_key"] = result
        return data

    @property
    def is_goal(self) -> bool:
        return self.result == EventType.GOAL.value


class Shift(_Record):
    """A player's continuous on-ice interval within one period."""

    player_id: int
    team_id: int
    period: int
    start_time: str
    end_time: str


class GameRecord(_Record):
    """One game's ordered events, shot subset and shift chart."""

    game_id: int
    game_date: str = ""
    home_team_id: int
    away_team_id: int
    events: tuple[TimelineEvent, ...] = Field(default_factory=tuple)
    shots: tuple[ShotEvent, ...] = Field(default_factory=tuple)
    shifts: tuple[Shift, ...] = Field(default_factory=tuple)

    def is_home(self, team_id: int) -> bool:
        return team_id == self.home_team_id

    def opponent_of(self, team_id: int) -> int:
        """Return the other team in this game."""
        return self.away_team_id if team_id == self.home_team_id else self.home_team_id

    def index_of(self, event_id: int) -> int | None:
        """Position of an event in the ordered event list, or None."""
        for index in range(len(self.events)):
            if self.events[index].event_id == event_id:
                return index
        return None

    def team_shots(self, team_id: int, player_id: int | None = None) -> list[ShotEvent]:
        """Shots taken by a team, optionally restricted to one shooter."""
        return [
            shot
            for shot in self.shots
            if shot.team_id == team_id
            and (player_id is None or shot.shooting_player_id == player_id)
        ]
