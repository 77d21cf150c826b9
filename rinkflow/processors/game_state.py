"""
Game-State Reconstructor

Rebuilds the running score from a game's goal events so any moment can be
labelled tied / leading / trailing from either team's perspective.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from rinkflow.models.timeline import EventType, TimelineEvent
from rinkflow.processors.rink import parse_clock


class GameState(str, Enum):
    """Score situation from one team's perspective."""

    TIED = "tied"
    LEADING = "leading"
    TRAILING = "trailing"


@dataclass(frozen=True)
class ScoreMoment:
    """Cumulative score as of (and including) a goal."""

    period: int
    elapsed_seconds: int
    home_score: int
    away_score: int

    @property
    def key(self) -> tuple[int, int]:
        return (self.period, self.elapsed_seconds)


@dataclass(frozen=True)
class GameStateSnapshot:
    state: GameState
    goal_differential: int  # signed, from the querying team's side


class ScoreTimeline:
    """
    Ordered score history for one game.

    Starts at 0-0 at the opening of period 1; every goal adds a moment keyed by
    (period, elapsed seconds). Two goals at the same key keep the later total.
    """

    def __init__(self, home_team_id: int, moments: list[ScoreMoment]) -> None:
        self.home_team_id = home_team_id
        self.moments = moments

    @classmethod
    def from_events(cls, events: Iterable[TimelineEvent], home_team_id: int) -> "ScoreTimeline":
        by_key: dict[tuple[int, int], ScoreMoment] = {(1, 0): ScoreMoment(1, 0, 0, 0)}
        home_score = 0
        away_score = 0
        for event in events:
            if event.type_key != EventType.GOAL.value:
                continue
            if event.team_id == home_team_id:
                home_score += 1
            else:
                away_score += 1
            moment = ScoreMoment(
                period=event.period,
                elapsed_seconds=parse_clock(event.time_in_period),
                home_score=home_score,
                away_score=away_score,
            )
            by_key[moment.key] = moment
        return cls(home_team_id, list(by_key.values()))

    def score_before(self, period: int, clock: str) -> tuple[int, int]:
        """
        Return (home, away) as of a moment, goals at that exact moment included.

        Args:
            period: Period number
            clock: Elapsed MM:SS within the period

        Returns:
            (home_score, away_score)
        """
        query = (period, parse_clock(clock))
        best: ScoreMoment | None = None
        for moment in self.moments:
            if moment.key <= query and (best is None or moment.key >= best.key):
                best = moment
        if best is None:
            return (0, 0)
        return (best.home_score, best.away_score)

    def state_for(self, team_id: int, period: int, clock: str) -> GameStateSnapshot:
        """Game state and signed goal differential for a team at a moment."""
        home_score, away_score = self.score_before(period, clock)
        if team_id == self.home_team_id:
            differential = home_score - away_score
        else:
            differential = away_score - home_score

        if differential > 0:
            state = GameState.LEADING
        elif differential < 0:
            state = GameState.TRAILING
        else:
            state = GameState.TIED
        return GameStateSnapshot(state=state, goal_differential=differential)
