"""
Zone Transition Detector

Detects blue-line crossings into and out of either end zone from located
play-by-play events and classifies how the puck got there.

Entry types follow a conservative ordered rule list shared with the attack
sequence reconstructor: explicit shots and giveaways are dumps, takeaways and
won faceoffs are controlled, a quick follow-up shot is controlled, and
anything ambiguous is treated as a dump.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, Sequence

from loguru import logger

from rinkflow.config import DEFAULT_CONFIG, AnalyticsConfig, ZoneEntryConfig
from rinkflow.models.timeline import SHOT_ATTEMPT_TYPES, EventType, TimelineEvent
from rinkflow.processors.rink import (
    EndZoneSide,
    clock_gap,
    end_zone_side,
    in_end_zone,
    round_to,
)


class EntryType(str, Enum):
    CONTROLLED = "controlled"
    DUMP = "dump"


class ExitType(str, Enum):
    CONTROLLED = "controlled"  # carried out
    CLEAR = "clear"  # cleared under pressure
    PASS = "pass"  # outlet


DUMP_EVENT_TYPES = frozenset(SHOT_ATTEMPT_TYPES | {EventType.GIVEAWAY.value})
STALL_EVENT_TYPES = frozenset({EventType.GIVEAWAY.value, EventType.STOPPAGE.value})
SUSTAIN_EVENT_TYPES = frozenset(
    {EventType.SHOT_ON_GOAL.value, EventType.GOAL.value, EventType.HIT.value}
)
FOLLOW_UP_SHOT_TYPES = frozenset(
    {EventType.SHOT_ON_GOAL.value, EventType.MISSED_SHOT.value, EventType.GOAL.value}
)
EXIT_PRESSURE_TYPES = frozenset(
    {EventType.TAKEAWAY.value, EventType.SHOT_ON_GOAL.value, EventType.HIT.value}
)


@dataclass(frozen=True)
class EntryContext:
    """What is known at the moment the puck crosses the blue line."""

    event_type: str
    won_by_actor: bool  # the crossing event belongs to the entering team
    next_type: str | None = None
    gap_seconds: int | None = None  # seconds to the next same-team event


@dataclass(frozen=True)
class EntryRule:
    name: str
    applies: Callable[[EntryContext, ZoneEntryConfig], bool]
    entry_type: EntryType


ENTRY_RULES: tuple[EntryRule, ...] = (
    EntryRule(
        "shot-or-giveaway",
        lambda ctx, cfg: ctx.event_type in DUMP_EVENT_TYPES,
        EntryType.DUMP,
    ),
    EntryRule(
        "possession-won",
        lambda ctx, cfg: ctx.event_type == EventType.TAKEAWAY.value
        or (ctx.event_type == EventType.FACEOFF.value and ctx.won_by_actor),
        EntryType.CONTROLLED,
    ),
    EntryRule(
        "quick-shot",
        lambda ctx, cfg: ctx.next_type in SHOT_ATTEMPT_TYPES
        and ctx.gap_seconds is not None
        and ctx.gap_seconds <= cfg.quick_shot_seconds,
        EntryType.CONTROLLED,
    ),
    EntryRule(
        "turnover-or-stall",
        lambda ctx, cfg: ctx.next_type in STALL_EVENT_TYPES
        or (ctx.gap_seconds is not None and ctx.gap_seconds > cfg.stall_seconds),
        EntryType.DUMP,
    ),
)


def classify_entry(
    context: EntryContext,
    config: ZoneEntryConfig = DEFAULT_CONFIG.zone_entries,
) -> EntryType:
    """First matching rule wins; unmatched entries are dumps."""
    for rule in ENTRY_RULES:
        if rule.applies(context, config):
            return rule.entry_type
    return EntryType.DUMP


def entry_context(
    current: TimelineEvent,
    following: TimelineEvent | None,
    actor_team_id: int | None,
) -> EntryContext:
    """Build the classification context from the crossing event and its successor."""
    if following is None:
        return EntryContext(
            event_type=current.type_key,
            won_by_actor=current.team_id == actor_team_id,
        )
    return EntryContext(
        event_type=current.type_key,
        won_by_actor=current.team_id == actor_team_id,
        next_type=following.type_key,
        gap_seconds=clock_gap(current.time_in_period, following.time_in_period),
    )


@dataclass(frozen=True)
class ZoneEntry:
    """A detected end-zone entry."""

    event_id: int
    player_id: int | None
    team_id: int
    period: int
    time_in_period: str
    entry_type: EntryType
    x_coord: float
    y_coord: float
    end_zone: EndZoneSide
    success: bool  # possession sustained after the entry
    quick_shot: bool  # shot attempt followed within the follow-up window

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ZoneExit:
    """A detected end-zone exit."""

    event_id: int
    player_id: int | None
    team_id: int
    period: int
    time_in_period: str
    exit_type: ExitType
    x_coord: float
    y_coord: float
    end_zone: EndZoneSide  # side that was left
    success: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ZoneAnalytics:
    """Summary of entry and exit outcomes."""

    total_entries: int = 0
    controlled_entries: int = 0
    dump_ins: int = 0
    controlled_entry_rate: float = 0.0  # percent
    total_exits: int = 0
    successful_exits: int = 0
    exit_success_rate: float = 0.0  # percent

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ZoneTransitionDetector:
    """
    Per-team state machine over located events.

    For each team the detector remembers whether that team's previous usable
    event was inside an end zone; a flip from outside to inside is an entry,
    inside to outside is an exit. Events without both coordinates or without
    an owning team never change state.
    """

    def __init__(self, config: AnalyticsConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    def _team_tracks(
        self,
        events: Sequence[TimelineEvent],
        team_id: int | None,
    ) -> dict[int, list[int]]:
        """Indices of usable events, grouped by owning team in event order."""
        tracks: dict[int, list[int]] = {}
        for index in range(len(events)):
            event = events[index]
            if not event.has_coordinates or event.team_id is None:
                continue
            if team_id is not None and event.team_id != team_id:
                continue
            tracks.setdefault(event.team_id, []).append(index)
        return tracks

    def _crossings(
        self,
        events: Sequence[TimelineEvent],
        team_id: int | None,
        entering: bool,
    ) -> list[tuple[int, int | None]]:
        """(event index, index of the team's next usable event) for each crossing."""
        rink = self.config.rink
        found: list[tuple[int, int | None]] = []
        for track in self._team_tracks(events, team_id).values():
            for position in range(1, len(track)):
                was_inside = in_end_zone(events[track[position - 1]].x_coord, rink)
                now_inside = in_end_zone(events[track[position]].x_coord, rink)
                if was_inside == now_inside or now_inside != entering:
                    continue
                following = track[position + 1] if position + 1 < len(track) else None
                found.append((track[position], following))
        found.sort(key=lambda pair: pair[0])
        return found

    def detect_entries(
        self,
        events: Sequence[TimelineEvent],
        team_id: int | None = None,
    ) -> list[ZoneEntry]:
        """
        Detect end-zone entries.

        Args:
            events: Ordered events for one game
            team_id: Only track this team (both teams when None)

        Returns:
            Entries in event order
        """
        entries = []
        for index, following_index in self._crossings(events, team_id, entering=True):
            event = events[index]
            following = events[following_index] if following_index is not None else None
            context = entry_context(event, following, event.team_id)
            entries.append(
                ZoneEntry(
                    event_id=event.event_id,
                    player_id=event.player_id,
                    team_id=event.team_id,
                    period=event.period,
                    time_in_period=event.time_in_period,
                    entry_type=classify_entry(context, self.config.zone_entries),
                    x_coord=event.x_coord,
                    y_coord=event.y_coord,
                    end_zone=end_zone_side(event.x_coord, self.config.rink),
                    success=self._entry_sustained(events, index, event.team_id),
                    quick_shot=self._shot_follows(events, index),
                )
            )
        logger.debug(f"Detected {len(entries)} zone entries")
        return entries

    def detect_exits(
        self,
        events: Sequence[TimelineEvent],
        team_id: int | None = None,
    ) -> list[ZoneExit]:
        """
        Detect end-zone exits.

        Args:
            events: Ordered events for one game
            team_id: Only track this team (both teams when None)

        Returns:
            Exits in event order
        """
        exits = []
        for index, _ in self._crossings(events, team_id, entering=False):
            event = events[index]
            previous = self._previous_team_event(events, index, event.team_id)
            exits.append(
                ZoneExit(
                    event_id=event.event_id,
                    player_id=event.player_id,
                    team_id=event.team_id,
                    period=event.period,
                    time_in_period=event.time_in_period,
                    exit_type=self._classify_exit(event),
                    x_coord=event.x_coord,
                    y_coord=event.y_coord,
                    end_zone=end_zone_side(previous.x_coord, self.config.rink),
                    success=self._exit_succeeded(events, index, event.team_id),
                )
            )
        logger.debug(f"Detected {len(exits)} zone exits")
        return exits

    def _previous_team_event(
        self,
        events: Sequence[TimelineEvent],
        index: int,
        team_id: int,
    ) -> TimelineEvent:
        for back in range(index - 1, -1, -1):
            event = events[back]
            if event.team_id == team_id and event.has_coordinates:
                return event
        return events[index]

    def _entry_sustained(
        self,
        events: Sequence[TimelineEvent],
        index: int,
        team_id: int,
    ) -> bool:
        """Possession holds if the opponent and faceoffs stay away until a shot, goal or hit."""
        stop = min(index + 1 + self.config.zone_entries.sustain_lookahead_events, len(events))
        for ahead in range(index + 1, stop):
            event = events[ahead]
            if event.team_id is not None and event.team_id != team_id:
                return False
            if event.type_key == EventType.FACEOFF.value:
                return False
            if event.type_key in SUSTAIN_EVENT_TYPES:
                return True
        return True

    def _shot_follows(self, events: Sequence[TimelineEvent], index: int) -> bool:
        settings = self.config.zone_entries
        entry_clock = events[index].time_in_period
        stop = min(index + 1 + settings.follow_up_lookahead_events, len(events))
        for ahead in range(index + 1, stop):
            event = events[ahead]
            if clock_gap(entry_clock, event.time_in_period) > settings.follow_up_shot_seconds:
                break
            if event.type_key in FOLLOW_UP_SHOT_TYPES:
                return True
        return False

    def _classify_exit(self, event: TimelineEvent) -> ExitType:
        if event.type_key in (EventType.HIT.value, EventType.TAKEAWAY.value):
            return ExitType.CLEAR
        if event.type_key in (EventType.SHOT_ON_GOAL.value, "pass"):
            return ExitType.PASS
        return ExitType.CONTROLLED

    def _exit_succeeded(
        self,
        events: Sequence[TimelineEvent],
        index: int,
        team_id: int,
    ) -> bool:
        stop = min(index + 1 + self.config.zone_entries.exit_lookahead_events, len(events))
        for ahead in range(index + 1, stop):
            event = events[ahead]
            if (
                event.team_id is not None
                and event.team_id != team_id
                and event.type_key in EXIT_PRESSURE_TYPES
            ):
                return False
        return True


def detect_zone_entries(
    events: Sequence[TimelineEvent],
    team_id: int | None = None,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> list[ZoneEntry]:
    return ZoneTransitionDetector(config).detect_entries(events, team_id)


def detect_zone_exits(
    events: Sequence[TimelineEvent],
    team_id: int | None = None,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> list[ZoneExit]:
    return ZoneTransitionDetector(config).detect_exits(events, team_id)


def calculate_zone_analytics(
    entries: Sequence[ZoneEntry],
    exits: Sequence[ZoneExit],
) -> ZoneAnalytics:
    """Summarize entry control and exit success rates (percent, one decimal)."""
    total_entries = len(entries)
    controlled = sum(1 for entry in entries if entry.entry_type == EntryType.CONTROLLED)
    dumps = sum(1 for entry in entries if entry.entry_type == EntryType.DUMP)
    total_exits = len(exits)
    successful = sum(1 for exit_ in exits if exit_.success)

    return ZoneAnalytics(
        total_entries=total_entries,
        controlled_entries=controlled,
        dump_ins=dumps,
        controlled_entry_rate=round_to(controlled / total_entries * 100) if total_entries else 0.0,
        total_exits=total_exits,
        successful_exits=successful,
        exit_success_rate=round_to(successful / total_exits * 100) if total_exits else 0.0,
    )
