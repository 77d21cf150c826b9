"""
Attack Sequence Reconstructor

Walks back from each shot to the start of the possession that produced it and
classifies the sequence into one of eleven play archetypes.

Pipeline per shot:
    1. Origin search (bounded backward scan, faceoff = definite start)
    2. Waypoints (own located events from origin to shot)
    3. Zone entry (first non-offensive -> offensive waypoint step)
    4. Rebound check (own prior shot attempt within a few seconds)
    5. Archetype (ordered rule list, first match wins)
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable

from loguru import logger

from rinkflow.config import DEFAULT_CONFIG, AnalyticsConfig, SequenceConfig
from rinkflow.models.timeline import EventType, GameRecord, ShotEvent, TimelineEvent
from rinkflow.processors.rink import AttackZone, attack_zone, clock_gap, distance_from_goal
from rinkflow.processors.zone_transitions import EntryContext, EntryType, classify_entry


class PlayArchetype(str, Enum):
    """Attack sequence archetypes."""

    RUSH_BREAKAWAY = "rush-breakaway"
    RUSH_ODDMAN = "rush-oddman"
    RUSH_STANDARD = "rush-standard"
    CYCLE_LOW = "cycle-low"
    CYCLE_HIGH = "cycle-high"
    POINT_SHOT = "point-shot"
    POINT_DEFLECTION = "point-deflection"
    NET_SCRAMBLE = "net-scramble"
    REBOUND = "rebound"
    TRANSITION_QUICK = "transition-quick"
    TRANSITION_SUSTAINED = "transition-sustained"


class ArchetypeGroup(str, Enum):
    RUSH = "rush"
    CYCLE = "cycle"
    POINT = "point"
    NET_FRONT = "net-front"
    TRANSITION = "transition"


ARCHETYPE_GROUPS: dict[PlayArchetype, ArchetypeGroup] = {
    PlayArchetype.RUSH_BREAKAWAY: ArchetypeGroup.RUSH,
    PlayArchetype.RUSH_ODDMAN: ArchetypeGroup.RUSH,
    PlayArchetype.RUSH_STANDARD: ArchetypeGroup.RUSH,
    PlayArchetype.CYCLE_LOW: ArchetypeGroup.CYCLE,
    PlayArchetype.CYCLE_HIGH: ArchetypeGroup.CYCLE,
    PlayArchetype.POINT_SHOT: ArchetypeGroup.POINT,
    PlayArchetype.POINT_DEFLECTION: ArchetypeGroup.POINT,
    PlayArchetype.NET_SCRAMBLE: ArchetypeGroup.NET_FRONT,
    PlayArchetype.REBOUND: ArchetypeGroup.NET_FRONT,
    PlayArchetype.TRANSITION_QUICK: ArchetypeGroup.TRANSITION,
    PlayArchetype.TRANSITION_SUSTAINED: ArchetypeGroup.TRANSITION,
}


class TriggerEvent(str, Enum):
    FACEOFF = "faceoff"
    TAKEAWAY = "takeaway"
    BLOCKED_SHOT = "blocked-shot"
    BREAKOUT = "breakout"


class SequenceResult(str, Enum):
    GOAL = "goal"
    SAVE = "save"
    MISS = "miss"
    BLOCK = "block"


REBOUND_SOURCE_TYPES = frozenset(
    {EventType.SHOT_ON_GOAL.value, EventType.BLOCKED_SHOT.value, EventType.MISSED_SHOT.value}
)


def classify_shot_result(result: str) -> SequenceResult:
    if result == EventType.GOAL.value:
        return SequenceResult.GOAL
    if result == EventType.SHOT_ON_GOAL.value:
        return SequenceResult.SAVE
    if result == EventType.MISSED_SHOT.value:
        return SequenceResult.MISS
    return SequenceResult.BLOCK


def classify_trigger(type_key: str) -> TriggerEvent:
    if type_key == EventType.FACEOFF.value:
        return TriggerEvent.FACEOFF
    if type_key == EventType.TAKEAWAY.value:
        return TriggerEvent.TAKEAWAY
    if type_key == EventType.BLOCKED_SHOT.value:
        return TriggerEvent.BLOCKED_SHOT
    return TriggerEvent.BREAKOUT


@dataclass(frozen=True)
class AttackOrigin:
    zone: AttackZone
    x_coord: float | None
    y_coord: float | None
    trigger_event: TriggerEvent
    time_in_period: str


@dataclass(frozen=True)
class AttackWaypoint:
    x_coord: float
    y_coord: float
    event_type: str
    time_in_period: str


@dataclass(frozen=True)
class SequenceZoneEntry:
    entry_type: EntryType
    x_coord: float
    y_coord: float
    success: bool


@dataclass(frozen=True)
class AttackOutcome:
    result: SequenceResult
    x_coord: float | None
    y_coord: float | None


@dataclass(frozen=True)
class AttackSequence:
    """One reconstructed possession ending in a shot attempt."""

    sequence_id: str
    game_id: int
    team_id: int
    player_id: int | None
    period: int
    start_time: str
    end_time: str
    duration_seconds: int
    origin: AttackOrigin
    waypoints: tuple[AttackWaypoint, ...]
    zone_entry: SequenceZoneEntry | None
    outcome: AttackOutcome
    archetype: PlayArchetype
    is_rebound: bool

    @property
    def transition_time(self) -> int:
        return self.duration_seconds

    @property
    def group(self) -> ArchetypeGroup:
        return ARCHETYPE_GROUPS[self.archetype]

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["waypoints"] = [asdict(waypoint) for waypoint in self.waypoints]
        return data


@dataclass(frozen=True)
class ArchetypeFeatures:
    """Inputs to archetype classification."""

    origin_zone: AttackZone
    duration_seconds: int
    waypoint_count: int
    is_rebound: bool
    shot_distance: float
    shot_x: float | None
    shot_y: float | None


@dataclass(frozen=True)
class ArchetypeRule:
    archetype: PlayArchetype
    applies: Callable[[ArchetypeFeatures, SequenceConfig], bool]


def _is_rush(f: ArchetypeFeatures, cfg: SequenceConfig) -> bool:
    return f.origin_zone != AttackZone.OFFENSIVE and f.duration_seconds <= cfg.rush_seconds


def _is_cycle(f: ArchetypeFeatures, cfg: SequenceConfig) -> bool:
    return f.origin_zone == AttackZone.OFFENSIVE and f.duration_seconds >= cfg.cycle_seconds


ARCHETYPE_RULES: tuple[ArchetypeRule, ...] = (
    ArchetypeRule(
        PlayArchetype.REBOUND,
        lambda f, cfg: f.is_rebound and f.shot_distance < cfg.net_front_distance,
    ),
    ArchetypeRule(
        PlayArchetype.RUSH_BREAKAWAY,
        lambda f, cfg: _is_rush(f, cfg) and f.shot_distance < cfg.breakaway_distance,
    ),
    ArchetypeRule(
        PlayArchetype.RUSH_ODDMAN,
        lambda f, cfg: _is_rush(f, cfg) and f.waypoint_count <= cfg.oddman_max_waypoints,
    ),
    ArchetypeRule(PlayArchetype.RUSH_STANDARD, _is_rush),
    ArchetypeRule(
        PlayArchetype.POINT_SHOT,
        lambda f, cfg: f.shot_x is not None and abs(f.shot_x) < cfg.point_shot_x,
    ),
    ArchetypeRule(
        PlayArchetype.NET_SCRAMBLE,
        lambda f, cfg: f.shot_distance < cfg.net_front_distance,
    ),
    ArchetypeRule(
        PlayArchetype.CYCLE_LOW,
        lambda f, cfg: _is_cycle(f, cfg) and f.shot_y is not None and abs(f.shot_y) > cfg.cycle_low_y,
    ),
    ArchetypeRule(PlayArchetype.CYCLE_HIGH, _is_cycle),
    ArchetypeRule(
        PlayArchetype.TRANSITION_QUICK,
        lambda f, cfg: f.origin_zone == AttackZone.DEFENSIVE
        and f.duration_seconds < cfg.quick_transition_seconds,
    ),
    ArchetypeRule(
        PlayArchetype.TRANSITION_SUSTAINED,
        lambda f, cfg: f.origin_zone == AttackZone.DEFENSIVE,
    ),
)


def classify_archetype(
    features: ArchetypeFeatures,
    config: SequenceConfig = DEFAULT_CONFIG.sequences,
) -> PlayArchetype:
    """Apply the archetype rules in order; sustained offensive play is the fallback."""
    for rule in ARCHETYPE_RULES:
        if rule.applies(features, config):
            return rule.archetype
    return PlayArchetype.CYCLE_HIGH


class AttackSequenceBuilder:
    """
    Reconstruct attack sequences for one team in one game.

    Inputs:
        - GameRecord: ordered events plus the shot list
    Outputs:
        - AttackSequence per shot whose possession origin can be found
    """

    def __init__(self, config: AnalyticsConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    def build(
        self,
        game: GameRecord,
        team_id: int,
        player_id: int | None = None,
    ) -> list[AttackSequence]:
        """
        Build sequences for every shot by a team (or one shooter).

        Args:
            game: Game record
            team_id: Attacking team
            player_id: Restrict to shots by this player

        Returns:
            Sequences in shot order; shots without a resolvable origin are dropped
        """
        events = game.events
        sequences = []
        dropped = 0
        shots = game.team_shots(team_id, player_id)
        for shot_number in range(len(shots)):
            shot = shots[shot_number]
            shot_index = game.index_of(shot.event_id)
            if shot_index is None:
                dropped += 1
                continue
            sequence = self._build_one(game, events, shot, shot_index, shot_number, team_id, player_id)
            if sequence is None:
                dropped += 1
                continue
            sequences.append(sequence)

        logger.debug(
            f"Game {game.game_id}: built {len(sequences)} attack sequences for team {team_id}"
            f" ({dropped} dropped)"
        )
        return sequences

    def _build_one(
        self,
        game: GameRecord,
        events: tuple[TimelineEvent, ...],
        shot: ShotEvent,
        shot_index: int,
        shot_number: int,
        team_id: int,
        player_id: int | None,
    ) -> AttackSequence | None:
        found = self.find_origin(events, shot_index, team_id)
        if found is None:
            logger.debug(f"Game {game.game_id}: no origin for shot {shot.event_id}, skipping")
            return None
        origin_index, origin = found

        waypoints = self.extract_waypoints(events, origin_index, shot_index, team_id)
        duration = clock_gap(origin.time_in_period, shot.time_in_period)
        rebound = self.is_rebound(events, shot_index, team_id)

        if shot.has_coordinates:
            shot_distance = distance_from_goal(shot.x_coord, shot.y_coord, self.config.rink)
        else:
            shot_distance = self.config.sequences.default_shot_distance

        archetype = classify_archetype(
            ArchetypeFeatures(
                origin_zone=origin.zone,
                duration_seconds=duration,
                waypoint_count=len(waypoints),
                is_rebound=rebound,
                shot_distance=shot_distance,
                shot_x=shot.x_coord,
                shot_y=shot.y_coord,
            ),
            self.config.sequences,
        )

        return AttackSequence(
            sequence_id=f"seq-{team_id}-{player_id or 'team'}-{shot_number}",
            game_id=game.game_id,
            team_id=team_id,
            player_id=player_id,
            period=shot.period,
            start_time=origin.time_in_period,
            end_time=shot.time_in_period,
            duration_seconds=duration,
            origin=origin,
            waypoints=tuple(waypoints),
            zone_entry=self.find_zone_entry(waypoints),
            outcome=AttackOutcome(
                result=classify_shot_result(shot.result),
                x_coord=shot.x_coord,
                y_coord=shot.y_coord,
            ),
            archetype=archetype,
            is_rebound=rebound,
        )

    def find_origin(
        self,
        events: tuple[TimelineEvent, ...],
        shot_index: int,
        team_id: int,
    ) -> tuple[int, AttackOrigin] | None:
        """
        Scan back from the shot for the start of the possession.

        A faceoff is always a definite start. Otherwise the first event owned by
        the other team ends the chain and the event after it is the origin; an
        origin without coordinates is passed over and the scan keeps going.
        """
        rink = self.config.rink
        floor = max(0, shot_index - self.config.sequences.lookback_events)
        for index in range(shot_index - 1, floor - 1, -1):
            event = events[index]

            if event.type_key == EventType.FACEOFF.value:
                zone = attack_zone(event.x_coord, rink) if event.x_coord is not None else AttackZone.NEUTRAL
                return index, AttackOrigin(
                    zone=zone,
                    x_coord=event.x_coord,
                    y_coord=event.y_coord,
                    trigger_event=TriggerEvent.FACEOFF,
                    time_in_period=event.time_in_period,
                )

            if event.team_id is not None and event.team_id != team_id:
                candidate = events[index + 1]
                if not candidate.has_coordinates:
                    continue
                return index + 1, AttackOrigin(
                    zone=attack_zone(candidate.x_coord, rink),
                    x_coord=candidate.x_coord,
                    y_coord=candidate.y_coord,
                    trigger_event=classify_trigger(candidate.type_key),
                    time_in_period=candidate.time_in_period,
                )
        return None

    def extract_waypoints(
        self,
        events: tuple[TimelineEvent, ...],
        start_index: int,
        end_index: int,
        team_id: int,
    ) -> list[AttackWaypoint]:
        waypoints = []
        for index in range(start_index, end_index + 1):
            event = events[index]
            if event.team_id != team_id or not event.has_coordinates:
                continue
            waypoints.append(
                AttackWaypoint(
                    x_coord=event.x_coord,
                    y_coord=event.y_coord,
                    event_type=event.type_key,
                    time_in_period=event.time_in_period,
                )
            )
        return waypoints

    def find_zone_entry(self, waypoints: list[AttackWaypoint]) -> SequenceZoneEntry | None:
        """First step from outside into the offensive zone, classified conservatively."""
        rink = self.config.rink
        for position in range(1, len(waypoints)):
            previous = waypoints[position - 1]
            current = waypoints[position]
            if attack_zone(previous.x_coord, rink) == AttackZone.OFFENSIVE:
                continue
            if attack_zone(current.x_coord, rink) != AttackZone.OFFENSIVE:
                continue
            # waypoints are own-team events, so a faceoff here is a won draw
            context = EntryContext(event_type=current.event_type, won_by_actor=True)
            if position + 1 < len(waypoints):
                following = waypoints[position + 1]
                context = EntryContext(
                    event_type=current.event_type,
                    won_by_actor=True,
                    next_type=following.event_type,
                    gap_seconds=clock_gap(current.time_in_period, following.time_in_period),
                )
            return SequenceZoneEntry(
                entry_type=classify_entry(context, self.config.zone_entries),
                x_coord=current.x_coord,
                y_coord=current.y_coord,
                success=True,
            )
        return None

    def is_rebound(
        self,
        events: tuple[TimelineEvent, ...],
        shot_index: int,
        team_id: int,
    ) -> bool:
        settings = self.config.sequences
        shot_clock = events[shot_index].time_in_period
        floor = max(0, shot_index - settings.rebound_lookback_events)
        for index in range(shot_index - 1, floor - 1, -1):
            event = events[index]
            if event.type_key not in REBOUND_SOURCE_TYPES or event.team_id != team_id:
                continue
            if clock_gap(event.time_in_period, shot_clock) <= settings.rebound_window_seconds:
                return True
        return False


def build_attack_sequences(
    game: GameRecord,
    team_id: int,
    player_id: int | None = None,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> list[AttackSequence]:
    return AttackSequenceBuilder(config).build(game, team_id, player_id)
