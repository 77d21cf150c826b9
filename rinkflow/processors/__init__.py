"""
Event Stream Processors

This module turns a game's ordered event stream into derived records.

Processors:
    - ScoreTimeline: Running score and game state at any moment
    - enrich_shots_with_context: Game-state, danger and clock context per shot
    - ZoneTransitionDetector: Blue-line entries and exits with outcome checks
    - AttackSequenceBuilder: Possession reconstruction and archetype labelling
"""

from rinkflow.processors.rink import (
    AttackZone,
    EndZoneSide,
    attack_zone,
    clock_gap,
    distance_from_goal,
    end_zone_side,
    in_end_zone,
    is_high_danger,
    parse_clock,
)
from rinkflow.processors.game_state import (
    GameState,
    GameStateSnapshot,
    ScoreMoment,
    ScoreTimeline,
)
from rinkflow.processors.shot_context import (
    ShotWithContext,
    enrich_shot,
    enrich_shots_with_context,
)
from rinkflow.processors.zone_transitions import (
    EntryContext,
    EntryType,
    ExitType,
    ZoneAnalytics,
    ZoneEntry,
    ZoneExit,
    ZoneTransitionDetector,
    calculate_zone_analytics,
    classify_entry,
    detect_zone_entries,
    detect_zone_exits,
)
from rinkflow.processors.attack_sequences import (
    ARCHETYPE_GROUPS,
    ArchetypeGroup,
    AttackOrigin,
    AttackOutcome,
    AttackSequence,
    AttackSequenceBuilder,
    AttackWaypoint,
    PlayArchetype,
    SequenceResult,
    SequenceZoneEntry,
    TriggerEvent,
    build_attack_sequences,
    classify_archetype,
)

__all__ = [
    # Rink geometry
    "AttackZone",
    "EndZoneSide",
    "attack_zone",
    "clock_gap",
    "distance_from_goal",
    "end_zone_side",
    "in_end_zone",
    "is_high_danger",
    "parse_clock",
    # Game state
    "GameState",
    "GameStateSnapshot",
    "ScoreMoment",
    "ScoreTimeline",
    # Shot context
    "ShotWithContext",
    "enrich_shot",
    "enrich_shots_with_context",
    # Zone transitions
    "EntryContext",
    "EntryType",
    "ExitType",
    "ZoneAnalytics",
    "ZoneEntry",
    "ZoneExit",
    "ZoneTransitionDetector",
    "calculate_zone_analytics",
    "classify_entry",
    "detect_zone_entries",
    "detect_zone_exits",
    # Attack sequences
    "ARCHETYPE_GROUPS",
    "ArchetypeGroup",
    "AttackOrigin",
    "AttackOutcome",
    "AttackSequence",
    "AttackSequenceBuilder",
    "AttackWaypoint",
    "PlayArchetype",
    "SequenceResult",
    "SequenceZoneEntry",
    "TriggerEvent",
    "build_attack_sequences",
    "classify_archetype",
]
