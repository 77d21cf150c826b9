"""
Play Style Analytics

Play-style fingerprint and combined Attack DNA for a team or player.

Features:
- Six-axis fingerprint (rush, cycle, point, net-front, transition speed, entry aggression)
- Archetype and archetype-group distributions
- Primary / secondary style classification with style strength
- Deviation from league-average baselines
- Attack DNA: fingerprint + flow field + ribbons + period breakdown
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Iterable, Sequence

from loguru import logger

from rinkflow.config import DEFAULT_CONFIG, AnalyticsConfig
from rinkflow.models.timeline import GameRecord
from rinkflow.processors.attack_sequences import (
    ArchetypeGroup,
    AttackSequence,
    PlayArchetype,
    SequenceResult,
    build_attack_sequences,
)
from rinkflow.processors.rink import clamp, round_half_up
from rinkflow.processors.zone_transitions import EntryType, ZoneEntry
from rinkflow.analytics.flow_field import (
    AttackRibbon,
    FlowField,
    compute_flow_field,
    generate_attack_ribbons,
)


class PlayStyle(str, Enum):
    """Primary play style categories."""

    RUSH = "Rush Team"
    CYCLE = "Cycle Team"
    POINT_SHOT = "Point Shot Team"
    NET_FRONT = "Net-Front Team"
    TRANSITION = "Transition Team"
    BALANCED = "Balanced"


# Style scores; the strongest one has to beat the runner-up by this relative margin
STYLE_WEIGHTS = {
    PlayStyle.RUSH: {"rush_tendency": 1.2, "transition_speed": 0.8},
    PlayStyle.CYCLE: {"cycle_tendency": 1.5},
    PlayStyle.POINT_SHOT: {"point_focus": 2.0},
    PlayStyle.NET_FRONT: {"net_front_presence": 2.0},
    PlayStyle.TRANSITION: {"transition_speed": 1.0},
}
MIN_STYLE_STRENGTH = 30

LEAGUE_ARCHETYPE_DISTRIBUTION = {
    PlayArchetype.RUSH_BREAKAWAY: 5,
    PlayArchetype.RUSH_ODDMAN: 10,
    PlayArchetype.RUSH_STANDARD: 10,
    PlayArchetype.CYCLE_LOW: 15,
    PlayArchetype.CYCLE_HIGH: 15,
    PlayArchetype.POINT_SHOT: 15,
    PlayArchetype.POINT_DEFLECTION: 5,
    PlayArchetype.NET_SCRAMBLE: 10,
    PlayArchetype.REBOUND: 5,
    PlayArchetype.TRANSITION_QUICK: 5,
    PlayArchetype.TRANSITION_SUSTAINED: 5,
}

FINGERPRINT_AXES = (
    "rush_tendency",
    "cycle_tendency",
    "point_focus",
    "net_front_presence",
    "transition_speed",
    "entry_aggression",
)


@dataclass
class PlayStyleFingerprint:
    """Six-axis play-style profile (each axis 0-100)."""

    team_id: int
    player_id: int | None = None
    sample_games: int = 0
    sample_size: int = 0  # sequences

    rush_tendency: int = 0
    cycle_tendency: int = 0
    point_focus: int = 0
    net_front_presence: int = 0
    transition_speed: int = 0
    entry_aggression: int = 50

    primary_style: PlayStyle = PlayStyle.BALANCED
    secondary_style: PlayStyle | None = None
    style_strength: int = 0

    archetype_distribution: dict[PlayArchetype, int] = field(default_factory=dict)
    group_distribution: dict[ArchetypeGroup, float] = field(default_factory=dict)  # percent
    deviation_from_average: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["archetype_distribution"] = {
            archetype.value: count for archetype, count in self.archetype_distribution.items()
        }
        data["group_distribution"] = {
            group.value: round(pct, 1) for group, pct in self.group_distribution.items()
        }
        data["deviation_from_average"] = {
            axis: round(value, 1) for axis, value in self.deviation_from_average.items()
        }
        return data


@dataclass
class PeriodBreakdown:
    period: int
    attacks: int
    goals: int
    primary_archetype: PlayArchetype


@dataclass
class AttackDNA:
    """Combined attack analytics for a team or player."""

    fingerprint: PlayStyleFingerprint
    flow_field: FlowField
    ribbons: list[AttackRibbon]
    sequences: list[AttackSequence]
    total_attacks: int = 0
    goals_scored: int = 0
    conversion_rate: float = 0.0  # percent
    avg_transition_time: float = 0.0  # seconds
    period_breakdown: list[PeriodBreakdown] = field(default_factory=list)

    def to_dict(self, include_sequences: bool = False) -> dict[str, Any]:
        data = {
            "fingerprint": self.fingerprint.to_dict(),
            "flow_field": self.flow_field.to_dict(),
            "ribbons": [ribbon.to_dict() for ribbon in self.ribbons],
            "total_attacks": self.total_attacks,
            "goals_scored": self.goals_scored,
            "conversion_rate": round(self.conversion_rate, 1),
            "avg_transition_time": round(self.avg_transition_time, 2),
            "period_breakdown": [asdict(period) for period in self.period_breakdown],
        }
        if include_sequences:
            data["sequences"] = [sequence.to_dict() for sequence in self.sequences]
        return data


def _share(count: int, total: int) -> float:
    return count / total * 100


def classify_primary_style(
    axes: dict[str, float],
) -> tuple[PlayStyle, PlayStyle | None, int]:
    """
    Pick the dominant style from unrounded fingerprint axes.

    Args:
        axes: Fingerprint axis values keyed by axis name

    Returns:
        (primary_style, secondary_style, style_strength); Balanced when the
        leader does not clear the runner-up by a 30% relative margin
    """
    scores = [
        (style, sum(axes[axis] * weight for axis, weight in weights.items()))
        for style, weights in STYLE_WEIGHTS.items()
    ]
    scores.sort(key=lambda item: item[1], reverse=True)

    primary, primary_score = scores[0]
    secondary, secondary_score = scores[1]
    spread = primary_score - secondary_score
    strength = min(100, round_half_up(spread / (primary_score or 1) * 100))

    if strength < MIN_STYLE_STRENGTH:
        return PlayStyle.BALANCED, None, strength
    return primary, secondary, strength


def calculate_fingerprint(
    sequences: Sequence[AttackSequence],
    zone_entries: Sequence[ZoneEntry],
    team_id: int,
    player_id: int | None = None,
    sample_games: int = 0,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> PlayStyleFingerprint:
    """
    Build a play-style fingerprint.

    Args:
        sequences: Attack sequences
        zone_entries: Zone entries for the entry aggression axis
        team_id: Team ID
        player_id: Player ID (optional)
        sample_games: Number of games the sequences came from
        config: Analytics configuration

    Returns:
        PlayStyleFingerprint with rounded axes
    """
    total = len(sequences) or 1
    cycle_floor = config.sequences.fingerprint_cycle_min_seconds

    rush = sum(
        1 for seq in sequences
        if seq.group in (ArchetypeGroup.RUSH, ArchetypeGroup.TRANSITION)
    )
    cycle = sum(
        1 for seq in sequences
        if seq.group == ArchetypeGroup.CYCLE and seq.duration_seconds > cycle_floor
    )
    point = sum(1 for seq in sequences if seq.group == ArchetypeGroup.POINT)
    net_front = sum(1 for seq in sequences if seq.group == ArchetypeGroup.NET_FRONT)
    avg_transition = sum(seq.transition_time for seq in sequences) / total

    controlled = sum(1 for entry in zone_entries if entry.entry_type == EntryType.CONTROLLED)
    entry_aggression = _share(controlled, len(zone_entries)) if zone_entries else 50.0

    axes = {
        "rush_tendency": _share(rush, total),
        "cycle_tendency": _share(cycle, total),
        "point_focus": _share(point, total),
        "net_front_presence": _share(net_front, total),
        "transition_speed": clamp(100 - avg_transition * 5),
        "entry_aggression": entry_aggression,
    }

    archetype_distribution = {archetype: 0 for archetype in PlayArchetype}
    group_counts = {group: 0 for group in ArchetypeGroup}
    for seq in sequences:
        archetype_distribution[seq.archetype] += 1
        group_counts[seq.group] += 1

    baseline = config.league.fingerprint
    primary, secondary, strength = classify_primary_style(axes)

    return PlayStyleFingerprint(
        team_id=team_id,
        player_id=player_id,
        sample_games=sample_games,
        sample_size=len(sequences),
        primary_style=primary,
        secondary_style=secondary,
        style_strength=strength,
        archetype_distribution=archetype_distribution,
        group_distribution={
            group: _share(count, total) if sequences else 0.0
            for group, count in group_counts.items()
        },
        deviation_from_average={
            axis: axes[axis] - getattr(baseline, axis) for axis in FINGERPRINT_AXES
        },
        **{axis: round_half_up(axes[axis]) for axis in FINGERPRINT_AXES},
    )


def league_average_fingerprint(config: AnalyticsConfig = DEFAULT_CONFIG) -> PlayStyleFingerprint:
    """League-average reference fingerprint."""
    baseline = config.league.fingerprint
    return PlayStyleFingerprint(
        team_id=0,
        primary_style=PlayStyle.BALANCED,
        style_strength=0,
        archetype_distribution=dict(LEAGUE_ARCHETYPE_DISTRIBUTION),
        deviation_from_average={axis: 0.0 for axis in FINGERPRINT_AXES},
        **{axis: round_half_up(getattr(baseline, axis)) for axis in FINGERPRINT_AXES},
    )


def _period_breakdown(sequences: Sequence[AttackSequence]) -> list[PeriodBreakdown]:
    """Regulation periods only; overtime is grouped together and left out."""
    by_period: dict[int, list[AttackSequence]] = {}
    for seq in sequences:
        period = seq.period if seq.period <= 3 else 4
        by_period.setdefault(period, []).append(seq)

    breakdown = []
    for period in sorted(by_period):
        if period > 3:
            continue
        members = by_period[period]
        counts: dict[PlayArchetype, int] = {}
        for seq in members:
            counts[seq.archetype] = counts.get(seq.archetype, 0) + 1
        primary = PlayArchetype.CYCLE_HIGH
        best = 0
        for archetype, count in counts.items():
            if count > best:
                best = count
                primary = archetype
        breakdown.append(
            PeriodBreakdown(
                period=period,
                attacks=len(members),
                goals=sum(1 for seq in members if seq.outcome.result == SequenceResult.GOAL),
                primary_archetype=primary,
            )
        )
    return breakdown


def compute_attack_dna(
    games: Iterable[GameRecord],
    team_id: int,
    player_id: int | None = None,
    zone_entries: Sequence[ZoneEntry] = (),
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> AttackDNA:
    """
    Compute combined Attack DNA over one or more games.

    Args:
        games: Game records
        team_id: Team ID
        player_id: Restrict sequences to this shooter (optional)
        zone_entries: Zone entries for the entry aggression axis
        config: Analytics configuration

    Returns:
        AttackDNA
    """
    sequences: list[AttackSequence] = []
    game_count = 0
    for game in games:
        game_count += 1
        sequences.extend(build_attack_sequences(game, team_id, player_id, config))

    goals = sum(1 for seq in sequences if seq.outcome.result == SequenceResult.GOAL)
    total = len(sequences)
    logger.info(f"Attack DNA for team {team_id}: {total} sequences from {game_count} games")

    return AttackDNA(
        fingerprint=calculate_fingerprint(
            sequences, zone_entries, team_id, player_id, game_count, config
        ),
        flow_field=compute_flow_field(sequences, team_id, player_id, config.rink),
        ribbons=generate_attack_ribbons(sequences, top_n=5),
        sequences=sequences,
        total_attacks=total,
        goals_scored=goals,
        conversion_rate=goals / total * 100 if total else 0.0,
        avg_transition_time=sum(seq.transition_time for seq in sequences) / total if total else 0.0,
        period_breakdown=_period_breakdown(sequences),
    )
