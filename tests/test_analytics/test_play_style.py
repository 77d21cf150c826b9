"""
Tests for Play Style Analytics

Validates fingerprint axes, primary style selection, league baselines and
the combined Attack DNA.
"""

import pytest

from rinkflow.analytics.play_style import (
    PlayStyle,
    calculate_fingerprint,
    classify_primary_style,
    compute_attack_dna,
    league_average_fingerprint,
)
from rinkflow.processors.attack_sequences import ArchetypeGroup, PlayArchetype
from rinkflow.processors.rink import EndZoneSide
from rinkflow.processors.zone_transitions import EntryType, ZoneEntry


def _entry(entry_type: EntryType) -> ZoneEntry:
    return ZoneEntry(
        event_id=1,
        player_id=None,
        team_id=22,
        period=1,
        time_in_period="00:00",
        entry_type=entry_type,
        x_coord=30.0,
        y_coord=0.0,
        end_zone=EndZoneSide.POSITIVE,
        success=True,
        quick_shot=False,
    )


def _season(make_sequence):
    rush = [make_sequence(PlayArchetype.RUSH_ODDMAN, duration=5) for _ in range(10)]
    cycle = [make_sequence(PlayArchetype.CYCLE_HIGH, duration=20) for _ in range(6)]
    point = [make_sequence(PlayArchetype.POINT_SHOT, duration=10) for _ in range(4)]
    return rush + cycle + point


class TestClassifyPrimaryStyle:
    """Tests for classify_primary_style."""

    def test_all_zero_is_balanced(self):
        style, secondary, strength = classify_primary_style(
            {
                "rush_tendency": 0,
                "cycle_tendency": 0,
                "point_focus": 0,
                "net_front_presence": 0,
                "transition_speed": 0,
            }
        )
        assert style == PlayStyle.BALANCED
        assert secondary is None
        assert strength == 0

    def test_clear_leader(self):
        style, secondary, strength = classify_primary_style(
            {
                "rush_tendency": 60,
                "cycle_tendency": 10,
                "point_focus": 10,
                "net_front_presence": 10,
                "transition_speed": 50,
            }
        )
        assert style == PlayStyle.RUSH
        assert secondary == PlayStyle.TRANSITION
        assert strength == 55

    def test_close_scores_are_balanced(self):
        style, secondary, _ = classify_primary_style(
            {
                "rush_tendency": 0,
                "cycle_tendency": 20,
                "point_focus": 15,
                "net_front_presence": 0,
                "transition_speed": 0,
            }
        )
        assert style == PlayStyle.BALANCED
        assert secondary is None


class TestCalculateFingerprint:
    """Tests for calculate_fingerprint."""

    def test_axes(self, make_sequence):
        fingerprint = calculate_fingerprint(_season(make_sequence), [], 22)

        assert fingerprint.sample_size == 20
        assert fingerprint.rush_tendency == 50
        assert fingerprint.cycle_tendency == 30
        assert fingerprint.point_focus == 20
        assert fingerprint.net_front_presence == 0
        assert fingerprint.transition_speed == 48
        assert fingerprint.primary_style == PlayStyle.RUSH
        assert fingerprint.secondary_style == PlayStyle.TRANSITION
        assert fingerprint.style_strength == 52

    def test_entry_aggression_defaults_to_50(self, make_sequence):
        """With no zone entries the entry axis is exactly 50."""
        assert calculate_fingerprint(_season(make_sequence), [], 22).entry_aggression == 50

    def test_entry_aggression_from_entries(self, make_sequence):
        entries = [_entry(EntryType.CONTROLLED), _entry(EntryType.CONTROLLED), _entry(EntryType.DUMP)]
        assert calculate_fingerprint(_season(make_sequence), entries, 22).entry_aggression == 67

    def test_short_cycles_do_not_count(self, make_sequence):
        """Cycle tendency only counts cycles longer than ten seconds."""
        sequences = [
            make_sequence(PlayArchetype.CYCLE_LOW, duration=10),
            make_sequence(PlayArchetype.CYCLE_HIGH, duration=11),
        ]
        assert calculate_fingerprint(sequences, [], 22).cycle_tendency == 50

    def test_distributions(self, make_sequence):
        fingerprint = calculate_fingerprint(_season(make_sequence), [], 22)

        assert fingerprint.archetype_distribution[PlayArchetype.RUSH_ODDMAN] == 10
        assert sum(fingerprint.archetype_distribution.values()) == 20
        assert fingerprint.group_distribution[ArchetypeGroup.RUSH] == pytest.approx(50.0)
        assert sum(fingerprint.group_distribution.values()) == pytest.approx(100.0)
        assert fingerprint.deviation_from_average["rush_tendency"] == pytest.approx(25.0)

    def test_empty(self):
        fingerprint = calculate_fingerprint([], [], 22)
        assert fingerprint.rush_tendency == 0
        assert fingerprint.transition_speed == 100
        assert fingerprint.entry_aggression == 50
        assert all(value == 0.0 for value in fingerprint.group_distribution.values())

    def test_to_dict_uses_values(self, make_sequence):
        data = calculate_fingerprint(_season(make_sequence), [], 22).to_dict()
        assert data["archetype_distribution"]["rush-oddman"] == 10
        assert data["group_distribution"]["rush"] == 50.0


class TestLeagueAverage:
    def test_baseline(self):
        league = league_average_fingerprint()
        assert league.rush_tendency == 25
        assert league.cycle_tendency == 30
        assert league.entry_aggression == 55
        assert league.primary_style == PlayStyle.BALANCED
        assert sum(league.archetype_distribution.values()) == 100


class TestAttackDNA:
    """Tests for compute_attack_dna."""

    def test_sample_game(self, sample_game):
        dna = compute_attack_dna([sample_game], 22)

        assert dna.total_attacks == 2
        assert dna.goals_scored == 1
        assert dna.conversion_rate == pytest.approx(50.0)
        assert dna.avg_transition_time == pytest.approx(4.5)
        assert dna.fingerprint.sample_games == 1
        assert len(dna.ribbons) == 2
        assert len(dna.period_breakdown) == 1
        assert dna.period_breakdown[0].attacks == 2
        assert dna.period_breakdown[0].primary_archetype == PlayArchetype.RUSH_ODDMAN

    def test_to_dict_omits_sequences_by_default(self, sample_game):
        dna = compute_attack_dna([sample_game], 22)
        assert "sequences" not in dna.to_dict()
        assert len(dna.to_dict(include_sequences=True)["sequences"]) == 2

    def test_overtime_excluded_from_breakdown(self, make_event, make_game):
        game = make_game(
            [
                make_event(1, "faceoff", 22, 0, 0, "00:00", period=4),
                make_event(2, "goal", 22, 84, 0, "00:05", period=4),
            ]
        )
        dna = compute_attack_dna([game], 22)
        assert dna.total_attacks == 1
        assert dna.period_breakdown == []
        assert dna.fingerprint.rush_tendency == 100

    def test_no_games(self):
        dna = compute_attack_dna([], 22)
        assert dna.total_attacks == 0
        assert dna.conversion_rate == 0.0
        assert dna.ribbons == []
        assert dna.period_breakdown == []

    def test_idempotent(self, sample_game):
        assert compute_attack_dna([sample_game], 22).to_dict() == compute_attack_dna(
            [sample_game], 22
        ).to_dict()
