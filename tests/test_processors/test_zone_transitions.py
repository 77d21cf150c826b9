"""
Tests for Zone Transition Detector

Validates blue-line crossing detection, entry classification rules,
exit typing and the summary analytics.
"""

import pytest

from rinkflow.processors.rink import EndZoneSide
from rinkflow.processors.zone_transitions import (
    EntryContext,
    EntryType,
    ExitType,
    ZoneTransitionDetector,
    calculate_zone_analytics,
    classify_entry,
    detect_zone_entries,
    detect_zone_exits,
)


class TestClassifyEntry:
    """Tests for the ordered entry rules."""

    def test_shot_or_giveaway_is_dump(self):
        """Shots and giveaways at the line are dumps even with a quick follow-up."""
        for event_type in ("shot-on-goal", "goal", "missed-shot", "blocked-shot", "giveaway"):
            context = EntryContext(event_type, True, "shot-on-goal", 1)
            assert classify_entry(context) == EntryType.DUMP

    def test_possession_won_is_controlled(self):
        assert classify_entry(EntryContext("takeaway", False)) == EntryType.CONTROLLED
        assert classify_entry(EntryContext("faceoff", True)) == EntryType.CONTROLLED

    def test_lost_faceoff_falls_through(self):
        """A faceoff the entering team did not win is not possession."""
        assert classify_entry(EntryContext("faceoff", False)) == EntryType.DUMP

    def test_quick_shot_is_controlled(self):
        assert classify_entry(EntryContext("hit", True, "missed-shot", 3)) == EntryType.CONTROLLED

    def test_stall_is_dump(self):
        assert classify_entry(EntryContext("hit", True, "hit", 6)) == EntryType.DUMP
        assert classify_entry(EntryContext("hit", True, "stoppage", 1)) == EntryType.DUMP

    def test_ambiguous_defaults_to_dump(self):
        """Entries no rule matches are treated as dumps."""
        assert classify_entry(EntryContext("hit", True)) == EntryType.DUMP
        assert classify_entry(EntryContext("hit", True, "hit", 4)) == EntryType.DUMP


class TestDetectEntries:
    """Tests for entry detection."""

    def test_controlled_entry_with_quick_shot(self, make_event):
        """A carried entry followed by a quick shot is controlled and sustained."""
        events = [
            make_event(1, "hit", 22, 0, 0, "00:00"),
            make_event(2, "hit", 22, 30, 0, "00:02", player_id=97),
            make_event(3, "shot-on-goal", 22, 60, 0, "00:04"),
        ]

        entries = detect_zone_entries(events)

        assert len(entries) == 1
        entry = entries[0]
        assert entry.event_id == 2
        assert entry.player_id == 97
        assert entry.entry_type == EntryType.CONTROLLED
        assert entry.end_zone == EndZoneSide.POSITIVE
        assert entry.success is True
        assert entry.quick_shot is True

    def test_takeaway_entry(self, make_event):
        events = [
            make_event(1, "hit", 22, 0, 0, "00:00"),
            make_event(2, "takeaway", 22, -40, 5, "00:02"),
        ]
        entries = detect_zone_entries(events)
        assert entries[0].entry_type == EntryType.CONTROLLED
        assert entries[0].end_zone == EndZoneSide.NEGATIVE

    def test_stalled_entry_is_dump(self, make_event):
        events = [
            make_event(1, "hit", 22, 0, 0, "00:00"),
            make_event(2, "hit", 22, 30, 0, "00:02"),
            make_event(3, "hit", 22, 40, 0, "00:10"),
        ]
        entries = detect_zone_entries(events)
        assert entries[0].entry_type == EntryType.DUMP
        assert entries[0].quick_shot is False

    def test_opponent_event_breaks_sustain(self, make_event):
        events = [
            make_event(1, "hit", 22, 0, 0, "00:00"),
            make_event(2, "hit", 22, 30, 0, "00:02"),
            make_event(3, "takeaway", 10, 35, 0, "00:03"),
        ]
        entries = detect_zone_entries(events, team_id=22)
        assert entries[0].success is False

    def test_unlocated_events_do_not_change_state(self, make_event):
        """Events without coordinates or team are skipped by the tracker."""
        events = [
            make_event(1, "hit", 22, 0, 0, "00:00"),
            make_event(2, "shot-on-goal", 22, None, None, "00:01"),
            make_event(3, "stoppage", None, 50, 0, "00:01"),
            make_event(4, "hit", 22, 30, 0, "00:02"),
        ]
        entries = detect_zone_entries(events)
        assert [entry.event_id for entry in entries] == [4]

    def test_teams_tracked_separately(self, sample_game):
        """Each team's crossings come from its own event track."""
        entries = detect_zone_entries(sample_game.events)

        assert [(entry.event_id, entry.team_id) for entry in entries] == [(3, 22), (9, 10)]
        assert entries[0].entry_type == EntryType.DUMP
        assert entries[1].end_zone == EndZoneSide.NEGATIVE

    def test_team_filter(self, sample_game):
        entries = detect_zone_entries(sample_game.events, team_id=10)
        assert [entry.event_id for entry in entries] == [9]

    def test_no_events(self):
        assert detect_zone_entries([]) == []


class TestDetectExits:
    """Tests for exit detection."""

    def test_clear_under_pressure(self, make_event):
        events = [
            make_event(1, "hit", 22, 60, 0, "00:00"),
            make_event(2, "takeaway", 22, 10, 0, "00:02"),
            make_event(3, "takeaway", 10, 20, 0, "00:03"),
        ]

        exits = detect_zone_exits(events, team_id=22)

        assert len(exits) == 1
        assert exits[0].exit_type == ExitType.CLEAR
        assert exits[0].end_zone == EndZoneSide.POSITIVE
        assert exits[0].success is False

    def test_outlet_and_carry(self, make_event):
        detector = ZoneTransitionDetector()
        events = [
            make_event(1, "hit", 22, -60, 0, "00:00"),
            make_event(2, "shot-on-goal", 22, 0, 0, "00:02"),
            make_event(3, "hit", 22, -60, 0, "00:04"),
            make_event(4, "faceoff", 22, 0, 0, "00:06"),
        ]

        exits = detector.detect_exits(events)

        assert [exit_.exit_type for exit_ in exits] == [ExitType.PASS, ExitType.CONTROLLED]
        assert all(exit_.end_zone == EndZoneSide.NEGATIVE for exit_ in exits)
        assert all(exit_.success for exit_ in exits)

    def test_sample_game_exit(self, sample_game):
        exits = detect_zone_exits(sample_game.events)
        assert [(exit_.event_id, exit_.team_id) for exit_ in exits] == [(8, 10)]
        assert exits[0].exit_type == ExitType.CONTROLLED


class TestZoneAnalytics:
    """Tests for calculate_zone_analytics."""

    def test_rates(self, make_event):
        events = [
            make_event(1, "hit", 22, 0, 0, "00:00"),
            make_event(2, "takeaway", 22, 30, 0, "00:02"),
            make_event(3, "hit", 22, 0, 0, "00:10"),
            make_event(4, "takeaway", 22, 30, 0, "00:12"),
            make_event(5, "hit", 22, 0, 0, "00:20"),
            make_event(6, "giveaway", 22, 30, 0, "00:22"),
        ]
        entries = detect_zone_entries(events)
        exits = detect_zone_exits(events)

        analytics = calculate_zone_analytics(entries, exits)

        assert analytics.total_entries == 3
        assert analytics.controlled_entries == 2
        assert analytics.dump_ins == 1
        assert analytics.controlled_entry_rate == pytest.approx(66.7)
        assert analytics.total_exits == 2
        assert analytics.exit_success_rate == pytest.approx(100.0)

    def test_empty(self):
        analytics = calculate_zone_analytics([], [])
        assert analytics.controlled_entry_rate == 0.0
        assert analytics.exit_success_rate == 0.0
