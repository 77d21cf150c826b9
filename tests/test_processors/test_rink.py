"""
Tests for Rink Geometry and Clock Helpers
"""

import math

import pytest

from rinkflow.processors.rink import (
    AttackZone,
    EndZoneSide,
    attack_zone,
    clamp,
    clock_gap,
    distance_from_goal,
    end_zone_side,
    in_end_zone,
    is_high_danger,
    parse_clock,
    round_half_up,
    round_to,
)


class TestClock:
    """Tests for period clock parsing."""

    def test_parse_clock(self):
        assert parse_clock("00:00") == 0
        assert parse_clock("05:30") == 330
        assert parse_clock("19:59") == 1199

    def test_malformed_clock_is_zero(self):
        """Empty and malformed clocks parse to 0."""
        assert parse_clock("") == 0
        assert parse_clock(None) == 0
        assert parse_clock("ab:cd") == 0

    def test_clock_gap_is_absolute(self):
        assert clock_gap("01:00", "01:05") == 5
        assert clock_gap("01:05", "01:00") == 5


class TestGeometry:
    """Tests for distance, danger and zones."""

    def test_distance_uses_nearest_goal(self):
        """Shots on either side of center measure to their own end's goal."""
        assert distance_from_goal(89, 0) == pytest.approx(0.0)
        assert distance_from_goal(-80, 5) == pytest.approx(math.sqrt(81 + 25))

    def test_high_danger_boundaries(self):
        """Danger thresholds are inclusive."""
        assert is_high_danger(64, 0) is True
        assert is_high_danger(63, 0) is False
        assert is_high_danger(80, 5) is True
        assert is_high_danger(89, 21) is False

    def test_attack_zone(self):
        assert attack_zone(-30) == AttackZone.DEFENSIVE
        assert attack_zone(25) == AttackZone.NEUTRAL
        assert attack_zone(26) == AttackZone.OFFENSIVE

    def test_end_zone_side(self):
        assert end_zone_side(60) == EndZoneSide.POSITIVE
        assert end_zone_side(-60) == EndZoneSide.NEGATIVE
        assert end_zone_side(0) == EndZoneSide.NEUTRAL
        assert in_end_zone(-26) is True
        assert in_end_zone(25) is False


class TestRounding:
    """Tests for reporting helpers."""

    def test_round_half_up(self):
        """Halves round toward positive infinity."""
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(-2.5) == -2
        assert round_half_up(2.4) == 2

    def test_round_to(self):
        assert round_to(66.666) == 66.7
        assert round_to(12.25, 1) == pytest.approx(12.3)

    def test_clamp(self):
        assert clamp(150) == 100
        assert clamp(-5) == 0
        assert clamp(42.0) == 42.0
