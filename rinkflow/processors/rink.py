"""
Rink Geometry and Clock Helpers

Shared primitives for the event-stream processors:
    - Period clock parsing (MM:SS elapsed)
    - Distance to the attacked goal and high-danger tests
    - Zone classification (directional attack zones and raw end-zone sides)
    - Score rounding and clamping used by published 0-100 indicators
"""

import math
from enum import Enum

from rinkflow.config import DEFAULT_CONFIG, RinkConfig, ShotQualityConfig


class AttackZone(str, Enum):
    """Zone relative to a team attacking toward positive x."""

    DEFENSIVE = "defensive"
    NEUTRAL = "neutral"
    OFFENSIVE = "offensive"


class EndZoneSide(str, Enum):
    """Literal rink side of a location, independent of attack direction."""

    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    POSITIVE = "positive"


def parse_clock(clock: str | None) -> int:
    """
    Convert an elapsed MM:SS clock to seconds.

    Empty or malformed clocks parse to 0.
    """
    if not clock:
        return 0
    parts = clock.split(":")
    try:
        minutes = int(parts[0]) if parts[0] else 0
        seconds = int(parts[1]) if len(parts) > 1 and parts[1] else 0
    except ValueError:
        return 0
    return minutes * 60 + seconds


def clock_gap(start: str | None, end: str | None) -> int:
    """Absolute number of seconds between two period clocks."""
    return abs(parse_clock(end) - parse_clock(start))


def distance_from_goal(
    x: float,
    y: float,
    rink: RinkConfig = DEFAULT_CONFIG.rink,
) -> float:
    """Distance to the goal on the same side of center as the shot."""
    goal_x = rink.goal_x if x >= 0 else -rink.goal_x
    return math.sqrt((x - goal_x) ** 2 + y**2)


def is_high_danger(
    x: float,
    y: float,
    shot_quality: ShotQualityConfig = DEFAULT_CONFIG.shot_quality,
    rink: RinkConfig = DEFAULT_CONFIG.rink,
) -> bool:
    """Slot test: close to the net and not too wide."""
    return (
        distance_from_goal(x, y, rink) <= shot_quality.high_danger_distance
        and abs(y) <= shot_quality.high_danger_lateral
    )


def attack_zone(x: float, rink: RinkConfig = DEFAULT_CONFIG.rink) -> AttackZone:
    """Classify x assuming the team attacks toward positive x."""
    if x < -rink.blue_line_x:
        return AttackZone.DEFENSIVE
    if x > rink.blue_line_x:
        return AttackZone.OFFENSIVE
    return AttackZone.NEUTRAL


def end_zone_side(x: float, rink: RinkConfig = DEFAULT_CONFIG.rink) -> EndZoneSide:
    if x > rink.blue_line_x:
        return EndZoneSide.POSITIVE
    if x < -rink.blue_line_x:
        return EndZoneSide.NEGATIVE
    return EndZoneSide.NEUTRAL


def in_end_zone(x: float, rink: RinkConfig = DEFAULT_CONFIG.rink) -> bool:
    return abs(x) > rink.blue_line_x


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return math.floor(value + 0.5)


def round_to(value: float, digits: int = 1) -> float:
    """Round a percentage for reporting, halves toward positive infinity."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor
