"""
Data Models Module

This module contains Pydantic models for the game event timeline.

Models:
    - TimelineEvent: Timestamped, optionally located play-by-play event
    - ShotEvent: Shot attempt with shooter and on-ice players
    - Shift: Player on-ice interval
    - GameRecord: Ordered events, shots and shifts for one game
"""

from rinkflow.models.timeline import (
    EventType,
    GameRecord,
    SHOT_ATTEMPT_TYPES,
    Shift,
    ShotEvent,
    TimelineEvent,
)

__all__ = [
    "EventType",
    "GameRecord",
    "SHOT_ATTEMPT_TYPES",
    "Shift",
    "ShotEvent",
    "TimelineEvent",
]
