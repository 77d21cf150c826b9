"""
Rinkflow Tactical Analytics

Event-stream analytics for hockey: game-state shot quality, attack sequence
archetypes, zone transitions, behavioural change detection and line chemistry.
"""

__version__ = "0.1.0"
__author__ = "Rinkflow Analytics Team"
