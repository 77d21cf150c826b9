"""
Attack Flow Field and Ribbons

Spatial summaries of attack sequences:
    - Flow field: 10x8 grid over the full rink; each cell averages the
      direction of puck movement that starts in it, with event density and
      success rate
    - Attack ribbons: one averaged path per archetype, weighted by how often
      the archetype occurs

Ribbon paths are a literal average of origin and outcome points with
midpoint-derived Bezier controls. They show where an archetype usually starts
and ends and are not a fitted curve.
"""

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Sequence

import numpy as np

from rinkflow.config import DEFAULT_CONFIG, RinkConfig
from rinkflow.processors.attack_sequences import AttackSequence, PlayArchetype, SequenceResult

FLOW_GRID_WIDTH = 10
FLOW_GRID_HEIGHT = 8

TURNOVER_TYPES = frozenset({"giveaway", "turnover"})


@dataclass
class FlowFieldCell:
    """Direction and density of attack movement starting in one cell."""

    grid_x: int
    grid_y: int
    x: float  # cell center
    y: float
    direction: float = 0.0  # radians, mean step angle
    magnitude: float = 0.0  # 0-1, relative to the busiest cell
    event_count: int = 0
    success_rate: float = 0.0  # share of steps in sequences ending in goal or save
    shots: int = 0
    passes: int = 0
    turnovers: int = 0


@dataclass
class FlowField:
    team_id: int
    player_id: int | None
    grid_width: int
    grid_height: int
    sample_size: int
    cells: list[FlowFieldCell] = field(default_factory=list)

    def magnitude_grid(self) -> np.ndarray:
        """Magnitudes as a (grid_height, grid_width) array for plotting."""
        grid = np.zeros((self.grid_height, self.grid_width))
        for cell in self.cells:
            grid[cell.grid_y, cell.grid_x] = cell.magnitude
        return grid

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "player_id": self.player_id,
            "grid_width": self.grid_width,
            "grid_height": self.grid_height,
            "sample_size": self.sample_size,
            "cells": [
                {
                    **asdict(cell),
                    "direction": round(cell.direction, 4),
                    "magnitude": round(cell.magnitude, 4),
                    "success_rate": round(cell.success_rate, 4),
                }
                for cell in self.cells
            ],
        }


@dataclass(frozen=True)
class PathPoint:
    x: float
    y: float


@dataclass
class AttackRibbon:
    """Averaged attack path for one archetype."""

    archetype: PlayArchetype
    start: PathPoint
    control1: PathPoint
    control2: PathPoint
    end: PathPoint
    frequency: int
    percentage: float  # share of all sequences
    conversion_rate: float  # goals per sequence, percent
    width: float
    opacity: float = 0.6

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["percentage"] = round(self.percentage, 1)
        data["conversion_rate"] = round(self.conversion_rate, 1)
        data["width"] = round(self.width, 2)
        return data


DEFAULT_RIBBON_PATH = (PathPoint(0, 0), PathPoint(50, 0), PathPoint(50, 0), PathPoint(89, 0))


def _grid_cell(x: float, y: float, rink: RinkConfig) -> tuple[int, int]:
    cell_width = (rink.max_x - rink.min_x) / FLOW_GRID_WIDTH
    cell_height = (rink.max_y - rink.min_y) / FLOW_GRID_HEIGHT
    grid_x = int(math.floor((x - rink.min_x) / cell_width))
    grid_y = int(math.floor((y - rink.min_y) / cell_height))
    return (
        max(0, min(FLOW_GRID_WIDTH - 1, grid_x)),
        max(0, min(FLOW_GRID_HEIGHT - 1, grid_y)),
    )


def compute_flow_field(
    sequences: Sequence[AttackSequence],
    team_id: int,
    player_id: int | None = None,
    rink: RinkConfig = DEFAULT_CONFIG.rink,
) -> FlowField:
    """
    Accumulate waypoint steps into the flow grid.

    Args:
        sequences: Attack sequences
        team_id: Team the sequences belong to
        player_id: Player filter the sequences were built with (informational)
        rink: Rink bounds

    Returns:
        FlowField with cells in column-major order (x outer, y inner)
    """
    shape = (FLOW_GRID_WIDTH, FLOW_GRID_HEIGHT)
    direction_sum = np.zeros(shape)
    counts = np.zeros(shape, dtype=int)
    successes = np.zeros(shape)
    shots = np.zeros(shape, dtype=int)
    passes = np.zeros(shape, dtype=int)
    turnovers = np.zeros(shape, dtype=int)

    for sequence in sequences:
        succeeded = sequence.outcome.result in (SequenceResult.GOAL, SequenceResult.SAVE)
        waypoints = sequence.waypoints
        for step in range(len(waypoints) - 1):
            start = waypoints[step]
            end = waypoints[step + 1]
            cell = _grid_cell(start.x_coord, start.y_coord, rink)
            direction_sum[cell] += math.atan2(end.y_coord - start.y_coord, end.x_coord - start.x_coord)
            counts[cell] += 1
            if "shot" in start.event_type:
                shots[cell] += 1
            elif start.event_type in TURNOVER_TYPES:
                turnovers[cell] += 1
            else:
                passes[cell] += 1
            if succeeded:
                successes[cell] += 1

    max_count = max(1, int(counts.max()))
    cell_width = (rink.max_x - rink.min_x) / FLOW_GRID_WIDTH
    cell_height = (rink.max_y - rink.min_y) / FLOW_GRID_HEIGHT

    cells = []
    for grid_x in range(FLOW_GRID_WIDTH):
        for grid_y in range(FLOW_GRID_HEIGHT):
            count = int(counts[grid_x, grid_y])
            cell = FlowFieldCell(
                grid_x=grid_x,
                grid_y=grid_y,
                x=rink.min_x + (grid_x + 0.5) * cell_width,
                y=rink.min_y + (grid_y + 0.5) * cell_height,
                event_count=count,
                shots=int(shots[grid_x, grid_y]),
                passes=int(passes[grid_x, grid_y]),
                turnovers=int(turnovers[grid_x, grid_y]),
            )
            if count > 0:
                cell.direction = float(direction_sum[grid_x, grid_y] / count)
                cell.magnitude = count / max_count
                cell.success_rate = float(successes[grid_x, grid_y] / count)
            cells.append(cell)

    return FlowField(
        team_id=team_id,
        player_id=player_id,
        grid_width=FLOW_GRID_WIDTH,
        grid_height=FLOW_GRID_HEIGHT,
        sample_size=len(sequences),
        cells=cells,
    )


def _average_point(points: list[tuple[float, float]]) -> PathPoint | None:
    if not points:
        return None
    return PathPoint(
        x=sum(point[0] for point in points) / len(points),
        y=sum(point[1] for point in points) / len(points),
    )


def _average_path(
    sequences: Sequence[AttackSequence],
) -> tuple[PathPoint, PathPoint, PathPoint, PathPoint]:
    """Mean origin and outcome points; controls sit between them at each end's y."""
    starts = [
        (seq.origin.x_coord, seq.origin.y_coord)
        for seq in sequences
        if seq.origin.x_coord is not None and seq.origin.y_coord is not None
    ]
    ends = [
        (seq.outcome.x_coord, seq.outcome.y_coord)
        for seq in sequences
        if seq.outcome.x_coord is not None and seq.outcome.y_coord is not None
    ]
    default_start, _, _, default_end = DEFAULT_RIBBON_PATH
    start = _average_point(starts) or default_start
    end = _average_point(ends) or default_end
    if not sequences:
        return DEFAULT_RIBBON_PATH

    mid_x = (start.x + end.x) / 2
    control1 = PathPoint(x=start.x + (mid_x - start.x) * 0.5, y=start.y)
    control2 = PathPoint(x=mid_x + (end.x - mid_x) * 0.5, y=end.y)
    return start, control1, control2, end


def generate_attack_ribbons(
    sequences: Sequence[AttackSequence],
    top_n: int = 5,
) -> list[AttackRibbon]:
    """
    Group sequences by archetype into averaged ribbons.

    Args:
        sequences: Attack sequences
        top_n: Number of ribbons to keep

    Returns:
        Ribbons by descending frequency (first-seen order breaks ties)
    """
    if not sequences:
        return []

    groups: dict[PlayArchetype, list[AttackSequence]] = {}
    for sequence in sequences:
        groups.setdefault(sequence.archetype, []).append(sequence)

    total = len(sequences)
    ribbons = []
    for archetype, members in groups.items():
        start, control1, control2, end = _average_path(members)
        goals = sum(1 for seq in members if seq.outcome.result == SequenceResult.GOAL)
        ribbons.append(
            AttackRibbon(
                archetype=archetype,
                start=start,
                control1=control1,
                control2=control2,
                end=end,
                frequency=len(members),
                percentage=len(members) / total * 100,
                conversion_rate=goals / len(members) * 100,
                width=math.sqrt(len(members) / total) * 30 + 2,
            )
        )

    ribbons.sort(key=lambda ribbon: ribbon.frequency, reverse=True)
    return ribbons[:top_n]
