"""Coordinate helpers shared across wayfinding modules.

Conventions:
- Plan points are `(x, y)` percentages of the floor-plan image, both in [0, 100].
- Grid cells are `(row, col)`; x maps to the column and y to the row.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

import numpy as np

from wayfinding.errors import InvalidCoordinate

PlanPoint = tuple[float, float]
GridPoint = tuple[int, int]


def check_plan_point(value: Sequence[float], label: str = "point") -> PlanPoint:
    """Validate and normalize a plan-percentage `[x, y]` pair.

    Raises:
        InvalidCoordinate: If the value is not two finite numbers in [0, 100].
    """
    try:
        if len(value) != 2:
            raise InvalidCoordinate(f"{label} must be an [x, y] pair")
        x, y = float(value[0]), float(value[1])
    except (TypeError, ValueError) as exc:
        if isinstance(exc, InvalidCoordinate):
            raise
        raise InvalidCoordinate(f"{label} must contain two numbers") from exc

    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidCoordinate(f"{label} must be finite")
    if not (0.0 <= x <= 100.0 and 0.0 <= y <= 100.0):
        raise InvalidCoordinate(f"{label} must lie within [0, 100] on both axes")
    return x, y


def pct_to_cell(point: PlanPoint, rows: int, cols: int) -> GridPoint:
    """Map a plan point to its clamped `(row, col)` grid cell."""
    if rows <= 0 or cols <= 0:
        raise ValueError("rows and cols must be > 0")

    x, y = point
    col = int(math.floor(x * cols / 100.0))
    row = int(math.floor(y * rows / 100.0))
    row = max(0, min(rows - 1, row))
    col = max(0, min(cols - 1, col))
    return row, col


def cell_to_pct(cell: GridPoint, rows: int, cols: int) -> PlanPoint:
    """Map a `(row, col)` cell back to plan percentages."""
    if rows <= 0 or cols <= 0:
        raise ValueError("rows and cols must be > 0")
    row, col = cell
    return col * 100.0 / cols, row * 100.0 / rows


def planar_distance(a: PlanPoint, b: PlanPoint) -> float:
    """Euclidean distance between two plan points."""
    return math.hypot(b[0] - a[0], b[1] - a[1])


def to_serializable_path(path: Iterable[PlanPoint]) -> list[list[float]]:
    """Convert `(x, y)` tuples to JSON-friendly `[x, y]` lists."""
    return [[float(x), float(y)] for x, y in path]


def json_grid(grid: np.ndarray) -> list[list[int]]:
    """Convert a boolean walkability grid to nested int lists (1 = walkable)."""
    if not isinstance(grid, np.ndarray) or grid.ndim != 2:
        raise ValueError("grid must be a 2D numpy array")
    return grid.astype(int).tolist()
