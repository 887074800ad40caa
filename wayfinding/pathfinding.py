"""A* pathfinding on floor traversability grids.

Purpose:
- Compute shortest walkable routes with 8-way movement.
- Refuse diagonal corner cutting between two blocked cells.
- Translate between plan percentages and grid cells at the boundary.

Usage example:
    >>> import numpy as np
    >>> from wayfinding.pathfinding import find_path
    >>> grid = np.ones((100, 100), dtype=bool)
    >>> find_path(grid, (10.0, 10.0), (90.0, 90.0))[-1]
    (90.0, 90.0)
"""

from __future__ import annotations

import heapq
import math
from typing import Iterable

import numpy as np

from wayfinding.errors import NoRouteFound
from wayfinding.utils import GridPoint, PlanPoint, cell_to_pct, pct_to_cell

SQRT2 = math.sqrt(2)

_MOVES: tuple[tuple[int, int, float], ...] = (
    (-1, 0, 1.0),
    (1, 0, 1.0),
    (0, -1, 1.0),
    (0, 1, 1.0),
    (-1, -1, SQRT2),
    (-1, 1, SQRT2),
    (1, -1, SQRT2),
    (1, 1, SQRT2),
)


def _validate_grid(grid: np.ndarray) -> None:
    """Validate walkability grid contract (2D, non-empty, boolean)."""
    if not isinstance(grid, np.ndarray):
        raise ValueError("Grid must be a numpy array")
    if grid.ndim != 2 or grid.size == 0:
        raise ValueError("Grid must be a non-empty 2D array")
    if grid.dtype != np.bool_:
        raise ValueError("Grid must be a boolean array (True = walkable)")


def _octile(a: GridPoint, b: GridPoint) -> float:
    """Admissible distance estimate for 8-way movement with 1 / sqrt(2) costs."""
    dr = abs(a[0] - b[0])
    dc = abs(a[1] - b[1])
    return max(dr, dc) + (SQRT2 - 1) * min(dr, dc)


def _backtrack(came_from: dict[GridPoint, GridPoint], cell: GridPoint) -> list[GridPoint]:
    path = [cell]
    while cell in came_from:
        cell = came_from[cell]
        path.append(cell)
    path.reverse()
    return path


def astar(
    grid: np.ndarray,
    start: GridPoint,
    goal: GridPoint,
    open_cells: Iterable[GridPoint] = (),
) -> list[GridPoint]:
    """Compute the cheapest 8-way cell route via A*.

    Args:
        grid: 2D boolean grid, True where walkable.
        start: Start cell `(row, col)`.
        goal: Goal cell `(row, col)`.
        open_cells: Cells treated as walkable whatever the grid says. The grid
            itself is never modified.

    Returns:
        List of cells from start to goal. Empty list if no path exists.

    Raises:
        ValueError: If grid/start/goal are invalid.
    """
    _validate_grid(grid)

    rows, cols = grid.shape
    forced = set(open_cells)

    def passable(r: int, c: int) -> bool:
        return (r, c) in forced or bool(grid[r, c])

    for label, (r, c) in (("Start", start), ("Goal", goal)):
        if not (0 <= r < rows and 0 <= c < cols):
            raise ValueError(f"{label} is out of grid bounds")
        if not passable(r, c):
            raise ValueError(f"{label} cell is blocked")

    # (f, cell) ordering makes equal-cost frontiers pop in a fixed order.
    frontier: list[tuple[float, GridPoint]] = [(_octile(start, goal), start)]
    came_from: dict[GridPoint, GridPoint] = {}
    cost_so_far: dict[GridPoint, float] = {start: 0.0}
    settled: set[GridPoint] = set()

    while frontier:
        _, cell = heapq.heappop(frontier)
        if cell == goal:
            return _backtrack(came_from, cell)
        if cell in settled:
            continue
        settled.add(cell)

        r, c = cell
        for dr, dc, step in _MOVES:
            nr, nc = r + dr, c + dc
            if not (0 <= nr < rows and 0 <= nc < cols) or not passable(nr, nc):
                continue
            # A diagonal may not squeeze between two blocked orthogonal cells.
            if dr and dc and not passable(r + dr, c) and not passable(r, c + dc):
                continue

            nxt = (nr, nc)
            if nxt in settled:
                continue
            cost = cost_so_far[cell] + step
            if cost < cost_so_far.get(nxt, math.inf):
                cost_so_far[nxt] = cost
                came_from[nxt] = cell
                heapq.heappush(frontier, (cost + _octile(nxt, goal), nxt))

    return []


def find_path(grid: np.ndarray, start: PlanPoint, end: PlanPoint) -> list[PlanPoint]:
    """Route between two plan points on one floor.

    Start and end cells count as walkable even when the raster marks them as
    obstacles, so a desk drawn as furniture stays reachable.

    Returns:
        Plan-percentage points from start cell to end cell.

    Raises:
        NoRouteFound: If the cells are not connected.
    """
    _validate_grid(grid)
    rows, cols = grid.shape

    start_cell = pct_to_cell(start, rows, cols)
    goal_cell = pct_to_cell(end, rows, cols)

    cells = astar(grid, start_cell, goal_cell, open_cells=(start_cell, goal_cell))
    if not cells:
        raise NoRouteFound(f"No walkable route from {list(start)} to {list(end)}")

    return [cell_to_pct(cell, rows, cols) for cell in cells]
