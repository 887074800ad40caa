"""Turn raw plan paths into grouped walking instructions and metrics.

Directions are classified per step on the image axes: x growth is "right",
x decrease "left", y growth "forward" and y decrease "backward". Horizontal
movement wins for diagonal steps.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from shapely.geometry import MultiPoint, Point

from wayfinding.models import Landmark, MoveInstruction, Resource
from wayfinding.utils import PlanPoint, planar_distance


def step_direction(prev: PlanPoint, curr: PlanPoint) -> str | None:
    """Classify one step; None for a zero-length step."""
    dx = curr[0] - prev[0]
    dy = curr[1] - prev[1]
    if dx > 0:
        return "right"
    if dx < 0:
        return "left"
    if dy > 0:
        return "forward"
    if dy < 0:
        return "backward"
    return None


def _group_steps(path: Sequence[PlanPoint]) -> list[tuple[str, int, int, int]]:
    """Group consecutive same-direction steps.

    Returns `(direction, step_count, first_index, last_index)` tuples where the
    indices bound the sub-path covered by the group.
    """
    groups: list[tuple[str, int, int, int]] = []
    current: str | None = None
    steps = 0
    first = 0

    for i in range(1, len(path)):
        direction = step_direction(path[i - 1], path[i])
        if direction is None:
            continue
        if direction != current:
            if current is not None:
                groups.append((current, steps, first, i - 1))
            current = direction
            steps = 1
            first = i - 1
        else:
            steps += 1

    if current is not None:
        groups.append((current, steps, first, len(path) - 1))
    return groups


def nearest_landmark(
    points: Sequence[PlanPoint],
    resources: Iterable[Resource],
    max_distance: float | None = None,
) -> Landmark | None:
    """Pick the resource closest to any of `points`.

    Ties resolve by resource id. Resources farther than `max_distance` are
    ignored when a limit is given.
    """
    if not points:
        return None

    sub_path = MultiPoint([(float(x), float(y)) for x, y in points])
    best: tuple[float, str, Resource] | None = None
    for resource in resources:
        d = float(sub_path.distance(Point(resource.location)))
        if max_distance is not None and d > max_distance:
            continue
        key = (d, resource.id, resource)
        if best is None or key[:2] < best[:2]:
            best = key

    if best is None:
        return None
    d, _, resource = best
    return Landmark(resource_id=resource.id, name=resource.name, distance=d)


def generate_instructions(
    path: Sequence[PlanPoint],
    resources: Iterable[Resource] = (),
    landmark_radius: float | None = None,
) -> list[MoveInstruction]:
    """Build grouped move instructions for one floor leg.

    Args:
        path: Plan points for a single floor.
        resources: Landmark candidates on that floor.
        landmark_radius: Max plan distance for a landmark, None for no limit.

    Returns:
        One `MoveInstruction` per direction change, carrying step counts.
    """
    candidates = list(resources)
    instructions: list[MoveInstruction] = []

    for direction, steps, first, last in _group_steps(path):
        landmark = None
        if candidates:
            landmark = nearest_landmark(path[first : last + 1], candidates, landmark_radius)
        instructions.append(MoveInstruction(direction=direction, distance=steps, landmark=landmark))

    return instructions


def path_distance(path: Sequence[PlanPoint]) -> float:
    """Sum of Euclidean step lengths in plan percentages."""
    return float(sum(planar_distance(path[i - 1], path[i]) for i in range(1, len(path))))


def path_distance_m(path: Sequence[PlanPoint], real_width: float, real_height: float) -> float:
    """Sum of step lengths rescaled per axis by the floor's real extent."""
    if real_width <= 0 or real_height <= 0:
        raise ValueError("real_width and real_height must be > 0")

    sx = real_width / 100.0
    sy = real_height / 100.0
    total = 0.0
    for i in range(1, len(path)):
        dx = (path[i][0] - path[i - 1][0]) * sx
        dy = (path[i][1] - path[i - 1][1]) * sy
        total += math.hypot(dx, dy)
    return total


def estimate_walking_time(distance_m: float, walking_speed_mps: float) -> int:
    """Whole seconds needed to walk `distance_m` at `walking_speed_mps`."""
    if walking_speed_mps <= 0:
        raise ValueError("walking_speed_mps must be > 0")
    return int(round(distance_m / walking_speed_mps))
