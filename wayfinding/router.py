"""Multi-floor routing through stairs and elevator transition points.

A cross-floor route is two single-floor legs joined by one transition:
start point -> nearest matching transition on the start floor, then the
nearest matching transition on the end floor -> end point.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np

from wayfinding.errors import NoTransitionAvailable
from wayfinding.models import Floor, TransitionInstruction, TransitionPoint
from wayfinding.pathfinding import find_path
from wayfinding.utils import PlanPoint, planar_distance

GridProvider = Callable[[Floor], np.ndarray]


@dataclass(slots=True)
class RouteLeg:
    """Path segment walked on a single floor."""

    floor: Floor
    path: list[PlanPoint]


@dataclass(slots=True)
class MultiFloorRoute:
    first: RouteLeg
    transition: TransitionInstruction
    second: RouteLeg

    @property
    def path(self) -> list[PlanPoint]:
        return [*self.first.path, *self.second.path]


def nearest_transition(point: PlanPoint, floor: Floor, target_floor_number: int) -> TransitionPoint | None:
    """Closest transition on `floor` that connects to `target_floor_number`."""
    matching = [t for t in floor.transition_points if t.connects_to(target_floor_number)]
    if not matching:
        return None
    # min() keeps the first of equally distant points, i.e. authoring order.
    return min(matching, key=lambda t: planar_distance(point, t.location))


def find_connecting_transitions(
    start_point: PlanPoint,
    end_point: PlanPoint,
    start_floor: Floor,
    end_floor: Floor,
) -> tuple[TransitionPoint, TransitionPoint]:
    """Pick the departure and arrival transition points for a floor change.

    Raises:
        NoTransitionAvailable: If either floor lacks a transition point that
            lists the other floor in its connected floors.
    """
    departure = nearest_transition(start_point, start_floor, end_floor.floor_number)
    if departure is None:
        raise NoTransitionAvailable(
            f"No transition on floor {start_floor.floor_number} connects to floor {end_floor.floor_number}"
        )

    arrival = nearest_transition(end_point, end_floor, start_floor.floor_number)
    if arrival is None:
        raise NoTransitionAvailable(
            f"No transition on floor {end_floor.floor_number} connects to floor {start_floor.floor_number}"
        )

    return departure, arrival


def route_across_floors(
    start_point: PlanPoint,
    end_point: PlanPoint,
    start_floor: Floor,
    end_floor: Floor,
    grid_for: GridProvider,
) -> MultiFloorRoute:
    """Compute a two-leg route between different floors.

    Transition points are resolved before any grid is requested, so a missing
    connection fails without loading floor plans.

    Args:
        start_point: Plan point on `start_floor`.
        end_point: Plan point on `end_floor`.
        start_floor: Departure floor.
        end_floor: Destination floor.
        grid_for: Builds the walkability grid for a floor.

    Raises:
        NoTransitionAvailable: If the floors are not connected.
        NoRouteFound: If either leg is unreachable on its floor.
    """
    if start_floor.floor_number == end_floor.floor_number:
        raise ValueError("route_across_floors requires two different floor numbers")

    departure, arrival = find_connecting_transitions(start_point, end_point, start_floor, end_floor)

    first_path = find_path(grid_for(start_floor), start_point, departure.location)
    second_path = find_path(grid_for(end_floor), arrival.location, end_point)

    return MultiFloorRoute(
        first=RouteLeg(floor=start_floor, path=first_path),
        transition=TransitionInstruction(
            type=departure.type,
            from_floor=start_floor.floor_number,
            to_floor=end_floor.floor_number,
        ),
        second=RouteLeg(floor=end_floor, path=second_path),
    )
