"""Per-request navigation orchestration.

`NavigationService` exposes the two core operations:

- `locate`: geodetic fix -> plan position on a floor.
- `route`: plan point + floor -> plan point + floor, with instructions,
  distance and a walking-time estimate.

Nothing is cached between calls. Each floor involved in a route has its
floor-plan raster loaded and its grid rebuilt, so admin edits to a plan are
picked up by the next request.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from wayfinding.app_logger import get_logger
from wayfinding.config import NavigationSettings
from wayfinding.errors import FloorNotFound, ResourceNotFound
from wayfinding.geodesy import locate as locate_on_floor
from wayfinding.grid import build_traversability_grid
from wayfinding.instructions import (
    estimate_walking_time,
    generate_instructions,
    path_distance,
    path_distance_m,
)
from wayfinding.models import Floor, GeoPoint, Instruction, Resource, RouteResult
from wayfinding.pathfinding import find_path
from wayfinding.repository import FloorRepository
from wayfinding.router import RouteLeg, route_across_floors
from wayfinding.utils import PlanPoint, check_plan_point

logger = get_logger(__name__)


class NavigationService:
    """Stateless navigation operations over a floor repository."""

    def __init__(self, repository: FloorRepository, settings: NavigationSettings | None = None) -> None:
        self.repository = repository
        self.settings = settings or NavigationSettings()

    def company_floor(self, company_id: str | None, floor_id: str) -> Floor:
        """Fetch a floor, hiding floors that belong to another company."""
        floor = self.repository.get_floor(floor_id)
        if company_id is not None and floor.company_id != str(company_id):
            raise FloorNotFound(f"Floor '{floor_id}' was not found")
        return floor

    def locate(self, position: GeoPoint, floor_id: str, company_id: str | None = None) -> PlanPoint:
        """Project a geodetic fix onto the plan of `floor_id`."""
        return locate_on_floor(position, self.company_floor(company_id, floor_id))

    def list_floors(self, company_id: str) -> list[Floor]:
        return self.repository.list_floors(str(company_id))

    def search_destinations(
        self,
        company_id: str,
        query: str | None = None,
        resource_type: str | None = None,
    ) -> list[tuple[Resource, Floor]]:
        """Resources matching the search, each paired with its floor."""
        hits = self.repository.search_resources(str(company_id), query=query, resource_type=resource_type)
        logger.debug("Destination search for company %s (%r, %r): %d hits", company_id, query, resource_type, len(hits))
        return [(resource, self.repository.get_floor(resource.floor_id)) for resource in hits]

    def build_grid(self, floor: Floor) -> np.ndarray:
        """Load the floor's raster and build a fresh walkability grid.

        The raster load is the blocking step; grid construction starts only
        once the bytes are available, and any load failure propagates.
        """
        raw = self.repository.load_raster_image(floor.layout_image_ref)
        return build_traversability_grid(
            raw,
            walkable_paths=floor.walkable_paths,
            grid_size=self.settings.grid_size,
            threshold=self.settings.walkable_threshold,
        )

    def route(
        self,
        company_id: str,
        start_point: Sequence[float],
        end_point: Sequence[float],
        start_floor: int,
        end_floor: int,
    ) -> RouteResult:
        """Compute a walkable route, across floors when they differ.

        Raises:
            InvalidCoordinate: If a point is outside [0, 100].
            FloorNotFound: If a floor number does not exist for the company.
            FloorPlanUnavailable: If a floor plan cannot be loaded or decoded.
            NoTransitionAvailable: If the floors are not connected.
            NoRouteFound: If a leg has no walkable route.
        """
        start = check_plan_point(start_point, "start_point")
        end = check_plan_point(end_point, "end_point")

        departure_floor = self.repository.get_floor_by_number(company_id, start_floor)
        if int(start_floor) == int(end_floor):
            path = find_path(self.build_grid(departure_floor), start, end)
            legs = [RouteLeg(floor=departure_floor, path=path)]
            instructions: list[Instruction] = list(self._leg_instructions(legs[0]))
        else:
            arrival_floor = self.repository.get_floor_by_number(company_id, end_floor)
            multi = route_across_floors(start, end, departure_floor, arrival_floor, grid_for=self.build_grid)
            legs = [multi.first, multi.second]
            instructions = [
                *self._leg_instructions(multi.first),
                multi.transition,
                *self._leg_instructions(multi.second),
            ]

        result = self._summarize(legs, instructions)
        logger.info(
            "Route for company %s: floor %s -> %s, %d points, %.1f%% plan distance, ~%ss",
            company_id,
            start_floor,
            end_floor,
            len(result.path),
            result.distance,
            result.estimated_time_seconds,
        )
        return result

    def route_to_resource(
        self,
        company_id: str,
        start_point: Sequence[float],
        start_floor: int,
        resource_id: str,
    ) -> RouteResult:
        """Route to a stored resource's location on its own floor."""
        resource = self.repository.get_resource(resource_id)
        target_floor = self.repository.get_floor(resource.floor_id)
        if target_floor.company_id != str(company_id):
            # Tenants never see each other's resources.
            raise ResourceNotFound(f"Resource '{resource_id}' was not found")
        return self.route(company_id, start_point, resource.location, start_floor, target_floor.floor_number)

    def _leg_instructions(self, leg: RouteLeg) -> list[Instruction]:
        resources = self.repository.find_resources_by_floor(leg.floor.id)
        return list(generate_instructions(leg.path, resources, self.settings.landmark_radius_pct))

    def _summarize(self, legs: list[RouteLeg], instructions: list[Instruction]) -> RouteResult:
        path: list[PlanPoint] = []
        distance = 0.0
        distance_m = 0.0

        for leg in legs:
            path.extend(leg.path)
            leg_distance = path_distance(leg.path)
            distance += leg_distance
            if self.settings.rescale_distance and leg.floor.has_real_extent:
                distance_m += path_distance_m(leg.path, leg.floor.real_width, leg.floor.real_height)
            else:
                if self.settings.rescale_distance:
                    logger.warning(
                        "Floor %s has no real-world extent; using plan distance as meters",
                        leg.floor.id,
                    )
                distance_m += leg_distance

        return RouteResult(
            path=path,
            instructions=instructions,
            distance=distance,
            distance_m=distance_m,
            estimated_time_seconds=estimate_walking_time(distance_m, self.settings.walking_speed_mps),
        )
