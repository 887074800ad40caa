"""Unit tests for wayfinding.navigation."""

from __future__ import annotations

import math

import pytest

from wayfinding.config import NavigationSettings
from wayfinding.errors import (
    FloorNotFound,
    FloorPlanUnavailable,
    InvalidCoordinate,
    NoRouteFound,
    NoTransitionAvailable,
    ResourceNotFound,
)
from wayfinding.instructions import path_distance
from wayfinding.models import Floor, GeoPoint, MoveInstruction, Resource, TransitionInstruction
from wayfinding.navigation import NavigationService
from wayfinding.repository import InMemoryFloorRepository


def test_locate_fix_at_base_returns_centre(repository: InMemoryFloorRepository) -> None:
    service = NavigationService(repository)
    assert service.locate(GeoPoint(40.0, -75.0), "f1") == pytest.approx((50.0, 50.0))


def test_locate_unknown_floor_raises(repository: InMemoryFloorRepository) -> None:
    with pytest.raises(FloorNotFound):
        NavigationService(repository).locate(GeoPoint(40.0, -75.0), "nope")


def test_single_floor_route_metrics(repository: InMemoryFloorRepository) -> None:
    service = NavigationService(repository)

    result = service.route("acme", [10, 10], [90, 90], 1, 1)

    assert result.path[0] == (10.0, 10.0)
    assert result.path[-1] == (90.0, 90.0)
    assert result.distance == pytest.approx(math.sqrt(80**2 + 80**2))
    # 40 m x 40 m floor: one plan percent is 0.4 m on both axes.
    assert result.distance_m == pytest.approx(result.distance * 0.4)
    assert result.estimated_time_seconds == round(result.distance_m / 1.4)
    assert [i.direction for i in result.instructions] == ["right"]


def test_route_is_deterministic(repository: InMemoryFloorRepository) -> None:
    service = NavigationService(repository)

    first = service.route("acme", [5, 50], [95, 20], 1, 1)
    second = service.route("acme", [5, 50], [95, 20], 1, 1)

    assert first.path == second.path
    assert first.instructions == second.instructions


def test_straight_route_groups_into_one_move(repository: InMemoryFloorRepository) -> None:
    settings = NavigationSettings(landmark_radius_pct=0.0)
    result = NavigationService(repository, settings).route("acme", [10, 50], [30, 50], 1, 1)

    assert result.instructions == [MoveInstruction(direction="right", distance=20)]


def test_route_blocked_by_wall_raises_no_route(repository: InMemoryFloorRepository) -> None:
    with pytest.raises(NoRouteFound):
        NavigationService(repository).route("acme", [10, 50], [90, 50], 2, 2)


def test_multi_floor_route_has_one_transition(repository: InMemoryFloorRepository) -> None:
    result = NavigationService(repository).route("acme", [10, 10], [50, 60], 1, 3)

    transitions = [i for i in result.instructions if isinstance(i, TransitionInstruction)]
    assert transitions == [TransitionInstruction(type="elevator", from_floor=1, to_floor=3)]

    # Leg one: (10,10)->(20,10), 11 points. Leg two: (50,50)->(50,60), 11 points.
    assert len(result.path) == 22
    assert result.path[10] == (20.0, 10.0)
    assert result.path[11] == (50.0, 50.0)

    moves = [(i.direction, i.distance) for i in result.instructions if isinstance(i, MoveInstruction)]
    assert moves == [("right", 10), ("forward", 10)]
    assert isinstance(result.instructions[1], TransitionInstruction)

    # The jump between the two transition points is not walked and is not counted.
    assert result.distance == pytest.approx(20.0)
    assert result.distance == pytest.approx(path_distance(result.path[:11]) + path_distance(result.path[11:]))
    assert result.distance_m == pytest.approx(8.0)
    assert result.estimated_time_seconds == 6


def test_multi_floor_landmarks_come_from_each_leg_floor(repository: InMemoryFloorRepository) -> None:
    result = NavigationService(repository).route("acme", [10, 10], [50, 60], 1, 3)

    first, _, last = result.instructions
    assert first.landmark.resource_id == "desk-1"
    assert last.landmark.resource_id == "room-a"


def test_multi_floor_without_connection_raises(repository: InMemoryFloorRepository) -> None:
    # Floor 2 has no transition points at all.
    with pytest.raises(NoTransitionAvailable):
        NavigationService(repository).route("acme", [10, 10], [10, 10], 1, 2)


def test_route_unknown_floor_raises(repository: InMemoryFloorRepository) -> None:
    with pytest.raises(FloorNotFound):
        NavigationService(repository).route("acme", [10, 10], [20, 20], 9, 9)


def test_route_other_company_cannot_see_floors(repository: InMemoryFloorRepository) -> None:
    with pytest.raises(FloorNotFound):
        NavigationService(repository).route("globex", [10, 10], [20, 20], 1, 1)


@pytest.mark.parametrize("point", [[-1, 10], [10, 101], [float("nan"), 5], [1, 2, 3]])
def test_route_rejects_invalid_points(repository: InMemoryFloorRepository, point: list[float]) -> None:
    with pytest.raises(InvalidCoordinate):
        NavigationService(repository).route("acme", point, [20, 20], 1, 1)


def test_missing_floor_plan_fails_whole_request(repository: InMemoryFloorRepository) -> None:
    repository.put_image("plans/f1.png", b"garbage")

    with pytest.raises(FloorPlanUnavailable):
        NavigationService(repository).route("acme", [10, 10], [20, 20], 1, 1)


def test_grid_is_rebuilt_after_plan_update(repository: InMemoryFloorRepository, walled_plan: bytes) -> None:
    service = NavigationService(repository)
    service.route("acme", [10, 50], [90, 50], 1, 1)

    repository.put_image("plans/f1.png", walled_plan)
    with pytest.raises(NoRouteFound):
        service.route("acme", [10, 50], [90, 50], 1, 1)


def test_route_to_resource_uses_stored_location(repository: InMemoryFloorRepository) -> None:
    result = NavigationService(repository).route_to_resource("acme", [10, 10], 1, "room-a")

    assert result.path[-1] == (50.0, 60.0)
    assert any(isinstance(i, TransitionInstruction) for i in result.instructions)


def test_route_to_resource_is_tenant_scoped(repository: InMemoryFloorRepository) -> None:
    repository.add_floor(Floor(id="g1", company_id="globex", name="G", floor_number=1, layout_image_ref="plans/f1.png"))

    with pytest.raises(ResourceNotFound):
        NavigationService(repository).route_to_resource("globex", [10, 10], 1, "desk-1")


def test_time_falls_back_to_plan_distance_without_extent(open_plan: bytes) -> None:
    repo = InMemoryFloorRepository(
        floors=[Floor(id="x", company_id="acme", name="X", floor_number=0, layout_image_ref="x.png")],
        images={"x.png": open_plan},
    )

    result = NavigationService(repo).route("acme", [0, 0], [14, 0], 0, 0)

    assert result.distance_m == pytest.approx(14.0)
    assert result.estimated_time_seconds == 10


def test_destination_on_obstacle_pixel_is_reachable(repository: InMemoryFloorRepository, make_plan) -> None:
    # Desk drawn as a dark block; the destination sits on its top row.
    repository.put_image("plans/f1.png", make_plan(blocks=((90, 100, 110, 110),)))

    result = NavigationService(repository).route("acme", [10, 10], [50, 50], 1, 1)

    assert result.path[-1] == (50.0, 50.0)


def _add_other_company(repository: InMemoryFloorRepository) -> None:
    repository.add_floor(
        Floor(
            id="g1",
            company_id="globex",
            name="Lobby",
            floor_number=1,
            layout_image_ref="plans/f1.png",
            base_location=GeoPoint(40.0, -75.0),
            real_width=40.0,
            real_height=40.0,
        )
    )
    repository.add_resource(Resource(id="g-desk", name="Desk 1", floor_id="g1", location=(30.0, 30.0)))


def test_locate_hides_other_company_floor(repository: InMemoryFloorRepository) -> None:
    _add_other_company(repository)
    service = NavigationService(repository)

    assert service.locate(GeoPoint(40.0, -75.0), "g1", company_id="globex") == pytest.approx((50.0, 50.0))
    with pytest.raises(FloorNotFound):
        service.locate(GeoPoint(40.0, -75.0), "g1", company_id="acme")


def test_search_destinations_pairs_each_resource_with_its_floor(repository: InMemoryFloorRepository) -> None:
    _add_other_company(repository)
    service = NavigationService(repository)

    hits = service.search_destinations("acme", query="desk")

    assert [(resource.id, floor.id) for resource, floor in hits] == [("desk-1", "f1")]
    assert [r.id for r, _ in service.search_destinations("globex")] == ["g-desk"]
