"""Unit tests for wayfinding.instructions."""

from __future__ import annotations

import math

import pytest

from wayfinding.instructions import (
    estimate_walking_time,
    generate_instructions,
    nearest_landmark,
    path_distance,
    path_distance_m,
    step_direction,
)
from wayfinding.models import MoveInstruction, Resource


@pytest.mark.parametrize(
    "curr,expected",
    [
        ((1.0, 0.0), "right"),
        ((-1.0, 0.0), "left"),
        ((0.0, 1.0), "forward"),
        ((0.0, -1.0), "backward"),
        ((1.0, 1.0), "right"),
        ((-1.0, -1.0), "left"),
        ((0.0, 0.0), None),
    ],
)
def test_step_direction(curr: tuple[float, float], expected: str | None) -> None:
    assert step_direction((0.0, 0.0), curr) == expected


def test_straight_path_is_one_instruction() -> None:
    path = [(float(x), 50.0) for x in range(10, 31)]

    instructions = generate_instructions(path)

    assert instructions == [MoveInstruction(direction="right", distance=20)]


def test_direction_changes_split_instructions() -> None:
    path = [(0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (2.0, 1.0), (2.0, 2.0), (2.0, 3.0), (1.0, 3.0)]

    instructions = generate_instructions(path)

    assert [(i.direction, i.distance) for i in instructions] == [
        ("right", 2),
        ("forward", 3),
        ("left", 1),
    ]


def test_single_point_path_has_no_instructions() -> None:
    assert generate_instructions([(5.0, 5.0)]) == []


def test_landmark_is_nearest_resource_within_radius() -> None:
    path = [(float(x), 10.0) for x in range(10, 31)]
    resources = [
        Resource(id="far", name="Far Desk", floor_id="f1", location=(90.0, 90.0)),
        Resource(id="near", name="Near Desk", floor_id="f1", location=(20.0, 12.0)),
    ]

    [instruction] = generate_instructions(path, resources, landmark_radius=10.0)

    assert instruction.landmark is not None
    assert instruction.landmark.resource_id == "near"
    assert instruction.landmark.distance == pytest.approx(2.0)


def test_landmark_outside_radius_is_dropped() -> None:
    path = [(0.0, 0.0), (1.0, 0.0)]
    resources = [Resource(id="far", name="Far Desk", floor_id="f1", location=(90.0, 90.0))]

    [instruction] = generate_instructions(path, resources, landmark_radius=5.0)
    assert instruction.landmark is None


def test_landmark_is_chosen_per_instruction_sub_path() -> None:
    path = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (10.0, 20.0)]
    resources = [
        Resource(id="a", name="A", floor_id="f1", location=(5.0, 1.0)),
        Resource(id="b", name="B", floor_id="f1", location=(11.0, 20.0)),
    ]

    first, second = generate_instructions(path, resources)

    assert first.landmark.resource_id == "a"
    assert second.landmark.resource_id == "b"


def test_nearest_landmark_ties_break_by_id() -> None:
    resources = [
        Resource(id="z", name="Z", floor_id="f1", location=(0.0, 2.0)),
        Resource(id="a", name="A", floor_id="f1", location=(0.0, 2.0)),
    ]
    landmark = nearest_landmark([(0.0, 0.0)], resources)
    assert landmark.resource_id == "a"


def test_path_distance_sums_euclidean_steps() -> None:
    path = [(0.0, 0.0), (3.0, 4.0), (3.0, 5.0)]
    assert path_distance(path) == pytest.approx(6.0)
    assert path_distance([]) == 0.0


def test_path_distance_m_rescales_each_axis() -> None:
    path = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)]
    # 10% of 40 m wide plus 10% of 20 m tall.
    assert path_distance_m(path, real_width=40.0, real_height=20.0) == pytest.approx(4.0 + 2.0)

    diagonal = [(0.0, 0.0), (10.0, 10.0)]
    assert path_distance_m(diagonal, 30.0, 40.0) == pytest.approx(math.hypot(3.0, 4.0))


def test_path_distance_m_requires_positive_extent() -> None:
    with pytest.raises(ValueError, match="real_width"):
        path_distance_m([(0.0, 0.0), (1.0, 0.0)], 0.0, 10.0)


def test_estimate_walking_time_rounds_seconds() -> None:
    assert estimate_walking_time(14.0, 1.4) == 10
    assert estimate_walking_time(8.0, 1.4) == 6
    assert estimate_walking_time(0.0, 1.4) == 0
