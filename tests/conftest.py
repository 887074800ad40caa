"""Pytest shared fixtures: synthetic floor plans and a seeded repository."""

from __future__ import annotations

from typing import Callable

import cv2
import numpy as np
import pytest

from wayfinding.models import Floor, GeoPoint, Resource, TransitionPoint
from wayfinding.repository import InMemoryFloorRepository

PLAN_PX = 200


def encode_png(image: np.ndarray) -> bytes:
    """Encode an image array as PNG bytes."""
    ok, buf = cv2.imencode(".png", image)
    assert ok
    return buf.tobytes()


@pytest.fixture()
def make_plan() -> Callable[..., bytes]:
    """Factory for white floor plans with optional black rectangles.

    Each block is `(x0, y0, x1, y1)` in pixels, inclusive-exclusive.
    """

    def _make(blocks: tuple[tuple[int, int, int, int], ...] = (), size: int = PLAN_PX) -> bytes:
        image = np.full((size, size, 3), 255, dtype=np.uint8)
        for x0, y0, x1, y1 in blocks:
            image[y0:y1, x0:x1] = 0
        return encode_png(image)

    return _make


@pytest.fixture()
def open_plan(make_plan) -> bytes:
    return make_plan()


@pytest.fixture()
def walled_plan(make_plan) -> bytes:
    """Plan split in two by a full-height wall through the middle."""
    return make_plan(blocks=((90, 0, 110, PLAN_PX),))


@pytest.fixture()
def open_grid() -> np.ndarray:
    """Provide a simple reusable fully walkable grid."""
    return np.ones((100, 100), dtype=bool)


@pytest.fixture()
def repository(open_plan, walled_plan) -> InMemoryFloorRepository:
    """Company `acme` with floors 1 and 3 linked by an elevator and a split floor 2."""
    floors = [
        Floor(
            id="f1",
            company_id="acme",
            name="Ground",
            floor_number=1,
            layout_image_ref="plans/f1.png",
            base_location=GeoPoint(40.0, -75.0),
            real_width=40.0,
            real_height=40.0,
            transition_points=[
                TransitionPoint(location=(20.0, 10.0), type="elevator", connected_floors=[1, 3]),
                TransitionPoint(location=(90.0, 90.0), type="stairs", connected_floors=[1, 2]),
            ],
        ),
        Floor(
            id="f2",
            company_id="acme",
            name="Split",
            floor_number=2,
            layout_image_ref="plans/f2.png",
            real_width=40.0,
            real_height=40.0,
        ),
        Floor(
            id="f3",
            company_id="acme",
            name="Third",
            floor_number=3,
            layout_image_ref="plans/f3.png",
            real_width=40.0,
            real_height=40.0,
            transition_points=[
                TransitionPoint(location=(50.0, 50.0), type="elevator", connected_floors=[1, 3]),
            ],
        ),
    ]
    resources = [
        Resource(id="desk-1", name="Desk 1", floor_id="f1", location=(20.0, 12.0)),
        Resource(id="room-a", name="Room A", floor_id="f3", location=(50.0, 60.0), resource_type="meeting room"),
    ]
    images = {
        "plans/f1.png": open_plan,
        "plans/f2.png": walled_plan,
        "plans/f3.png": open_plan,
    }
    return InMemoryFloorRepository(floors=floors, resources=resources, images=images)
