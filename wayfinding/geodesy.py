"""Geodetic-to-planar transform for floor-plan positioning.

Uses an equirectangular approximation around the floor's base location, which
is accurate enough at building scale.

Usage example:
    >>> from wayfinding.geodesy import locate
    >>> locate(GeoPoint(40.0, -75.0), floor)
    (50.0, 50.0)
"""

from __future__ import annotations

import math

from wayfinding.errors import InvalidCoordinate
from wayfinding.models import Floor, GeoPoint
from wayfinding.utils import PlanPoint

METERS_PER_LAT_DEGREE = 111111.0


def geodetic_offset_m(position: GeoPoint, origin: GeoPoint) -> tuple[float, float]:
    """Return `(x_m, y_m)` of `position` relative to `origin`.

    x follows longitude (east), y follows latitude (north).
    """
    meters_per_lng_degree = METERS_PER_LAT_DEGREE * math.cos(math.radians(origin.latitude))
    x_m = (position.longitude - origin.longitude) * meters_per_lng_degree
    y_m = (position.latitude - origin.latitude) * METERS_PER_LAT_DEGREE
    return x_m, y_m


def _clamp_pct(value: float) -> float:
    return max(0.0, min(100.0, value))


def locate(position: GeoPoint, floor: Floor) -> PlanPoint:
    """Convert a live geodetic fix into a plan-percentage position on `floor`.

    The floor's base location maps to the image centre (50, 50) and half the
    real extent on each side maps to the image edges. Results outside the
    modeled footprint saturate at 0 or 100 instead of failing, since GPS noise
    routinely pushes fixes slightly outside the building.

    Raises:
        InvalidCoordinate: If the floor has no geodetic reference or no
            positive real-world extent.
    """
    if floor.base_location is None:
        raise InvalidCoordinate(f"Floor '{floor.id}' has no base location")
    if not floor.has_real_extent:
        raise InvalidCoordinate(f"Floor '{floor.id}' has no positive real-world width/height")

    x_m, y_m = geodetic_offset_m(position, floor.base_location)
    relative_x = (x_m / floor.real_width) * 100.0 + 50.0
    relative_y = (y_m / floor.real_height) * 100.0 + 50.0
    return _clamp_pct(relative_x), _clamp_pct(relative_y)
