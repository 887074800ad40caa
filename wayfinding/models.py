"""Domain records consumed and produced by the navigation core.

Floors and resources are read-only inputs fetched from the repository. Routes
and instructions are transient outputs built per request.

Records can be parsed from plain mappings (`Floor.from_dict(...)`). The parser
accepts snake_case keys, camelCase keys and the legacy document fields
`realx` / `realy` / `layout_url` / `_id`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Union

from wayfinding.errors import InvalidCoordinate
from wayfinding.utils import PlanPoint, check_plan_point, to_serializable_path

_MISSING = object()


def _pick(data: Mapping[str, Any], *keys: str, default: Any = _MISSING) -> Any:
    """Return the first present key among aliases."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    if default is _MISSING:
        raise ValueError(f"Missing required field '{keys[0]}'")
    return default


@dataclass(slots=True)
class GeoPoint:
    """Geodetic fix in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        try:
            self.latitude = float(self.latitude)
            self.longitude = float(self.longitude)
        except (TypeError, ValueError) as exc:
            raise InvalidCoordinate("latitude and longitude must be numbers") from exc

        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            raise InvalidCoordinate("latitude and longitude must be finite")
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidCoordinate(f"{self.latitude} is not a valid latitude")
        if not -180.0 <= self.longitude <= 180.0:
            raise InvalidCoordinate(f"{self.longitude} is not a valid longitude")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GeoPoint":
        return cls(
            latitude=_pick(data, "latitude", "lat"),
            longitude=_pick(data, "longitude", "lng"),
        )

    def to_dict(self) -> dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(slots=True)
class WalkablePath:
    """Authored corridor segment forced walkable on top of the raster."""

    start_point: PlanPoint
    end_point: PlanPoint
    type: str = "corridor"
    distance: float | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WalkablePath":
        distance = _pick(data, "distance", default=None)
        return cls(
            start_point=check_plan_point(_pick(data, "start_point", "startPoint"), "walkable path start"),
            end_point=check_plan_point(_pick(data, "end_point", "endPoint"), "walkable path end"),
            type=str(_pick(data, "type", "path_type", default="corridor")),
            distance=None if distance is None else float(distance),
        )


@dataclass(slots=True)
class TransitionPoint:
    """Stairway or elevator anchor linking this floor to others."""

    location: PlanPoint
    type: str
    connected_floors: list[int] = field(default_factory=list)

    def connects_to(self, floor_number: int) -> bool:
        return int(floor_number) in self.connected_floors

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TransitionPoint":
        return cls(
            location=check_plan_point(_pick(data, "location"), "transition location"),
            type=str(_pick(data, "type", default="stairs")),
            connected_floors=[int(f) for f in _pick(data, "connected_floors", "connectedFloors", default=[])],
        )


@dataclass(slots=True)
class Floor:
    """One rasterized building level."""

    id: str
    company_id: str
    name: str
    floor_number: int
    layout_image_ref: str = ""
    base_location: GeoPoint | None = None
    real_width: float = 0.0
    real_height: float = 0.0
    walkable_paths: list[WalkablePath] = field(default_factory=list)
    transition_points: list[TransitionPoint] = field(default_factory=list)

    @property
    def has_real_extent(self) -> bool:
        return self.real_width > 0 and self.real_height > 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Floor":
        """Parse a floor document, accepting legacy and camelCase aliases."""
        base = _pick(data, "base_location", "baseLocation", default=None)
        return cls(
            id=str(_pick(data, "id", "_id")),
            company_id=str(_pick(data, "company_id", "companyId")),
            name=str(_pick(data, "name", default="")),
            floor_number=int(_pick(data, "floor_number", "floorNumber")),
            layout_image_ref=str(_pick(data, "layout_image_ref", "layoutImageRef", "layout_url", default="")),
            base_location=GeoPoint.from_dict(base) if base else None,
            real_width=float(_pick(data, "real_width", "realWidth", "realx", default=0.0)),
            real_height=float(_pick(data, "real_height", "realHeight", "realy", default=0.0)),
            walkable_paths=[
                WalkablePath.from_dict(p) for p in _pick(data, "walkable_paths", "walkablePaths", default=[])
            ],
            transition_points=[
                TransitionPoint.from_dict(t)
                for t in _pick(data, "transition_points", "transitionPoints", default=[])
            ],
        )


@dataclass(slots=True)
class Resource:
    """Bookable desk, room or parking spot placed on a floor plan."""

    id: str
    name: str
    floor_id: str
    location: PlanPoint
    resource_type: str = "desk"
    category: str = ""

    def matches(self, query: str | None = None, resource_type: str | None = None) -> bool:
        """Case-insensitive name/category substring and exact type filter."""
        if resource_type and self.resource_type.casefold() != resource_type.strip().casefold():
            return False
        if query:
            needle = query.strip().casefold()
            return needle in self.name.casefold() or needle in self.category.casefold()
        return True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Resource":
        return cls(
            id=str(_pick(data, "id", "_id")),
            name=str(_pick(data, "name", default="")),
            floor_id=str(_pick(data, "floor_id", "floorId")),
            location=check_plan_point(_pick(data, "location"), "resource location"),
            resource_type=str(_pick(data, "resource_type", "type", default="desk")),
            category=str(_pick(data, "category", default="")),
        )


@dataclass(slots=True)
class Landmark:
    """Resource mentioned next to an instruction for orientation."""

    resource_id: str
    name: str
    distance: float

    def to_dict(self) -> dict[str, Any]:
        return {"resource_id": self.resource_id, "name": self.name, "distance": round(self.distance, 2)}


@dataclass(slots=True)
class MoveInstruction:
    """Walk `distance` grid steps in one direction."""

    action: ClassVar[str] = "move"

    direction: str
    distance: int
    landmark: Landmark | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "action": self.action,
            "direction": self.direction,
            "distance": self.distance,
        }
        if self.landmark is not None:
            payload["landmark"] = self.landmark.to_dict()
        return payload


@dataclass(slots=True)
class TransitionInstruction:
    """Change floors via stairs, elevator or similar."""

    action: ClassVar[str] = "transition"

    type: str
    from_floor: int
    to_floor: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action,
            "type": self.type,
            "from_floor": self.from_floor,
            "to_floor": self.to_floor,
        }


Instruction = Union[MoveInstruction, TransitionInstruction]


@dataclass(slots=True)
class RouteResult:
    """Complete navigation answer for one request."""

    path: list[PlanPoint]
    instructions: list[Instruction]
    distance: float
    distance_m: float
    estimated_time_seconds: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": to_serializable_path(self.path),
            "instructions": [instruction.to_dict() for instruction in self.instructions],
            "distance": self.distance,
            "distance_m": self.distance_m,
            "estimated_time_seconds": self.estimated_time_seconds,
        }
