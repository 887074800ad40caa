"""Read-only access to floors, resources and floor-plan rasters.

Persistence and object storage live outside the navigation core. This module
declares the interface the core consumes and ships two implementations:

- `InMemoryFloorRepository`: dict-backed, used by tests and embedding callers.
- `JsonFloorRepository`: loads a seed document and reads rasters from disk.

Seed document schema:
  {
    "floors": [{"id": "f1", "company_id": "acme", "floor_number": 1, ...}],
    "resources": [{"id": "desk-1", "floor_id": "f1", "location": [40, 60], ...}]
  }
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Iterable, Mapping, Protocol

from wayfinding.app_logger import get_logger
from wayfinding.errors import FloorNotFound, FloorPlanUnavailable, ResourceNotFound
from wayfinding.models import Floor, Resource

logger = get_logger(__name__)


class FloorRepository(Protocol):
    """Interface of the external persistence collaborator."""

    def get_floor(self, floor_id: str) -> Floor: ...

    def get_floor_by_number(self, company_id: str, floor_number: int) -> Floor: ...

    def get_resource(self, resource_id: str) -> Resource: ...

    def find_resources_by_floor(self, floor_id: str) -> list[Resource]: ...

    def list_floors(self, company_id: str | None = None) -> list[Floor]: ...

    def search_resources(
        self,
        company_id: str,
        query: str | None = None,
        resource_type: str | None = None,
    ) -> list[Resource]: ...

    def load_raster_image(self, layout_image_ref: str) -> bytes: ...


class InMemoryFloorRepository:
    """Dict-backed repository.

    Raster lookups check registered image bytes first and then, if an image
    root is configured, files below that directory.
    """

    def __init__(
        self,
        floors: Iterable[Floor] = (),
        resources: Iterable[Resource] = (),
        images: Mapping[str, bytes] | None = None,
        image_root: str | Path | None = None,
    ) -> None:
        self._floors: dict[str, Floor] = {}
        self._resources: dict[str, Resource] = {}
        self._images: dict[str, bytes] = dict(images or {})
        self.image_root = Path(image_root).resolve() if image_root else None

        for floor in floors:
            self.add_floor(floor)
        for resource in resources:
            self.add_resource(resource)

    def add_floor(self, floor: Floor) -> None:
        for existing in self._floors.values():
            if (
                existing.id != floor.id
                and existing.company_id == floor.company_id
                and existing.floor_number == floor.floor_number
            ):
                raise ValueError(
                    f"Company '{floor.company_id}' already has floor number {floor.floor_number}"
                )
        self._floors[floor.id] = floor

    def add_resource(self, resource: Resource) -> None:
        self._resources[resource.id] = resource

    def put_image(self, layout_image_ref: str, raw_bytes: bytes) -> None:
        self._images[layout_image_ref] = raw_bytes

    def list_floors(self, company_id: str | None = None) -> list[Floor]:
        floors = [f for f in self._floors.values() if company_id is None or f.company_id == company_id]
        return sorted(floors, key=lambda f: (f.company_id, f.floor_number))

    def get_floor(self, floor_id: str) -> Floor:
        floor = self._floors.get(str(floor_id))
        if floor is None:
            raise FloorNotFound(f"Floor '{floor_id}' was not found")
        return floor

    def get_floor_by_number(self, company_id: str, floor_number: int) -> Floor:
        for floor in self._floors.values():
            if floor.company_id == str(company_id) and floor.floor_number == int(floor_number):
                return floor
        raise FloorNotFound(f"Floor {floor_number} was not found for company '{company_id}'")

    def get_resource(self, resource_id: str) -> Resource:
        resource = self._resources.get(str(resource_id))
        if resource is None:
            raise ResourceNotFound(f"Resource '{resource_id}' was not found")
        return resource

    def find_resources_by_floor(self, floor_id: str) -> list[Resource]:
        return [r for r in self._resources.values() if r.floor_id == str(floor_id)]

    def search_resources(
        self,
        company_id: str,
        query: str | None = None,
        resource_type: str | None = None,
    ) -> list[Resource]:
        """Company resources whose name or category contains `query`.

        Only resources placed on one of the company's floors are considered.
        Results are ordered by floor number, then name.
        """
        floor_numbers = {f.id: f.floor_number for f in self.list_floors(str(company_id))}
        hits = [
            r
            for r in self._resources.values()
            if r.floor_id in floor_numbers and r.matches(query, resource_type)
        ]
        return sorted(hits, key=lambda r: (floor_numbers[r.floor_id], r.name.casefold(), r.id))

    def load_raster_image(self, layout_image_ref: str) -> bytes:
        """Return the raw raster bytes for a layout reference.

        Raises:
            FloorPlanUnavailable: If the reference is empty, unknown, or
                points outside the image root.
        """
        if not layout_image_ref:
            raise FloorPlanUnavailable("Floor has no layout image")

        if layout_image_ref in self._images:
            return self._images[layout_image_ref]

        if self.image_root is None:
            raise FloorPlanUnavailable(f"Layout image '{layout_image_ref}' is not available")

        candidate = (self.image_root / layout_image_ref).resolve()
        if not candidate.is_relative_to(self.image_root):
            raise FloorPlanUnavailable(f"Layout image '{layout_image_ref}' is outside the image root")
        try:
            return candidate.read_bytes()
        except OSError as exc:
            raise FloorPlanUnavailable(f"Layout image '{layout_image_ref}' could not be read") from exc


class JsonFloorRepository(InMemoryFloorRepository):
    """Repository seeded from a JSON document of floors and resources."""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], image_root: str | Path | None = None) -> "JsonFloorRepository":
        if not isinstance(payload, Mapping):
            raise ValueError("Seed document must be a JSON object")

        floors_raw = payload.get("floors", [])
        resources_raw = payload.get("resources", [])
        if not isinstance(floors_raw, list) or not isinstance(resources_raw, list):
            raise ValueError("'floors' and 'resources' must be JSON lists")

        floors = []
        for idx, item in enumerate(floors_raw):
            try:
                floors.append(Floor.from_dict(item))
            except (TypeError, ValueError) as exc:
                raise ValueError(f"floors[{idx}] is invalid: {exc}") from exc

        resources = []
        for idx, item in enumerate(resources_raw):
            try:
                resources.append(Resource.from_dict(item))
            except (TypeError, ValueError) as exc:
                raise ValueError(f"resources[{idx}] is invalid: {exc}") from exc

        return cls(floors=floors, resources=resources, image_root=image_root)

    @classmethod
    def from_file(cls, path: str | Path, image_root: str | Path | None = None) -> "JsonFloorRepository":
        """Load a seed document; rasters resolve relative to `image_root`.

        The image root defaults to the seed file's directory.
        """
        seed_path = Path(path)
        try:
            payload = json.loads(seed_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"{seed_path} must be valid JSON") from exc

        repo = cls.from_payload(payload, image_root=image_root or seed_path.parent)
        logger.info(
            "Loaded %d floors and %d resources from %s",
            len(repo._floors),
            len(repo._resources),
            seed_path,
        )
        return repo


def repository_from_env() -> InMemoryFloorRepository:
    """Build the repository configured by `WAYFINDING_DATA_FILE` / `WAYFINDING_IMAGE_ROOT`.

    Without a data file the repository starts empty.
    """
    data_file = os.getenv("WAYFINDING_DATA_FILE", "").strip()
    image_root = os.getenv("WAYFINDING_IMAGE_ROOT", "").strip() or None

    if not data_file:
        return InMemoryFloorRepository(image_root=image_root)
    return JsonFloorRepository.from_file(data_file, image_root=image_root)
