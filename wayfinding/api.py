"""FastAPI routes for indoor positioning and route planning.

Endpoints:
- `POST /locate`: geodetic fix -> plan position on a floor
- `POST /find-path`: single- or multi-floor route with instructions
- `GET /floors`: floors of a company
- `GET /destinations`: resource search feeding the route call
- `GET /floors/{floor_id}/grid`: walkability grid used for routing
"""

from __future__ import annotations

import os
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, model_validator

from wayfinding.app_logger import get_logger
from wayfinding.config import NavigationSettings
from wayfinding.errors import NavigationError
from wayfinding.models import Floor, GeoPoint, Resource
from wayfinding.navigation import NavigationService
from wayfinding.repository import FloorRepository, repository_from_env
from wayfinding.utils import json_grid

API_VERSION = "1.0.0"

logger = get_logger(__name__)


class LocateRequest(BaseModel):
    """Live geodetic fix to project onto one of the company's floor plans."""

    company_id: str
    floor_id: str
    latitude: float
    longitude: float


class LocateResponse(BaseModel):
    floor_id: str
    position: list[float]


class RouteRequest(BaseModel):
    """Request payload for route computation.

    Provide either:
    - end_point + end_floor, or
    - end_resource_id (its stored location and floor are used)
    """

    company_id: str
    start_point: list[float]
    start_floor: int
    end_point: list[float] | None = None
    end_floor: int | None = None
    end_resource_id: str | None = None

    @model_validator(mode="after")
    def validate_destination(self) -> "RouteRequest":
        """Ensure caller provides a destination point or a resource id."""
        has_point = self.end_point is not None and self.end_floor is not None
        if not (has_point or self.end_resource_id):
            raise ValueError("Provide either end_point/end_floor or end_resource_id")
        return self


class RouteResponse(BaseModel):
    """Route payload: plan path, tagged instructions and metrics."""

    path: list[list[float]]
    instructions: list[dict[str, Any]]
    distance: float
    distance_m: float
    estimated_time_seconds: int


def _http_error(exc: NavigationError) -> HTTPException:
    """Translate a classified navigation failure into an HTTP error."""
    logger.warning("Navigation request failed (%s): %s", exc.code, exc)
    return HTTPException(status_code=exc.status_code, detail={"code": exc.code, "message": str(exc)})


def _floor_summary(floor: Floor) -> dict[str, Any]:
    return {
        "id": floor.id,
        "name": floor.name,
        "floor_number": floor.floor_number,
        "real_width": floor.real_width,
        "real_height": floor.real_height,
        "transition_points": [
            {"location": list(t.location), "type": t.type, "connected_floors": list(t.connected_floors)}
            for t in floor.transition_points
        ],
    }


def _destination(resource: Resource, floor: Floor) -> dict[str, Any]:
    return {
        "id": resource.id,
        "name": resource.name,
        "resource_type": resource.resource_type,
        "category": resource.category,
        "location": list(resource.location),
        "floor": {"id": floor.id, "name": floor.name, "floor_number": floor.floor_number},
    }


def create_app(
    repository: FloorRepository | None = None,
    settings: NavigationSettings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        repository: Floor/resource source. Defaults to the one described by
            `WAYFINDING_DATA_FILE` and `WAYFINDING_IMAGE_ROOT`.
        settings: Navigation tunables. Defaults to `WAYFINDING_*` env vars.
    """
    service = NavigationService(
        repository if repository is not None else repository_from_env(),
        settings or NavigationSettings.from_env(),
    )

    app = FastAPI(title="Workspace Wayfinding API", version=API_VERSION)
    app.state.navigation = service

    raw_origins = os.getenv("WAYFINDING_CORS_ORIGINS", "*").strip()
    if raw_origins == "*":
        cors_origins = ["*"]
        allow_credentials = False
    else:
        cors_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
        allow_credentials = True

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"status": "ok", "version": app.version}

    @app.post("/locate", response_model=LocateResponse)
    def locate(payload: LocateRequest) -> LocateResponse:
        """Project the caller's geodetic position onto a floor plan."""
        try:
            position = GeoPoint(latitude=payload.latitude, longitude=payload.longitude)
            x, y = service.locate(position, payload.floor_id, company_id=payload.company_id)
        except NavigationError as exc:
            raise _http_error(exc) from exc
        return LocateResponse(floor_id=payload.floor_id, position=[x, y])

    @app.post("/find-path", response_model=RouteResponse)
    def find_path(payload: RouteRequest) -> RouteResponse:
        """Compute a route to a plan point or a stored resource."""
        try:
            if payload.end_resource_id:
                result = service.route_to_resource(
                    company_id=payload.company_id,
                    start_point=payload.start_point,
                    start_floor=payload.start_floor,
                    resource_id=payload.end_resource_id,
                )
            else:
                result = service.route(
                    company_id=payload.company_id,
                    start_point=payload.start_point,
                    end_point=payload.end_point,
                    start_floor=payload.start_floor,
                    end_floor=payload.end_floor,
                )
        except NavigationError as exc:
            raise _http_error(exc) from exc
        except Exception as exc:  # pragma: no cover - safety net
            logger.exception("Unexpected pathfinding error")
            raise HTTPException(status_code=500, detail=f"Unexpected pathfinding error: {exc}") from exc

        return RouteResponse(**result.to_dict())

    @app.get("/floors")
    def list_floors(company_id: str) -> dict[str, Any]:
        """List the company's floors, lowest floor number first."""
        return {"floors": [_floor_summary(floor) for floor in service.list_floors(company_id)]}

    @app.get("/destinations")
    def search_destinations(
        company_id: str,
        query: str | None = None,
        resource_type: str | None = Query(default=None, alias="type"),
    ) -> dict[str, Any]:
        """Search the company's resources by name or category, optionally by type."""
        try:
            hits = service.search_destinations(company_id, query=query, resource_type=resource_type)
        except NavigationError as exc:
            raise _http_error(exc) from exc
        return {"destinations": [_destination(resource, floor) for resource, floor in hits]}

    @app.get("/floors/{floor_id}/grid")
    def floor_grid(floor_id: str, company_id: str) -> dict[str, Any]:
        """Return the walkability grid (1 = walkable) built from the floor plan."""
        try:
            floor = service.company_floor(company_id, floor_id)
            grid = service.build_grid(floor)
        except NavigationError as exc:
            raise _http_error(exc) from exc

        rows, cols = grid.shape
        return {"floor_id": floor.id, "rows": rows, "cols": cols, "grid": json_grid(grid)}

    return app
