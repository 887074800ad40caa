"""Classified navigation failures.

Every error carries a stable `code` for clients and the HTTP status the API
layer answers with. None of them are retried internally.
"""

from __future__ import annotations


class NavigationError(Exception):
    """Base class for failures surfaced to navigation callers."""

    code = "navigation_error"
    status_code = 500


class FloorNotFound(NavigationError):
    code = "floor_not_found"
    status_code = 404


class ResourceNotFound(NavigationError):
    code = "resource_not_found"
    status_code = 404


class FloorPlanUnavailable(NavigationError):
    """Floor-plan raster is missing or cannot be decoded."""

    code = "floor_plan_unavailable"
    status_code = 503


class NoRouteFound(NavigationError):
    """A* exhausted the grid without reaching the goal."""

    code = "no_route_found"
    status_code = 404


class NoTransitionAvailable(NavigationError):
    code = "no_transition_available"
    status_code = 404


class InvalidCoordinate(NavigationError, ValueError):
    """Input point or geodetic fix outside the expected numeric range."""

    code = "invalid_coordinate"
    status_code = 400
