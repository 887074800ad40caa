"""Runtime settings for grid construction, routing and time estimates.

All values come from environment variables so deployments can tune them
without code changes:

    WAYFINDING_GRID_SIZE=100
    WAYFINDING_WALKABLE_THRESHOLD=200
    WAYFINDING_WALKING_SPEED=1.4
    WAYFINDING_LANDMARK_RADIUS=10.0
    WAYFINDING_RESCALE_DISTANCE=true
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_GRID_SIZE = 100
DEFAULT_WALKABLE_THRESHOLD = 200
DEFAULT_WALKING_SPEED_MPS = 1.4
DEFAULT_LANDMARK_RADIUS_PCT = 10.0


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


@dataclass(slots=True)
class NavigationSettings:
    """Tunable constants used by one navigation request."""

    grid_size: int = DEFAULT_GRID_SIZE
    walkable_threshold: int = DEFAULT_WALKABLE_THRESHOLD
    walking_speed_mps: float = DEFAULT_WALKING_SPEED_MPS
    landmark_radius_pct: float | None = DEFAULT_LANDMARK_RADIUS_PCT
    rescale_distance: bool = True

    def __post_init__(self) -> None:
        if self.grid_size <= 0:
            raise ValueError("grid_size must be > 0")
        if not 0 <= self.walkable_threshold <= 255:
            raise ValueError("walkable_threshold must be within [0, 255]")
        if self.walking_speed_mps <= 0:
            raise ValueError("walking_speed_mps must be > 0")
        if self.landmark_radius_pct is not None and self.landmark_radius_pct < 0:
            raise ValueError("landmark_radius_pct must be >= 0")

    @classmethod
    def from_env(cls) -> "NavigationSettings":
        """Build settings from `WAYFINDING_*` environment variables."""
        radius = _env_float("WAYFINDING_LANDMARK_RADIUS", DEFAULT_LANDMARK_RADIUS_PCT)
        return cls(
            grid_size=_env_int("WAYFINDING_GRID_SIZE", DEFAULT_GRID_SIZE),
            walkable_threshold=_env_int("WAYFINDING_WALKABLE_THRESHOLD", DEFAULT_WALKABLE_THRESHOLD),
            walking_speed_mps=_env_float("WAYFINDING_WALKING_SPEED", DEFAULT_WALKING_SPEED_MPS),
            # A negative radius in the environment disables the limit entirely.
            landmark_radius_pct=None if radius < 0 else radius,
            rescale_distance=_env_bool("WAYFINDING_RESCALE_DISTANCE", True),
        )
