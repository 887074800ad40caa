"""Traversability grid generation from floor-plan rasters.

Purpose:
- Decode uploaded floor-plan images.
- Classify near-white cells as walkable on a fixed-resolution grid.
- Overlay authored walkable path segments as an additive override.

Grid convention: `grid[row, col] is True` means walkable.

Usage example:
    >>> grid = build_traversability_grid(raw_png_bytes, floor.walkable_paths)
    >>> grid.shape
    (100, 100)
"""

from __future__ import annotations

from typing import Iterable

import cv2
import numpy as np

from wayfinding.app_logger import get_logger
from wayfinding.config import DEFAULT_GRID_SIZE, DEFAULT_WALKABLE_THRESHOLD
from wayfinding.errors import FloorPlanUnavailable
from wayfinding.models import WalkablePath
from wayfinding.utils import pct_to_cell

logger = get_logger(__name__)


def decode_floor_plan(raw_bytes: bytes) -> np.ndarray:
    """Decode raster bytes into a 3-channel BGR image.

    Grayscale inputs are expanded to three channels. Alpha is composited over
    white so transparent backgrounds read as open floor.

    Raises:
        FloorPlanUnavailable: If the bytes are empty or not a decodable image.
    """
    if not raw_bytes:
        raise FloorPlanUnavailable("Floor-plan image is empty")

    np_buf = np.frombuffer(raw_bytes, dtype=np.uint8)
    image = cv2.imdecode(np_buf, cv2.IMREAD_UNCHANGED)
    if image is None or image.size == 0:
        raise FloorPlanUnavailable("Unsupported or corrupted floor-plan image")

    if image.dtype == np.uint16:
        image = (image // 257).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise FloorPlanUnavailable(f"Unsupported floor-plan pixel type: {image.dtype}")

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)

    channels = image.shape[2]
    if channels == 4:
        bgr = image[:, :, :3].astype(np.float32)
        alpha = image[:, :, 3:4].astype(np.float32) / 255.0
        composited = bgr * alpha + 255.0 * (1.0 - alpha)
        return np.clip(composited, 0, 255).astype(np.uint8)
    if channels == 3:
        return image
    raise FloorPlanUnavailable(f"Unsupported floor-plan channel count: {channels}")


def image_to_walkable_grid(
    image_bgr: np.ndarray,
    grid_size: int = DEFAULT_GRID_SIZE,
    threshold: int = DEFAULT_WALKABLE_THRESHOLD,
) -> np.ndarray:
    """Resample an image to `grid_size` x `grid_size` and classify cells.

    A cell is walkable when every colour channel of its nearest-neighbour
    sample is strictly above `threshold`.

    Raises:
        ValueError: If image or parameters are invalid.
    """
    if not isinstance(image_bgr, np.ndarray) or image_bgr.ndim != 3 or image_bgr.shape[2] != 3:
        raise ValueError("image_bgr must have shape (H, W, 3)")
    if image_bgr.size == 0:
        raise ValueError("image_bgr is empty")
    if grid_size <= 0:
        raise ValueError("grid_size must be > 0")

    sampled = cv2.resize(image_bgr, (grid_size, grid_size), interpolation=cv2.INTER_NEAREST)
    return np.all(sampled > threshold, axis=2)


def rasterize_walkable_paths(grid: np.ndarray, paths: Iterable[WalkablePath]) -> np.ndarray:
    """Return a copy of `grid` with every authored path segment forced walkable.

    Paths only ever add walkable cells; they never block anything.
    """
    if not isinstance(grid, np.ndarray) or grid.ndim != 2 or grid.size == 0:
        raise ValueError("grid must be a non-empty 2D numpy array")

    rows, cols = grid.shape
    mask = np.zeros((rows, cols), dtype=np.uint8)

    for path in paths:
        r0, c0 = pct_to_cell(path.start_point, rows, cols)
        r1, c1 = pct_to_cell(path.end_point, rows, cols)
        cv2.line(mask, (c0, r0), (c1, r1), color=1, thickness=1)

    return grid | (mask > 0)


def build_traversability_grid(
    raw_bytes: bytes,
    walkable_paths: Iterable[WalkablePath] = (),
    grid_size: int = DEFAULT_GRID_SIZE,
    threshold: int = DEFAULT_WALKABLE_THRESHOLD,
) -> np.ndarray:
    """Decode a floor plan and build its boolean walkability grid.

    Args:
        raw_bytes: Encoded raster (PNG, JPEG, ...).
        walkable_paths: Optional authored segments OR-ed into the result.
        grid_size: Number of rows and columns of the output grid.
        threshold: Channel brightness a cell must exceed to be walkable.

    Returns:
        `(grid_size, grid_size)` boolean array, True = walkable.

    Raises:
        FloorPlanUnavailable: If the image cannot be decoded.
    """
    image = decode_floor_plan(raw_bytes)
    grid = image_to_walkable_grid(image, grid_size=grid_size, threshold=threshold)

    paths = list(walkable_paths)
    if paths:
        grid = rasterize_walkable_paths(grid, paths)

    logger.debug(
        "Built %dx%d grid from %dx%d image (%d walkable cells, %d authored paths)",
        grid.shape[0],
        grid.shape[1],
        image.shape[1],
        image.shape[0],
        int(grid.sum()),
        len(paths),
    )
    return grid
