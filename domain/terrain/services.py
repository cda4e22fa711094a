"""Terrain Bounded Context - Domain Services.

Pure domain logic for extents and elevation lookup.
NO I/O operations - DEM loading is implemented by infrastructure adapters
under `src/infrastructure/terrain/geotiff_adapter.py` via domain ports.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from domain.terrain.value_objects import (
    GeoExtent,
    GeoPoint,
    TerrainGrid,
    extent_violation,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
EXTENT_DECIMALS = 5  # ~1.1 m at the equator

_EXTENT_FIELDS = ("west", "south", "east", "north")


# ---------------------------------------------------------------------------
# Extent validation and normalization
# ---------------------------------------------------------------------------
def _extent_values(extent: Any) -> tuple[Any, ...] | None:
    """Pull (west, south, east, north) out of a mapping or an object."""
    if extent is None:
        return None
    if isinstance(extent, Mapping):
        if not all(key in extent for key in _EXTENT_FIELDS):
            return None
        return tuple(extent[key] for key in _EXTENT_FIELDS)
    if all(hasattr(extent, key) for key in _EXTENT_FIELDS):
        return tuple(getattr(extent, key) for key in _EXTENT_FIELDS)
    return None


def _is_finite_number(value: Any) -> bool:
    # bool is an int subclass; a flag is never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def is_valid_extent(extent: Any) -> bool:
    """Check whether ``extent`` describes a usable geographic extent.

    Accepts a GeoExtent, a mapping with west/south/east/north keys, or any
    object exposing those attributes. True iff all four values are finite
    numbers, ``west < east``, ``south < north`` and every value lies within
    the global longitude/latitude ranges. No side effects.
    """
    values = _extent_values(extent)
    if values is None:
        return False
    if not all(_is_finite_number(v) for v in values):
        return False
    return extent_violation(*(float(v) for v in values)) is None


def normalize_extent(extent: Any) -> GeoExtent | None:
    """Return a new GeoExtent rounded to 5 decimals, or None if invalid.

    Idempotent for valid input. An extent that collapses under rounding
    (e.g. west and east round to the same value) is reported as None as well.
    """
    if not is_valid_extent(extent):
        return None
    values = _extent_values(extent)
    if values is None:
        return None
    rounded = {
        key: round(float(value), EXTENT_DECIMALS)
        for key, value in zip(_EXTENT_FIELDS, values)
    }
    if extent_violation(**rounded) is not None:
        return None
    return GeoExtent(**rounded)


def extent_center(extent: GeoExtent) -> GeoPoint:
    """Geometric center of the extent rectangle."""
    return GeoPoint(
        latitude=(extent.south + extent.north) / 2,
        longitude=(extent.west + extent.east) / 2,
    )


# ---------------------------------------------------------------------------
# Helper: Bounds Check
# ---------------------------------------------------------------------------
def is_within_bounds(point: GeoPoint, bounds: GeoExtent) -> bool:
    """Check if point is within bounds (inclusive)."""
    return (
        bounds.west <= point.longitude <= bounds.east
        and bounds.south <= point.latitude <= bounds.north
    )


# ---------------------------------------------------------------------------
# Bilinear Interpolation
# ---------------------------------------------------------------------------
def bilinear_interpolate(grid: TerrainGrid, point: GeoPoint) -> float | None:
    """Interpolate elevation at an arbitrary point using the 4 nearest pixels.

    Returns None when the point lies outside the grid or when any of the
    4 neighbours is NoData (no infill).

    Boundary behavior:
        Points exactly on grid boundaries use clamped indices, which makes
        bilinear degrade to linear (on edges) or nearest (on corners).
    """
    if not is_within_bounds(point, grid.bounds):
        return None

    # Row 0 is the north edge, so y is inverted
    px = (point.longitude - grid.bounds.west) / grid.resolution[0]
    py = (grid.bounds.north - point.latitude) / grid.resolution[1]

    height, width = grid.data.shape

    x0 = int(math.floor(px))
    y0 = int(math.floor(py))
    x1 = x0 + 1
    y1 = y0 + 1

    x0 = max(0, min(x0, width - 1))
    x1 = max(0, min(x1, width - 1))
    y0 = max(0, min(y0, height - 1))
    y1 = max(0, min(y1, height - 1))

    q11 = float(grid.data[y0, x0])  # top-left
    q21 = float(grid.data[y0, x1])  # top-right
    q12 = float(grid.data[y1, x0])  # bottom-left
    q22 = float(grid.data[y1, x1])  # bottom-right

    if math.isnan(q11) or math.isnan(q21) or math.isnan(q12) or math.isnan(q22):
        return None

    fx = px - math.floor(px)
    fy = py - math.floor(py)

    elevation = (
        q11 * (1 - fx) * (1 - fy)
        + q21 * fx * (1 - fy)
        + q12 * (1 - fx) * fy
        + q22 * fx * fy
    )

    return float(elevation)
