"""Terrain Bounded Context - Value Objects.

Immutable data structures representing geographic concepts.
All validation occurs at construction time via Pydantic.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# Global coordinate ranges (WGS84 degrees)
# ---------------------------------------------------------------------------
LON_MIN, LON_MAX = -180.0, 180.0
LAT_MIN, LAT_MAX = -90.0, 90.0


def extent_violation(west: float, south: float, east: float, north: float) -> str | None:
    """Return a description of the first broken extent invariant, or None.

    Shared by GeoExtent construction and the non-raising validity check so
    both agree on exactly the same rules.
    """
    for name, value in (("west", west), ("south", south), ("east", east), ("north", north)):
        if not math.isfinite(value):
            return f"{name} is not finite: {value}"
    if not (LON_MIN <= west <= LON_MAX):
        return f"west longitude out of range: {west}"
    if not (LON_MIN <= east <= LON_MAX):
        return f"east longitude out of range: {east}"
    if not (LAT_MIN <= south <= LAT_MAX):
        return f"south latitude out of range: {south}"
    if not (LAT_MIN <= north <= LAT_MAX):
        return f"north latitude out of range: {north}"
    if not (west < east):
        return f"Invalid x ordering: west={west} >= east={east}"
    if not (south < north):
        return f"Invalid y ordering: south={south} >= north={north}"
    return None


class GeoExtent(BaseModel):
    """Axis-aligned geographic extent in EPSG:4326 (Value Object).

    Invariants are enforced at construction time - an invalid GeoExtent
    cannot be instantiated.
    """

    west: float  # Western boundary (longitude)
    south: float  # Southern boundary (latitude)
    east: float  # Eastern boundary (longitude)
    north: float  # Northern boundary (latitude)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_bounds(self) -> "GeoExtent":
        problem = extent_violation(self.west, self.south, self.east, self.north)
        if problem is not None:
            raise ValueError(problem)
        return self

    @property
    def southwest(self) -> "GeoPoint":
        return GeoPoint(latitude=self.south, longitude=self.west)

    @property
    def northeast(self) -> "GeoPoint":
        return GeoPoint(latitude=self.north, longitude=self.east)

    def as_tuple(self) -> tuple[float, float, float, float]:
        """Return (west, south, east, north)."""
        return (self.west, self.south, self.east, self.north)


class TerrainGrid(BaseModel):
    """Immutable elevation grid with geographic metadata (Value Object).

    The data array is made read-only at construction time.
    """

    data: NDArray[np.float32]  # 2D float32 array (height x width), read-only
    bounds: GeoExtent  # Geographic extent in EPSG:4326
    crs: str  # Always "EPSG:4326"
    resolution: tuple[float, float]  # (x_res, y_res) absolute values in degrees
    source_crs: str | None = None  # Original CRS before normalization

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @model_validator(mode="after")
    def validate_grid(self) -> "TerrainGrid":
        if self.data.ndim != 2:
            raise ValueError(f"Data must be 2D, got {self.data.ndim}D")
        if self.data.shape[0] == 0 or self.data.shape[1] == 0:
            raise ValueError(f"Data cannot be empty: {self.data.shape}")
        if self.data.dtype != np.float32:
            raise ValueError(f"Data must be float32, got {self.data.dtype}")
        if self.crs != "EPSG:4326":
            raise ValueError(f"CRS must be EPSG:4326, got {self.crs}")
        if self.resolution[0] <= 0 or self.resolution[1] <= 0:
            raise ValueError(f"Resolution must be positive: {self.resolution}")
        if np.isnan(self.data).all():
            raise ValueError("Grid contains 100% NoData")

        # Owned, contiguous copy so callers' arrays are never frozen in place.
        immutable = np.array(self.data, dtype=np.float32, copy=True, order="C")
        immutable.flags.writeable = False
        object.__setattr__(self, "data", immutable)

        return self


class GeoPoint(BaseModel):
    """Geographic coordinate in WGS84 (Value Object).

    Invariants:
        latitude in [-90, 90]
        longitude in [-180, 180]
    """

    latitude: float = Field(ge=LAT_MIN, le=LAT_MAX)
    longitude: float = Field(ge=LON_MIN, le=LON_MAX)

    model_config = ConfigDict(frozen=True)


class SampledPoint(BaseModel):
    """A GeoPoint annotated with a terrain elevation (Value Object).

    ``height`` is ``None`` when the terrain source has no value for the
    location. Non-finite heights are treated as unknown too, see
    ``known_height``.
    """

    point: GeoPoint
    height: float | None = None  # metres above the ellipsoid/geoid of the source

    model_config = ConfigDict(frozen=True)

    @property
    def longitude(self) -> float:
        return self.point.longitude

    @property
    def latitude(self) -> float:
        return self.point.latitude

    @property
    def known_height(self) -> float | None:
        """Sampled height, or None when unknown (missing or NaN/inf)."""
        if self.height is None or not math.isfinite(self.height):
            return None
        return self.height
