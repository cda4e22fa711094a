"""Relief Bounded Context - Value Objects.

Wall segments, wall polygons, camera framing and the generated block.
"""

from __future__ import annotations

import math
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from domain.terrain.value_objects import GeoExtent, GeoPoint, SampledPoint

# ---------------------------------------------------------------------------
# Camera constants
# ---------------------------------------------------------------------------
CAMERA_HEADING_DEG = 0.0
CAMERA_PITCH_DEG = -45.0
CAMERA_RANGE_FACTOR = 1.5  # range = diagonal * factor
CAMERA_MIN_ZOOM_DISTANCE = 500.0
CAMERA_MAX_ZOOM_FACTOR = 3.0  # max zoom = range * factor


class EdgeLabel(str, Enum):
    """Cardinal edge of an extent, in counter-clockwise traversal order."""

    SOUTH = "south"
    EAST = "east"
    NORTH = "north"
    WEST = "west"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class WallSegment(BaseModel):
    """Ordered points along one edge of an extent (Value Object).

    Point order defines the winding of the wall built from it.
    """

    label: EdgeLabel
    points: tuple[GeoPoint, ...]

    model_config = ConfigDict(frozen=True)

    def annotate(self, samples: tuple[SampledPoint, ...]) -> "SampledWallSegment":
        """Attach sampled elevations, keeping length and order."""
        if len(samples) != len(self.points):
            raise ValueError(
                f"{self.label.value}: expected {len(self.points)} samples, got {len(samples)}"
            )
        return SampledWallSegment(label=self.label, points=samples)


class SampledWallSegment(BaseModel):
    """A WallSegment whose points carry terrain elevation."""

    label: EdgeLabel
    points: tuple[SampledPoint, ...]

    model_config = ConfigDict(frozen=True)


class GeoPosition(BaseModel):
    """3D geographic position: degrees plus height in metres."""

    longitude: float = Field(ge=-180, le=180)
    latitude: float = Field(ge=-90, le=90)
    height: float

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_height(self) -> "GeoPosition":
        if not math.isfinite(self.height):
            raise ValueError(f"height must be finite, got {self.height}")
        return self


class WallPolygon(BaseModel):
    """Closed vertical wall ring (Value Object).

    Invariants:
        vertices has an even length >= 4: N top vertices followed by the
        same N positions reversed at the base altitude.
    """

    label: EdgeLabel
    name: str
    vertices: tuple[GeoPosition, ...]

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_ring(self) -> "WallPolygon":
        if len(self.vertices) < 4 or len(self.vertices) % 2:
            raise ValueError(
                f"Wall ring needs an even vertex count >= 4, got {len(self.vertices)}"
            )
        return self


class CameraPlan(BaseModel):
    """Look-at framing and orbit constraints for a generated block."""

    focus: GeoPosition  # ground-anchored center of the extent
    target_ecef: tuple[float, float, float]  # focus in EPSG:4978 metres
    diagonal_m: float = Field(gt=0)
    range_m: float = Field(gt=0)
    heading_deg: float = CAMERA_HEADING_DEG
    pitch_deg: float = CAMERA_PITCH_DEG
    min_zoom_distance: float = CAMERA_MIN_ZOOM_DISTANCE
    max_zoom_distance: float
    enable_pan: bool = False
    enable_tilt: bool = False

    model_config = ConfigDict(frozen=True)


class Block(BaseModel):
    """The generated relief block: walls plus base altitude for one extent."""

    extent: GeoExtent
    base_altitude: float
    walls: tuple[WallPolygon, ...]

    model_config = ConfigDict(frozen=True)

    def wall(self, label: EdgeLabel) -> WallPolygon | None:
        return next((w for w in self.walls if w.label is label), None)
