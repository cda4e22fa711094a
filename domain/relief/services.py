"""Relief Bounded Context - Domain Services.

Turns a validated extent into a relief block: edge interpolation, concurrent
terrain sampling, base altitude, wall rings and camera framing.
Terrain and rendering are reached only through the domain ports.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Iterable, Mapping, Sequence

import numpy as np
from pydantic import ValidationError
from pyproj import Transformer

from domain.relief.errors import CameraFramingError, WallConstructionError
from domain.relief.ports import SceneRenderer
from domain.relief.value_objects import (
    CAMERA_MAX_ZOOM_FACTOR,
    CAMERA_RANGE_FACTOR,
    Block,
    CameraPlan,
    EdgeLabel,
    GeoPosition,
    SampledWallSegment,
    WallPolygon,
    WallSegment,
)
from domain.terrain.errors import TerrainUnavailableError
from domain.terrain.repositories import TerrainSampler
from domain.terrain.services import extent_center
from domain.terrain.value_objects import GeoExtent, GeoPoint, SampledPoint

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
BASE_BUFFER_RATIO = 0.2  # share of the observed relief added below the lowest point
WALL_NAME_PREFIX = "Block Wall"

# Geographic 3D (lon, lat, ellipsoidal height) -> geocentric ECEF metres
_to_ecef = Transformer.from_crs("EPSG:4979", "EPSG:4978", always_xy=True)


# ---------------------------------------------------------------------------
# Fallback policies for unknown elevation
# ---------------------------------------------------------------------------
def aggregation_height(sample: SampledPoint) -> float:
    """Height used for min/max aggregation; unknown counts as 0 m."""
    height = sample.known_height
    return 0.0 if height is None else height


def vertex_height(sample: SampledPoint, base_altitude: float) -> float:
    """Height of a wall's top vertex; unknown collapses onto the base."""
    height = sample.known_height
    return base_altitude if height is None else height


# ---------------------------------------------------------------------------
# Segment interpolation
# ---------------------------------------------------------------------------
def _interpolate_edge(
    label: EdgeLabel,
    start: tuple[float, float],
    end: tuple[float, float],
    fidelity: int,
) -> WallSegment:
    # linspace pins both endpoints exactly to the corners
    lons = np.linspace(start[0], end[0], fidelity + 1)
    lats = np.linspace(start[1], end[1], fidelity + 1)
    return WallSegment(
        label=label,
        points=tuple(
            GeoPoint(longitude=float(lon), latitude=float(lat))
            for lon, lat in zip(lons, lats)
        ),
    )


def interpolate_wall_segments(
    extent: GeoExtent, fidelity: int
) -> dict[EdgeLabel, WallSegment]:
    """Evenly spaced points along the four edges of ``extent``.

    Each edge gets ``fidelity + 1`` points with t = i / fidelity. Traversal is
    counter-clockwise: south west->east, east south->north, north east->west,
    west north->south.

    Raises:
        ValueError: If fidelity < 1
    """
    if fidelity < 1:
        raise ValueError(f"fidelity must be >= 1, got {fidelity}")

    w, s, e, n = extent.as_tuple()
    return {
        EdgeLabel.SOUTH: _interpolate_edge(EdgeLabel.SOUTH, (w, s), (e, s), fidelity),
        EdgeLabel.EAST: _interpolate_edge(EdgeLabel.EAST, (e, s), (e, n), fidelity),
        EdgeLabel.NORTH: _interpolate_edge(EdgeLabel.NORTH, (e, n), (w, n), fidelity),
        EdgeLabel.WEST: _interpolate_edge(EdgeLabel.WEST, (w, n), (w, s), fidelity),
    }


# ---------------------------------------------------------------------------
# Terrain sampling
# ---------------------------------------------------------------------------
async def sample_points(
    sampler: TerrainSampler, points: Sequence[GeoPoint]
) -> tuple[SampledPoint, ...]:
    """Sample ``points`` once; any failure becomes TerrainUnavailableError."""
    try:
        samples = tuple(await sampler.sample(points))
    except Exception as e:
        raise TerrainUnavailableError(f"Terrain sampling failed: {e}") from e
    if len(samples) != len(points):
        raise TerrainUnavailableError(
            f"Sampler returned {len(samples)} results for {len(points)} points"
        )
    return samples


async def sample_wall_segments(
    sampler: TerrainSampler, segments: Mapping[EdgeLabel, WallSegment]
) -> dict[EdgeLabel, SampledWallSegment]:
    """Sample all segments concurrently and merge the results by label."""
    labels = list(segments)
    results = await asyncio.gather(
        *(sample_points(sampler, segments[label].points) for label in labels)
    )
    return {
        label: segments[label].annotate(samples)
        for label, samples in zip(labels, results)
    }


# ---------------------------------------------------------------------------
# Base altitude
# ---------------------------------------------------------------------------
def derive_base_altitude(segments: Iterable[SampledWallSegment]) -> float:
    """Floor of the block: lowest height minus 20% of the observed relief.

    Flat terrain gives a zero buffer, i.e. the base equals the lowest height.

    Raises:
        ValueError: If the segments contain no points at all
    """
    heights = [aggregation_height(p) for segment in segments for p in segment.points]
    if not heights:
        raise ValueError("Cannot derive base altitude without sampled points")

    min_height = min(heights)
    max_height = max(heights)
    delta = max_height - min_height
    return min_height - BASE_BUFFER_RATIO * delta


# ---------------------------------------------------------------------------
# Walls
# ---------------------------------------------------------------------------
def wall_name(label: EdgeLabel) -> str:
    return f"{WALL_NAME_PREFIX} {label.display_name}"


def build_wall(segment: SampledWallSegment, base_altitude: float) -> WallPolygon:
    """Build the closed vertical ring for one sampled edge.

    The first N vertices follow the terrain (unknown heights fall back to the
    base), the last N are the same points reversed at ``base_altitude``.

    Raises:
        WallConstructionError: If any vertex or the ring itself is invalid
    """
    label = segment.label
    try:
        top = [
            GeoPosition(
                longitude=p.longitude,
                latitude=p.latitude,
                height=vertex_height(p, base_altitude),
            )
            for p in segment.points
        ]
        bottom = [
            GeoPosition(longitude=p.longitude, latitude=p.latitude, height=base_altitude)
            for p in reversed(segment.points)
        ]
        return WallPolygon(label=label, name=wall_name(label), vertices=(*top, *bottom))
    except ValidationError as e:
        raise WallConstructionError(label.value, str(e)) from e


def build_walls(
    segments: Mapping[EdgeLabel, SampledWallSegment], base_altitude: float
) -> list[WallPolygon]:
    """Build every wall independently; failed walls are logged and skipped."""
    walls: list[WallPolygon] = []
    for segment in segments.values():
        try:
            walls.append(build_wall(segment, base_altitude))
        except WallConstructionError as e:
            logger.error("Skipping wall: %s", e)
    return walls


# ---------------------------------------------------------------------------
# Camera
# ---------------------------------------------------------------------------
def to_ecef(longitude: float, latitude: float, height: float = 0.0) -> tuple[float, float, float]:
    x, y, z = _to_ecef.transform(longitude, latitude, height)
    return (float(x), float(y), float(z))


def chord_distance(start: GeoPoint, end: GeoPoint) -> float:
    """Straight-line distance in metres between two points on the ellipsoid."""
    return math.dist(
        to_ecef(start.longitude, start.latitude),
        to_ecef(end.longitude, end.latitude),
    )


def plan_camera(extent: GeoExtent, focus: SampledPoint) -> CameraPlan:
    """Oblique orbit framing around the ground-anchored extent center.

    Raises:
        CameraFramingError: If the focus elevation is unknown
    """
    height = focus.known_height
    if height is None:
        raise CameraFramingError("Elevation of the extent center is unknown")

    diagonal = chord_distance(extent.southwest, extent.northeast)
    zoom_range = diagonal * CAMERA_RANGE_FACTOR
    return CameraPlan(
        focus=GeoPosition(
            longitude=focus.longitude, latitude=focus.latitude, height=height
        ),
        target_ecef=to_ecef(focus.longitude, focus.latitude, height),
        diagonal_m=diagonal,
        range_m=zoom_range,
        max_zoom_distance=zoom_range * CAMERA_MAX_ZOOM_FACTOR,
    )


async def frame_camera(
    extent: GeoExtent, sampler: TerrainSampler, scene: SceneRenderer
) -> CameraPlan | None:
    """Point and lock the viewer camera on ``extent``.

    Non-fatal: on failure the camera is left where it is and None is returned.
    """
    try:
        (focus,) = await sample_points(sampler, [extent_center(extent)])
        plan = plan_camera(extent, focus)
    except (TerrainUnavailableError, CameraFramingError) as e:
        logger.error("Error setting camera view: %s", e)
        return None

    scene.look_at(plan)
    scene.lock_camera(plan)
    return plan


# ---------------------------------------------------------------------------
# Viewer visibility handshake
# ---------------------------------------------------------------------------
async def transition_visibility(
    scene: SceneRenderer, visible: bool, timeout: float
) -> None:
    """Request a visibility change and wait for it, at most ``timeout`` s."""
    if scene.is_visible == visible:
        return
    try:
        await asyncio.wait_for(scene.request_visibility(visible), timeout)
    except asyncio.TimeoutError:
        logger.debug("Visibility transition to %s timed out after %.3fs", visible, timeout)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------
class BlockGenerator:
    """Computes a Block for a validated extent.

    Parameters
    ----------
    sampler: TerrainSampler
        Source of terrain heights.
    fidelity: int
        Interpolation intervals per edge.
    """

    def __init__(self, sampler: TerrainSampler, fidelity: int) -> None:
        if fidelity < 1:
            raise ValueError(f"fidelity must be >= 1, got {fidelity}")
        self.sampler = sampler
        self.fidelity = fidelity

    async def generate(self, extent: GeoExtent) -> Block:
        """Sample the four edges concurrently and build the walls.

        Raises:
            TerrainUnavailableError: If any edge could not be sampled
        """
        segments = interpolate_wall_segments(extent, self.fidelity)
        sampled = await sample_wall_segments(self.sampler, segments)
        base_altitude = derive_base_altitude(sampled.values())
        walls = build_walls(sampled, base_altitude)
        logger.debug(
            "Built %d walls for %s at base %.2f m", len(walls), extent.as_tuple(), base_altitude
        )
        return Block(extent=extent, base_altitude=base_altitude, walls=tuple(walls))
