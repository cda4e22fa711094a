"""Drawing Bounded Context - Domain Services.

Pure geometry for the square draw interaction and the 2D map panel.
"""

from __future__ import annotations

from pyproj import Transformer

from domain.drawing.value_objects import (
    DrawnSquare,
    PanelBounds,
    PlanarBounds,
    PlanarPoint,
)
from domain.terrain.value_objects import GeoExtent

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
PANEL_VIEWPORT_MARGIN_PX = 32  # panel never grows closer than this to the window edge

# Web Mercator <-> WGS84, (x, y) == (lon, lat) ordering
_to_geographic = Transformer.from_crs("EPSG:3857", "EPSG:4326", always_xy=True)
_to_planar = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)


def _direction(delta: float) -> int:
    # Zero delta defaults to +1 so a motionless drag still has a direction
    return -1 if delta < 0 else 1


# ---------------------------------------------------------------------------
# Square constraint
# ---------------------------------------------------------------------------
def build_square(
    first: PlanarPoint, second: PlanarPoint, max_square_size: float
) -> DrawnSquare:
    """Constrain a drag from ``first`` to ``second`` to a capped perfect square.

    The side is the larger of the two axis deltas, capped at
    ``max_square_size``; the square grows from ``first`` towards ``second``
    on each axis. Used for the live preview on every drag move and for the
    committed shape at drag end, so both always agree.
    """
    delta_x = second.x - first.x
    delta_y = second.y - first.y
    side = min(max(abs(delta_x), abs(delta_y)), max_square_size)

    direction_x = _direction(delta_x)
    direction_y = _direction(delta_y)

    return DrawnSquare(
        first_corner=first,
        second_corner=PlanarPoint(
            x=first.x + side * direction_x,
            y=first.y + side * direction_y,
        ),
        side=side,
        direction_x=direction_x,
        direction_y=direction_y,
    )


def is_accidental_tap(square: DrawnSquare, min_size: float) -> bool:
    """True when the shape is too small to be a deliberate drag."""
    return square.bounds.max_dimension < min_size


# ---------------------------------------------------------------------------
# Reprojection
# ---------------------------------------------------------------------------
def planar_bounds_to_extent(bounds: PlanarBounds) -> dict[str, float]:
    """Reproject a Web Mercator box to a raw geographic extent mapping.

    The result is NOT validated: a box drawn across the antimeridian comes
    back with west > east and is rejected later by extent validation.
    """
    west, south = _to_geographic.transform(bounds.min_x, bounds.min_y)
    east, north = _to_geographic.transform(bounds.max_x, bounds.max_y)
    return {
        "west": float(west),
        "south": float(south),
        "east": float(east),
        "north": float(north),
    }


def extent_to_planar_bounds(extent: GeoExtent) -> PlanarBounds:
    """Project a geographic extent to a Web Mercator box."""
    min_x, min_y = _to_planar.transform(extent.west, extent.south)
    max_x, max_y = _to_planar.transform(extent.east, extent.north)
    return PlanarBounds(
        min_x=float(min_x), min_y=float(min_y), max_x=float(max_x), max_y=float(max_y)
    )


# ---------------------------------------------------------------------------
# Map panel
# ---------------------------------------------------------------------------
def _clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


def constrain_panel_size(
    width: float,
    height: float,
    viewport_width: float,
    viewport_height: float,
    bounds: PanelBounds,
) -> tuple[float, float]:
    """Clamp a requested panel size to the configured bounds and the viewport.

    The viewport-derived maximum never drops below the configured minimum.
    """
    max_width = max(
        bounds.min_width, min(bounds.max_width, viewport_width - PANEL_VIEWPORT_MARGIN_PX)
    )
    max_height = max(
        bounds.min_height,
        min(bounds.max_height, viewport_height - PANEL_VIEWPORT_MARGIN_PX),
    )
    return (
        _clamp(width, bounds.min_width, max_width),
        _clamp(height, bounds.min_height, max_height),
    )
