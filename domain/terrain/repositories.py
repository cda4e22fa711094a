"""Domain Port(s) for Terrain I/O.

Defines interfaces (Protocols) that infrastructure adapters must implement.
No concrete I/O here.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from .value_objects import GeoPoint, SampledPoint, TerrainGrid


class TerrainRepository(Protocol):
    """Port for obtaining terrain grids from external sources.

    Implementations live in infrastructure (e.g., GeoTIFF adapter).
    """

    def load_dem(self, file_path: Path | str) -> TerrainGrid:
        """Load a DEM and return a normalized TerrainGrid in EPSG:4326."""
        ...


class TerrainSampler(Protocol):
    """Port for resolving terrain elevation at arbitrary locations.

    The result has the same length and order as ``points``; each entry carries
    the most detailed elevation available there, or ``None`` when unknown.
    Failures are raised, never retried by the caller.
    """

    async def sample(self, points: Sequence[GeoPoint]) -> Sequence[SampledPoint]:
        ...
