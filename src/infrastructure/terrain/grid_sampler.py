"""TerrainSampler backed by an in-memory TerrainGrid.

Lookups are bilinear; points outside the grid or next to NoData pixels come
back with an unknown height. Sampling runs in a worker thread so large point
lists do not block the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from domain.terrain.repositories import TerrainRepository
from domain.terrain.services import bilinear_interpolate
from domain.terrain.value_objects import GeoPoint, SampledPoint, TerrainGrid

logger = logging.getLogger(__name__)


class GridTerrainSampler:
    """Implements the TerrainSampler port over a single DEM grid."""

    def __init__(self, grid: TerrainGrid) -> None:
        self.grid = grid

    @classmethod
    def from_file(
        cls, repository: TerrainRepository, file_path: Path | str
    ) -> "GridTerrainSampler":
        return cls(repository.load_dem(file_path))

    async def sample(self, points: Sequence[GeoPoint]) -> list[SampledPoint]:
        return await asyncio.to_thread(self.sample_sync, points)

    def sample_sync(self, points: Sequence[GeoPoint]) -> list[SampledPoint]:
        samples = [
            SampledPoint(point=point, height=bilinear_interpolate(self.grid, point))
            for point in points
        ]
        unknown = sum(1 for s in samples if s.height is None)
        if unknown:
            logger.debug("%d of %d points have no elevation", unknown, len(samples))
        return samples
