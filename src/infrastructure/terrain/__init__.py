"""Infrastructure adapters for the terrain bounded context.

Loading DEMs from GeoTIFF files and sampling elevations from them.
"""

from .geotiff_adapter import GeoTiffTerrainAdapter
from .grid_sampler import GridTerrainSampler

__all__ = ["GeoTiffTerrainAdapter", "GridTerrainSampler"]
