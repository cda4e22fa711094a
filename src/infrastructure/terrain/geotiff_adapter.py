"""GeoTIFF adapter for TerrainRepository.

Loads a DEM raster with rasterio, normalizes it to EPSG:4326 and returns a
domain TerrainGrid Value Object, ready to back a GridTerrainSampler.

Lifecycle (to avoid resource leaks):
1) Pre-flight file checks (existence, extension, size budget)
2) Open dataset inside rasterio.Env with a context manager
3) Validate band count, CRS and geotransform
4) Read directly, or reproject to EPSG:4326 when the CRS differs
5) Convert nodata -> np.nan as float32; reject all-NoData rasters
6) Exit contexts to release GDAL handles and return the TerrainGrid
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any

import numpy as np
import rasterio
from affine import Affine
from numpy.typing import NDArray
from rasterio.crs import CRS
from rasterio.enums import Resampling
from rasterio.errors import RasterioError, RasterioIOError
from rasterio.transform import array_bounds
from rasterio.warp import calculate_default_transform, reproject

from domain.terrain.errors import (
    AllNoDataError,
    InsufficientMemoryError,
    InvalidBoundsError,
    InvalidGeotransformError,
    InvalidRasterError,
    MissingCRSError,
)
from domain.terrain.value_objects import GeoExtent, TerrainGrid

logger = logging.getLogger(__name__)

_TARGET_CRS = CRS.from_epsg(4326)
_ALLOWED_SUFFIXES = (".tif", ".tiff")
_HIGH_NODATA_PCT = 80.0


def _is_wgs84(crs: Any) -> bool:
    if crs is None:
        return False
    if crs == _TARGET_CRS:
        return True
    return str(crs).upper() in ("EPSG:4326", "OGC:CRS84")


def _validate_transform(transform: Any) -> Affine:
    if not isinstance(transform, Affine):
        raise InvalidGeotransformError("Missing affine transform")
    coefficients = (transform.a, transform.b, transform.c, transform.d, transform.e, transform.f)
    if any(not math.isfinite(v) for v in coefficients):
        raise InvalidGeotransformError("Invalid (NaN/Inf) transform values")
    if transform.a == 0 or transform.e == 0:
        raise InvalidGeotransformError("Invalid transform scale (zero)")
    return transform


def _grid_extent(height: int, width: int, transform: Affine) -> GeoExtent:
    west, south, east, north = array_bounds(height, width, transform)
    try:
        return GeoExtent(
            west=float(west), south=float(south), east=float(east), north=float(north)
        )
    except ValueError as e:
        raise InvalidBoundsError(str(e)) from e


class GeoTiffTerrainAdapter:
    """Infrastructure adapter for loading DEMs from GeoTIFF files.

    Parameters
    ----------
    max_bytes: int | None
        Optional memory budget for the resulting float32 grid (height*width*4).
        InsufficientMemoryError is raised when the estimate exceeds it.
    """

    def __init__(self, max_bytes: int | None = None) -> None:
        self.max_bytes = max_bytes

    def load_dem(self, file_path: Path | str) -> TerrainGrid:
        """Load a DEM from GeoTIFF and return a TerrainGrid in EPSG:4326."""
        path = Path(file_path)
        self._preflight(path)

        try:
            with rasterio.Env():
                with rasterio.open(path) as src:
                    if src.count != 1:
                        raise InvalidRasterError(f"Expected 1 band, got {src.count}")
                    if src.crs is None:
                        raise MissingCRSError("Raster has no CRS defined")
                    transform = _validate_transform(src.transform)
                    source_crs = src.crs.to_string()

                    if _is_wgs84(src.crs):
                        data = self._read_native(src)
                    else:
                        data, transform = self._read_reprojected(src, transform)
                        logger.info(
                            "DEM %s: Reprojected from %s to EPSG:4326", path.name, source_crs
                        )
        except (RasterioIOError, RasterioError) as e:
            raise InvalidRasterError(f"Corrupted or invalid raster: {e}") from e
        except MemoryError as e:
            raise InsufficientMemoryError("Insufficient memory to load raster") from e

        if np.isnan(data).all():
            raise AllNoDataError("Raster contains 100% NoData pixels - unusable")

        height, width = data.shape
        nodata_pct = float(np.isnan(data).mean() * 100.0)
        if nodata_pct > _HIGH_NODATA_PCT:
            logger.warning("DEM %s: %.1f%% NoData pixels detected", path.name, nodata_pct)
        logger.debug("DEM %s: Loaded %dx%d grid", path.name, width, height)

        return TerrainGrid(
            data=data,
            bounds=_grid_extent(height, width, transform),
            crs="EPSG:4326",
            resolution=(abs(transform.a), abs(transform.e)),
            source_crs=source_crs,
        )

    # ------------------------------------------------------------------
    def _preflight(self, path: Path) -> None:
        if not path.exists():
            raise FileNotFoundError(str(path))
        if path.suffix.lower() not in _ALLOWED_SUFFIXES:
            raise InvalidRasterError(f"Unsupported file extension: {path.suffix}")
        if path.is_symlink():
            raise InvalidRasterError("Symlinks are not permitted")
        size = path.stat().st_size
        if size == 0:
            raise InvalidRasterError("Empty file")
        # A file over twice the budget can never fit once decoded
        if self.max_bytes is not None and size > self.max_bytes * 2:
            raise InsufficientMemoryError(
                f"File size {size}B exceeds 2x memory budget {self.max_bytes}B"
            )

    def _check_budget(self, width: int, height: int) -> None:
        if self.max_bytes is None:
            return
        estimate = int(width) * int(height) * 4  # float32
        if estimate > self.max_bytes:
            raise InsufficientMemoryError(
                f"Estimated grid size {estimate}B exceeds budget {self.max_bytes}B"
            )

    def _read_native(self, src: Any) -> NDArray[np.float32]:
        self._check_budget(src.width, src.height)
        band = src.read(1, masked=True, out_dtype="float32")
        mask = np.ma.getmaskarray(band)
        data = np.where(mask, np.float32(np.nan), np.ma.getdata(band))
        if src.nodata is not None:
            # GeoTIFF stores nodata exactly, so exact comparison is correct
            data = np.where(data == src.nodata, np.float32(np.nan), data)
        return data.astype(np.float32, copy=False)

    def _read_reprojected(
        self, src: Any, transform: Affine
    ) -> tuple[NDArray[np.float32], Affine]:
        bounds = src.bounds
        dst_transform, dst_width, dst_height = calculate_default_transform(
            src.crs,
            _TARGET_CRS,
            src.width,
            src.height,
            bounds.left,
            bounds.bottom,
            bounds.right,
            bounds.top,
        )
        self._check_budget(dst_width, dst_height)

        dst = np.full((dst_height, dst_width), np.nan, dtype=np.float32)
        reproject(
            source=rasterio.band(src, 1),
            destination=dst,
            src_transform=transform,
            src_crs=src.crs,
            dst_transform=dst_transform,
            dst_crs=_TARGET_CRS,
            resampling=Resampling.bilinear,
            src_nodata=src.nodata,
            dst_nodata=np.nan,
        )
        return dst, dst_transform
