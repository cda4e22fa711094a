"""Pytest configuration for GeoTIFF integration tests.

Fixtures write small synthetic DEMs with real rasterio into tmp_path.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from tests.conftest_utils import write_geotiff


@pytest.fixture
def dem_4326(tmp_path: Path) -> Path:
    """40x40 DEM over lon [8, 8.04], lat [46, 46.04]; rises eastwards 500-890 m.

    Pixel (0, 0) carries the nodata value -9999.
    """
    data = np.tile(np.arange(40, dtype=np.float32) * 10 + 500, (40, 1))
    data[0, 0] = -9999
    return write_geotiff(
        tmp_path / "dem_4326.tif",
        data,
        west=8.0,
        north=46.04,
        resolution=0.001,
        nodata=-9999,
    )


@pytest.fixture
def dem_utm(tmp_path: Path) -> Path:
    """50x50 DEM in UTM 32N (30 m pixels) near 8.2 E / 46.0 N."""
    data = np.linspace(400, 900, 2500, dtype=np.float32).reshape(50, 50)
    return write_geotiff(
        tmp_path / "dem_utm32n.tif",
        data,
        west=440_000.0,
        north=5_095_000.0,
        resolution=30.0,
        crs="EPSG:32632",
    )
