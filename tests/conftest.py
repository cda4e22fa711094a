"""Root pytest configuration for all tests.

Domain tests build value objects directly; port doubles come from
tests/conftest_utils.py.
"""

from __future__ import annotations

import pytest

from domain.terrain.value_objects import GeoExtent
from shared.config import BlockSettings
from tests.conftest_utils import FakeDrawSurface, FakeLocation, make_settings


@pytest.fixture
def settings() -> BlockSettings:
    return make_settings()


@pytest.fixture
def small_extent() -> GeoExtent:
    """Roughly 770 m x 1110 m near Bern."""
    return GeoExtent(west=8.0, south=46.0, east=8.01, north=46.01)


@pytest.fixture
def surface() -> FakeDrawSurface:
    return FakeDrawSurface()


@pytest.fixture
def location() -> FakeLocation:
    return FakeLocation()
