"""Tests for extent validation and normalization."""

from __future__ import annotations

import math
from decimal import Decimal
from types import SimpleNamespace

import pytest

from domain.terrain.services import extent_center, is_valid_extent, normalize_extent
from domain.terrain.value_objects import GeoExtent


def _decimals(value: float) -> int:
    exponent = Decimal(repr(value)).as_tuple().exponent
    return max(0, -exponent)


# ===========================================================================
# is_valid_extent
# ===========================================================================
def test_valid_mapping_extent():
    assert is_valid_extent({"west": 8.0, "south": 46.0, "east": 8.01, "north": 46.01})


def test_valid_geo_extent_and_attribute_object(small_extent):
    assert is_valid_extent(small_extent)
    assert is_valid_extent(SimpleNamespace(west=-1, south=-1, east=1, north=1))


@pytest.mark.parametrize(
    "extent",
    [
        {"west": 8.0, "south": 46.0, "east": 8.0, "north": 46.01},  # west == east
        {"west": 8.1, "south": 46.0, "east": 8.0, "north": 46.01},  # west > east
        {"west": 8.0, "south": 46.0, "east": 8.01, "north": 46.0},  # south == north
        {"west": 8.0, "south": 46.1, "east": 8.01, "north": 46.0},  # south > north
        {"west": -180.5, "south": 0, "east": 0, "north": 1},
        {"west": 0, "south": 0, "east": 180.0001, "north": 1},
        {"west": 0, "south": -90.1, "east": 1, "north": 1},
        {"west": 0, "south": 0, "east": 1, "north": 91},
    ],
)
def test_invalid_geometry_rejected(extent):
    assert not is_valid_extent(extent)


@pytest.mark.parametrize(
    "extent",
    [
        None,
        "8,46,9,47",
        {"west": 8.0, "south": 46.0, "east": 8.01},  # missing north
        {"west": "8", "south": 46.0, "east": 8.01, "north": 46.01},
        {"west": True, "south": 46.0, "east": 8.01, "north": 46.01},
        {"west": math.nan, "south": 46.0, "east": 8.01, "north": 46.01},
        {"west": 8.0, "south": 46.0, "east": math.inf, "north": 46.01},
    ],
)
def test_non_numeric_or_non_finite_rejected(extent):
    assert not is_valid_extent(extent)


def test_global_bounds_are_inclusive():
    assert is_valid_extent({"west": -180, "south": -90, "east": 180, "north": 90})


def test_geo_extent_construction_enforces_invariants():
    with pytest.raises(ValueError):
        GeoExtent(west=9.0, south=46.0, east=8.0, north=47.0)
    with pytest.raises(ValueError):
        GeoExtent(west=8.0, south=46.0, east=9.0, north=math.nan)


# ===========================================================================
# normalize_extent
# ===========================================================================
def test_normalize_rounds_to_five_decimals():
    extent = normalize_extent(
        {"west": 8.1234567, "south": 46.9876543, "east": 8.2000049, "north": 47.0}
    )

    assert extent == GeoExtent(west=8.12346, south=46.98765, east=8.2, north=47.0)


@pytest.mark.parametrize(
    "raw",
    [
        {"west": 8.1234567, "south": 46.9876543, "east": 8.2000049, "north": 47.0000051},
        {"west": -179.999999, "south": -89.123456789, "east": 179.99999, "north": 0.000001},
        {"west": 0.1 + 0.2, "south": 1 / 3, "east": 2 / 3 + 1, "north": 2.0},
    ],
)
def test_normalize_is_idempotent_with_at_most_five_decimals(raw):
    once = normalize_extent(raw)
    twice = normalize_extent(once)

    assert once is not None
    assert twice == once
    for value in once.as_tuple():
        assert _decimals(value) <= 5


def test_normalize_invalid_returns_none():
    assert normalize_extent({"west": 9.0, "south": 46.0, "east": 8.0, "north": 47.0}) is None
    assert normalize_extent(None) is None


def test_normalize_collapsing_extent_returns_none():
    raw = {"west": 8.000001, "south": 46.0, "east": 8.000004, "north": 46.01}

    assert is_valid_extent(raw)
    assert normalize_extent(raw) is None


def test_extent_center(small_extent):
    center = extent_center(small_extent)

    assert center.longitude == pytest.approx(8.005)
    assert center.latitude == pytest.approx(46.005)
