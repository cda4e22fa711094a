"""Tests for camera framing around a generated block."""

from __future__ import annotations

import asyncio

import pytest
from pyproj import Geod

from domain.relief.errors import CameraFramingError
from domain.relief.services import (
    chord_distance,
    frame_camera,
    plan_camera,
    to_ecef,
    transition_visibility,
)
from domain.terrain.value_objects import GeoPoint, SampledPoint
from infrastructure.scene import InMemoryScene
from tests.conftest_utils import FakeTerrainSampler, fail_single_point

_GEOD = Geod(ellps="WGS84")


def test_chord_matches_geodesic_for_small_extents(small_extent):
    sw, ne = small_extent.southwest, small_extent.northeast
    _, _, geodesic = _GEOD.inv(sw.longitude, sw.latitude, ne.longitude, ne.latitude)

    assert chord_distance(sw, ne) == pytest.approx(geodesic, rel=1e-6)


def test_ecef_of_null_island():
    x, y, z = to_ecef(0.0, 0.0, 0.0)

    assert x == pytest.approx(6_378_137.0)
    assert y == pytest.approx(0.0, abs=1e-6)
    assert z == pytest.approx(0.0, abs=1e-6)


def test_plan_frames_extent(small_extent):
    focus = SampledPoint(point=GeoPoint(latitude=46.005, longitude=8.005), height=1234.0)

    plan = plan_camera(small_extent, focus)

    assert plan.focus.height == 1234.0
    assert plan.range_m == pytest.approx(plan.diagonal_m * 1.5)
    assert plan.max_zoom_distance == pytest.approx(plan.range_m * 3)
    assert plan.min_zoom_distance == 500.0
    assert (plan.heading_deg, plan.pitch_deg) == (0.0, -45.0)
    assert not plan.enable_pan and not plan.enable_tilt
    assert plan.target_ecef == pytest.approx(to_ecef(8.005, 46.005, 1234.0))


def test_plan_requires_known_center_height(small_extent):
    focus = SampledPoint(point=GeoPoint(latitude=46.005, longitude=8.005), height=None)

    with pytest.raises(CameraFramingError):
        plan_camera(small_extent, focus)


@pytest.mark.asyncio
async def test_frame_camera_points_and_locks(small_extent):
    scene = InMemoryScene()

    plan = await frame_camera(small_extent, FakeTerrainSampler(), scene)

    assert plan is not None
    assert scene.camera == plan
    assert scene.camera_locked
    assert plan.focus.longitude == pytest.approx(8.005)
    assert plan.focus.height == 100.0


@pytest.mark.asyncio
async def test_frame_camera_failure_leaves_camera(small_extent, caplog):
    scene = InMemoryScene()

    plan = await frame_camera(
        small_extent, FakeTerrainSampler(fail_when=fail_single_point), scene
    )

    assert plan is None
    assert scene.camera is None
    assert not scene.camera_locked
    assert "Error setting camera view" in caplog.text


@pytest.mark.asyncio
async def test_frame_camera_unknown_height_is_non_fatal(small_extent):
    scene = InMemoryScene()

    plan = await frame_camera(small_extent, FakeTerrainSampler(lambda p: None), scene)

    assert plan is None
    assert scene.camera is None


# ===========================================================================
# Visibility handshake
# ===========================================================================
@pytest.mark.asyncio
async def test_visibility_transition_waits_for_signal():
    scene = InMemoryScene(transition_delay=0.01)

    await transition_visibility(scene, False, timeout=1.0)

    assert scene.visibility_log == [False]
    assert not scene.is_visible


@pytest.mark.asyncio
async def test_visibility_transition_falls_back_to_timeout():
    scene = InMemoryScene(transition_delay=None)
    loop = asyncio.get_running_loop()
    started = loop.time()

    await transition_visibility(scene, False, timeout=0.05)

    assert loop.time() - started < 1.0
    assert scene.visibility_log == [False]


@pytest.mark.asyncio
async def test_visibility_noop_when_already_in_state():
    scene = InMemoryScene()

    await transition_visibility(scene, True, timeout=0.05)

    assert scene.visibility_log == []
