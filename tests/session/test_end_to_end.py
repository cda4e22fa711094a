"""Draw-to-block flows through the coordinator with in-memory ports."""

from __future__ import annotations

from decimal import Decimal
from urllib.parse import parse_qs, urlsplit

import pytest

from domain.drawing.value_objects import PlanarPoint
from domain.relief.value_objects import EdgeLabel
from domain.session.services import SessionCoordinator
from domain.session.value_objects import PanelStatus, SessionPhase
from domain.sharing.services import build_share_url, read_share_config
from domain.sharing.value_objects import SharePayload
from domain.terrain.value_objects import GeoExtent
from infrastructure.scene import InMemoryScene
from tests.conftest_utils import FakeLocation, make_settings

# 1 km square near Lucerne in EPSG:3857
FIRST = PlanarPoint(x=915_000, y=5_780_000)
SECOND = PlanarPoint(x=916_000, y=5_781_000)


def _decimals(value: float) -> int:
    return max(0, -Decimal(repr(value)).as_tuple().exponent)


@pytest.mark.asyncio
async def test_drawn_square_becomes_block(coordinator, scene, surface):
    await coordinator.on_terrain_ready()
    assert coordinator.on_draw_start()
    coordinator.on_draw_move(FIRST, PlanarPoint(x=915_500, y=5_780_200))

    block = await coordinator.on_draw_end(FIRST, SECOND)

    assert block is not None
    # four named walls in the scene
    assert sorted(w.name for w in scene.walls) == [
        "Block Wall East",
        "Block Wall North",
        "Block Wall South",
        "Block Wall West",
    ]
    assert all(len(w.vertices) == 2 * (8 + 1) for w in block.walls)
    assert all(v.height >= block.base_altitude for w in block.walls for v in w.vertices)

    # terrain clipped to the block, camera locked on it, globe revealed
    assert scene.clip_extent == block.extent
    assert scene.camera is not None and scene.camera_locked
    assert scene.globe_visible
    assert scene.visibility_log == [False, True]

    extent = coordinator.context.current_extent
    assert extent == block.extent
    assert all(_decimals(v) <= 5 for v in extent.as_tuple())
    assert 8.2 < extent.west < extent.east < 8.24
    assert 45.99 < extent.south < extent.north < 46.01

    assert coordinator.context.phase is SessionPhase.IDLE
    assert coordinator.context.status is PanelStatus.IDLE
    assert coordinator.context.has_generated_block
    assert surface.active_log == [False, True]


@pytest.mark.asyncio
async def test_new_block_replaces_previous_entities(coordinator, scene):
    await coordinator.on_terrain_ready()
    coordinator.on_draw_start()
    await coordinator.on_draw_end(FIRST, SECOND)
    first_handles = set(coordinator.context.wall_handles)

    coordinator.on_draw_start()
    block = await coordinator.on_draw_end(
        PlanarPoint(x=920_000, y=5_790_000), PlanarPoint(x=921_500, y=5_788_500)
    )

    assert len(scene.entities) == 4
    assert first_handles.isdisjoint(scene.entities)
    assert scene.clip_extent == block.extent
    assert scene.visibility_log == [False, True, False, True]


@pytest.mark.asyncio
async def test_share_link_reproduces_extent(coordinator, location):
    await coordinator.on_terrain_ready()
    assert not coordinator.can_share
    assert coordinator.share_url() is None

    coordinator.on_draw_start()
    block = await coordinator.on_draw_end(FIRST, SECOND)

    assert coordinator.can_share
    url = coordinator.publish_share(hide_map=True)
    assert location.url == url
    config = read_share_config(url)
    assert config is not None
    assert config.extent == block.extent
    assert config.hide_map is True


@pytest.mark.asyncio
async def test_drawing_clears_stale_share_param(sampler, scene, surface, settings):
    location = FakeLocation("https://blocks.example/app?share=stale&lang=de")
    coordinator = SessionCoordinator(
        sampler=sampler, scene=scene, surface=surface, settings=settings, location=location
    )
    await coordinator.on_terrain_ready()

    coordinator.on_draw_start()
    await coordinator.on_draw_end(FIRST, SECOND)

    assert parse_qs(urlsplit(location.url).query) == {"lang": ["de"]}


@pytest.mark.asyncio
async def test_share_link_bootstraps_block(sampler, scene, surface, settings):
    shared = GeoExtent(west=8.22, south=45.95, east=8.23, north=45.96)
    url = build_share_url(
        "https://blocks.example/app", SharePayload(extent=shared, hide_map=True)
    )
    location = FakeLocation(url)
    coordinator = SessionCoordinator(
        sampler=sampler, scene=scene, surface=surface, settings=settings, location=location
    )

    config = coordinator.load()

    assert config is not None and config.extent == shared
    assert coordinator.context.is_challenge_mode
    assert surface.hidden
    assert not coordinator.can_share
    assert scene.walls == []  # nothing until terrain is ready

    block = await coordinator.on_terrain_ready()

    assert block is not None and block.extent == shared
    assert len(surface.shown) == 1
    assert surface.shown[0].min_x < surface.shown[0].max_x
    assert location.replaced == []  # the link that built the block stays
    assert block.wall(EdgeLabel.SOUTH) is not None


@pytest.mark.asyncio
async def test_broken_share_link_falls_back_to_default_view(sampler, scene, surface, settings):
    location = FakeLocation("https://blocks.example/app?share=%%%not-a-token")
    coordinator = SessionCoordinator(
        sampler=sampler, scene=scene, surface=surface, settings=settings, location=location
    )

    assert coordinator.load() is None
    assert not coordinator.context.is_challenge_mode
    assert await coordinator.on_terrain_ready() is None
    assert scene.walls == []


@pytest.mark.asyncio
async def test_missing_visibility_signal_falls_back_to_timeout(sampler, surface, location):
    scene = InMemoryScene(transition_delay=None)
    coordinator = SessionCoordinator(
        sampler=sampler,
        scene=scene,
        surface=surface,
        settings=make_settings(visibility_timeout_s=0.02),
        location=location,
    )
    await coordinator.on_terrain_ready()
    coordinator.on_draw_start()

    block = await coordinator.on_draw_end(FIRST, SECOND)

    assert block is not None
    assert scene.visibility_log == [False, True]
    assert coordinator.context.phase is SessionPhase.IDLE
