"""Fixtures wiring a SessionCoordinator to in-memory ports."""

from __future__ import annotations

import pytest

from domain.session.services import SessionCoordinator
from infrastructure.scene import InMemoryScene
from tests.conftest_utils import FakeTerrainSampler


@pytest.fixture
def scene() -> InMemoryScene:
    return InMemoryScene()


@pytest.fixture
def sampler() -> FakeTerrainSampler:
    return FakeTerrainSampler()


@pytest.fixture
def coordinator(sampler, scene, surface, settings, location) -> SessionCoordinator:
    """Coordinator whose terrain is NOT ready yet; await on_terrain_ready()."""
    return SessionCoordinator(
        sampler=sampler,
        scene=scene,
        surface=surface,
        settings=settings,
        location=location,
    )
