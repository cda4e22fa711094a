"""Tests for map panel resizing and relayout coalescing."""

from __future__ import annotations

import asyncio

import pytest

from domain.session.services import RelayoutCoalescer


def test_relayout_without_loop_runs_immediately():
    calls = []
    coalescer = RelayoutCoalescer(lambda: calls.append(1), frame_interval=0.01)

    coalescer.request()
    coalescer.request()

    assert calls == [1, 1]
    assert not coalescer.pending


@pytest.mark.asyncio
async def test_burst_of_requests_coalesces_to_one():
    calls = []
    coalescer = RelayoutCoalescer(lambda: calls.append(1), frame_interval=0.01)

    for _ in range(10):
        coalescer.request()
    assert coalescer.pending
    assert calls == []

    await asyncio.sleep(0.05)

    assert calls == [1]
    assert not coalescer.pending


@pytest.mark.asyncio
async def test_resize_clamps_and_schedules_relayout(coordinator, surface):
    size = coordinator.resize_map_panel(2_000, 10, 1_280, 720)

    assert size == (880, 140)
    await asyncio.sleep(0.05)
    assert surface.update_size_count == 1


@pytest.mark.asyncio
async def test_challenge_mode_hides_map_and_relayouts(coordinator, surface):
    coordinator.apply_challenge_mode(True)
    coordinator.resize_map_panel(300, 300, 1_280, 720)
    await asyncio.sleep(0.05)

    assert surface.hidden
    assert surface.update_size_count == 1
