"""Headless SceneRenderer keeping the scene as plain data.

Used by the command-line builder and by tests; a browser bridge would
implement the same port against the real 3D viewer.
"""

from __future__ import annotations

import asyncio
import itertools
import logging

from domain.relief.value_objects import CameraPlan, WallPolygon
from domain.terrain.value_objects import GeoExtent

logger = logging.getLogger(__name__)


class InMemoryScene:
    """Implements the SceneRenderer port in memory.

    Parameters
    ----------
    transition_delay: float | None
        Seconds before a visibility change reports completion. None means the
        completion signal never fires (callers must rely on their timeout).
    """

    def __init__(self, transition_delay: float | None = 0.0) -> None:
        self.transition_delay = transition_delay
        self.entities: dict[int, WallPolygon] = {}
        self.clip_extent: GeoExtent | None = None
        self.camera: CameraPlan | None = None
        self.camera_locked = False
        self.globe_visible = False
        self.visibility_log: list[bool] = []
        self._visible = True
        self._ids = itertools.count(1)

    @property
    def is_visible(self) -> bool:
        return self._visible

    def request_visibility(self, visible: bool) -> asyncio.Future[None]:
        self._visible = visible
        self.visibility_log.append(visible)
        done: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        if self.transition_delay is not None:
            asyncio.get_running_loop().call_later(
                self.transition_delay, lambda: done.done() or done.set_result(None)
            )
        return done

    def add_wall(self, wall: WallPolygon) -> int:
        handle = next(self._ids)
        self.entities[handle] = wall
        logger.debug("Added entity %d (%s)", handle, wall.name)
        return handle

    def remove_wall(self, handle: int) -> None:
        self.entities.pop(handle, None)

    def clip_to_extent(self, extent: GeoExtent) -> None:
        self.clip_extent = extent

    def clear_clipping(self) -> None:
        self.clip_extent = None

    def look_at(self, plan: CameraPlan) -> None:
        self.camera = plan

    def lock_camera(self, plan: CameraPlan) -> None:
        self.camera_locked = not (plan.enable_pan or plan.enable_tilt)

    def reveal_globe(self) -> None:
        self.globe_visible = True

    @property
    def walls(self) -> list[WallPolygon]:
        return list(self.entities.values())
