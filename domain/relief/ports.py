"""Domain Port(s) for the 3D rendering surface.

Defines the exact scene operations the block pipeline performs.
No concrete rendering here.
"""

from __future__ import annotations

from collections.abc import Awaitable, Hashable
from typing import Protocol

from domain.terrain.value_objects import GeoExtent

from .value_objects import CameraPlan, WallPolygon


class SceneRenderer(Protocol):
    """Port for the 3D viewer hosting the relief block."""

    @property
    def is_visible(self) -> bool:
        ...

    def request_visibility(self, visible: bool) -> Awaitable[None]:
        """Start a visibility transition; the awaitable completes when it ends.

        Callers bound the wait with a timeout, so an implementation that never
        signals completion cannot stall them.
        """
        ...

    def add_wall(self, wall: WallPolygon) -> Hashable:
        """Add a wall entity and return a handle for later removal."""
        ...

    def remove_wall(self, handle: Hashable) -> None:
        ...

    def clip_to_extent(self, extent: GeoExtent) -> None:
        """Hide all terrain outside ``extent`` (inverse clipping polygon)."""
        ...

    def clear_clipping(self) -> None:
        ...

    def look_at(self, plan: CameraPlan) -> None:
        ...

    def lock_camera(self, plan: CameraPlan) -> None:
        """Disable pan/tilt and bound the zoom distance per ``plan``."""
        ...

    def reveal_globe(self) -> None:
        """Show the terrain surface (hidden until the first block exists)."""
        ...
