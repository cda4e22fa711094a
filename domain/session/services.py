"""Session Bounded Context - Draw/generate coordination.

State machine:

    Idle -> Drawing -> Generating -> Idle
    Drawing -> Idle                       (abort, accidental tap)

Drawing can never be entered while Generating; a draw attempted during a
generation is aborted, not queued. A generation always returns the session to
Idle and re-enables drawing, whatever its outcome.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from domain.drawing.ports import DrawSurface
from domain.drawing.services import (
    build_square,
    constrain_panel_size,
    extent_to_planar_bounds,
    is_accidental_tap,
    planar_bounds_to_extent,
)
from domain.drawing.value_objects import DrawnSquare, PlanarPoint
from domain.relief.ports import SceneRenderer
from domain.relief.services import BlockGenerator, frame_camera, transition_visibility
from domain.relief.value_objects import Block
from domain.session.value_objects import PanelStatus, SessionContext, SessionPhase
from domain.sharing.ports import ShareLocation
from domain.sharing.services import (
    build_share_url,
    clear_share_param,
    has_share_param,
    read_share_config,
)
from domain.sharing.value_objects import SharePayload
from domain.terrain.errors import InvalidExtentError, TerrainError
from domain.terrain.repositories import TerrainSampler
from domain.terrain.services import normalize_extent
from domain.terrain.value_objects import GeoExtent
from shared.config import BlockSettings

logger = logging.getLogger(__name__)


class RelayoutCoalescer:
    """Collapses bursts of relayout requests into one call per frame."""

    def __init__(self, relayout: Callable[[], None], frame_interval: float) -> None:
        self._relayout = relayout
        self._frame_interval = frame_interval
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def request(self) -> None:
        if self._pending:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop, so no frames to wait for
            self._relayout()
            return
        self._pending = True
        loop.call_later(self._frame_interval, self._flush)

    def _flush(self) -> None:
        self._pending = False
        self._relayout()


class SessionCoordinator:
    """Owns the SessionContext and drives drawing, generation and sharing.

    Parameters
    ----------
    sampler: TerrainSampler
        Terrain heights for walls and camera framing.
    scene: SceneRenderer
        3D viewer receiving the block.
    surface: DrawSurface
        2D map carrying the draw interaction.
    settings: BlockSettings
        Static configuration.
    location: ShareLocation | None
        Page location holding the share parameter, if any.
    """

    def __init__(
        self,
        *,
        sampler: TerrainSampler,
        scene: SceneRenderer,
        surface: DrawSurface,
        settings: BlockSettings,
        location: ShareLocation | None = None,
        context: SessionContext | None = None,
    ) -> None:
        self.sampler = sampler
        self.scene = scene
        self.surface = surface
        self.settings = settings
        self.location = location
        self.context = context if context is not None else SessionContext()
        self.generator = BlockGenerator(sampler, settings.fidelity)
        self.relayout = RelayoutCoalescer(surface.update_size, settings.relayout_interval_s)
        self._pending_extent: GeoExtent | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def load(self, url: str | None = None) -> SharePayload | None:
        """Read the share parameter and prepare the initial view.

        A shared extent is kept until the terrain is ready.
        """
        if url is None and self.location is not None:
            url = self.location.current_url()
        config = read_share_config(url, self.settings.share_param) if url else None

        self._pending_extent = config.extent if config is not None else None
        self.apply_challenge_mode(config.hide_map if config is not None else False)
        self._set_status(PanelStatus.IDLE)
        return config

    async def on_terrain_ready(self) -> Block | None:
        """Mark terrain usable and build the shared block, if one is pending."""
        self.context.terrain_ready = True
        extent, self._pending_extent = self._pending_extent, None
        if extent is None:
            return None
        return await self.bootstrap_extent(extent)

    def on_terrain_error(self, error: BaseException) -> None:
        """Terrain provider failed during setup: fatal until reload."""
        logger.error("Error loading terrain: %s", error)
        self.context.terrain_ready = False
        self.context.is_fatal = True
        self.context.last_error = error if isinstance(error, Exception) else None
        self.surface.set_active(False)
        self._set_status(PanelStatus.ERROR)

    async def bootstrap_extent(self, extent: GeoExtent) -> Block | None:
        """Show ``extent`` on the 2D map and generate its block."""
        if self._generation_refused():
            return None
        self.surface.clear_shapes()
        self.surface.show_extent(extent_to_planar_bounds(extent))
        return await self._run_generation(extent, from_share=True)

    # ------------------------------------------------------------------
    # Draw interaction events
    # ------------------------------------------------------------------
    def on_draw_start(self) -> bool:
        """Handle drawstart; returns False when the draw was refused."""
        if self.context.is_fatal or self.context.is_generating:
            # Leave the current shape alone: it belongs to the running generation
            logger.debug("Draw refused in phase %s", self.context.phase.value)
            self.surface.abort_drawing()
            return False

        self.surface.clear_shapes()
        self.context.drawn_square = None
        self._enter(SessionPhase.DRAWING, PanelStatus.DRAWING)
        return True

    def on_draw_move(self, first: PlanarPoint, cursor: PlanarPoint) -> DrawnSquare | None:
        """Live preview of the square for the current drag."""
        if self.context.phase is not SessionPhase.DRAWING:
            return None
        square = build_square(first, cursor, self.settings.max_square_size)
        self.context.drawn_square = square
        return square

    async def on_draw_end(self, first: PlanarPoint, second: PlanarPoint) -> Block | None:
        """Commit the drawn square and generate its block."""
        if self.context.phase is not SessionPhase.DRAWING:
            logger.debug("drawend ignored in phase %s", self.context.phase.value)
            return None

        square = build_square(first, second, self.settings.max_square_size)
        self.context.drawn_square = square
        self._enter(SessionPhase.IDLE, PanelStatus.IDLE)

        if is_accidental_tap(square, self.settings.draw_min_size):
            logger.debug("Discarding %.1f m shape as a tap", square.bounds.max_dimension)
            self._discard_shape()
            return None

        return await self._run_generation(planar_bounds_to_extent(square.bounds))

    def on_draw_abort(self) -> None:
        """Drop the shape of an abandoned draw, unless a generation has begun."""
        if self.context.is_generating:
            return
        self._discard_shape()
        self._enter(SessionPhase.IDLE, PanelStatus.IDLE)

    # ------------------------------------------------------------------
    # Sharing and panel
    # ------------------------------------------------------------------
    @property
    def can_share(self) -> bool:
        return self.context.current_extent is not None and not self.context.is_challenge_mode

    def share_url(self, hide_map: bool = False) -> str | None:
        """Link reproducing the current block, or None if there is none."""
        if self.context.current_extent is None or self.location is None:
            return None
        payload = SharePayload(extent=self.context.current_extent, hide_map=hide_map)
        return build_share_url(
            self.location.current_url(), payload, self.settings.share_param
        )

    def publish_share(self, hide_map: bool = False) -> str | None:
        """Write the share link into the location without navigating."""
        url = self.share_url(hide_map)
        if url is not None and self.location is not None:
            self.location.replace_url(url)
        return url

    def apply_challenge_mode(self, hide_map: bool) -> None:
        self.context.is_challenge_mode = bool(hide_map)
        self.surface.set_hidden(self.context.is_challenge_mode)
        self.relayout.request()

    def resize_map_panel(
        self, width: float, height: float, viewport_width: float, viewport_height: float
    ) -> tuple[float, float]:
        """Constrain a requested panel size and schedule a map relayout."""
        size = constrain_panel_size(
            width, height, viewport_width, viewport_height, self.settings.map_panel
        )
        self.relayout.request()
        return size

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    async def _run_generation(
        self, raw_extent: Any, *, from_share: bool = False
    ) -> Block | None:
        if self._generation_refused():
            if not self.context.is_generating:
                # No block will be built for this shape
                self._discard_shape()
            return None

        extent = normalize_extent(raw_extent)
        if extent is None:
            error = InvalidExtentError(f"Invalid extent: {raw_extent!r}")
            logger.error("Error generating block: %s", error)
            self.context.last_error = error
            self._discard_shape()
            return None

        self._enter(SessionPhase.GENERATING, PanelStatus.GENERATING)
        self.surface.set_active(False)
        try:
            block = await self._generate_and_render(extent)
        except TerrainError as e:
            logger.error("Error generating block: %s", e)
            self.context.last_error = e
            return None
        except Exception as e:
            logger.exception("Unexpected error generating block")
            self.context.last_error = e
            return None
        finally:
            self._enter(SessionPhase.IDLE, PanelStatus.IDLE)
            self.surface.set_active(True)

        self.context.last_error = None
        self.context.current_extent = block.extent
        self.context.current_block = block
        if not from_share:
            self._clear_stale_share_param()
        logger.info("Generated block for %s with %d walls", extent.as_tuple(), len(block.walls))
        return block

    async def _generate_and_render(self, extent: GeoExtent) -> Block:
        timeout = self.settings.visibility_timeout_s
        await transition_visibility(self.scene, False, timeout)
        try:
            block = await self.generator.generate(extent)
            await self._render(block)
            return block
        finally:
            await transition_visibility(self.scene, True, timeout)

    async def _render(self, block: Block) -> None:
        """Replace the previous block's entities with ``block``."""
        for handle in self.context.wall_handles:
            self.scene.remove_wall(handle)
        self.context.wall_handles = []
        self.scene.clear_clipping()

        self.scene.clip_to_extent(block.extent)
        for wall in block.walls:
            try:
                self.context.wall_handles.append(self.scene.add_wall(wall))
            except Exception as e:
                logger.error("Skipping wall %s: %s", wall.name, e)
        await frame_camera(block.extent, self.sampler, self.scene)

        if not self.context.has_generated_block:
            self.context.has_generated_block = True
            self.scene.reveal_globe()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _generation_refused(self) -> bool:
        if self.context.is_fatal:
            logger.warning("Generation refused: terrain failed to load")
            return True
        if self.context.is_generating:
            logger.warning("Generation already in progress; request rejected")
            return True
        if not self.context.terrain_ready:
            logger.error("Generation requested before terrain was ready")
            return True
        return False

    def _enter(self, phase: SessionPhase, status: PanelStatus) -> None:
        logger.debug("Session %s -> %s", self.context.phase.value, phase.value)
        self.context.phase = phase
        self._set_status(status)

    def _set_status(self, status: PanelStatus) -> None:
        # A fatal terrain error stays on screen until reload
        self.context.status = PanelStatus.ERROR if self.context.is_fatal else status

    def _discard_shape(self) -> None:
        self.surface.clear_shapes()
        self.context.drawn_square = None

    def _clear_stale_share_param(self) -> None:
        if self.location is None:
            return
        url = self.location.current_url()
        if has_share_param(url, self.settings.share_param):
            self.location.replace_url(clear_share_param(url, self.settings.share_param))
