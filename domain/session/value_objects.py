"""Session Bounded Context - Session state.

The SessionContext is the single mutable object of the engine. It is owned by
the SessionCoordinator and passed around explicitly, never held globally.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from domain.drawing.value_objects import DrawnSquare
from domain.relief.value_objects import Block
from domain.terrain.value_objects import GeoExtent


class SessionPhase(str, Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    GENERATING = "generating"


class PanelStatus(str, Enum):
    """User-facing status line of the info panel."""

    IDLE = "idle"
    DRAWING = "drawing"
    GENERATING = "generating"
    ERROR = "error"

    @property
    def message(self) -> str:
        return _PANEL_MESSAGES[self]


_PANEL_MESSAGES = {
    PanelStatus.IDLE: "Draw Area (Tap or click and drag)",
    PanelStatus.DRAWING: "Release to build the block. Tap outside the map to cancel",
    PanelStatus.GENERATING: "Generating 3D Block...",
    PanelStatus.ERROR: "Something went wrong. Refresh the page.",
}


class SessionContext(BaseModel):
    """Mutable state of one drawing/generation session."""

    phase: SessionPhase = SessionPhase.IDLE
    status: PanelStatus = PanelStatus.IDLE
    current_extent: GeoExtent | None = None  # always normalized
    current_block: Block | None = None
    drawn_square: DrawnSquare | None = None
    is_challenge_mode: bool = False
    has_generated_block: bool = False
    terrain_ready: bool = False
    is_fatal: bool = False  # terrain never became ready; needs a reload
    last_error: Exception | None = None
    wall_handles: list[Any] = Field(default_factory=list)  # opaque SceneRenderer handles

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    @property
    def is_generating(self) -> bool:
        return self.phase is SessionPhase.GENERATING
