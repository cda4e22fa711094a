"""Relief Bounded Context - Error Hierarchy."""

from __future__ import annotations


class ReliefError(Exception):
    """Base error for block construction."""


class WallConstructionError(ReliefError):
    """A single wall could not be built; its siblings are unaffected.

    Attributes:
        label: Edge name of the failed wall
    """

    def __init__(self, label: str, reason: str) -> None:
        self.label = label
        super().__init__(f"Cannot build {label} wall: {reason}")


class CameraFramingError(ReliefError):
    """The camera could not be framed on the block (non-fatal)."""
