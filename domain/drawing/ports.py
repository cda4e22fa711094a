"""Domain Port(s) for the 2D map and its draw interaction.

Implemented by whatever hosts the 2D map (a browser bridge, a test double).
"""

from __future__ import annotations

from typing import Protocol

from .value_objects import PlanarBounds


class DrawSurface(Protocol):
    """Port for the 2D map surface carrying the square draw interaction."""

    def set_active(self, active: bool) -> None:
        """Enable or disable the draw interaction."""
        ...

    def abort_drawing(self) -> None:
        """Cancel a draw that has started but not finished."""
        ...

    def clear_shapes(self) -> None:
        """Remove any drawn shape from the map."""
        ...

    def show_extent(self, bounds: PlanarBounds) -> None:
        """Draw a square for ``bounds`` and fit the view to it."""
        ...

    def set_hidden(self, hidden: bool) -> None:
        """Hide or show the whole map panel."""
        ...

    def update_size(self) -> None:
        """Relayout the map after its container changed size."""
        ...
