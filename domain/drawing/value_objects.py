"""Drawing Bounded Context - Value Objects.

Planar (Web Mercator, EPSG:3857) geometry produced by the 2D draw interaction.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PlanarPoint(BaseModel):
    """Point in projected map units (metres in EPSG:3857)."""

    x: float
    y: float

    model_config = ConfigDict(frozen=True)


class PlanarBounds(BaseModel):
    """Axis-aligned bounding box in projected map units."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_ordering(self) -> "PlanarBounds":
        if self.min_x > self.max_x or self.min_y > self.max_y:
            raise ValueError(
                f"Inverted bounds: ({self.min_x}, {self.min_y}) > "
                f"({self.max_x}, {self.max_y})"
            )
        return self

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def max_dimension(self) -> float:
        return max(self.width, self.height)


class DrawnSquare(BaseModel):
    """A perfect square anchored at the drag start (Value Object).

    Invariants:
        side >= 0
        direction_x, direction_y in {-1, +1}
    """

    first_corner: PlanarPoint
    second_corner: PlanarPoint  # first + side * (direction_x, direction_y)
    side: float = Field(ge=0)
    direction_x: int
    direction_y: int

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_directions(self) -> "DrawnSquare":
        if self.direction_x not in (-1, 1) or self.direction_y not in (-1, 1):
            raise ValueError(
                f"Directions must be +/-1, got ({self.direction_x}, {self.direction_y})"
            )
        return self

    @property
    def ring(self) -> tuple[PlanarPoint, ...]:
        """Closed 5-point ring, first point repeated at the end."""
        first, second = self.first_corner, self.second_corner
        return (
            first,
            PlanarPoint(x=second.x, y=first.y),
            second,
            PlanarPoint(x=first.x, y=second.y),
            first,
        )

    @property
    def bounds(self) -> PlanarBounds:
        first, second = self.first_corner, self.second_corner
        return PlanarBounds(
            min_x=min(first.x, second.x),
            min_y=min(first.y, second.y),
            max_x=max(first.x, second.x),
            max_y=max(first.y, second.y),
        )


class PanelBounds(BaseModel):
    """Size limits of the 2D map panel, in CSS pixels."""

    min_width: float = 220
    max_width: float = 880
    min_height: float = 140
    max_height: float = 880

    model_config = ConfigDict(frozen=True)
