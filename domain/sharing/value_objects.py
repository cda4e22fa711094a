"""Sharing Bounded Context - Value Objects."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from domain.terrain.value_objects import GeoExtent


class SharePayload(BaseModel):
    """What a share link carries: the block extent and the display option.

    ``hide_map`` travels as ``hideMap`` on the wire.
    """

    extent: GeoExtent
    hide_map: bool = Field(default=False, alias="hideMap")

    model_config = ConfigDict(frozen=True, populate_by_name=True)
