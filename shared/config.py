"""Static configuration, loaded once at start.

Values can be overridden with ``BLOCKBILD_*`` environment variables or a
``.env`` file, e.g. ``BLOCKBILD_FIDELITY=40``.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.drawing.value_objects import PanelBounds


class BlockSettings(BaseSettings):
    fidelity: int = Field(default=100, ge=1)  # interpolation intervals per wall edge
    max_square_size: float = Field(default=15_000, gt=0)  # EPSG:3857 metres
    draw_min_size: float = Field(default=25, ge=0)  # smaller drags are taps
    default_center: tuple[float, float] = (8.2275, 46.8182)  # lon, lat
    default_zoom: int = 8
    map_panel: PanelBounds = PanelBounds()

    # Fallback when the viewer never signals the end of a fade
    visibility_timeout_s: float = Field(default=0.32, gt=0)
    # One relayout per rendering frame at most
    relayout_interval_s: float = Field(default=1 / 60, gt=0)

    share_param: str = "share"

    model_config = SettingsConfigDict(
        env_prefix="BLOCKBILD_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )


settings = BlockSettings()
