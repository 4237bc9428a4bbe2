"""Centralized settings for the scroll-journey engine."""
from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "SCROLL_JOURNEY_"}

    # Scroll mapping
    base_px_per_km: float = Field(default=600.0, gt=0)
    dwell_window_km: float = Field(default=5.0, ge=0)   # also the activation window
    dwell_factor: float = Field(default=3.0, ge=1.0)    # slow-down inside dwell zones
    sample_step_km: float = Field(default=0.2, gt=0)
    tail_fraction: float = Field(default=0.5, ge=0)     # tail padding in base units

    # Position resolution
    heading_delta_km: float = Field(default=0.5, gt=0)

    # Narrative panel
    swap_delay_ms: float = Field(default=280.0, ge=0)
    exclude_endpoints: bool = True  # first/last waypoints only anchor the path

    # Navigation index
    nav_epsilon_px: float = Field(default=1.0, ge=0)
    bottom_tolerance_px: float = Field(default=5.0, ge=0)
    nav_ms_per_section: float = Field(default=5000.0, ge=0)
    nav_fixed_duration_ms: Optional[float] = Field(default=None, ge=0)
    include_subsections: bool = False

    # Frame loop
    frame_interval_ms: float = Field(default=16.0, gt=0)

    log_level: str = "INFO"


settings = Settings()
