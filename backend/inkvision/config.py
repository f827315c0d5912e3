# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Application Configuration
All settings are loaded from environment variables with defaults tuned
for interactive preview of a single design over a single photo.
Override via backend/.env or environment.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ─── Transform Bounds ────────────────────────────────────────────────────
    # Earlier builds clamped to 0.1–3.0; the wider range lets small fine-line
    # designs shrink further and sleeve-sized ones grow past the photo width.
    scale_min: float = 0.05
    scale_max: float = 5.0

    # ─── Compositor ──────────────────────────────────────────────────────────
    # Foreground width at scale=1, as a fraction of the background width
    base_width_ratio: float = 0.3
    enable_color_adjustment: bool = True

    # A fresh photo puts the design back in the centre
    reset_fields_on_background_change: list[str] = ["offset_x", "offset_y"]

    # ─── Image Loading ───────────────────────────────────────────────────────
    enforce_cross_origin_taint: bool = True
    trusted_origins: list[str] = []
    # None = wait indefinitely; a stalled fetch leaves the previous bitmap in place
    remote_fetch_timeout_s: Optional[float] = None
    upload_max_mb: int = 25

    # ─── Design Generation ───────────────────────────────────────────────────
    gemini_api_key: str = ""
    gemini_model_name: str = "gemini-2.5-flash-image"

    # ─── Sessions ────────────────────────────────────────────────────────────
    session_ttl_seconds: int = 3600  # 1 hour idle

    # ─── Export ──────────────────────────────────────────────────────────────
    export_filename_prefix: str = "inkvision"

    # ─── Logging ─────────────────────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ─── Server ──────────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 8000

    # ─── Derived helpers ─────────────────────────────────────────────────────
    @property
    def upload_max_bytes(self) -> int:
        return self.upload_max_mb * 1024 * 1024

    @property
    def scale_bounds(self) -> tuple[float, float]:
        return self.scale_min, self.scale_max


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached singleton Settings instance."""
    return Settings()
