# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Compositor
Pure render pipeline: (photo, design, state) → BGRA pixels.

Steps:
  1. Output buffer = photo's native pixel size (never the display size)
  2. Photo drawn unscaled at the origin
  3. No design → done
  4. Design width = photo width × base_width_ratio × scale, height keeps
     the design's aspect ratio
  5. Hue / saturation / brightness applied to the design only
  6. Design centred at photo centre + offset, rotated clockwise about
     that point, scaled to the step 4 size
  7. Composited with blend_mode, faded in by opacity

Same inputs always give byte-identical output.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from inkvision.models.state import TransformFilterState
from inkvision.modules.compositing.color_adjust import adjust_colors
from inkvision.modules.compositing.loader import BitmapHandle
from inkvision.modules.compositing.pixel_buffer import PixelBuffer
from inkvision.utils.geometry_utils import placement_matrix
from inkvision.utils.logger import get_logger

log = get_logger(__name__)

BASE_WIDTH_RATIO = 0.3


@dataclass(frozen=True)
class ForegroundPlacement:
    """Where and how big the design lands, in photo pixel space."""
    center_x: float
    center_y: float
    width: float
    height: float
    rotation: float


def compute_placement(
    background_size: tuple[int, int],
    foreground_size: tuple[int, int],
    state: TransformFilterState,
    base_width_ratio: float = BASE_WIDTH_RATIO,
) -> Optional[ForegroundPlacement]:
    """
    Size and centre the design relative to the photo.
    Returns None for a design with zero width or height.
    """
    bg_w, bg_h = background_size
    fg_w, fg_h = foreground_size
    if fg_w <= 0 or fg_h <= 0:
        return None

    width = bg_w * base_width_ratio * state.scale
    height = width * (fg_h / fg_w)
    return ForegroundPlacement(
        center_x=bg_w / 2.0 + state.offset_x,
        center_y=bg_h / 2.0 + state.offset_y,
        width=width,
        height=height,
        rotation=state.rotation,
    )


def render(
    background: Optional[BitmapHandle],
    foreground: Optional[BitmapHandle],
    state: TransformFilterState,
    *,
    base_width_ratio: float = BASE_WIDTH_RATIO,
    color_adjustment: bool = True,
) -> Optional[np.ndarray]:
    """
    Composite foreground over background.

    Args:
        background:       decoded photo; None → nothing to show
        foreground:       decoded design, or None for photo only
        state:            already-clamped transform / filter state
        base_width_ratio: design width at scale=1 as a fraction of photo width
        color_adjustment: apply hue / saturation / brightness

    Returns:
        BGRA uint8 array (H×W×4) at the photo's native size, or None when
        there is no background.
    """
    if background is None or background.is_empty:
        return None
    started = time.perf_counter()

    buffer = PixelBuffer.from_bitmap(background.pixels)

    placement = None
    if foreground is not None:
        placement = compute_placement(
            background.size, foreground.size, state, base_width_ratio
        )

    if placement is not None:
        design = foreground.pixels
        if color_adjustment:
            design = adjust_colors(design, state.hue, state.saturation, state.brightness)

        matrix = placement_matrix(
            foreground.width,
            foreground.height,
            center=(placement.center_x, placement.center_y),
            size=(placement.width, placement.height),
            angle_deg=placement.rotation,
        )
        buffer.draw_bitmap(design, matrix, state.blend_mode, state.opacity)

    log.debug(
        "render_complete",
        width=buffer.width,
        height=buffer.height,
        with_foreground=placement is not None,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    return buffer.to_array()
