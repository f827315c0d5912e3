# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Compositing Module
Public API for loading, state, gestures, rendering and export.
"""

from inkvision.modules.compositing.color_adjust import adjust_colors
from inkvision.modules.compositing.compositor import (
    ForegroundPlacement,
    compute_placement,
    render,
)
from inkvision.modules.compositing.exporter import (
    EncodedImage,
    RenderResult,
    export_render,
)
from inkvision.modules.compositing.gesture import GestureSession, GestureTracker
from inkvision.modules.compositing.loader import (
    BitmapHandle,
    BitmapSlots,
    ImageLoader,
    Slot,
    SlotSnapshot,
)
from inkvision.modules.compositing.pixel_buffer import PixelBuffer
from inkvision.modules.compositing.state_store import StateStore

__all__ = [
    # Loader
    "BitmapHandle",
    "BitmapSlots",
    "ImageLoader",
    "Slot",
    "SlotSnapshot",
    # State
    "StateStore",
    # Gestures
    "GestureSession",
    "GestureTracker",
    # Rendering
    "PixelBuffer",
    "ForegroundPlacement",
    "compute_placement",
    "adjust_colors",
    "render",
    # Export
    "RenderResult",
    "EncodedImage",
    "export_render",
]
