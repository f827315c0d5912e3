# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Foreground Colour Adjustment
Hue rotation, saturation and brightness, applied in that order to the
design only. Matches the CSS filter functions hue-rotate(), saturate()
and brightness(): 3×3 colour matrices on sRGB values with luminance
weights (0.213, 0.715, 0.072), each result clamped to [0, 1] before the
next step. Alpha passes through untouched.

Always computed from the decoded design, never from a previous frame.
"""

from __future__ import annotations

import math

import numpy as np

_LUMA_R, _LUMA_G, _LUMA_B = 0.213, 0.715, 0.072


def hue_rotate_matrix(angle_deg: float) -> np.ndarray:
    """RGB matrix for a hue rotation of angle_deg degrees."""
    theta = math.radians(angle_deg)
    c, s = math.cos(theta), math.sin(theta)
    return np.array(
        [
            [_LUMA_R + c * (1 - _LUMA_R) - s * _LUMA_R,
             _LUMA_G - c * _LUMA_G - s * _LUMA_G,
             _LUMA_B - c * _LUMA_B + s * (1 - _LUMA_B)],
            [_LUMA_R - c * _LUMA_R + s * 0.143,
             _LUMA_G + c * (1 - _LUMA_G) + s * 0.140,
             _LUMA_B - c * _LUMA_B - s * 0.283],
            [_LUMA_R - c * _LUMA_R - s * (1 - _LUMA_R),
             _LUMA_G - c * _LUMA_G + s * _LUMA_G,
             _LUMA_B + c * (1 - _LUMA_B) + s * _LUMA_B],
        ],
        dtype=np.float32,
    )


def saturate_matrix(amount: float) -> np.ndarray:
    """RGB matrix for saturate(amount); 0 = greyscale, 1 = identity."""
    a = amount
    return np.array(
        [
            [_LUMA_R + (1 - _LUMA_R) * a, _LUMA_G - _LUMA_G * a, _LUMA_B - _LUMA_B * a],
            [_LUMA_R - _LUMA_R * a, _LUMA_G + (1 - _LUMA_G) * a, _LUMA_B - _LUMA_B * a],
            [_LUMA_R - _LUMA_R * a, _LUMA_G - _LUMA_G * a, _LUMA_B + (1 - _LUMA_B) * a],
        ],
        dtype=np.float32,
    )


def is_neutral(hue: float, saturation: float, brightness: float) -> bool:
    return hue % 360.0 == 0.0 and saturation == 100.0 and brightness == 100.0


def adjust_colors(
    pixels: np.ndarray,
    hue: float = 0.0,
    saturation: float = 100.0,
    brightness: float = 100.0,
) -> np.ndarray:
    """
    Apply hue → saturation → brightness to a BGRA uint8 image.

    Args:
        pixels:     BGRA uint8 array (H×W×4)
        hue:        rotation in degrees
        saturation: percent, 100 = unchanged
        brightness: percent, 100 = unchanged

    Returns:
        New BGRA uint8 array, or pixels itself when all three are neutral.
    """
    if is_neutral(hue, saturation, brightness):
        return pixels

    # BGR → RGB as float in [0, 1]
    rgb = pixels[:, :, 2::-1].astype(np.float32) / 255.0

    if hue % 360.0 != 0.0:
        rgb = np.clip(rgb @ hue_rotate_matrix(hue).T, 0.0, 1.0)
    if saturation != 100.0:
        rgb = np.clip(rgb @ saturate_matrix(saturation / 100.0).T, 0.0, 1.0)
    if brightness != 100.0:
        rgb = np.clip(rgb * np.float32(brightness / 100.0), 0.0, 1.0)

    out = np.empty_like(pixels)
    out[:, :, :3] = np.rint(rgb[:, :, ::-1] * 255.0).astype(np.uint8)
    out[:, :, 3] = pixels[:, :, 3]
    return out
