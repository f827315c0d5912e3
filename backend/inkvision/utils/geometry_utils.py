# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Geometry Utilities
Affine placement, bounding box and coordinate-mapping helpers shared by
the compositor and the pointer gesture tracker.

Coordinate convention: pixel (i, j) covers the continuous square
[i, i+1) × [j, j+1), so its centre is at (i + 0.5, j + 0.5). OpenCV's
warpAffine works on pixel indices, so matrices built here map source
indices to destination indices.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np


# ─── Affine Placement ────────────────────────────────────────────────────────

def rotation_matrix(angle_deg: float) -> np.ndarray:
    """
    2×2 rotation for image space (y axis pointing down).
    Positive angles turn clockwise on screen.
    """
    theta = math.radians(angle_deg)
    c, s = math.cos(theta), math.sin(theta)
    return np.array([[c, -s], [s, c]], dtype=np.float64)


def placement_matrix(
    src_w: int,
    src_h: int,
    center: tuple[float, float],
    size: tuple[float, float],
    angle_deg: float,
) -> np.ndarray:
    """
    Build the 2×3 affine that draws a src_w×src_h image scaled to size
    (width, height), rotated clockwise by angle_deg about its own centre,
    with that centre placed at center, all in destination pixel space.
    """
    width, height = size
    scale = np.diag([width / src_w, height / src_h])
    rot = rotation_matrix(angle_deg)
    linear = rot @ scale

    half_px = np.array([0.5, 0.5])
    half_size = np.array([width / 2.0, height / 2.0])
    translation = (
        linear @ half_px
        - rot @ half_size
        + np.asarray(center, dtype=np.float64)
        - half_px
    )

    m = np.empty((2, 3), dtype=np.float64)
    m[:, :2] = linear
    m[:, 2] = translation
    return m


def transformed_bounds(
    matrix: np.ndarray,
    src_w: int,
    src_h: int,
    canvas_w: int,
    canvas_h: int,
) -> Optional[tuple[int, int, int, int]]:
    """
    Integer (x0, y0, x1, y1) region of the canvas touched by the mapped
    source rectangle, padded by one pixel for bilinear footprint and
    clipped to the canvas. x1/y1 are exclusive.
    Returns None if the mapped image lies entirely off-canvas.
    """
    corners = np.array(
        [
            [-0.5, -0.5, 1.0],
            [src_w - 0.5, -0.5, 1.0],
            [src_w - 0.5, src_h - 0.5, 1.0],
            [-0.5, src_h - 0.5, 1.0],
        ]
    )
    mapped = corners @ matrix.T
    x0 = max(0, int(math.floor(mapped[:, 0].min())) - 1)
    y0 = max(0, int(math.floor(mapped[:, 1].min())) - 1)
    x1 = min(canvas_w, int(math.ceil(mapped[:, 0].max())) + 2)
    y1 = min(canvas_h, int(math.ceil(mapped[:, 1].max())) + 2)
    if x0 >= x1 or y0 >= y1:
        return None
    return x0, y0, x1, y1


def translate_matrix(matrix: np.ndarray, dx: float, dy: float) -> np.ndarray:
    """Return a copy of matrix with (dx, dy) added to its translation."""
    m = matrix.copy()
    m[0, 2] += dx
    m[1, 2] += dy
    return m


# ─── Display Mapping ─────────────────────────────────────────────────────────

def display_to_native_ratio(
    native_size: Optional[tuple[int, int]],
    display_size: Optional[tuple[float, float]],
) -> tuple[float, float]:
    """
    Ratio of the bitmap's true pixel size to its on-screen size, per axis.
    A surface shown at half size yields (2.0, 2.0). Unknown or degenerate
    sizes map 1:1.
    """
    if native_size is None or display_size is None:
        return 1.0, 1.0
    native_w, native_h = native_size
    display_w, display_h = display_size
    rx = native_w / display_w if display_w > 0 else 1.0
    ry = native_h / display_h if display_h > 0 else 1.0
    return rx, ry
