# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — PixelBuffer
A 2D raster surface with a single drawing primitive:

    draw_bitmap(pixels, matrix, blend_mode, alpha)

Draw the BGRA image through the 2×3 affine matrix, combine it with what is
already there using blend_mode, and fade the result in with alpha.

Compositing follows the W3C source-over with separable blending:
    Cs' = (1 - αb)·Cs + αb·B(Cb, Cs)
    co  = αs·Cs' + (1 - αs)·αb·Cb           (premultiplied)
    αo  = αs + αb·(1 - αs)
where αs = source pixel alpha × alpha. Over an opaque photo this reduces to
    C = αs·B(Cb, Cs) + (1 - αs)·Cb

Storage is BGRA uint8; only the region the drawn image covers is promoted
to float for the blend.
"""

from __future__ import annotations

import cv2
import numpy as np

from inkvision.models.state import BlendMode
from inkvision.modules.compositing.blend import get_blend_function
from inkvision.utils.geometry_utils import transformed_bounds, translate_matrix

_EPS = 1e-6


class PixelBuffer:

    def __init__(self, width: int, height: int) -> None:
        self._pixels = np.zeros((height, width, 4), dtype=np.uint8)

    @classmethod
    def from_bitmap(cls, pixels: np.ndarray) -> "PixelBuffer":
        """New buffer sized to pixels, with pixels drawn unscaled at the origin."""
        h, w = pixels.shape[:2]
        buf = cls(w, h)
        buf._pixels[:] = pixels
        return buf

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    def to_array(self) -> np.ndarray:
        """Copy of the buffer as BGRA uint8."""
        return self._pixels.copy()

    def draw_bitmap(
        self,
        pixels: np.ndarray,
        matrix: np.ndarray,
        blend_mode: BlendMode = BlendMode.NORMAL,
        alpha: float = 1.0,
    ) -> None:
        """
        Composite a BGRA uint8 image onto the buffer.

        Args:
            pixels:     BGRA uint8 source image
            matrix:     2×3 affine from source pixel indices to buffer indices
            blend_mode: separable blend operator
            alpha:      uniform opacity multiplier in [0, 1]
        """
        if alpha <= 0.0 or pixels.size == 0:
            return
        src_h, src_w = pixels.shape[:2]
        bounds = transformed_bounds(matrix, src_w, src_h, self.width, self.height)
        if bounds is None:
            return
        x0, y0, x1, y1 = bounds

        # Resample premultiplied so transparent texels don't bleed colour
        src = pixels.astype(np.float32) / 255.0
        src[:, :, :3] *= src[:, :, 3:4]
        warped = cv2.warpAffine(
            src,
            translate_matrix(matrix, -x0, -y0),
            (x1 - x0, y1 - y0),
            flags=cv2.INTER_LINEAR,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=(0.0, 0.0, 0.0, 0.0),
        )

        src_alpha = np.clip(warped[:, :, 3:4], 0.0, 1.0)
        cs = np.divide(
            warped[:, :, :3],
            src_alpha,
            out=np.zeros_like(warped[:, :, :3]),
            where=src_alpha > _EPS,
        )
        np.clip(cs, 0.0, 1.0, out=cs)
        a_s = src_alpha * np.float32(alpha)

        region = self._pixels[y0:y1, x0:x1].astype(np.float32) / 255.0
        cb = region[:, :, :3]
        a_b = region[:, :, 3:4]

        blended = get_blend_function(blend_mode)(cb, cs)
        mixed = (1.0 - a_b) * cs + a_b * blended
        co = a_s * mixed + (1.0 - a_s) * a_b * cb
        a_o = a_s + a_b * (1.0 - a_s)

        color = np.divide(co, a_o, out=np.zeros_like(co), where=a_o > _EPS)
        out = self._pixels[y0:y1, x0:x1]
        out[:, :, :3] = np.rint(np.clip(color, 0.0, 1.0) * 255.0).astype(np.uint8)
        out[:, :, 3] = np.rint(np.clip(a_o[:, :, 0], 0.0, 1.0) * 255.0).astype(np.uint8)
