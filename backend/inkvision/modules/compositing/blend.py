# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Separable blend functions B(Cb, Cs) on colour values in [0, 1].

Cb is the backdrop (photo so far), Cs the source (adjusted design).
Opacity is not part of these formulas; PixelBuffer applies it afterwards
as the alpha of the source-over step.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

from inkvision.models.state import BlendMode

BlendFn = Callable[[np.ndarray, np.ndarray], np.ndarray]


def blend_normal(cb: np.ndarray, cs: np.ndarray) -> np.ndarray:
    return cs


def blend_multiply(cb: np.ndarray, cs: np.ndarray) -> np.ndarray:
    return cb * cs


def blend_screen(cb: np.ndarray, cs: np.ndarray) -> np.ndarray:
    return 1.0 - (1.0 - cb) * (1.0 - cs)


def blend_overlay(cb: np.ndarray, cs: np.ndarray) -> np.ndarray:
    # hard-light with the layers swapped: the backdrop picks the branch
    return np.where(
        cb < 0.5,
        2.0 * cb * cs,
        1.0 - 2.0 * (1.0 - cb) * (1.0 - cs),
    )


def blend_darken(cb: np.ndarray, cs: np.ndarray) -> np.ndarray:
    return np.minimum(cb, cs)


BLEND_FUNCTIONS: dict[BlendMode, BlendFn] = {
    BlendMode.NORMAL: blend_normal,
    BlendMode.MULTIPLY: blend_multiply,
    BlendMode.SCREEN: blend_screen,
    BlendMode.OVERLAY: blend_overlay,
    BlendMode.DARKEN: blend_darken,
}


def get_blend_function(mode: BlendMode) -> BlendFn:
    return BLEND_FUNCTIONS[BlendMode(mode)]
