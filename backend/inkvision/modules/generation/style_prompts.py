# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Prompt templates for stencil generation.
Each style contributes a short art-direction clause; build_prompt() wraps
the user's idea in instructions that keep the output usable as an overlay:
isolated on pure white, centred, no skin or shadows.
"""

from __future__ import annotations

from inkvision.models.design import TattooStyle

STYLE_PROMPTS: dict[TattooStyle, str] = {
    TattooStyle.TRADITIONAL: (
        "bold black outlines, classic American traditional aesthetic, primary color "
        "palette, iconic tattoo flash look, vintage sailor style."
    ),
    TattooStyle.GEOMETRIC: (
        "ultra-clean vector-like geometric patterns, sacred geometry, perfect symmetry, "
        "thin but consistent black lines, mathematical motifs."
    ),
    TattooStyle.WATERCOLOR: (
        "ethereal watercolor splashes, soft gradients, painterly ink bleeds, artistic "
        "vibrant hues, delicate organic shapes, no heavy outlines."
    ),
    TattooStyle.FINE_LINE: (
        "minimalist elegant fine line art, single needle style, sophisticated subtle "
        "outlines, delicate botanical or celestial elements."
    ),
    TattooStyle.DOTWORK: (
        "intricate pointillism, stippled shading, complex dotwork patterns, "
        "high-contrast black ink, meticulous detail."
    ),
    TattooStyle.REALISTIC: (
        "masterful photorealistic detail, smooth transition shading, 3D depth, "
        "professional charcoal-like realism in ink form."
    ),
    TattooStyle.JAPANESE: (
        "traditional Irezumi flow, classic oriental motifs, stylized waves and clouds, "
        "bold composition, rich cultural symbolic elements."
    ),
    TattooStyle.CYBERPUNK: (
        "techno-organic circuitry, neon glow accents, glitch art aesthetic, futuristic "
        "cybernetic augmentations, industrial sharp edges."
    ),
}


def build_prompt(prompt: str, style: TattooStyle) -> str:
    return (
        f"Professional high-contrast tattoo stencil: {prompt.strip()}.\n"
        f"Style: {STYLE_PROMPTS[TattooStyle(style)]}\n"
        "Execution: Perfectly isolated on a solid #FFFFFF pure white background. "
        "Center composition.\n"
        "Crucial: Zero skin texture, zero shadows, no backgrounds, no clothing, "
        "no human models, no frames.\n"
        "Format: Sharp high-resolution line art suitable for professional tattoo "
        "transfer paper."
    )
