# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Generation Module
Public API for prompt building, design generation and design history.
"""

from inkvision.modules.generation.design_library import SAMPLE_DESIGNS, DesignLibrary
from inkvision.modules.generation.generator import DesignGenerator, GeminiDesignGenerator
from inkvision.modules.generation.style_prompts import STYLE_PROMPTS, build_prompt

__all__ = [
    "STYLE_PROMPTS",
    "build_prompt",
    "DesignGenerator",
    "GeminiDesignGenerator",
    "DesignLibrary",
    "SAMPLE_DESIGNS",
]
