# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Design Models
Generated tattoo designs and the styles they can be generated in.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class TattooStyle(str, Enum):
    TRADITIONAL = "Traditional"
    GEOMETRIC = "Geometric"
    WATERCOLOR = "Watercolor"
    FINE_LINE = "Fine Line"
    DOTWORK = "Dotwork"
    REALISTIC = "Realistic"
    JAPANESE = "Japanese"
    CYBERPUNK = "Cyberpunk"


DEFAULT_STYLE = TattooStyle.FINE_LINE


class TattooDesign(BaseModel):
    """One entry in a session's design history."""
    id: str
    url: str = Field(..., description="Remote URL or PNG data URI")
    prompt: str
    style: TattooStyle
