# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Session API Models
Request and response bodies for the /sessions endpoints.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from inkvision.models.design import DEFAULT_STYLE, TattooDesign, TattooStyle
from inkvision.models.state import BlendMode, TransformFilterState


class PointerEventType(str, Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    LEAVE = "leave"
    CANCEL = "cancel"


# ─── Requests ────────────────────────────────────────────────────────────────

class StateUpdateRequest(BaseModel):
    """
    Partial state update. Omitted fields keep their value; out-of-range
    values are clamped. Field names may be snake_case or camelCase.
    """
    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    scale: Optional[float] = None
    rotation: Optional[float] = None
    opacity: Optional[float] = None
    offset_x: Optional[float] = None
    offset_y: Optional[float] = None
    blend_mode: Optional[BlendMode] = None
    hue: Optional[float] = None
    saturation: Optional[float] = None
    brightness: Optional[float] = None


class ResetRequest(BaseModel):
    fields: Optional[list[str]] = Field(
        None, description="Fields to restore to defaults; omit to reset everything"
    )


class ScaleRequest(BaseModel):
    delta: float = Field(..., description="Added to the current scale, e.g. 0.1 / -0.1")


class DisplayRequest(BaseModel):
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class PointerEventRequest(BaseModel):
    type: PointerEventType
    x: float = 0.0
    y: float = 0.0
    pointer_id: int = 0


class ForegroundRequest(BaseModel):
    """Exactly one of design_id (from the design history) or source (URL / data URI)."""
    design_id: Optional[str] = None
    source: Optional[str] = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "ForegroundRequest":
        if (self.design_id is None) == (self.source is None):
            raise ValueError("Provide exactly one of 'design_id' or 'source'.")
        return self


class GenerateRequest(BaseModel):
    prompt: str
    style: TattooStyle = DEFAULT_STYLE


# ─── Responses ───────────────────────────────────────────────────────────────

class BitmapInfo(BaseModel):
    source_id: str
    width: int
    height: int
    origin_clean: bool


class SessionResponse(BaseModel):
    session_id: str
    created_at: datetime
    state: TransformFilterState
    background: Optional[BitmapInfo] = None
    foreground: Optional[BitmapInfo] = None
    is_dragging: bool = False
    is_generating: bool = False
    render_sequence: Optional[int] = Field(
        None, description="Sequence number of the latest completed render"
    )
    exportable: bool = False


class DesignListResponse(BaseModel):
    designs: list[TattooDesign] = Field(default_factory=list)
    is_generating: bool = False


class DataUriResponse(BaseModel):
    data_uri: str
    filename: str
    width: int
    height: int
