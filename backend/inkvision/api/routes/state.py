# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Transform / filter controls and pointer gestures
Control endpoints return the clamped state after the change.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, status

from inkvision.dependencies import SessionDep
from inkvision.models.session import (
    DisplayRequest,
    PointerEventRequest,
    ResetRequest,
    ScaleRequest,
    StateUpdateRequest,
)
from inkvision.models.state import TransformFilterState
from inkvision.utils.logger import get_logger

router = APIRouter(prefix="/sessions/{session_id}", tags=["state"])
log = get_logger(__name__)


@router.patch(
    "/state",
    response_model=TransformFilterState,
    summary="Partially update transform and filter values",
    description="Out-of-range values are clamped rather than rejected. Unknown fields are rejected.",
)
async def update_state(body: StateUpdateRequest, session: SessionDep) -> TransformFilterState:
    return session.update_state(body.model_dump(exclude_unset=True, exclude_none=True))


@router.post(
    "/state/reset",
    response_model=TransformFilterState,
    summary="Restore fields (or everything) to defaults",
)
async def reset_state(session: SessionDep, body: Optional[ResetRequest] = None) -> TransformFilterState:
    fields = body.fields if body is not None else None
    try:
        return session.reset_state(fields)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.post(
    "/scale",
    response_model=TransformFilterState,
    summary="Zoom the design in or out by a step",
)
async def adjust_scale(body: ScaleRequest, session: SessionDep) -> TransformFilterState:
    return session.adjust_scale(body.delta)


@router.put(
    "/display",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Report the on-screen size of the preview",
    description="Used to convert pointer movement from screen units to photo pixels.",
)
async def set_display_size(body: DisplayRequest, session: SessionDep) -> None:
    session.set_display_size(body.width, body.height)


@router.post(
    "/pointer",
    response_model=TransformFilterState,
    summary="Forward a pointer / touch event for drag-to-move",
)
async def pointer_event(body: PointerEventRequest, session: SessionDep) -> TransformFilterState:
    return session.pointer_event(body.type, body.x, body.y, body.pointer_id)
