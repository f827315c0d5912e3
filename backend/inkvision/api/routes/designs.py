# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Design history and generation
"""

from __future__ import annotations

from fastapi import APIRouter, status

from inkvision.dependencies import SessionDep
from inkvision.models.design import TattooDesign
from inkvision.models.session import DesignListResponse, GenerateRequest
from inkvision.utils.logger import get_logger

router = APIRouter(prefix="/sessions/{session_id}/designs", tags=["designs"])
log = get_logger(__name__)


@router.get(
    "",
    response_model=DesignListResponse,
    summary="Design history, newest first",
)
async def list_designs(session: SessionDep) -> DesignListResponse:
    return DesignListResponse(
        designs=session.library.designs,
        is_generating=session.library.is_generating,
    )


@router.post(
    "/generate",
    response_model=TattooDesign,
    status_code=status.HTTP_201_CREATED,
    summary="Generate a design from a prompt and place it over the photo",
)
async def generate_design(body: GenerateRequest, session: SessionDep) -> TattooDesign:
    log.info("generate_request", session_id=session.session_id, style=body.style.value)
    design = await session.generate_design(body.prompt, body.style)
    await session.flush()
    return design
