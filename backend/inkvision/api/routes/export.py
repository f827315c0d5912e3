# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Preview and export
GET /preview         latest composite, inline
GET /export          PNG download at the photo's native resolution
GET /export/data-uri same PNG as a data URI for in-page saving
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, HTTPException, Response, status

from inkvision.dependencies import SessionDep
from inkvision.models.session import DataUriResponse
from inkvision.modules.compositing.exporter import PNG_MEDIA_TYPE
from inkvision.utils.image_utils import bgra_to_png_bytes
from inkvision.utils.logger import get_logger

router = APIRouter(prefix="/sessions/{session_id}", tags=["export"])
log = get_logger(__name__)


@router.get(
    "/preview",
    summary="Latest rendered composite (inline PNG)",
    responses={200: {"content": {PNG_MEDIA_TYPE: {}}}},
)
async def preview(session: SessionDep) -> Response:
    result = await session.flush()
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Nothing rendered yet. Upload a background photo first.",
        )
    data = await asyncio.to_thread(bgra_to_png_bytes, result.pixels)
    return Response(
        content=data,
        media_type=PNG_MEDIA_TYPE,
        headers={"Cache-Control": "no-store", "X-Render-Sequence": str(result.sequence)},
    )


@router.get(
    "/export",
    summary="Download the composite as PNG",
    responses={200: {"content": {PNG_MEDIA_TYPE: {}}}},
)
async def export_png(session: SessionDep) -> Response:
    encoded = await session.export_current()
    return Response(
        content=encoded.data,
        media_type=encoded.media_type,
        headers={"Content-Disposition": f'attachment; filename="{encoded.filename}"'},
    )


@router.get(
    "/export/data-uri",
    response_model=DataUriResponse,
    summary="Composite as a PNG data URI",
)
async def export_data_uri(session: SessionDep) -> DataUriResponse:
    encoded = await session.export_current()
    return DataUriResponse(
        data_uri=encoded.to_data_uri(),
        filename=encoded.filename,
        width=encoded.width,
        height=encoded.height,
    )
