# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — /sessions lifecycle and image slots
Create / inspect / delete sessions, upload the background photo and pick
the foreground design.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Response, UploadFile, status

from inkvision.api.middleware.error_handler import (
    ImageValidationError,
    SessionNotFoundError,
)
from inkvision.config import get_settings
from inkvision.core.session import CompositingSession
from inkvision.dependencies import SessionDep, SessionStoreDep
from inkvision.models.session import BitmapInfo, ForegroundRequest, SessionResponse
from inkvision.modules.compositing import BitmapHandle
from inkvision.utils.logger import get_logger

router = APIRouter(prefix="/sessions", tags=["sessions"])
log = get_logger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp"}


def _bitmap_info(handle: Optional[BitmapHandle]) -> Optional[BitmapInfo]:
    if handle is None:
        return None
    return BitmapInfo(
        source_id=handle.source_id,
        width=handle.width,
        height=handle.height,
        origin_clean=handle.origin_clean,
    )


def session_response(session: CompositingSession) -> SessionResponse:
    """Snapshot of a session for API responses."""
    result = session.last_render
    return SessionResponse(
        session_id=session.session_id,
        created_at=session.created_at,
        state=session.state,
        background=_bitmap_info(session.background),
        foreground=_bitmap_info(session.foreground),
        is_dragging=session.gestures.is_dragging,
        is_generating=session.library.is_generating,
        render_sequence=result.sequence if result is not None else None,
        exportable=result is not None and result.origin_clean,
    )


async def _read_upload(upload: UploadFile) -> bytes:
    """Read an uploaded photo, enforcing content type and size limit."""
    settings = get_settings()

    if upload.content_type not in ALLOWED_CONTENT_TYPES:
        raise ImageValidationError(
            f"Unsupported file type '{upload.content_type}'. "
            f"Allowed: {', '.join(sorted(ALLOWED_CONTENT_TYPES))}"
        )

    data = await upload.read()
    if not data:
        raise ImageValidationError(f"File '{upload.filename}' is empty.")
    if len(data) > settings.upload_max_bytes:
        raise ImageValidationError(
            f"File '{upload.filename}' exceeds maximum size "
            f"of {settings.upload_max_mb} MB."
        )
    return data


# ─── Lifecycle ───────────────────────────────────────────────────────────────

@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a compositing session",
)
async def create_session(store: SessionStoreDep) -> SessionResponse:
    session = store.create_session()
    return session_response(session)


@router.get(
    "/{session_id}",
    response_model=SessionResponse,
    summary="Current state, slots and render status",
)
async def get_session(session: SessionDep) -> SessionResponse:
    await session.flush()
    return session_response(session)


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="End a session and release its images",
)
async def delete_session(session_id: str, store: SessionStoreDep) -> Response:
    if not store.delete_session(session_id):
        raise SessionNotFoundError(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─── Background ──────────────────────────────────────────────────────────────

@router.post(
    "/{session_id}/background",
    response_model=SessionResponse,
    summary="Upload the background photo",
    description=(
        "Replaces the current photo. A new photo re-centres the design. "
        "The previous photo stays in place if the upload cannot be decoded."
    ),
)
async def upload_background(file: UploadFile, session: SessionDep) -> SessionResponse:
    data = await _read_upload(file)
    log.info(
        "background_upload_received",
        session_id=session.session_id,
        filename=file.filename,
        size_bytes=len(data),
    )
    await session.load_background(data)
    await session.flush()
    return session_response(session)


@router.delete(
    "/{session_id}/background",
    response_model=SessionResponse,
    summary="Remove the background photo",
)
async def clear_background(session: SessionDep) -> SessionResponse:
    session.clear_background()
    await session.flush()
    return session_response(session)


# ─── Foreground ──────────────────────────────────────────────────────────────

@router.post(
    "/{session_id}/foreground",
    response_model=SessionResponse,
    summary="Choose the design drawn over the photo",
    description="Pass a design_id from the session's design history, or a source URL / data URI.",
)
async def set_foreground(body: ForegroundRequest, session: SessionDep) -> SessionResponse:
    if body.design_id is not None:
        await session.select_design(body.design_id)
    else:
        await session.load_foreground(body.source)
    await session.flush()
    return session_response(session)


@router.delete(
    "/{session_id}/foreground",
    response_model=SessionResponse,
    summary="Remove the design",
)
async def clear_foreground(session: SessionDep) -> SessionResponse:
    session.clear_foreground()
    await session.flush()
    return session_response(session)
