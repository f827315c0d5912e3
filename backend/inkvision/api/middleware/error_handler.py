# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Global Error Handler
Defines the engine's error taxonomy and converts every exception into a
structured JSON error response. Registered on the FastAPI app in main.py.

None of these errors is fatal: each leaves the session usable, and the
user recovers by retrying (new upload, new export, new generation).
"""

from __future__ import annotations

import traceback
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from inkvision.utils.logger import get_logger

log = get_logger(__name__)


class DecodeError(ValueError):
    """Raised when an image source cannot be fetched or decoded."""

    def __init__(self, source_id: str, reason: str = "could not be decoded") -> None:
        self.source_id = source_id
        self.reason = reason
        super().__init__(f"Image source '{source_id}' {reason}.")


class ExportError(RuntimeError):
    """Raised when the current composite cannot be exported."""


class GenerationFailure(RuntimeError):
    """Raised when the design generator returns no usable image."""

    def __init__(self, message: str, retryable: bool = True) -> None:
        self.retryable = retryable
        super().__init__(message)


class GenerationBusyError(RuntimeError):
    """Raised when a generation is already in flight for the session."""


class PromptValidationError(ValueError):
    """Raised when a generation prompt is empty."""


class ImageValidationError(ValueError):
    """Raised when an uploaded image fails content-type or size validation."""


class SessionNotFoundError(KeyError):
    """Raised when a session_id does not exist in the store."""


class DesignNotFoundError(KeyError):
    """Raised when a design_id is not in the session's design history."""


def _error_body(
    code: str,
    message: str,
    detail: Optional[str] = None,
    **extra,
) -> dict:
    body = {"error": {"code": code, "message": message, **extra}}
    if detail:
        body["error"]["detail"] = detail
    return body


def register_error_handlers(app: FastAPI) -> None:
    """
    Register all global exception handlers on the FastAPI application.
    Call this in main.py after creating the app instance.
    """

    @app.exception_handler(DecodeError)
    async def decode_error_handler(req: Request, exc: DecodeError) -> JSONResponse:
        log.warning(
            "decode_error",
            path=str(req.url),
            source_id=exc.source_id,
            error=str(exc),
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(
                code="DECODE_ERROR",
                message="The image could not be loaded. Try a different file or link.",
                detail=str(exc),
            ),
        )

    @app.exception_handler(ImageValidationError)
    async def image_validation_handler(
        req: Request, exc: ImageValidationError
    ) -> JSONResponse:
        log.warning("image_validation_error", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(code="IMAGE_VALIDATION_ERROR", message=str(exc)),
        )

    @app.exception_handler(PromptValidationError)
    async def prompt_validation_handler(
        req: Request, exc: PromptValidationError
    ) -> JSONResponse:
        log.info("prompt_validation_error", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(code="PROMPT_VALIDATION_ERROR", message=str(exc)),
        )

    @app.exception_handler(ExportError)
    async def export_error_handler(req: Request, exc: ExportError) -> JSONResponse:
        log.warning("export_error", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=_error_body(
                code="EXPORT_ERROR",
                message="Failed to export. Please try again or use a different photo.",
                detail=str(exc),
            ),
        )

    @app.exception_handler(GenerationFailure)
    async def generation_failure_handler(
        req: Request, exc: GenerationFailure
    ) -> JSONResponse:
        log.warning("generation_failure", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=_error_body(
                code="GENERATION_FAILED",
                message="The design could not be generated. Your prompt was kept, please retry.",
                detail=str(exc),
                retryable=exc.retryable,
            ),
        )

    @app.exception_handler(GenerationBusyError)
    async def generation_busy_handler(
        req: Request, exc: GenerationBusyError
    ) -> JSONResponse:
        log.info("generation_busy", path=str(req.url))
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=_error_body(code="GENERATION_IN_PROGRESS", message=str(exc)),
        )

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found_handler(
        req: Request, exc: SessionNotFoundError
    ) -> JSONResponse:
        log.warning("session_not_found", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=_error_body(
                code="SESSION_NOT_FOUND",
                message=f"Session not found: {exc}",
            ),
        )

    @app.exception_handler(DesignNotFoundError)
    async def design_not_found_handler(
        req: Request, exc: DesignNotFoundError
    ) -> JSONResponse:
        log.info("design_not_found", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=_error_body(
                code="DESIGN_NOT_FOUND",
                message=f"Design not found: {exc}",
            ),
        )

    @app.exception_handler(Exception)
    async def generic_handler(req: Request, exc: Exception) -> JSONResponse:
        tb = traceback.format_exc()
        log.error(
            "unhandled_exception",
            path=str(req.url),
            error=str(exc),
            exc_type=type(exc).__name__,
            traceback=tb,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                code="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred.",
            ),
        )
