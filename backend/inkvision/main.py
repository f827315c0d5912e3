# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — FastAPI Application Entry Point
Creates the app, registers lifespan events, CORS, routers,
and global error handlers.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inkvision.api.middleware.error_handler import register_error_handlers
from inkvision.api.routes import designs, export, sessions, state
from inkvision.config import get_settings
from inkvision.dependencies import (
    get_generator,
    init_generator,
    init_session_store,
    shutdown_session_store,
)
from inkvision.utils.logger import configure_logging, get_logger

log = get_logger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Startup: configure logging, build the design generator and session store.
    Shutdown: close live sessions.
    """
    # ── Startup ──────────────────────────────────────────────────────────────
    configure_logging()
    settings = get_settings()

    log.info(
        "inkvision_startup",
        version=VERSION,
        scale_bounds=settings.scale_bounds,
        base_width_ratio=settings.base_width_ratio,
        color_adjustment=settings.enable_color_adjustment,
        cross_origin_taint=settings.enforce_cross_origin_taint,
    )

    # Generator first: sessions capture it when they are created
    if get_generator() is None:
        init_generator()
    init_session_store()

    log.info("inkvision_ready")
    yield

    # ── Shutdown ─────────────────────────────────────────────────────────────
    shutdown_session_store()
    log.info("inkvision_shutdown")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="InkVision",
        summary="Preview a tattoo design on your own photo before it's inked.",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # ── CORS ─────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",   # Vite dev server
            "http://localhost:3000",   # Alternative dev port
            "http://localhost:80",     # Docker nginx
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Render-Sequence"],
    )

    # ── Error Handlers ───────────────────────────────────────────────────────
    register_error_handlers(app)

    # ── Routers ──────────────────────────────────────────────────────────────
    app.include_router(sessions.router)
    app.include_router(state.router)
    app.include_router(export.router)
    app.include_router(designs.router)

    # ── Health Check ─────────────────────────────────────────────────────────
    @app.get("/health", tags=["health"], summary="Health check")
    async def health() -> dict:
        return {
            "status": "ok",
            "service": "inkvision",
            "version": VERSION,
            "generator": "enabled" if get_generator() is not None else "disabled",
            "scale_bounds": list(settings.scale_bounds),
        }

    return app


# Module-level app instance for uvicorn
app = create_app()
