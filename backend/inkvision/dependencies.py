# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — FastAPI Dependencies
Singleton providers for the SessionStore and the design generator.
Both are created once during the lifespan startup in main.py and
injected into route handlers via Depends().
"""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends

from inkvision.api.middleware.error_handler import (
    GenerationFailure,
    SessionNotFoundError,
)
from inkvision.config import get_settings
from inkvision.core.session import CompositingSession
from inkvision.core.session_store import InMemorySessionStore, SessionStore
from inkvision.modules.generation import DesignGenerator, GeminiDesignGenerator
from inkvision.utils.logger import bind_session, get_logger

log = get_logger(__name__)

# ─── Design Generator Singleton ──────────────────────────────────────────────

_generator: Optional[DesignGenerator] = None


def init_generator() -> None:
    """
    Build the Gemini generator if an API key is configured.
    Without one, sessions still work; generation requests fail with
    GENERATION_FAILED (retryable=false).
    """
    global _generator
    settings = get_settings()
    try:
        _generator = GeminiDesignGenerator(
            api_key=settings.gemini_api_key,
            model_name=settings.gemini_model_name,
        )
        log.info("init_generator", backend="gemini", model=settings.gemini_model_name)
    except GenerationFailure as e:
        _generator = None
        log.warning("generator_unavailable", error=str(e))


def set_generator(generator: Optional[DesignGenerator]) -> None:
    """Replace the generator used for sessions created from now on."""
    global _generator
    _generator = generator


def get_generator() -> Optional[DesignGenerator]:
    return _generator


# ─── SessionStore Singleton ──────────────────────────────────────────────────

_session_store: SessionStore | None = None


def init_session_store() -> None:
    """
    Initialise the SessionStore singleton.
    Called once during application lifespan startup.
    """
    global _session_store
    settings = get_settings()
    log.info("init_session_store", backend="memory", ttl_seconds=settings.session_ttl_seconds)
    _session_store = InMemorySessionStore(
        factory=lambda: CompositingSession(settings, generator=get_generator()),
        ttl_seconds=settings.session_ttl_seconds,
    )


def shutdown_session_store() -> None:
    """Close every live session. Called during lifespan shutdown."""
    global _session_store
    if _session_store is not None:
        _session_store.close_all()
    _session_store = None


def get_session_store() -> SessionStore:
    """FastAPI dependency: inject the SessionStore singleton into route handlers."""
    if _session_store is None:
        raise RuntimeError(
            "SessionStore has not been initialised. "
            "Ensure init_session_store() is called during app lifespan startup."
        )
    return _session_store


SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]


async def get_session(session_id: str, store: SessionStoreDep) -> CompositingSession:
    """FastAPI dependency: resolve the {session_id} path parameter and bind it to the log context."""
    bind_session(session_id)
    session = store.get_session(session_id)
    if session is None:
        raise SessionNotFoundError(session_id)
    return session


SessionDep = Annotated[CompositingSession, Depends(get_session)]
