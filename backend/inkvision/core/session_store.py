# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Abstract SessionStore
Clean interface over live compositing sessions.

Sessions hold decoded bitmaps and pending render tasks, so they only live
in process memory; nothing is persisted. Idle sessions are evicted after
session_ttl_seconds.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from inkvision.core.session import CompositingSession
from inkvision.utils.logger import get_logger

log = get_logger(__name__)

SessionFactory = Callable[[], CompositingSession]


# ─── Abstract Interface ──────────────────────────────────────────────────────

class SessionStore(ABC):
    """
    Abstract base class for session backends.
    All methods are synchronous; sessions themselves are async-aware.
    """

    @abstractmethod
    def create_session(self) -> CompositingSession:
        """Create and register a new session."""

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[CompositingSession]:
        """Return the session and mark it active, or None if unknown / expired."""

    @abstractmethod
    def delete_session(self, session_id: str) -> bool:
        """Drop a session. Returns False if it did not exist."""

    @abstractmethod
    def close_all(self) -> None:
        """Drop every session (application shutdown)."""


# ─── In-Memory Implementation ────────────────────────────────────────────────

class InMemorySessionStore(SessionStore):
    """
    Thread-safe in-memory session store using a dict + RLock.
    Expired sessions are evicted lazily on create / get.
    """

    def __init__(
        self,
        factory: SessionFactory,
        ttl_seconds: int = 3600,
    ) -> None:
        self._factory = factory
        self._ttl = timedelta(seconds=ttl_seconds)
        self._store: dict[str, CompositingSession] = {}
        self._lock = threading.RLock()

    def create_session(self) -> CompositingSession:
        session = self._factory()
        with self._lock:
            self._evict_expired()
            self._store[session.session_id] = session
        log.info("session_created", session_id=session.session_id, backend="memory")
        return session

    def get_session(self, session_id: str) -> Optional[CompositingSession]:
        with self._lock:
            self._evict_expired()
            session = self._store.get(session_id)
        if session is not None:
            session.touch()
        return session

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            session = self._store.pop(session_id, None)
        if session is None:
            return False
        session.close()
        log.info("session_deleted", session_id=session_id)
        return True

    def close_all(self) -> None:
        with self._lock:
            sessions = list(self._store.values())
            self._store.clear()
        for session in sessions:
            session.close()
        log.info("session_store_closed", sessions=len(sessions))

    def count(self) -> int:
        """Return number of live sessions (useful for health checks)."""
        with self._lock:
            return len(self._store)

    def _evict_expired(self) -> None:
        cutoff = datetime.now(timezone.utc) - self._ttl
        expired = [sid for sid, s in self._store.items() if s.last_active < cutoff]
        for sid in expired:
            self._store.pop(sid).close()
        if expired:
            log.info("sessions_evicted", count=len(expired))
