# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Pointer Gesture Tracker
Turns raw pointer / touch events into offset updates on the StateStore.

States:
  Idle      --down (design present)--> Dragging
  Dragging  --move-->                  Dragging  (offset += delta * display ratio)
  Dragging  --up / leave / cancel-->   Idle

Pointer coordinates arrive in display (CSS / screen) units. The rendered
bitmap is usually shown scaled to fit its container, so deltas are
multiplied by native_size / display_size before they reach the state,
which lives in background pixel space.

Only the pointer that started the drag drives it; extra touch points are
ignored until that pointer is released.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from inkvision.models.state import TransformFilterState
from inkvision.modules.compositing.state_store import StateStore
from inkvision.utils.geometry_utils import display_to_native_ratio
from inkvision.utils.logger import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class GestureSession:
    active: bool
    pointer_id: int
    last_x: float
    last_y: float


class GestureTracker:

    def __init__(
        self,
        store: StateStore,
        has_foreground: Callable[[], bool],
        native_size: Callable[[], Optional[tuple[int, int]]],
    ) -> None:
        self._store = store
        self._has_foreground = has_foreground
        self._native_size = native_size
        self._display_size: Optional[tuple[float, float]] = None
        self._session: Optional[GestureSession] = None

    @property
    def session(self) -> Optional[GestureSession]:
        return self._session

    @property
    def is_dragging(self) -> bool:
        return self._session is not None

    @property
    def display_size(self) -> Optional[tuple[float, float]]:
        return self._display_size

    def set_display_size(self, width: float, height: float) -> None:
        """Record the on-screen size of the display surface."""
        self._display_size = (float(width), float(height))

    # ── Events ───────────────────────────────────────────────────────────────

    def pointer_down(self, x: float, y: float, pointer_id: int = 0) -> bool:
        """Start a drag. Returns True if a drag began."""
        if self._session is not None:
            # secondary touch point while dragging
            return False
        if not self._has_foreground():
            return False
        self._session = GestureSession(True, pointer_id, float(x), float(y))
        log.debug("drag_start", pointer_id=pointer_id, x=x, y=y)
        return True

    def pointer_move(
        self, x: float, y: float, pointer_id: int = 0
    ) -> Optional[TransformFilterState]:
        """
        Apply the movement since the last event to the offsets.
        Returns the new state, or None when no drag is in progress
        (or the event belongs to a different pointer).
        """
        session = self._session
        if session is None or pointer_id != session.pointer_id:
            return None

        rx, ry = display_to_native_ratio(self._native_size(), self._display_size)
        dx = (x - session.last_x) * rx
        dy = (y - session.last_y) * ry

        current = self._store.state
        new_state = self._store.update(
            offset_x=current.offset_x + dx,
            offset_y=current.offset_y + dy,
        )
        self._session = GestureSession(True, session.pointer_id, float(x), float(y))
        return new_state

    def pointer_up(self, pointer_id: Optional[int] = None) -> None:
        self._end("up", pointer_id)

    def pointer_leave(self, pointer_id: Optional[int] = None) -> None:
        self._end("leave", pointer_id)

    def pointer_cancel(self, pointer_id: Optional[int] = None) -> None:
        self._end("cancel", pointer_id)

    def _end(self, reason: str, pointer_id: Optional[int]) -> None:
        session = self._session
        if session is None:
            return
        if pointer_id is not None and pointer_id != session.pointer_id:
            return
        self._session = None
        log.debug("drag_end", reason=reason, pointer_id=session.pointer_id)

    # ── Discrete controls ────────────────────────────────────────────────────

    def adjust_scale(self, delta: float) -> TransformFilterState:
        """Zoom buttons: nudge scale by delta, clamped to the configured range."""
        return self._store.update(scale=self._store.state.scale + delta)
