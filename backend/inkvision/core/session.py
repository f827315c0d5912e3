# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Compositing Session
Ties the engine together for one user: two bitmap slots, the transform /
filter state, the gesture tracker, the design history and the latest
completed render.

Render scheduling:
  Every state change and every slot change marks the session dirty and,
  when an event loop is running, schedules one render task. Tasks take the
  render lock, snapshot state and both slots, and run the compositor in a
  worker thread. Renders therefore complete in order and always reflect
  the newest inputs at the moment they start. Without a running loop
  (plain synchronous use) the session just stays dirty until flush().
"""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from inkvision.api.middleware.error_handler import DesignNotFoundError
from inkvision.config import Settings, get_settings
from inkvision.models.design import DEFAULT_STYLE, TattooDesign, TattooStyle
from inkvision.models.session import PointerEventType
from inkvision.models.state import TransformFilterState
from inkvision.modules.compositing import (
    BitmapHandle,
    BitmapSlots,
    EncodedImage,
    GestureTracker,
    ImageLoader,
    RenderResult,
    Slot,
    StateStore,
    export_render,
    render,
)
from inkvision.modules.compositing.loader import ImageSource
from inkvision.modules.generation import DesignGenerator, DesignLibrary
from inkvision.utils.image_utils import freeze
from inkvision.utils.logger import get_logger

log = get_logger(__name__)


class CompositingSession:
    """
    One interactive preview: a photo, a design over it, and how it is placed.

    Args:
        settings:  engine settings; defaults to get_settings()
        loader:    image loader; built from settings when omitted
        generator: design generator for the session's DesignLibrary
        session_id: explicit id (a uuid4 is generated otherwise)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        loader: Optional[ImageLoader] = None,
        generator: Optional[DesignGenerator] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self.session_id = session_id or str(uuid.uuid4())
        self.created_at = datetime.now(timezone.utc)
        self.last_active = self.created_at

        self.slots = BitmapSlots(loader or ImageLoader(
            trusted_origins=self._settings.trusted_origins,
            enforce_cross_origin_taint=self._settings.enforce_cross_origin_taint,
            fetch_timeout_s=self._settings.remote_fetch_timeout_s,
        ))
        self.store = StateStore(scale_bounds=self._settings.scale_bounds)
        self.gestures = GestureTracker(
            self.store,
            has_foreground=lambda: self.slots.foreground is not None,
            native_size=self._native_size,
        )
        self.library = DesignLibrary(generator)

        self._render_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()
        self._dirty = False
        self._sequence = 0
        self._last_render: Optional[RenderResult] = None

        self.store.subscribe(lambda _state: self._schedule_render())
        self.slots.subscribe(lambda _slot, _handle: self._schedule_render())

    # ── Read-only views ──────────────────────────────────────────────────────

    @property
    def state(self) -> TransformFilterState:
        return self.store.state

    @property
    def background(self) -> Optional[BitmapHandle]:
        return self.slots.background

    @property
    def foreground(self) -> Optional[BitmapHandle]:
        return self.slots.foreground

    @property
    def last_render(self) -> Optional[RenderResult]:
        return self._last_render

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def touch(self) -> None:
        self.last_active = datetime.now(timezone.utc)

    # ── Images ───────────────────────────────────────────────────────────────

    async def load_background(self, source: ImageSource) -> Optional[BitmapHandle]:
        """
        Load a new photo. When it differs from the previous one, the
        configured fields (offsets by default) go back to their defaults.
        Returns None if a newer load superseded this one.
        """
        previous = self.slots.background
        handle = await self.slots.load(Slot.BACKGROUND, source)
        if handle is None:
            return None

        reset = self._settings.reset_fields_on_background_change
        if reset and (previous is None or previous.source_id != handle.source_id):
            self.store.reset(reset)
            log.info(
                "background_changed",
                session_id=self.session_id,
                source_id=handle.source_id,
                reset_fields=list(reset),
            )
        return handle

    def clear_background(self) -> None:
        self.slots.clear(Slot.BACKGROUND)
        self._last_render = None

    async def load_foreground(self, source: ImageSource) -> Optional[BitmapHandle]:
        return await self.slots.load(Slot.FOREGROUND, source)

    async def select_design(self, design_id: str) -> Optional[BitmapHandle]:
        """Use a design from the history as the foreground."""
        design = self.library.get(design_id)
        if design is None:
            raise DesignNotFoundError(design_id)
        log.info("design_selected", session_id=self.session_id, design_id=design_id)
        return await self.load_foreground(design.url)

    def clear_foreground(self) -> None:
        self.slots.clear(Slot.FOREGROUND)

    # ── State ────────────────────────────────────────────────────────────────

    def update_state(
        self,
        partial: Optional[Mapping[str, Any]] = None,
        **fields: Any,
    ) -> TransformFilterState:
        return self.store.update(partial, **fields)

    def reset_state(self, fields: Optional[list[str]] = None) -> TransformFilterState:
        return self.store.reset(fields)

    def adjust_scale(self, delta: float) -> TransformFilterState:
        return self.gestures.adjust_scale(delta)

    def set_display_size(self, width: float, height: float) -> None:
        self.gestures.set_display_size(width, height)

    def pointer_event(
        self,
        kind: PointerEventType,
        x: float = 0.0,
        y: float = 0.0,
        pointer_id: int = 0,
    ) -> TransformFilterState:
        """Route one pointer event to the gesture tracker. Returns the current state."""
        kind = PointerEventType(kind)
        if kind is PointerEventType.DOWN:
            self.gestures.pointer_down(x, y, pointer_id)
        elif kind is PointerEventType.MOVE:
            self.gestures.pointer_move(x, y, pointer_id)
        elif kind is PointerEventType.UP:
            self.gestures.pointer_up(pointer_id)
        elif kind is PointerEventType.LEAVE:
            self.gestures.pointer_leave(pointer_id)
        else:
            self.gestures.pointer_cancel(pointer_id)
        return self.store.state

    # ── Rendering ────────────────────────────────────────────────────────────

    def _native_size(self) -> Optional[tuple[int, int]]:
        background = self.slots.background
        return background.size if background is not None else None

    def _schedule_render(self) -> None:
        self._dirty = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self._render_if_dirty())
        self._tasks.add(task)
        task.add_done_callback(self._on_render_done)

    def _on_render_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error(
                "render_failed",
                session_id=self.session_id,
                error=str(exc),
                exc_type=type(exc).__name__,
            )

    async def _render_if_dirty(self) -> None:
        async with self._render_lock:
            if not self._dirty:
                return
            self._dirty = False
            try:
                await self._render_snapshot()
            except Exception:
                self._dirty = True
                raise

    async def _render_snapshot(self) -> None:
        state = self.store.state
        snapshot = self.slots.snapshot()
        self._sequence += 1
        sequence = self._sequence

        pixels = await asyncio.to_thread(
            render,
            snapshot.background,
            snapshot.foreground,
            state,
            base_width_ratio=self._settings.base_width_ratio,
            color_adjustment=self._settings.enable_color_adjustment,
        )
        if pixels is None:
            self._last_render = None
            return

        handles = [h for h in (snapshot.background, snapshot.foreground) if h is not None]
        self._last_render = RenderResult(
            pixels=freeze(pixels),
            origin_clean=all(h.origin_clean for h in handles),
            sequence=sequence,
            rendered_at=datetime.now(timezone.utc),
        )

    async def flush(self) -> Optional[RenderResult]:
        """Wait for scheduled renders, render once more if still dirty, return the latest."""
        pending = [t for t in self._tasks if not t.done()]
        while pending:
            await asyncio.gather(*pending, return_exceptions=True)
            pending = [t for t in self._tasks if not t.done()]
        await self._render_if_dirty()
        return self._last_render

    async def render(self) -> Optional[RenderResult]:
        """Force a render of the current inputs."""
        self._dirty = True
        return await self.flush()

    async def export_current(self) -> EncodedImage:
        """
        PNG of the current composite at the photo's native resolution.

        Raises:
            ExportError: nothing rendered, or a tainted source blocks read-back.
        """
        result = await self.flush()
        return await asyncio.to_thread(
            export_render, result, self._settings.export_filename_prefix
        )

    # ── Designs ──────────────────────────────────────────────────────────────

    async def generate_design(
        self,
        prompt: str,
        style: TattooStyle = DEFAULT_STYLE,
    ) -> TattooDesign:
        """Generate a design, add it to the history and place it over the photo."""
        design = await self.library.generate(prompt, style)
        await self.select_design(design.id)
        return design

    # ── Lifecycle ────────────────────────────────────────────────────────────

    def close(self) -> None:
        """Cancel pending renders. The session must not be used afterwards."""
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        log.debug("session_closed", session_id=self.session_id)
