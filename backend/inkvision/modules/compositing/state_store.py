# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Transform / Filter State Store
Holds the session's current TransformFilterState. update() and reset() are
the only ways to change it; each call notifies subscribers exactly once
with the new value, which is how re-renders get scheduled.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Optional

from inkvision.models.state import (
    DEFAULT_SCALE_BOUNDS,
    TransformFilterState,
    apply_update,
    reset_fields,
)
from inkvision.utils.logger import get_logger

log = get_logger(__name__)

StateListener = Callable[[TransformFilterState], None]


class StateStore:

    def __init__(
        self,
        initial: Optional[TransformFilterState] = None,
        *,
        scale_bounds: tuple[float, float] = DEFAULT_SCALE_BOUNDS,
    ) -> None:
        self._scale_bounds = scale_bounds
        self._state = apply_update(initial or TransformFilterState(), None, scale_bounds)
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> TransformFilterState:
        return self._state

    @property
    def scale_bounds(self) -> tuple[float, float]:
        return self._scale_bounds

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a change listener. Returns an unsubscribe callable."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def update(
        self,
        partial: Optional[Mapping[str, Any]] = None,
        **fields: Any,
    ) -> TransformFilterState:
        """
        Merge fields over the current state, clamping each into its domain.
        Accepts a mapping, keyword arguments, or both (keywords win).
        """
        merged = {**(partial or {}), **fields}
        self._state = apply_update(self._state, merged, self._scale_bounds)
        log.debug("state_updated", fields=sorted(merged))
        self._notify()
        return self._state

    def reset(self, fields: Optional[Iterable[str]] = None) -> TransformFilterState:
        """Restore the named fields (or every field) to their defaults."""
        names = None if fields is None else list(fields)
        # defaults can sit outside configured scale bounds
        self._state = apply_update(
            reset_fields(self._state, names), None, self._scale_bounds
        )
        log.debug("state_reset", fields=names or "all")
        self._notify()
        return self._state

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._state)
