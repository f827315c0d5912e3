# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
InkVision — Transform / Filter State Model
The single record describing how the design is placed over the photo and
how its colours are adjusted. Values are immutable; a new state is derived
through apply_update() / reset_fields(), which clamp instead of rejecting.

Field domains:
  scale                  [scale_min, scale_max]  (configurable, default 0.05–5.0)
  rotation               [-180, 180] degrees, clockwise
  opacity                [0.1, 1.0]
  offset_x, offset_y     unbounded, background pixel space
  blend_mode             closed BlendMode set
  hue                    [0, 360) degrees, wraps around
  saturation, brightness [0, 200] percent
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BlendMode(str, Enum):
    MULTIPLY = "multiply"
    SCREEN = "screen"
    OVERLAY = "overlay"
    DARKEN = "darken"
    NORMAL = "normal"


ROTATION_RANGE: tuple[float, float] = (-180.0, 180.0)
OPACITY_RANGE: tuple[float, float] = (0.1, 1.0)
PERCENT_RANGE: tuple[float, float] = (0.0, 200.0)
HUE_PERIOD = 360.0
DEFAULT_SCALE_BOUNDS: tuple[float, float] = (0.05, 5.0)

OFFSET_FIELDS: tuple[str, ...] = ("offset_x", "offset_y")


class TransformFilterState(BaseModel):
    """Placement and colour adjustment of the design relative to the photo."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    scale: float = 1.0
    rotation: float = 0.0
    opacity: float = 0.8
    offset_x: float = 0.0
    offset_y: float = 0.0
    blend_mode: BlendMode = BlendMode.MULTIPLY
    hue: float = 0.0
    saturation: float = 100.0
    brightness: float = 100.0

    @property
    def has_neutral_filter(self) -> bool:
        return self.hue == 0.0 and self.saturation == 100.0 and self.brightness == 100.0


STATE_FIELDS: tuple[str, ...] = tuple(TransformFilterState.model_fields)

# snake_case and camelCase names both resolve to the field name
_FIELD_NAMES: dict[str, str] = {
    **{name: name for name in STATE_FIELDS},
    **{to_camel(name): name for name in STATE_FIELDS},
}

_DEFAULTS: dict[str, Any] = {
    name: info.default for name, info in TransformFilterState.model_fields.items()
}


def resolve_field_name(name: str) -> str:
    """Map a snake_case or camelCase field name to the model field name."""
    try:
        return _FIELD_NAMES[name]
    except KeyError:
        raise ValueError(f"Unknown state field: {name!r}") from None


def _clamp(value: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, value))


def _normalise_field(
    name: str,
    value: Any,
    current: Any,
    scale_bounds: tuple[float, float],
) -> Any:
    """Bring one field value into its domain. NaN keeps the current value."""
    if name == "blend_mode":
        return BlendMode(value)

    number = float(value)
    if math.isnan(number):
        return current

    if name in OFFSET_FIELDS:
        return number if math.isfinite(number) else current

    if name == "hue":
        if not math.isfinite(number):
            return current
        wrapped = number % HUE_PERIOD
        # -1e-20 % 360.0 rounds up to 360.0
        return 0.0 if wrapped >= HUE_PERIOD else wrapped

    if name == "scale":
        lo, hi = scale_bounds
    elif name == "rotation":
        lo, hi = ROTATION_RANGE
    elif name == "opacity":
        lo, hi = OPACITY_RANGE
    else:
        lo, hi = PERCENT_RANGE
    return _clamp(number, lo, hi)


def apply_update(
    state: TransformFilterState,
    partial: Optional[Mapping[str, Any]] = None,
    scale_bounds: tuple[float, float] = DEFAULT_SCALE_BOUNDS,
) -> TransformFilterState:
    """
    Merge partial fields over state and clamp every field into its domain.

    Idempotent: apply_update(apply_update(s, p), {}) == apply_update(s, p).

    Raises:
        ValueError: for unknown field names or an unknown blend mode.
    """
    current = state.model_dump()
    merged = dict(current)
    for key, value in (partial or {}).items():
        merged[resolve_field_name(key)] = value

    normalised = {
        name: _normalise_field(name, merged[name], current[name], scale_bounds)
        for name in STATE_FIELDS
    }
    return TransformFilterState(**normalised)


def reset_fields(
    state: TransformFilterState,
    fields: Optional[Iterable[str]] = None,
) -> TransformFilterState:
    """Restore the named fields (all fields when None) to their defaults."""
    if fields is None:
        return TransformFilterState()
    names = {resolve_field_name(f) for f in fields}
    return state.model_copy(update={name: _DEFAULTS[name] for name in names})
