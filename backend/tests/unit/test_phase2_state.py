# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 2 — Transform / filter state tests.
Clamping, hue wrap-around, partial updates, resets and change
notification. Pure Python, no images involved.
"""

import math

import pytest

from inkvision.models.state import BlendMode, TransformFilterState


# ─── Defaults ────────────────────────────────────────────────────────────────

def test_state_defaults():
    s = TransformFilterState()
    assert s.scale == 1.0
    assert s.rotation == 0.0
    assert s.opacity == 0.8
    assert (s.offset_x, s.offset_y) == (0.0, 0.0)
    assert s.blend_mode == BlendMode.MULTIPLY
    assert s.hue == 0.0
    assert s.saturation == 100.0
    assert s.brightness == 100.0
    assert s.has_neutral_filter is True


def test_state_is_immutable():
    s = TransformFilterState()
    with pytest.raises(Exception):
        s.scale = 2.0


def test_state_serialises_camel_case():
    data = TransformFilterState(offset_x=3.0).model_dump(by_alias=True)
    assert data["offsetX"] == 3.0
    assert data["blendMode"] == BlendMode.MULTIPLY


# ─── apply_update ────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "field,value,expected",
    [
        ("scale", 10.0, 5.0),
        ("scale", 0.0, 0.05),
        ("scale", -3.0, 0.05),
        ("rotation", 500.0, 180.0),
        ("rotation", -500.0, -180.0),
        ("opacity", 0.0, 0.1),
        ("opacity", 2.0, 1.0),
        ("saturation", 300.0, 200.0),
        ("brightness", -5.0, 0.0),
    ],
)
def test_apply_update_clamps(field, value, expected):
    from inkvision.models.state import apply_update

    s = apply_update(TransformFilterState(), {field: value})
    assert getattr(s, field) == pytest.approx(expected)


def test_apply_update_within_range_is_exact():
    from inkvision.models.state import apply_update

    s = apply_update(TransformFilterState(), {"scale": 1.7, "rotation": -45.0, "opacity": 0.35})
    assert s.scale == 1.7
    assert s.rotation == -45.0
    assert s.opacity == 0.35


@pytest.mark.parametrize("value,expected", [(370.0, 10.0), (-30.0, 330.0), (360.0, 0.0), (720.5, 0.5)])
def test_hue_wraps(value, expected):
    from inkvision.models.state import apply_update

    s = apply_update(TransformFilterState(), {"hue": value})
    assert s.hue == pytest.approx(expected)
    assert 0.0 <= s.hue < 360.0


def test_nan_keeps_current_value():
    from inkvision.models.state import apply_update

    start = TransformFilterState(scale=2.0, hue=40.0, offset_x=12.0)
    s = apply_update(start, {"scale": math.nan, "hue": math.nan, "offset_x": math.nan})
    assert s.scale == 2.0
    assert s.hue == 40.0
    assert s.offset_x == 12.0


def test_infinity_clamps_bounded_fields():
    from inkvision.models.state import apply_update

    s = apply_update(TransformFilterState(), {"scale": math.inf, "rotation": -math.inf})
    assert s.scale == 5.0
    assert s.rotation == -180.0


def test_infinity_keeps_current_offset():
    from inkvision.models.state import apply_update

    s = apply_update(TransformFilterState(offset_y=7.0), {"offset_y": math.inf})
    assert s.offset_y == 7.0


def test_offsets_are_unbounded():
    from inkvision.models.state import apply_update

    s = apply_update(TransformFilterState(), {"offset_x": -1e6, "offset_y": 98765.4})
    assert s.offset_x == -1e6
    assert s.offset_y == 98765.4


def test_apply_update_accepts_camel_case():
    from inkvision.models.state import apply_update

    s = apply_update(TransformFilterState(), {"offsetX": 12.0, "blendMode": "screen"})
    assert s.offset_x == 12.0
    assert s.blend_mode == BlendMode.SCREEN


def test_apply_update_rejects_unknown_field():
    from inkvision.models.state import apply_update

    with pytest.raises(ValueError):
        apply_update(TransformFilterState(), {"skew": 3.0})


def test_apply_update_rejects_unknown_blend_mode():
    from inkvision.models.state import apply_update

    with pytest.raises(ValueError):
        apply_update(TransformFilterState(), {"blend_mode": "difference"})


def test_apply_update_leaves_other_fields():
    from inkvision.models.state import apply_update

    start = TransformFilterState(rotation=30.0, hue=90.0)
    s = apply_update(start, {"scale": 2.5})
    assert s.rotation == 30.0
    assert s.hue == 90.0
    assert start.scale == 1.0


def test_apply_update_is_idempotent():
    from inkvision.models.state import apply_update

    once = apply_update(TransformFilterState(), {"scale": 99.0, "hue": -10.0, "opacity": 0.0})
    twice = apply_update(once, {})
    assert once == twice


def test_apply_update_custom_scale_bounds():
    from inkvision.models.state import apply_update

    s = apply_update(TransformFilterState(), {"scale": 4.0}, scale_bounds=(0.1, 3.0))
    assert s.scale == 3.0


# ─── reset_fields ────────────────────────────────────────────────────────────

def test_reset_named_fields():
    from inkvision.models.state import reset_fields

    s = TransformFilterState(scale=2.0, offset_x=10.0, offset_y=-4.0)
    r = reset_fields(s, ["offset_x", "offsetY"])
    assert (r.offset_x, r.offset_y) == (0.0, 0.0)
    assert r.scale == 2.0


def test_reset_all_fields():
    from inkvision.models.state import reset_fields

    s = TransformFilterState(scale=2.0, blend_mode=BlendMode.DARKEN, hue=50.0)
    assert reset_fields(s) == TransformFilterState()


def test_reset_unknown_field_raises():
    from inkvision.models.state import reset_fields

    with pytest.raises(ValueError):
        reset_fields(TransformFilterState(), ["nope"])


# ─── StateStore ──────────────────────────────────────────────────────────────

def test_store_update_notifies_once():
    from inkvision.modules.compositing import StateStore

    store = StateStore()
    seen = []
    store.subscribe(seen.append)

    new_state = store.update(scale=2.0, rotation=15.0)
    assert len(seen) == 1
    assert seen[0] is new_state
    assert store.state.scale == 2.0
    assert store.state.rotation == 15.0


def test_store_update_mapping_and_keywords():
    from inkvision.modules.compositing import StateStore

    store = StateStore()
    store.update({"scale": 2.0, "hue": 10.0}, scale=3.0)
    assert store.state.scale == 3.0
    assert store.state.hue == 10.0


def test_store_reset_notifies_once():
    from inkvision.modules.compositing import StateStore

    store = StateStore()
    store.update(offset_x=5.0, scale=2.0)
    seen = []
    store.subscribe(seen.append)

    store.reset(["offset_x"])
    assert len(seen) == 1
    assert store.state.offset_x == 0.0
    assert store.state.scale == 2.0


def test_store_unsubscribe():
    from inkvision.modules.compositing import StateStore

    store = StateStore()
    seen = []
    unsubscribe = store.subscribe(seen.append)
    unsubscribe()
    store.update(scale=2.0)
    assert seen == []


def test_store_clamps_with_configured_bounds():
    from inkvision.modules.compositing import StateStore

    store = StateStore(scale_bounds=(0.1, 3.0))
    assert store.update(scale=10.0).scale == 3.0
    assert store.update(scale=0.01).scale == 0.1


def test_store_clamps_initial_state():
    from inkvision.modules.compositing import StateStore

    store = StateStore(TransformFilterState(scale=50.0, hue=400.0))
    assert store.state.scale == 5.0
    assert store.state.hue == pytest.approx(40.0)


def test_store_reset_respects_configured_bounds():
    from inkvision.modules.compositing import StateStore

    store = StateStore(scale_bounds=(2.0, 5.0))
    assert store.state.scale == 2.0
    store.update(scale=4.0, rotation=30.0)

    assert store.reset(["scale"]).scale == 2.0
    assert store.state.rotation == 30.0
    assert store.reset().scale == 2.0
