# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 3 — Pointer gesture tracker tests.
Drag-to-move with display → native scaling, multi-touch handling,
and the zoom step control.
"""

import pytest

from inkvision.modules.compositing import GestureTracker, StateStore


def _make_tracker(has_foreground=True, native=(200, 200)):
    store = StateStore()
    tracker = GestureTracker(
        store,
        has_foreground=lambda: has_foreground,
        native_size=lambda: native,
    )
    return store, tracker


# ─── Drag ────────────────────────────────────────────────────────────────────

def test_drag_scales_delta_by_display_ratio():
    store, tracker = _make_tracker(native=(200, 200))
    tracker.set_display_size(100, 100)

    assert tracker.pointer_down(10, 10) is True
    tracker.pointer_move(15, 14)

    assert store.state.offset_x == pytest.approx(10.0)
    assert store.state.offset_y == pytest.approx(8.0)


def test_drag_accumulates_from_last_position():
    store, tracker = _make_tracker(native=(200, 200))
    tracker.set_display_size(100, 100)

    tracker.pointer_down(10, 10)
    tracker.pointer_move(15, 14)
    tracker.pointer_move(16, 14)

    assert store.state.offset_x == pytest.approx(12.0)
    assert store.state.offset_y == pytest.approx(8.0)


def test_drag_without_display_size_is_one_to_one():
    store, tracker = _make_tracker()

    tracker.pointer_down(0, 0)
    tracker.pointer_move(-3, 7)

    assert store.state.offset_x == pytest.approx(-3.0)
    assert store.state.offset_y == pytest.approx(7.0)


def test_drag_adds_to_existing_offset():
    store, tracker = _make_tracker()
    store.update(offset_x=50.0, offset_y=-20.0)

    tracker.pointer_down(100, 100)
    tracker.pointer_move(110, 90)

    assert store.state.offset_x == pytest.approx(60.0)
    assert store.state.offset_y == pytest.approx(-30.0)


def test_pointer_down_ignored_without_foreground():
    store, tracker = _make_tracker(has_foreground=False)

    assert tracker.pointer_down(5, 5) is False
    assert tracker.is_dragging is False
    assert tracker.pointer_move(50, 50) is None
    assert store.state.offset_x == 0.0


def test_move_without_drag_is_noop():
    store, tracker = _make_tracker()
    seen = []
    store.subscribe(seen.append)

    assert tracker.pointer_move(40, 40) is None
    assert seen == []


def test_each_move_notifies_once():
    store, tracker = _make_tracker()
    seen = []
    store.subscribe(seen.append)

    tracker.pointer_down(0, 0)
    tracker.pointer_move(1, 1)
    tracker.pointer_move(2, 2)
    assert len(seen) == 2


@pytest.mark.parametrize("end", ["pointer_up", "pointer_leave", "pointer_cancel"])
def test_drag_ends(end):
    store, tracker = _make_tracker()

    tracker.pointer_down(0, 0)
    getattr(tracker, end)()
    assert tracker.is_dragging is False

    assert tracker.pointer_move(30, 30) is None
    assert store.state.offset_x == 0.0


# ─── Multi-touch ─────────────────────────────────────────────────────────────

def test_second_pointer_does_not_restart_drag():
    store, tracker = _make_tracker()

    assert tracker.pointer_down(0, 0, pointer_id=1) is True
    assert tracker.pointer_down(50, 50, pointer_id=2) is False
    assert tracker.session.pointer_id == 1


def test_other_pointer_moves_are_ignored():
    store, tracker = _make_tracker()

    tracker.pointer_down(0, 0, pointer_id=1)
    assert tracker.pointer_move(80, 80, pointer_id=2) is None
    assert store.state.offset_x == 0.0

    tracker.pointer_move(4, 0, pointer_id=1)
    assert store.state.offset_x == pytest.approx(4.0)


def test_other_pointer_up_keeps_drag():
    store, tracker = _make_tracker()

    tracker.pointer_down(0, 0, pointer_id=1)
    tracker.pointer_up(pointer_id=2)
    assert tracker.is_dragging is True

    tracker.pointer_up(pointer_id=1)
    assert tracker.is_dragging is False


# ─── Scale step ──────────────────────────────────────────────────────────────

def test_adjust_scale_steps():
    store, tracker = _make_tracker()

    tracker.adjust_scale(0.1)
    assert store.state.scale == pytest.approx(1.1)
    tracker.adjust_scale(-0.2)
    assert store.state.scale == pytest.approx(0.9)


def test_adjust_scale_clamps():
    store, tracker = _make_tracker()
    store.update(scale=4.95)

    assert tracker.adjust_scale(0.1).scale == 5.0
    store.update(scale=0.06)
    assert tracker.adjust_scale(-0.1).scale == 0.05
