from __future__ import annotations

import math
from typing import Any

import numpy as np
import pytest

from grapher.bounds import Interval, View, WindowSize
from grapher.config import GrapherConfig
from grapher.graph_state import GraphState
from grapher.viewport import (
    DragEvent,
    InputBatch,
    ResizeEvent,
    ScrollEvent,
    ViewportController,
    panned_centre,
    scale_floor,
    zoomed_scale,
)


def _state(scale: float = 5.0, centre: tuple[float, float] = (0.0, 0.0)) -> GraphState:
    state = GraphState(View(centre, scale), WindowSize(640.0, 640.0))
    state.view_changed = False
    state.window_changed = False
    return state


def test_drag_pans_against_pointer_motion() -> None:
    state = _state()
    ViewportController().apply(state, InputBatch.of(DragEvent(100.0, 0.0), primary_pressed=True))
    assert state.view.centre[0] == pytest.approx(-1.5625)
    assert state.view.centre[1] == 0.0
    assert state.view.scale == 5.0
    assert state.view_changed


def test_screen_y_is_inverted() -> None:
    state = _state()
    ViewportController().apply(state, InputBatch.of(DragEvent(0.0, 100.0), primary_pressed=True))
    assert state.view.centre == pytest.approx((0.0, 1.5625))


def test_drag_without_button_is_ignored() -> None:
    state = _state()
    ViewportController().apply(state, InputBatch.of(DragEvent(100.0, 50.0)))
    assert state.view.centre == (0.0, 0.0)
    assert not state.view_changed


def test_drag_inside_dead_zone_is_ignored() -> None:
    state = _state()
    ViewportController().apply(state, InputBatch.of(DragEvent(0.05, 0.05), primary_pressed=True))
    assert state.view.centre == (0.0, 0.0)
    assert not state.view_changed


def test_drags_are_summed_before_the_dead_zone_test() -> None:
    state = _state()
    batch = InputBatch.of(DragEvent(0.06, 0.0), DragEvent(0.06, 0.0), primary_pressed=True)
    ViewportController().apply(state, batch)
    assert state.view.centre[0] == pytest.approx(-0.12 * 2 * 5.0 / 640.0)


def test_pan_distance_scales_with_zoom() -> None:
    window = WindowSize(640.0, 480.0)
    near = panned_centre((0.0, 0.0), (64.0, 0.0), 1.0, window)
    far = panned_centre((0.0, 0.0), (64.0, 0.0), 10.0, window)
    assert far[0] == pytest.approx(10 * near[0])


@pytest.mark.parametrize(
    ("scroll", "expected"),
    [
        (1.0, 5.0 / 1.1),
        (-1.0, 5.0 * 1.1),
        (0.5, 5.0 * 1.1 ** -0.5),
        (3.0, 5.0 * 1.1 ** -3),
    ],
)
def test_scroll_zooms_geometrically(scroll: float, expected: float) -> None:
    state = _state()
    ViewportController().apply(state, InputBatch.of(ScrollEvent(scroll)))
    assert state.view.scale == pytest.approx(expected)
    assert state.view.centre == (0.0, 0.0)


def test_scroll_events_are_summed() -> None:
    state = _state()
    ViewportController().apply(state, InputBatch.of(ScrollEvent(1.0), ScrollEvent(1.0), ScrollEvent(-0.5)))
    assert state.view.scale == pytest.approx(5.0 * 1.1 ** -1.5)


def test_zoom_is_clamped() -> None:
    cfg = GrapherConfig()
    controller = ViewportController(cfg)

    state = _state()
    controller.apply(state, InputBatch.of(ScrollEvent(1e6)))
    assert state.view.scale == cfg.min_scale

    state = _state()
    controller.apply(state, InputBatch.of(ScrollEvent(-1e6)))
    assert state.view.scale == cfg.max_scale
    assert math.isfinite(state.view.scale)


def test_zoomed_scale_overflow_is_infinite() -> None:
    assert zoomed_scale(5.0, -1e6, 1.1) == math.inf


def test_zero_scroll_leaves_view_untouched() -> None:
    state = _state()
    ViewportController().zoom(state, 0.0)
    assert not state.view_changed


def test_last_resize_wins() -> None:
    state = _state()
    batch = InputBatch.of(ResizeEvent(800, 600), ResizeEvent(1024, 512))
    ViewportController().apply(state, batch)
    assert state.window == WindowSize(1024.0, 512.0)
    assert state.window_changed
    assert not state.view_changed


def test_resize_to_same_size_is_not_a_change() -> None:
    state = _state()
    ViewportController().apply(state, InputBatch.of(ResizeEvent(640, 640)))
    assert not state.window_changed


def test_resize_applies_before_pan() -> None:
    state = _state()
    batch = InputBatch.of(ResizeEvent(320, 320), DragEvent(100.0, 0.0), primary_pressed=True)
    ViewportController().apply(state, batch)
    assert state.view.centre[0] == pytest.approx(-100.0 * 2 * 5.0 / 320.0)


def test_reset_view_restores_defaults() -> None:
    cfg = GrapherConfig(default_scale=2.0, default_centre=(1.0, -1.0))
    state = _state(scale=7.0, centre=(3.0, 3.0))
    ViewportController(cfg).reset_view(state)
    assert state.view == View((1.0, -1.0), 2.0)
    assert state.view_changed


def test_input_batch_folding() -> None:
    batch = InputBatch()
    assert batch.is_empty()
    batch.extend([ScrollEvent(0.25), DragEvent(1.0, 2.0), DragEvent(-3.0, 1.0)])
    assert batch.scroll == 0.25
    assert batch.drag == (-2.0, 3.0)
    assert batch.resize is None
    assert not batch.is_empty()


def test_scale_floor_grows_with_centre_magnitude() -> None:
    cfg = GrapherConfig()
    assert scale_floor((0.0, 0.0), cfg) == cfg.min_scale
    far = scale_floor((1e8, -3.0), cfg)
    assert far > cfg.min_scale
    assert scale_floor((0.0, -1e8), cfg) == far
    # A visible interval at the floor still splits into distinct samples.
    xs = 1e8 + np.linspace(-2 * far, 2 * far, cfg.resolution)
    assert np.all(np.diff(xs) > 0)


def test_zoom_after_far_pan_stops_at_precision_floor() -> None:
    cfg = GrapherConfig()
    controller = ViewportController(cfg)
    state = _state(scale=1e11, centre=(1.045e8, 0.0))
    controller.zoom(state, 1000.0)
    assert state.view.scale == scale_floor(state.view.centre, cfg)
    bounds = state.visible_bounds()
    assert bounds.xbounds.length() > 0
    assert bounds.xbounds.end > bounds.xbounds.start


def test_pan_far_from_origin_raises_scale_to_floor() -> None:
    cfg = GrapherConfig()
    state = _state(scale=cfg.min_scale, centre=(1e9, 0.0))
    ViewportController(cfg).pan(state, (1.0, 0.0))
    assert state.view.scale == scale_floor(state.view.centre, cfg)


def test_fit_ranges_sets_view_and_aspect() -> None:
    state = _state()
    applied = ViewportController().fit_ranges(state, (2.0, 6.0), (-1.0, 1.0))
    assert applied
    assert state.view == View((4.0, 0.0), 2.0)
    assert state.window == WindowSize(640.0, 320.0)
    bounds = state.visible_bounds()
    assert bounds.xbounds == Interval(2.0, 6.0)
    assert bounds.ybounds == Interval(-1.0, 1.0)


@pytest.mark.parametrize(
    ("x_range", "y_range"),
    [
        (None, (0.0, 1.0)),
        ((0.0, 1.0), None),
        ((1.0, 1.0), (0.0, 1.0)),
        ((0.0, math.nan), (0.0, 1.0)),
    ],
)
def test_fit_ranges_ignores_unusable_ranges(x_range: Any, y_range: Any) -> None:
    state = _state()
    assert not ViewportController().fit_ranges(state, x_range, y_range)
    assert not state.view_changed
    assert not state.window_changed
