from __future__ import annotations

import numpy as np
import pytest

from grapher.axis_spacing import AxisSpacingInfo, compute_axis_spacing
from grapher.bounds import GenerationBounds, Interval, View
from grapher.errors import IndexWidthError
from grapher.geometry import index_array
from grapher.grid_mesh import (
    HORIZONTAL_NORMAL,
    VERTICAL_NORMAL,
    build_axis_tier,
    build_grid,
    build_main_axis,
    line_offsets,
)

BOUNDS = GenerationBounds(Interval(-2.0, 2.0), Interval(-3.0, 3.0))


def test_line_offsets_alternate_around_centre() -> None:
    assert line_offsets(1.0, 0.5, 3).tolist() == [1.0, 1.5, 0.5, 2.0, 0.0]
    assert line_offsets(0.0, 1.0, 1).tolist() == [0.0]
    assert line_offsets(0.0, 1.0, 0).size == 0


def test_main_axis_is_two_segments() -> None:
    mesh = build_main_axis(BOUNDS)
    assert mesh.tier == "main"
    assert mesh.topology == "line_list"
    assert mesh.line_count == 2
    assert mesh.positions.tolist() == [
        [-2.0, 0.0, 0.0],
        [2.0, 0.0, 0.0],
        [0.0, -3.0, 0.0],
        [0.0, 3.0, 0.0],
    ]
    assert mesh.orientations == ("horizontal", "vertical")
    assert mesh.normals.tolist() == [list(HORIZONTAL_NORMAL)] * 2 + [list(VERTICAL_NORMAL)] * 2


def test_mid_tier_lines_span_generation_bounds() -> None:
    info = AxisSpacingInfo(1.0, x_line_count=3, y_line_count=2, rounded_x_centre=0.0, rounded_y_centre=1.0)
    mesh = build_axis_tier(info, BOUNDS)

    # 2 * 2 - 1 horizontal lines then 2 * 3 - 1 vertical lines.
    assert mesh.line_count == 3 + 5
    assert mesh.orientations == ("horizontal",) * 3 + ("vertical",) * 5
    assert np.array_equal(mesh.indices, np.arange(16))

    segments = mesh.segments()
    horizontal, vertical = segments[:3], segments[3:]
    assert horizontal[:, :, 1][:, 0].tolist() == [1.0, 2.0, 0.0]
    assert np.all(horizontal[:, 0, 0] == -2.0)
    assert np.all(horizontal[:, 1, 0] == 2.0)
    assert vertical[:, :, 0][:, 0].tolist() == [0.0, 1.0, -1.0, 2.0, -2.0]
    assert np.all(vertical[:, 0, 1] == -3.0)
    assert np.all(vertical[:, 1, 1] == 3.0)
    assert np.all(mesh.positions[:, 2] == 0.0)

    assert np.all(mesh.normals[:6] == HORIZONTAL_NORMAL)
    assert np.all(mesh.normals[6:] == VERTICAL_NORMAL)


def test_grid_tiers_share_spacing() -> None:
    bounds = GenerationBounds(Interval(-10.0, 10.0), Interval(-10.0, 10.0))
    info = compute_axis_spacing(bounds, View((0.0, 0.0), 5.0))
    grid = build_grid(info, bounds)

    assert [t.tier for t in grid.tiers()] == ["main", "mid", "minor"]
    assert grid.mid.line_count == 2 * (2 * 11 - 1)
    assert grid.minor.line_count == 2 * (2 * 55 - 1)

    mid_x = grid.mid.segments()[21:, 0, 0]
    minor_x = grid.minor.segments()[109:, 0, 0]
    assert np.isclose(np.diff(np.sort(mid_x)), 1.0).all()
    assert np.isclose(np.diff(np.sort(minor_x)), 0.2).all()
    assert set(np.round(mid_x, 9)) <= set(np.round(minor_x, 9))


def test_grid_honours_index_width() -> None:
    bounds = GenerationBounds(Interval(-10.0, 10.0), Interval(-10.0, 10.0))
    info = compute_axis_spacing(bounds, View((0.0, 0.0), 5.0))
    grid = build_grid(info, bounds, index_width=16)
    assert all(t.indices.dtype == np.uint16 for t in grid.tiers())


def test_index_array_widths() -> None:
    assert index_array(4, 16).dtype == np.uint16
    assert index_array(4).dtype == np.uint32
    assert index_array(65536, 16)[-1] == 65535
    with pytest.raises(IndexWidthError):
        index_array(65537, 16)
    with pytest.raises(ValueError):
        index_array(4, 8)
