from __future__ import annotations

import numpy as np
import plotly.graph_objects as go

from grapher.axis_labels import axis_labels
from grapher.bounds import GenerationBounds, Interval
from grapher.graph_state import Grapher
from grapher.grid_mesh import build_main_axis
from grapher.plotly_render import PlotlyRenderer, line_mesh_xy, ribbon_polygons_xy
from grapher.tessellate import tessellate_ribbon


def test_line_mesh_xy_separates_segments() -> None:
    mesh = build_main_axis(GenerationBounds(Interval(-1.0, 2.0), Interval(-3.0, 4.0)))
    xs, ys = line_mesh_xy(mesh)
    assert xs == [-1.0, 2.0, None, 0.0, 0.0, None]
    assert ys == [0.0, 0.0, None, -3.0, 4.0, None]


def test_ribbon_polygon_is_closed() -> None:
    ribbon = tessellate_ribbon(np.sin, Interval(0.0, 1.0), resolution=8)
    xs, ys = ribbon_polygons_xy(ribbon)
    assert xs.count(None) == 1
    # Upper edge, lower edge reversed, then back to the first point.
    assert len(xs) == 2 * 8 + 1 + 1
    assert (xs[0], ys[0]) == (xs[-2], ys[-2])


def test_ribbon_polygons_split_at_invalid_samples() -> None:
    def gapped(xs: np.ndarray) -> np.ndarray:
        ys = np.sin(xs)
        ys[4] = np.nan
        ys[9] = np.nan
        return ys

    ribbon = tessellate_ribbon(gapped, Interval(0.0, 1.0), resolution=12)
    xs, _ = ribbon_polygons_xy(ribbon)
    # Runs [0, 4), [5, 9) and [10, 12).
    assert xs.count(None) == 3


def test_renderer_builds_figure_from_sink_updates() -> None:
    renderer = PlotlyRenderer(title="sin(x)")
    g = Grapher(np.sin, sink=renderer)
    labels = axis_labels(g.state.axis_spacing, g.state.generation_bounds)
    fig = renderer.figure(labels)

    assert isinstance(fig, go.Figure)
    names = [trace.name for trace in fig.data]
    assert names == ["minor axis", "mid axis", "main axis", "sin(x)", "labels"]
    assert fig.data[3].fill == "toself"
    assert list(fig.layout.xaxis.range) == [-5.0, 5.0]
    assert list(fig.layout.yaxis.range) == [-5.0, 5.0]
    assert fig.layout.width == 640
    assert fig.layout.title.text == "sin(x)"
    assert len(fig.data[4].text) == len(labels)


def test_empty_renderer_has_no_traces() -> None:
    fig = PlotlyRenderer().figure()
    assert len(fig.data) == 0


def test_write_html(tmp_path) -> None:
    renderer = PlotlyRenderer(title="x")
    Grapher(lambda xs: xs, sink=renderer)
    out = tmp_path / "plot.html"
    renderer.write_html(str(out))
    text = out.read_text(encoding="utf-8")
    assert "plotly" in text.lower()
