"""Plotly host renderer.

Purpose
-------
Receives rebuilt geometry from :class:`~grapher.graph_state.Grapher` and turns
it into a :class:`plotly.graph_objects.Figure`: one line trace per grid tier,
the curve ribbon as filled polygons and optional axis labels as a text trace.
Axis ranges follow the visible bounds of the last view hand-off.

Important gotchas
-----------------
- Line-list meshes are converted to ``None``-separated polylines, which is how
  Plotly draws disconnected segments in one trace.
- Ribbon quads touching a non-finite sample are dropped; each remaining run
  becomes its own closed polygon.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np
import plotly.graph_objects as go

from .axis_labels import AxisLabel
from .bounds import View, WindowSize
from .geometry import GridMeshes, LineMesh, RibbonMesh

__all__ = ["TIER_STYLES", "CURVE_COLOR", "line_mesh_xy", "ribbon_polygons_xy", "PlotlyRenderer"]

TIER_STYLES: dict[str, dict[str, object]] = {
    "main": {"color": "rgb(255,255,255)", "width": 1.5},
    "mid": {"color": "rgb(100,100,100)", "width": 1.0},
    "minor": {"color": "rgb(50,50,50)", "width": 0.5},
}
CURVE_COLOR = "rgb(255,255,255)"
BACKGROUND_COLOR = "rgb(0,0,0)"


def line_mesh_xy(mesh: LineMesh) -> tuple[list[Optional[float]], list[Optional[float]]]:
    """Return x/y lists with a ``None`` gap after every segment."""
    xs: list[Optional[float]] = []
    ys: list[Optional[float]] = []
    for (x0, y0, _), (x1, y1, _) in mesh.segments():
        xs.extend((float(x0), float(x1), None))
        ys.extend((float(y0), float(y1), None))
    return xs, ys


def _valid_runs(valid: np.ndarray) -> list[tuple[int, int]]:
    """Return ``[start, stop)`` index ranges of consecutive True values, length >= 2."""
    runs: list[tuple[int, int]] = []
    start: Optional[int] = None
    for i, ok in enumerate(valid):
        if ok and start is None:
            start = i
        elif not ok and start is not None:
            runs.append((start, i))
            start = None
    if start is not None:
        runs.append((start, len(valid)))
    return [(a, b) for a, b in runs if b - a >= 2]


def ribbon_polygons_xy(ribbon: RibbonMesh) -> tuple[list[Optional[float]], list[Optional[float]]]:
    """Return closed ribbon outlines (upper edge, then lower edge reversed)."""
    upper = ribbon.positions[0::2]
    lower = ribbon.positions[1::2]
    xs: list[Optional[float]] = []
    ys: list[Optional[float]] = []
    for a, b in _valid_runs(ribbon.valid):
        outline = np.concatenate([upper[a:b], lower[a:b][::-1], upper[a:a + 1]])
        xs.extend(outline[:, 0].tolist())
        ys.extend(outline[:, 1].tolist())
        xs.append(None)
        ys.append(None)
    return xs, ys


class PlotlyRenderer:
    """Geometry sink that renders into a Plotly figure."""

    def __init__(self, *, title: str = "") -> None:
        self.title = title
        self.grid: Optional[GridMeshes] = None
        self.curve: Optional[RibbonMesh] = None
        self.view: Optional[View] = None
        self.window: Optional[WindowSize] = None

    def set_grid(self, grid: GridMeshes) -> None:
        self.grid = grid

    def set_curve(self, ribbon: RibbonMesh) -> None:
        self.curve = ribbon

    def set_view(self, view: View, window: WindowSize) -> None:
        self.view = view
        self.window = window

    def _grid_traces(self) -> list[go.Scatter]:
        if self.grid is None:
            return []
        traces = []
        # Lightest tier first so heavier lines draw on top.
        for mesh in reversed(self.grid.tiers()):
            xs, ys = line_mesh_xy(mesh)
            traces.append(
                go.Scatter(
                    x=xs,
                    y=ys,
                    mode="lines",
                    name=f"{mesh.tier} axis",
                    line=dict(TIER_STYLES[mesh.tier]),
                    hoverinfo="skip",
                )
            )
        return traces

    def _curve_trace(self) -> Optional[go.Scatter]:
        if self.curve is None:
            return None
        xs, ys = ribbon_polygons_xy(self.curve)
        return go.Scatter(
            x=xs,
            y=ys,
            mode="lines",
            fill="toself",
            fillcolor=CURVE_COLOR,
            line=dict(color=CURVE_COLOR, width=0),
            name=self.title or "curve",
            hoverinfo="skip",
        )

    @staticmethod
    def label_trace(labels: Sequence[AxisLabel]) -> go.Scatter:
        return go.Scatter(
            x=[label.position[0] for label in labels],
            y=[label.position[1] for label in labels],
            text=[label.text for label in labels],
            mode="text",
            textposition="bottom right",
            textfont=dict(color=TIER_STYLES["main"]["color"], size=10),
            name="labels",
            hoverinfo="skip",
        )

    def traces(self, labels: Optional[Iterable[AxisLabel]] = None) -> list[go.Scatter]:
        """Return grid, curve and (non-empty) label traces in drawing order."""
        data: list[go.Scatter] = self._grid_traces()
        curve = self._curve_trace()
        if curve is not None:
            data.append(curve)
        label_list = list(labels or ())
        if label_list:
            data.append(self.label_trace(label_list))
        return data

    def figure(self, labels: Optional[Iterable[AxisLabel]] = None) -> go.Figure:
        """Build a figure from the latest geometry and view."""
        fig = go.Figure(data=self.traces(labels))
        layout: dict[str, object] = dict(
            showlegend=False,
            plot_bgcolor=BACKGROUND_COLOR,
            paper_bgcolor=BACKGROUND_COLOR,
            margin=dict(l=0, r=0, t=32 if self.title else 0, b=0),
            dragmode="pan",
            xaxis=dict(showgrid=False, zeroline=False, showticklabels=False),
            yaxis=dict(showgrid=False, zeroline=False, showticklabels=False),
        )
        if self.title:
            layout["title"] = dict(text=self.title, font=dict(color=CURVE_COLOR))
        if self.view is not None and self.window is not None:
            xb = self.view.visible_xbounds(self.window)
            yb = self.view.visible_ybounds(self.window)
            layout["xaxis"] = dict(layout["xaxis"], range=list(xb.as_tuple()))  # type: ignore[arg-type]
            layout["yaxis"] = dict(layout["yaxis"], range=list(yb.as_tuple()))  # type: ignore[arg-type]
            layout["width"] = int(self.window.width)
            layout["height"] = int(self.window.height)
        fig.update_layout(**layout)
        return fig

    def write_html(self, path: str, labels: Optional[Iterable[AxisLabel]] = None) -> None:
        self.figure(labels).write_html(path, include_plotlyjs=True)
