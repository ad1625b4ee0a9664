"""Notebook host: a live, pannable Plotly widget.

Purpose
-------
:class:`InteractivePlot` wires a :class:`~grapher.graph_state.Grapher` to a
:class:`plotly.graph_objects.FigureWidget`. Panning and zooming happen in the
browser; Plotly reports the new axis ranges, which are debounced, turned into
a view/window update and run through one :meth:`Grapher.tick`. When the tick
regenerates geometry the widget's traces are replaced in place.

Architecture notes
------------------
- The widget is the only consumer of the renderer's geometry; the renderer is
  still a plain :class:`~grapher.plotly_render.PlotlyRenderer` sink.
- The trace list is fixed at construction (three grid tiers, curve, labels);
  later refreshes only assign ``x``/``y``/``text`` inside ``batch_update``.
- Axis ranges are never written back after construction, so a range event
  cannot feed itself.

Examples
--------
>>> from grapher.widget import plot
>>> plot("sin(x) / x")  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import plotly.graph_objects as go
from IPython.display import display

from .axis_labels import AxisLabel, axis_labels
from .config import GrapherConfig
from .debouncing import QueuedDebouncer
from .expression import DEFAULT_VAR, compile_expression
from .graph_state import Grapher, TickResult
from .plotly_render import PlotlyRenderer
from .tessellate import BatchEvaluator

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

__all__ = ["RELAYOUT_DEBOUNCE_MS", "InteractivePlot", "plot"]

RELAYOUT_DEBOUNCE_MS = 100


class InteractivePlot:
    """Interactive plot of one curve backed by a Plotly ``FigureWidget``.

    Parameters
    ----------
    evaluate : callable
        Batch evaluator ``f(xs) -> ys``.
    config : GrapherConfig, optional
        Session configuration.
    title : str, optional
        Figure title and curve trace name.
    relayout_ms : int or None, default RELAYOUT_DEBOUNCE_MS
        Debounce period for axis-range events. ``None`` applies every event
        immediately.
    """

    def __init__(
        self,
        evaluate: BatchEvaluator,
        config: Optional[GrapherConfig] = None,
        *,
        title: str = "",
        relayout_ms: Optional[int] = RELAYOUT_DEBOUNCE_MS,
    ) -> None:
        self.renderer = PlotlyRenderer(title=title)
        self.grapher = Grapher(evaluate, config, sink=self.renderer)
        self.figure_widget = go.FigureWidget(self.renderer.figure(self.labels()))
        if not any(trace.name == "labels" for trace in self.figure_widget.data):
            self.figure_widget.add_trace(PlotlyRenderer.label_trace([]))

        self._debouncer: Optional[QueuedDebouncer] = None
        if relayout_ms is not None:
            self._debouncer = QueuedDebouncer(
                self._run_relayout, execute_every_ms=relayout_ms, drop_overflow=True
            )
        self._last_log_t = 0.0
        self.figure_widget.layout.on_change(self._throttled_relayout, "xaxis.range", "yaxis.range")

    def labels(self) -> list[AxisLabel]:
        state = self.grapher.state
        if state.axis_spacing is None or state.generation_bounds is None:
            return []
        return axis_labels(state.axis_spacing, state.generation_bounds)

    def _throttled_relayout(self, _layout: Any, x_range: Any, y_range: Any) -> None:
        if self._debouncer is None:
            self._run_relayout(x_range, y_range)
        else:
            self._debouncer(x_range, y_range)

    def _run_relayout(self, x_range: Any, y_range: Any) -> None:
        self.relayout(x_range, y_range)

    def relayout(self, x_range: Any, y_range: Any) -> TickResult:
        """Apply new axis ranges and run one tick.

        Parameters
        ----------
        x_range, y_range : pair of float
            Visible ranges as reported by Plotly. Unusable ranges leave the
            view untouched; the tick still runs and is idle.
        """
        grapher = self.grapher
        grapher.controller.fit_ranges(grapher.state, x_range, y_range)
        result = grapher.tick()
        if result.rebuilt:
            self.refresh()

        now = time.monotonic()
        if logger.isEnabledFor(logging.DEBUG) and now - self._last_log_t > 0.5:
            self._last_log_t = now
            logger.debug("relayout x=%s y=%s -> %s", x_range, y_range, result)
        return result

    def refresh(self) -> None:
        """Copy the renderer's latest geometry into the widget's traces."""
        fresh = {trace.name: trace for trace in self.renderer.traces(self.labels())}
        with self.figure_widget.batch_update():
            for handle in self.figure_widget.data:
                source = fresh.get(handle.name)
                handle.x = source.x if source is not None else []
                handle.y = source.y if source is not None else []
                if handle.name == "labels":
                    handle.text = source.text if source is not None else []

    def show(self) -> None:
        display(self.figure_widget)

    def _ipython_display_(self, **kwargs: Any) -> None:
        display(self.figure_widget)


def plot(
    text: str,
    *,
    var: str = DEFAULT_VAR,
    latex: bool = False,
    config: Optional[GrapherConfig] = None,
    relayout_ms: Optional[int] = RELAYOUT_DEBOUNCE_MS,
) -> InteractivePlot:
    """Compile ``text`` and return an :class:`InteractivePlot` for it.

    Raises
    ------
    ExpressionError
        If the expression is missing or cannot be parsed.
    """
    evaluator = compile_expression(text, var=var, latex=latex)
    return InteractivePlot(evaluator, config, title=evaluator.text, relayout_ms=relayout_ms)
