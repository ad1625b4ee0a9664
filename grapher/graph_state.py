"""Per-session state and the staged per-tick update pipeline.

Purpose
-------
``GraphState`` is the single owner of the mutable plotting state (view,
window, generation bounds, axis spacing). ``Grapher`` drives one tick at a
time through fixed stages:

1. input application (:class:`~grapher.viewport.ViewportController`),
2. bounds/spacing recalculation (:class:`~grapher.bounds_manager.BoundsManager`),
3. geometry rebuild (grid tiers and curve ribbon),
4. hand-off to a :class:`GeometrySink`.

Architecture notes
------------------
Change detection uses explicit dirty flags. Setters raise a flag only when the
value really changes and the consuming stage clears it, so an idle tick does
no work at all. Geometry is never rebuilt from a view that the current tick's
input has not yet been applied to, and spacing is always replaced together
with the bounds it was derived from.

Examples
--------
>>> import numpy as np
>>> g = Grapher(np.sin)  # doctest: +SKIP
>>> g.tick(InputBatch.of(ScrollEvent(1.0)))  # doctest: +SKIP
TickResult(regenerated=False, rebuilt=False, view_moved=True)
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional, Protocol

from .axis_spacing import AxisSpacingInfo
from .bounds import GenerationBounds, View, WindowSize
from .bounds_manager import BoundsManager, visible_bounds
from .config import GrapherConfig
from .geometry import GridMeshes, RibbonMesh
from .grid_mesh import build_grid
from .tessellate import BatchEvaluator, tessellate_ribbon
from .viewport import InputBatch, ViewportController

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

__all__ = ["GraphState", "GeometrySink", "GeometryStore", "TickResult", "Grapher"]


class GraphState:
    """Mutable state owned by one plotting session.

    Flags
    -----
    view_changed, window_changed
        Set by :meth:`set_view` / :meth:`set_window`, cleared by the bounds stage.
    bounds_changed
        Set by :meth:`set_generation`, cleared by the geometry stage.
    curve_changed
        Set when the curve must be rebuilt regardless of bounds (initially True).
    """

    def __init__(self, view: View, window: WindowSize) -> None:
        self._view = view
        self._window = window
        self._generation_bounds: Optional[GenerationBounds] = None
        self._axis_spacing: Optional[AxisSpacingInfo] = None
        self.view_changed = True
        self.window_changed = True
        self.bounds_changed = False
        self.curve_changed = True

    @property
    def view(self) -> View:
        return self._view

    @property
    def window(self) -> WindowSize:
        return self._window

    @property
    def generation_bounds(self) -> Optional[GenerationBounds]:
        return self._generation_bounds

    @property
    def axis_spacing(self) -> Optional[AxisSpacingInfo]:
        return self._axis_spacing

    def set_view(self, view: View) -> None:
        if view != self._view:
            self._view = view
            self.view_changed = True

    def set_window(self, window: WindowSize) -> None:
        if window != self._window:
            self._window = window
            self.window_changed = True

    def set_generation(self, bounds: GenerationBounds, spacing: AxisSpacingInfo) -> None:
        """Replace bounds and spacing together."""
        self._generation_bounds = bounds
        self._axis_spacing = spacing
        self.bounds_changed = True

    def visible_bounds(self) -> GenerationBounds:
        return visible_bounds(self._view, self._window)

    def __repr__(self) -> str:
        return (
            f"GraphState(view={self._view!r}, window={self._window!r}, "
            f"generation_bounds={self._generation_bounds!r})"
        )


class GeometrySink(Protocol):
    """Host-side receiver for rebuilt geometry and camera updates."""

    def set_grid(self, grid: GridMeshes) -> None: ...

    def set_curve(self, ribbon: RibbonMesh) -> None: ...

    def set_view(self, view: View, window: WindowSize) -> None: ...


class GeometryStore:
    """In-memory sink that keeps the latest geometry and counts replacements."""

    def __init__(self) -> None:
        self.grid: Optional[GridMeshes] = None
        self.curve: Optional[RibbonMesh] = None
        self.view: Optional[View] = None
        self.window: Optional[WindowSize] = None
        self.grid_builds = 0
        self.curve_builds = 0

    def set_grid(self, grid: GridMeshes) -> None:
        self.grid = grid
        self.grid_builds += 1

    def set_curve(self, ribbon: RibbonMesh) -> None:
        self.curve = ribbon
        self.curve_builds += 1

    def set_view(self, view: View, window: WindowSize) -> None:
        self.view = view
        self.window = window


class TickResult(NamedTuple):
    regenerated: bool
    rebuilt: bool
    view_moved: bool


class Grapher:
    """Drive view, bounds and geometry for one curve.

    Parameters
    ----------
    evaluate : callable
        Batch evaluator ``f(xs) -> ys``; see :mod:`grapher.expression`.
    config : GrapherConfig, optional
        Session configuration; defaults reproduce the reference behaviour.
    sink : GeometrySink, optional
        Receiver of rebuilt geometry. Defaults to a :class:`GeometryStore`.

    Notes
    -----
    The constructor runs one empty tick so the sink holds geometry for the
    initial view before any input arrives.
    """

    def __init__(
        self,
        evaluate: BatchEvaluator,
        config: Optional[GrapherConfig] = None,
        sink: Optional[GeometrySink] = None,
    ) -> None:
        self.config = config or GrapherConfig()
        cfg = self.config
        self.state = GraphState(
            View(cfg.default_centre, cfg.default_scale),
            WindowSize(cfg.window_width, cfg.window_height),
        )
        self.controller = ViewportController(cfg)
        self.bounds_manager = BoundsManager(cfg.pregenerate_factor)
        self.sink: GeometrySink = sink if sink is not None else GeometryStore()
        self._evaluate = evaluate
        self._curve_scale: Optional[float] = None
        self.tick()

    def tick(self, batch: Optional[InputBatch] = None) -> TickResult:
        """Run one frame of the pipeline."""
        state = self.state
        if batch is not None and not batch.is_empty():
            self.controller.apply(state, batch)

        view_moved = state.view_changed or state.window_changed
        if (
            self.config.curve_width_mode == "screen"
            and self._curve_scale is not None
            and state.view.scale != self._curve_scale
        ):
            state.curve_changed = True
        regenerated = self.bounds_manager.update(state)
        rebuilt = self._rebuild_geometry()
        if view_moved:
            self.sink.set_view(state.view, state.window)
        return TickResult(regenerated=regenerated, rebuilt=rebuilt, view_moved=view_moved)

    def _rebuild_geometry(self) -> bool:
        state = self.state
        if not (state.bounds_changed or state.curve_changed):
            return False
        bounds = state.generation_bounds
        spacing = state.axis_spacing
        if bounds is None or spacing is None:
            return False

        cfg = self.config
        # Both meshes are built before the sink sees either, so a failing
        # evaluation leaves the sink on one consistent set of bounds.
        grid = build_grid(spacing, bounds, index_width=cfg.index_width) if state.bounds_changed else None
        ribbon = tessellate_ribbon(
            self._evaluate,
            bounds.xbounds,
            resolution=cfg.resolution,
            half_width=cfg.curve_half_width(state.view.scale),
            y_clamp=bounds.ybounds,
            nonfinite=cfg.nonfinite,
            index_width=cfg.index_width,
        )
        if grid is not None:
            self.sink.set_grid(grid)
        self.sink.set_curve(ribbon)
        self._curve_scale = state.view.scale
        state.bounds_changed = False
        state.curve_changed = False
        logger.debug("rebuilt geometry for x=%s", bounds.xbounds.as_tuple())
        return True
