"""Input folding and view mutation.

Hosts deliver raw events for one tick as an :class:`InputBatch`; the
:class:`ViewportController` folds the batch (cumulative scroll, cumulative
drag, last resize) and writes the resulting view/window into the
:class:`~grapher.graph_state.GraphState`. No geometry work happens here.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Optional, Union

import numpy as np

from .bounds import View, WindowSize
from .config import GrapherConfig

if TYPE_CHECKING:
    from .graph_state import GraphState

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

__all__ = [
    "ScrollEvent",
    "DragEvent",
    "ResizeEvent",
    "InputEvent",
    "InputBatch",
    "zoomed_scale",
    "panned_centre",
    "scale_floor",
    "ViewportController",
]


@dataclass(frozen=True)
class ScrollEvent:
    """Vertical wheel movement; positive values scroll up (zoom in)."""

    delta: float


@dataclass(frozen=True)
class DragEvent:
    """Pointer motion in screen pixels (y grows downward)."""

    dx: float
    dy: float


@dataclass(frozen=True)
class ResizeEvent:
    width: float
    height: float


InputEvent = Union[ScrollEvent, DragEvent, ResizeEvent]


@dataclass
class InputBatch:
    """Events collected during one tick.

    Parameters
    ----------
    events : list
        Scroll, drag and resize events in arrival order.
    primary_pressed : bool
        Whether the primary pointer button is held this tick.
    """

    events: list[InputEvent] = field(default_factory=list)
    primary_pressed: bool = False

    @classmethod
    def of(cls, *events: InputEvent, primary_pressed: bool = False) -> "InputBatch":
        return cls(events=list(events), primary_pressed=primary_pressed)

    def extend(self, events: Iterable[InputEvent]) -> None:
        self.events.extend(events)

    @property
    def scroll(self) -> float:
        return math.fsum(e.delta for e in self.events if isinstance(e, ScrollEvent))

    @property
    def drag(self) -> tuple[float, float]:
        drags = [e for e in self.events if isinstance(e, DragEvent)]
        return (math.fsum(e.dx for e in drags), math.fsum(e.dy for e in drags))

    @property
    def resize(self) -> Optional[ResizeEvent]:
        """Return the last resize in the batch, if any."""
        for event in reversed(self.events):
            if isinstance(event, ResizeEvent):
                return event
        return None

    def is_empty(self) -> bool:
        return not self.events


def zoomed_scale(scale: float, scroll: float, zoom_factor: float) -> float:
    """Return ``scale * zoom_factor ** (-scroll)``, ``inf`` on overflow."""
    try:
        return scale * zoom_factor ** (-scroll)
    except OverflowError:
        return math.inf


def panned_centre(
    centre: tuple[float, float],
    drag: tuple[float, float],
    scale: float,
    window: WindowSize,
) -> tuple[float, float]:
    """Move ``centre`` against a screen-space ``drag``.

    One screen pixel covers ``2 * scale / width`` world units, so the drag
    feels the same at every zoom level.
    """
    dx, dy = drag[0], -drag[1]
    k = 2.0 * scale / window.width
    return (centre[0] - dx * k, centre[1] - dy * k)


# Spare bits between neighbouring samples once the scale sits on the floor.
_SAMPLE_ULP_MARGIN = 4.0


def scale_floor(centre: tuple[float, float], config: GrapherConfig) -> float:
    """Return the smallest usable scale for a view centred at ``centre``.

    Far from the origin a float cannot resolve an arbitrarily small interval:
    the visible bounds would collapse onto one representable value and the
    curve samples with them. The floor grows with the centre's magnitude so
    that neighbouring samples stay several ulps apart.

    >>> scale_floor((0.0, 0.0), GrapherConfig()) == GrapherConfig().min_scale
    True
    """
    magnitude = max(abs(centre[0]), abs(centre[1]))
    relative = magnitude * float(np.finfo(float).eps) * config.resolution * _SAMPLE_ULP_MARGIN
    return max(config.min_scale, relative)


class ViewportController:
    """Apply a tick's input to the view and window held by a graph state."""

    def __init__(self, config: Optional[GrapherConfig] = None) -> None:
        self._config = config or GrapherConfig()

    @property
    def config(self) -> GrapherConfig:
        return self._config

    def apply(self, state: "GraphState", batch: InputBatch) -> None:
        """Apply resize, zoom and pan from ``batch`` in that order."""
        resize = batch.resize
        if resize is not None:
            self.resize(state, resize.width, resize.height)
        self.zoom(state, batch.scroll)
        if batch.primary_pressed:
            self.pan(state, batch.drag)

    def zoom(self, state: "GraphState", scroll: float) -> None:
        if scroll == 0:
            return
        cfg = self._config
        raw = zoomed_scale(state.view.scale, scroll, cfg.zoom_factor)
        scale = self._clamp_scale(raw, state.view.centre)
        state.set_view(View(state.view.centre, scale))

    def pan(self, state: "GraphState", drag: tuple[float, float]) -> None:
        """Pan by a screen delta; deltas inside the dead zone are ignored."""
        if drag[0] ** 2 + drag[1] ** 2 <= self._config.pan_dead_zone:
            return
        view = state.view
        centre = panned_centre(view.centre, drag, view.scale, state.window)
        state.set_view(View(centre, self._clamp_scale(view.scale, centre)))

    def fit_ranges(
        self,
        state: "GraphState",
        x_range: Optional[tuple[float, float]],
        y_range: Optional[tuple[float, float]],
    ) -> bool:
        """Match the view to axis ranges reported by a plotting host.

        The window keeps its width; its height follows the aspect ratio of the
        ranges so the visible region is exactly the requested one (up to the
        scale clamp). Missing, non-finite or empty ranges are ignored.

        Returns
        -------
        bool
            Whether the ranges were applied.
        """
        if x_range is None or y_range is None:
            return False
        x0, x1 = sorted(float(v) for v in x_range)
        y0, y1 = sorted(float(v) for v in y_range)
        if not all(math.isfinite(v) for v in (x0, x1, y0, y1)) or x1 <= x0 or y1 <= y0:
            logger.debug("ignoring axis ranges x=%s y=%s", x_range, y_range)
            return False
        width = state.window.width
        state.set_window(WindowSize(width, width * (y1 - y0) / (x1 - x0)))
        centre = (0.5 * (x0 + x1), 0.5 * (y0 + y1))
        state.set_view(View(centre, self._clamp_scale(0.5 * (x1 - x0), centre)))
        return True

    def _clamp_scale(self, raw: float, centre: tuple[float, float]) -> float:
        cfg = self._config
        # The precision floor wins over max_scale; a collapsed view cannot be sampled.
        scale = max(min(raw, cfg.max_scale), scale_floor(centre, cfg))
        if scale != raw:
            logger.debug("clamped scale %g to %g", raw, scale)
        return scale

    def resize(self, state: "GraphState", width: float, height: float) -> None:
        state.set_window(WindowSize(float(width), float(height)))

    def reset_view(self, state: "GraphState") -> None:
        """Restore the configured default centre and scale."""
        cfg = self._config
        state.set_view(View(cfg.default_centre, cfg.default_scale))
