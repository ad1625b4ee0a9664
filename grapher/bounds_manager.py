"""Generation-bounds hysteresis.

Geometry is built for a window ``PREGENERATE_DISTANCE_FACTOR`` times larger
than what is visible. It is rebuilt only when the view runs off that window,
or when the view shrinks so far inside it that the cached geometry is
wastefully oversized. Small pans and zooms therefore reuse existing meshes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from .axis_spacing import compute_axis_spacing
from .bounds import GenerationBounds, Interval, View, WindowSize
from .config import PREGENERATE_DISTANCE_FACTOR

if TYPE_CHECKING:
    from .graph_state import GraphState

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

__all__ = [
    "BoundsManager",
    "visible_bounds",
    "recalculate_graphing_bounds",
    "needs_regeneration",
]


def visible_bounds(view: View, window: WindowSize) -> GenerationBounds:
    """Return the currently visible rectangle."""
    return GenerationBounds(view.visible_xbounds(window), view.visible_ybounds(window))


def _expand(interval: Interval, factor: float) -> Interval:
    centre = interval.centre()
    half = interval.length() * factor / 2.0
    return Interval(centre - half, centre + half)


def recalculate_graphing_bounds(
    view: View,
    window: WindowSize,
    factor: float = PREGENERATE_DISTANCE_FACTOR,
) -> GenerationBounds:
    """Return generation bounds ``factor`` times the visible extent, same centre."""
    visible = visible_bounds(view, window)
    return GenerationBounds(_expand(visible.xbounds, factor), _expand(visible.ybounds, factor))


# Relative slack on the shrink test: freshly recalculated bounds can exceed
# visible * factor by an ulp after the centre round trip.
_SHRINK_TOLERANCE = 1e-9


def _axis_needs_regeneration(visible: Interval, generated: Interval, factor: float) -> bool:
    return (
        visible.start < generated.start
        or visible.end > generated.end
        or visible.length() * factor * (1.0 + _SHRINK_TOLERANCE) < generated.length()
    )


def needs_regeneration(
    view: View,
    window: WindowSize,
    bounds: Optional[GenerationBounds],
    factor: float = PREGENERATE_DISTANCE_FACTOR,
) -> bool:
    """Return True when ``bounds`` no longer suits the visible region.

    Fires when the visible region leaves ``bounds`` on any side, or when the
    visible extent times ``factor`` falls below the generated extent on
    either axis. Missing bounds always need generating.
    """
    if bounds is None:
        return True
    visible = visible_bounds(view, window)
    return _axis_needs_regeneration(
        visible.xbounds, bounds.xbounds, factor
    ) or _axis_needs_regeneration(visible.ybounds, bounds.ybounds, factor)


class BoundsManager:
    """Own the regeneration decision for a :class:`~grapher.graph_state.GraphState`."""

    def __init__(self, factor: float = PREGENERATE_DISTANCE_FACTOR) -> None:
        if factor <= 1.0:
            raise ValueError("factor must be > 1")
        self._factor = float(factor)

    @property
    def factor(self) -> float:
        return self._factor

    def update(self, state: "GraphState") -> bool:
        """Consume view/window changes and regenerate bounds if required.

        Returns
        -------
        bool
            True when new generation bounds (and spacing) were stored.
        """
        if not (state.view_changed or state.window_changed):
            return False
        state.view_changed = False
        state.window_changed = False

        view, window = state.view, state.window
        if not needs_regeneration(view, window, state.generation_bounds, self._factor):
            return False

        bounds = recalculate_graphing_bounds(view, window, self._factor)
        spacing = compute_axis_spacing(bounds, view)
        state.set_generation(bounds, spacing)
        logger.debug(
            "regenerated bounds x=%s y=%s separation=%g",
            bounds.xbounds.as_tuple(),
            bounds.ybounds.as_tuple(),
            spacing.separation,
        )
        return True
