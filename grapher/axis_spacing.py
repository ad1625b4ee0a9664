"""Grid spacing selection on a 1-2-5 decade scheme.

Purpose
-------
Pick a "nice" world-space gridline separation for a zoom scale, independent of
pan position, and derive how many lines are needed to cover a set of
generation bounds.

Concepts
--------
``mid_axis_diff`` splits ``log2(scale / 10)`` into an integer bucket ``l2``
and spends ``l5`` of those doublings on factors of five, which walks the
sequence ..., 0.1, 0.2, 0.5, 1, 2, 5, 10, 20, 50, ... as the scale grows.
The minor tier is always a fixed fifth of the mid tier.

Examples
--------
>>> mid_axis_diff(5.0)
1.0
>>> mid_axis_diff(50.0)
10.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from .bounds import GenerationBounds, View

__all__ = [
    "MINOR_DIVISIONS",
    "AxisSpacingInfo",
    "mid_axis_diff",
    "axis_line_count",
    "rounded_centre",
    "compute_axis_spacing",
]

MINOR_DIVISIONS = 5


@dataclass(frozen=True)
class AxisSpacingInfo:
    """Spacing and line counts for one grid tier.

    Parameters
    ----------
    separation : float
        Distance between neighbouring lines. Always > 0.
    x_line_count, y_line_count : int
        Lines on one side of the reference line (the reference included).
    rounded_x_centre, rounded_y_centre : float
        Reference line positions, snapped to multiples of ``separation``.
    """

    separation: float
    x_line_count: int
    y_line_count: int
    rounded_x_centre: float
    rounded_y_centre: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.separation) and self.separation > 0):
            raise ValueError(f"separation must be finite and > 0, got {self.separation}")

    def minor(self) -> "AxisSpacingInfo":
        """Return the minor tier derived from this (mid) tier."""
        return replace(
            self,
            separation=self.separation / MINOR_DIVISIONS,
            x_line_count=self.x_line_count * MINOR_DIVISIONS,
            y_line_count=self.y_line_count * MINOR_DIVISIONS,
        )


def mid_axis_diff(scale: float) -> float:
    """Return the mid-tier gridline separation for ``scale``."""
    if not (math.isfinite(scale) and scale > 0):
        raise ValueError(f"scale must be finite and > 0, got {scale}")
    l2 = math.floor(math.log2(scale / 10.0)) + 1
    l5 = (l2 + 1) // 3
    return 2.0 ** (l2 - 2 * l5) * 5.0 ** l5


def axis_line_count(bounds: GenerationBounds, separation: float) -> tuple[int, int]:
    """Return ``(x_count, y_count)`` lines on one side of the bounds centre.

    The trailing ``+ 1`` over-counts by one line; without it an edge line
    occasionally goes missing at tier boundaries.
    """
    if separation <= 0:
        raise ValueError(f"separation must be > 0, got {separation}")
    x_count = math.floor(bounds.xbounds.length() / 2.0 / separation) + 1
    y_count = math.floor(bounds.ybounds.length() / 2.0 / separation) + 1
    return x_count, y_count


def rounded_centre(centre: float, separation: float) -> float:
    return round(centre / separation) * separation


def compute_axis_spacing(bounds: GenerationBounds, view: View) -> AxisSpacingInfo:
    """Return the mid-tier spacing for freshly recalculated ``bounds``.

    ``bounds`` and ``view`` must come from the same regeneration step.
    """
    separation = mid_axis_diff(view.scale)
    x_count, y_count = axis_line_count(bounds, separation)
    return AxisSpacingInfo(
        separation=separation,
        x_line_count=x_count,
        y_line_count=y_count,
        rounded_x_centre=rounded_centre(bounds.xbounds.centre(), separation),
        rounded_y_centre=rounded_centre(bounds.ybounds.centre(), separation),
    )
