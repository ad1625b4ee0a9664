"""Value types for intervals, views and window sizes.

Purpose
-------
Everything downstream (spacing, bounds hysteresis, tessellation) is written
against these small frozen records. They validate their own invariants on
construction so a degenerate view or window fails where it is created rather
than as NaN geometry several stages later.

Notes
-----
``View.scale`` is half the visible x-range. The visible y-range is derived
from the window aspect ratio so shapes are not distorted.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Interval:
    """Closed interval ``[start, end]`` with ``start <= end``."""

    start: float
    end: float

    def __post_init__(self) -> None:
        if not self.start <= self.end:
            raise ValueError(f"Interval start must not exceed end, got [{self.start}, {self.end}]")

    def centre(self) -> float:
        return (self.start + self.end) / 2.0

    def length(self) -> float:
        return self.end - self.start

    def contains(self, other: "Interval") -> bool:
        """Return True when ``other`` lies entirely inside this interval."""
        return self.start <= other.start and other.end <= self.end

    def as_tuple(self) -> tuple[float, float]:
        return (self.start, self.end)


@dataclass(frozen=True)
class WindowSize:
    """Window dimensions in pixels."""

    width: float
    height: float

    def __post_init__(self) -> None:
        if not (self.width > 0 and self.height > 0):
            raise ValueError(f"Window size must be positive, got {self.width}x{self.height}")

    def aspect(self) -> float:
        """Return ``height / width``."""
        return self.height / self.width


@dataclass(frozen=True)
class View:
    """Camera state: centre point and half x-extent.

    Parameters
    ----------
    centre : tuple[float, float]
        World-space point at the middle of the window.
    scale : float
        Half of the visible x-range. Must be finite and > 0.
    """

    centre: tuple[float, float]
    scale: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.scale) and self.scale > 0):
            raise ValueError(f"View scale must be finite and > 0, got {self.scale}")
        cx, cy = self.centre
        if not (math.isfinite(cx) and math.isfinite(cy)):
            raise ValueError(f"View centre must be finite, got {self.centre}")
        object.__setattr__(self, "centre", (float(cx), float(cy)))

    def visible_xbounds(self, window: WindowSize) -> Interval:
        cx = self.centre[0]
        return Interval(cx - self.scale, cx + self.scale)

    def visible_ybounds(self, window: WindowSize) -> Interval:
        dy = self.scale * window.height / window.width
        cy = self.centre[1]
        return Interval(cy - dy, cy + dy)


@dataclass(frozen=True)
class GenerationBounds:
    """World-space rectangle that geometry is currently generated for."""

    xbounds: Interval
    ybounds: Interval
