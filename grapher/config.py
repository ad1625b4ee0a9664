"""Defaults and the validated configuration record for the plotting core.

Module-level constants carry the reference values; :class:`GrapherConfig`
bundles them so a host (or the CLI) can override individual values without
touching the algorithms that read them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Literal

from .errors import InvalidSampleCount

DEFAULT_WINDOW_WIDTH = 640.0
DEFAULT_WINDOW_HEIGHT = 640.0

# Half the visible x-range: x spans [-5, 5] at startup.
DEFAULT_SCALE = 5.0

# Pregenerate geometry this factor outside the visible region.
PREGENERATE_DISTANCE_FACTOR = 2.0

ZOOM_FACTOR = 1.1
PAN_DEAD_ZONE = 0.01

RESOLUTION = 256
CURVE_HALF_WIDTH = 0.03

MIN_SCALE = 1e-9
MAX_SCALE = 1e12

INDEX_WIDTHS = (16, 32)

CurveWidthMode = Literal["world", "screen"]
NonFinitePolicy = Literal["clamp", "raise"]


@dataclass(frozen=True)
class GrapherConfig:
    """Tunable values for one plotting session.

    Parameters
    ----------
    window_width, window_height : float
        Initial window size in pixels.
    default_scale : float
        Initial half x-extent of the view.
    default_centre : tuple[float, float]
        Initial view centre.
    pregenerate_factor : float
        Ratio between generation bounds and visible bounds. Must be > 1.
    zoom_factor : float
        Scale multiplier per scroll unit. Must be > 1.
    pan_dead_zone : float
        Squared drag length below which pan input is ignored.
    resolution : int
        Curve sample count ``R``.
    half_width : float
        Ribbon half width in world units (at ``default_scale`` in screen mode).
    curve_width_mode : {"world", "screen"}
        ``"world"`` keeps the ribbon width fixed in world space; ``"screen"``
        scales it with the zoom level so it looks constant on screen.
    min_scale, max_scale : float
        Clamp range applied to the view scale after zooming.
    index_width : {16, 32}
        Bit width of the emitted index buffers.
    nonfinite : {"clamp", "raise"}
        How the tessellator treats non-finite evaluator output.
    """

    window_width: float = DEFAULT_WINDOW_WIDTH
    window_height: float = DEFAULT_WINDOW_HEIGHT
    default_scale: float = DEFAULT_SCALE
    default_centre: tuple[float, float] = (0.0, 0.0)
    pregenerate_factor: float = PREGENERATE_DISTANCE_FACTOR
    zoom_factor: float = ZOOM_FACTOR
    pan_dead_zone: float = PAN_DEAD_ZONE
    resolution: int = RESOLUTION
    half_width: float = CURVE_HALF_WIDTH
    curve_width_mode: CurveWidthMode = "world"
    min_scale: float = MIN_SCALE
    max_scale: float = MAX_SCALE
    index_width: int = 32
    nonfinite: NonFinitePolicy = "clamp"

    def __post_init__(self) -> None:
        if not (self.window_width > 0 and self.window_height > 0):
            raise ValueError(
                f"Window size must be positive, got {self.window_width}x{self.window_height}"
            )
        if not (0 < self.min_scale <= self.max_scale and math.isfinite(self.max_scale)):
            raise ValueError(
                f"Scale clamp must satisfy 0 < min_scale <= max_scale < inf, "
                f"got [{self.min_scale}, {self.max_scale}]"
            )
        if not (self.min_scale <= self.default_scale <= self.max_scale):
            raise ValueError(
                f"default_scale {self.default_scale} lies outside [{self.min_scale}, {self.max_scale}]"
            )
        if not all(math.isfinite(c) for c in self.default_centre):
            raise ValueError(f"default_centre must be finite, got {self.default_centre}")
        if self.pregenerate_factor <= 1.0:
            raise ValueError("pregenerate_factor must be > 1")
        if self.zoom_factor <= 1.0:
            raise ValueError("zoom_factor must be > 1")
        if self.resolution < 2:
            raise InvalidSampleCount(f"resolution must be >= 2, got {self.resolution}")
        if self.half_width <= 0:
            raise ValueError("half_width must be > 0")
        if self.curve_width_mode not in ("world", "screen"):
            raise ValueError(f"Unknown curve_width_mode: {self.curve_width_mode!r}")
        if self.index_width not in INDEX_WIDTHS:
            raise ValueError(f"index_width must be one of {INDEX_WIDTHS}, got {self.index_width}")
        if self.nonfinite not in ("clamp", "raise"):
            raise ValueError(f"Unknown nonfinite policy: {self.nonfinite!r}")

    def with_overrides(self, **kwargs: Any) -> "GrapherConfig":
        """Return a validated copy with ``kwargs`` replaced. ``None`` values are ignored."""
        updates = {key: value for key, value in kwargs.items() if value is not None}
        return replace(self, **updates)

    def curve_half_width(self, scale: float) -> float:
        """Return the ribbon half width to use at ``scale``."""
        if self.curve_width_mode == "screen":
            return self.half_width * scale / self.default_scale
        return self.half_width
