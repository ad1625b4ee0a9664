"""Line-list geometry for the three grid tiers.

- main: the coordinate axes ``y = 0`` and ``x = 0``, always present.
- mid: lines every ``separation`` around the rounded centre.
- minor: the same construction at ``separation / 5``.

Horizontal lines span the generation x-bounds and vertical lines span the
generation y-bounds, so the grid covers the whole pregenerated region.
"""

from __future__ import annotations

import numpy as np

from .axis_spacing import AxisSpacingInfo
from .bounds import GenerationBounds
from .geometry import GridMeshes, LineMesh, Orientation, index_array

__all__ = [
    "HORIZONTAL_NORMAL",
    "VERTICAL_NORMAL",
    "line_offsets",
    "build_main_axis",
    "build_axis_tier",
    "build_grid",
]

HORIZONTAL_NORMAL = (0.0, 1.0, 0.0)
VERTICAL_NORMAL = (1.0, 0.0, 0.0)


def line_offsets(centre: float, separation: float, count: int) -> np.ndarray:
    """Return line positions ``centre, centre + s, centre - s, centre + 2s, ...``.

    ``count`` lines lie on each side including the shared centre line, giving
    ``2 * count - 1`` positions.
    """
    if count < 1:
        return np.empty(0)
    steps = np.arange(1, count, dtype=float) * separation
    out = np.empty(2 * count - 1)
    out[0] = centre
    out[1::2] = centre + steps
    out[2::2] = centre - steps
    return out


def _horizontal_lines(ys: np.ndarray, xstart: float, xend: float) -> np.ndarray:
    pts = np.zeros((ys.size, 2, 3))
    pts[:, 0, 0] = xstart
    pts[:, 1, 0] = xend
    pts[:, :, 1] = ys[:, None]
    return pts.reshape(-1, 3)


def _vertical_lines(xs: np.ndarray, ystart: float, yend: float) -> np.ndarray:
    pts = np.zeros((xs.size, 2, 3))
    pts[:, :, 0] = xs[:, None]
    pts[:, 0, 1] = ystart
    pts[:, 1, 1] = yend
    return pts.reshape(-1, 3)


def _line_mesh(
    tier: str,
    horizontal: np.ndarray,
    vertical: np.ndarray,
    index_width: int,
) -> LineMesh:
    positions = np.concatenate([horizontal, vertical])
    normals = np.concatenate(
        [
            np.tile(HORIZONTAL_NORMAL, (horizontal.shape[0], 1)),
            np.tile(VERTICAL_NORMAL, (vertical.shape[0], 1)),
        ]
    )
    orientations: tuple[Orientation, ...] = ("horizontal",) * (horizontal.shape[0] // 2) + (
        "vertical",
    ) * (vertical.shape[0] // 2)
    return LineMesh(
        tier=tier,
        positions=positions,
        normals=normals,
        indices=index_array(positions.shape[0], index_width),
        orientations=orientations,
    )


def build_main_axis(bounds: GenerationBounds, *, index_width: int = 32) -> LineMesh:
    """Return the x-axis and y-axis as two segments."""
    xb, yb = bounds.xbounds, bounds.ybounds
    horizontal = _horizontal_lines(np.zeros(1), xb.start, xb.end)
    vertical = _vertical_lines(np.zeros(1), yb.start, yb.end)
    return _line_mesh("main", horizontal, vertical, index_width)


def build_axis_tier(
    info: AxisSpacingInfo,
    bounds: GenerationBounds,
    *,
    tier: str = "mid",
    index_width: int = 32,
) -> LineMesh:
    """Return the gridlines described by ``info`` clipped to ``bounds``' extents."""
    xb, yb = bounds.xbounds, bounds.ybounds
    ys = line_offsets(info.rounded_y_centre, info.separation, info.y_line_count)
    xs = line_offsets(info.rounded_x_centre, info.separation, info.x_line_count)
    return _line_mesh(
        tier,
        _horizontal_lines(ys, xb.start, xb.end),
        _vertical_lines(xs, yb.start, yb.end),
        index_width,
    )


def build_grid(
    info: AxisSpacingInfo,
    bounds: GenerationBounds,
    *,
    index_width: int = 32,
) -> GridMeshes:
    """Return main, mid and minor tiers for one regeneration."""
    return GridMeshes(
        main=build_main_axis(bounds, index_width=index_width),
        mid=build_axis_tier(info, bounds, tier="mid", index_width=index_width),
        minor=build_axis_tier(info.minor(), bounds, tier="minor", index_width=index_width),
    )
