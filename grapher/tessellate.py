"""Curve sampling and ribbon tessellation.

Purpose
-------
Turn a batch evaluator ``f(xs) -> ys`` and an x-interval into a ribbon of
constant width: every sample is offset along its estimated unit normal by
``± half_width`` and the offset pairs are stitched into a triangle strip.

Concepts
--------
Normals come from forward differences. For the slope ``s`` between two
neighbouring samples the normal is ``(-s, 1) / sqrt(s**2 + 1)``, i.e. the
tangent ``(1, s)`` rotated by 90 degrees. The last sample has no forward
neighbour and reuses the previous normal, so there are exactly ``R`` normals
for ``R`` samples.

Important gotchas
-----------------
- The slope is normalised with ``hypot`` so very steep segments give
  ``(-1, 0)``-ish normals instead of overflowing to ``0 / 0``.
- Evaluator output may contain ``NaN``/``inf`` (``1/x``, ``sqrt(x)``). With the
  default ``nonfinite="clamp"`` policy those samples are replaced by finite
  stand-ins before normal estimation and flagged in ``RibbonMesh.valid``.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import numpy as np

from .bounds import Interval
from .config import CURVE_HALF_WIDTH, RESOLUTION, NonFinitePolicy
from .errors import EvaluationError, InvalidSampleCount
from .geometry import PolylineMesh, RibbonMesh, index_array

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

__all__ = [
    "BatchEvaluator",
    "sample_xs",
    "evaluate_samples",
    "clamp_nonfinite",
    "curve_normals",
    "tessellate_ribbon",
    "tessellate_polyline",
]

BatchEvaluator = Callable[[np.ndarray], np.ndarray]


def _require_sample_count(resolution: int) -> None:
    if int(resolution) != resolution or resolution < 2:
        raise InvalidSampleCount(f"At least two samples are required, got {resolution!r}")


def sample_xs(xbounds: Interval, resolution: int = RESOLUTION) -> tuple[np.ndarray, float]:
    """Return ``(xs, dx)`` with ``xs[i] = start + i * dx`` and ``dx = extent / R``.

    The end point itself is not sampled.
    """
    _require_sample_count(resolution)
    length = xbounds.length()
    if not length > 0:
        raise ValueError(f"xbounds must have positive length, got {xbounds}")
    dx = length / resolution
    return xbounds.start + dx * np.arange(resolution, dtype=float), dx


def evaluate_samples(evaluate: BatchEvaluator, xs: np.ndarray) -> np.ndarray:
    """Call ``evaluate`` once on ``xs`` and check it returned one value per sample."""
    try:
        values = np.asarray(evaluate(xs), dtype=float)
    except (TypeError, ValueError) as exc:
        raise EvaluationError(f"Evaluator output is not a real array: {exc}") from exc
    if values.shape != xs.shape:
        raise EvaluationError(
            f"Evaluator returned shape {values.shape}, expected {xs.shape}"
        )
    return values


def clamp_nonfinite(
    values: np.ndarray,
    y_clamp: Optional[Interval] = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Replace non-finite samples with finite stand-ins.

    ``+inf``/``-inf`` become the ends of ``y_clamp`` (the range of the finite
    samples when ``None``). ``NaN`` takes the value of the nearest preceding
    non-NaN sample, or of the first one at the head of the array.

    Returns
    -------
    tuple[numpy.ndarray, numpy.ndarray]
        The cleaned values and the boolean mask of originally finite samples.
    """
    finite = np.isfinite(values)
    if finite.all():
        return values, finite

    if y_clamp is not None:
        lo, hi = y_clamp.start, y_clamp.end
    elif finite.any():
        lo, hi = float(values[finite].min()), float(values[finite].max())
    else:
        lo = hi = 0.0

    out = values.copy()
    out[np.isposinf(values)] = hi
    out[np.isneginf(values)] = lo

    keep = ~np.isnan(values)
    if not keep.any():
        out[:] = 0.0
    elif not keep.all():
        idx = np.where(keep, np.arange(out.size), 0)
        np.maximum.accumulate(idx, out=idx)
        idx[: int(np.argmax(keep))] = int(np.argmax(keep))
        out = out[idx]
    return out, finite


def curve_normals(values: np.ndarray, dx: float) -> np.ndarray:
    """Return ``(R, 2)`` unit normals for ``R`` evenly spaced samples.

    Raises
    ------
    InvalidSampleCount
        If fewer than two values are given.
    ValueError
        If ``dx`` is not positive.
    """
    values = np.asarray(values, dtype=float)
    if values.ndim != 1 or values.size < 2:
        raise InvalidSampleCount(f"At least two samples are required, got {values.size}")
    if not dx > 0:
        raise ValueError(f"dx must be > 0, got {dx}")

    with np.errstate(over="ignore", invalid="ignore"):
        slopes = np.diff(values) / dx
    slopes = np.where(np.isnan(slopes), 0.0, slopes)
    steep = np.isinf(slopes)

    k = 1.0 / np.hypot(np.where(steep, 0.0, slopes), 1.0)
    normals = np.stack([-np.where(steep, 0.0, slopes) * k, k], axis=1)
    if steep.any():
        normals[steep] = np.stack(
            [-np.sign(slopes[steep]), np.zeros(int(steep.sum()))], axis=1
        )

    # No forward difference exists for the last sample.
    return np.vstack([normals, normals[-1:]])


def tessellate_ribbon(
    evaluate: BatchEvaluator,
    xbounds: Interval,
    *,
    resolution: int = RESOLUTION,
    half_width: float = CURVE_HALF_WIDTH,
    y_clamp: Optional[Interval] = None,
    nonfinite: NonFinitePolicy = "clamp",
    index_width: int = 32,
) -> RibbonMesh:
    """Sample ``evaluate`` across ``xbounds`` and build a triangle-strip ribbon.

    Parameters
    ----------
    evaluate : callable
        Batch evaluator, called exactly once with ``resolution`` x-values.
    xbounds : Interval
        Sampled x-range.
    resolution : int
        Sample count ``R``; must be at least 2.
    half_width : float
        Offset of each ribbon edge from the curve, in world units.
    y_clamp : Interval or None
        Replacement range for infinite samples under the ``"clamp"`` policy.
    nonfinite : {"clamp", "raise"}
        ``"raise"`` turns any non-finite sample into an :class:`EvaluationError`.
    index_width : int
        Bit width of the index buffer.

    Returns
    -------
    RibbonMesh
        ``2R`` vertices ordered upper/lower per sample and strip indices
        ``0..2R``.
    """
    if half_width <= 0:
        raise ValueError(f"half_width must be > 0, got {half_width}")
    xs, dx = sample_xs(xbounds, resolution)
    values = evaluate_samples(evaluate, xs)

    if nonfinite == "raise":
        bad = int(np.count_nonzero(~np.isfinite(values)))
        if bad:
            raise EvaluationError(f"{bad} of {values.size} samples are not finite")
        valid = np.ones(values.size, dtype=bool)
    elif nonfinite == "clamp":
        values, valid = clamp_nonfinite(values, y_clamp)
        if not valid.all():
            logger.debug("clamped %d non-finite samples", int((~valid).sum()))
    else:
        raise ValueError(f"Unknown nonfinite policy: {nonfinite!r}")

    normals = curve_normals(values, dx)
    centres = np.stack([xs, values], axis=1)

    positions = np.zeros((2 * resolution, 3))
    positions[0::2, :2] = centres + normals * half_width
    positions[1::2, :2] = centres - normals * half_width

    vertex_normals = np.zeros((2 * resolution, 3))
    vertex_normals[0::2, :2] = normals
    vertex_normals[1::2, :2] = -normals

    return RibbonMesh(
        positions=positions,
        normals=vertex_normals,
        indices=index_array(2 * resolution, index_width),
        centres=centres,
        valid=valid,
        half_width=float(half_width),
    )


def tessellate_polyline(
    evaluate: BatchEvaluator,
    xbounds: Interval,
    *,
    resolution: int = RESOLUTION,
    y_clamp: Optional[Interval] = None,
    index_width: int = 32,
) -> PolylineMesh:
    """Sample ``evaluate`` and return a single-vertex-per-sample line strip."""
    xs, _ = sample_xs(xbounds, resolution)
    values, valid = clamp_nonfinite(evaluate_samples(evaluate, xs), y_clamp)
    positions = np.zeros((resolution, 3))
    positions[:, 0] = xs
    positions[:, 1] = values
    return PolylineMesh(
        positions=positions,
        normals=np.tile((0.0, 0.0, 1.0), (resolution, 1)),
        indices=index_array(resolution, index_width),
        valid=valid,
    )
