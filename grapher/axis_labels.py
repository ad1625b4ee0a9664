"""Numeric labels for the mid-tier gridlines.

Only label *values* and anchor positions are computed here; fonts and text
layout belong to the host renderer. X labels sit on the x-axis and are
produced only while that axis is inside the generation bounds; Y labels
likewise. The origin gets its own label when both axes are present.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

from .axis_spacing import AxisSpacingInfo
from .bounds import GenerationBounds
from .grid_mesh import line_offsets

__all__ = ["AxisLabel", "format_label", "axis_labels"]

LabelKind = Literal["x", "y", "origin"]


@dataclass(frozen=True)
class AxisLabel:
    kind: LabelKind
    value: float
    position: tuple[float, float]
    text: str


def format_label(value: float, separation: float) -> str:
    """Format ``value`` with as many decimals as ``separation`` needs."""
    decimals = max(0, -math.floor(math.log10(separation)))
    text = f"{value:.{decimals}f}"
    if float(text) == 0.0:
        text = text.lstrip("-")
    return text


def _ticks(centre: float, separation: float, count: int) -> list[float]:
    # Lines either side of the rounded centre; the centre line itself is unlabelled
    # and zero is covered by the origin label.
    offsets = line_offsets(centre, separation, count)[1:]
    return [float(v) for v in offsets if abs(v) > separation * 1e-9]


def axis_labels(info: AxisSpacingInfo, bounds: GenerationBounds) -> list[AxisLabel]:
    """Return labels for the mid-tier lines described by ``info``.

    Labels go on the lines either side of the rounded centre, never on the
    centre line itself. Values at zero are skipped on both axes; the origin
    label covers them.
    """
    xb, yb = bounds.xbounds, bounds.ybounds
    sep = info.separation
    x_axis_shown = yb.start < 0.0 < yb.end
    y_axis_shown = xb.start < 0.0 < xb.end

    labels: list[AxisLabel] = []
    if y_axis_shown:
        for v in _ticks(info.rounded_y_centre, sep, info.y_line_count):
            labels.append(AxisLabel("y", v, (0.0, v), format_label(v, sep)))
    if x_axis_shown:
        for v in _ticks(info.rounded_x_centre, sep, info.x_line_count):
            labels.append(AxisLabel("x", v, (v, 0.0), format_label(v, sep)))
    if x_axis_shown and y_axis_shown:
        labels.append(AxisLabel("origin", 0.0, (0.0, 0.0), "0"))
    return labels
