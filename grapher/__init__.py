"""Top-level public API for the ``grapher`` package.

``grapher`` is the geometry core of an interactive function plotter: it keeps
a pannable, zoomable view, decides when pregenerated geometry has to be
rebuilt, picks 1-2-5 grid spacings and tessellates the curve into a
constant-width ribbon. Hosts drive it one tick at a time:

>>> from grapher import Grapher, InputBatch, ScrollEvent, compile_expression
>>> g = Grapher(compile_expression("sin(x)"))  # doctest: +SKIP
>>> g.tick(InputBatch.of(ScrollEvent(2.0)))  # doctest: +SKIP

In a notebook, :func:`plot` returns a live Plotly widget that regenerates
geometry as the user pans and zooms.

Lower-level building blocks (spacing, bounds hysteresis, tessellation, grid
meshes) are re-exported for hosts that want to run their own pipeline.
"""

__version__ = "0.1.0"

from .axis_labels import AxisLabel, axis_labels, format_label
from .axis_spacing import (
    AxisSpacingInfo,
    axis_line_count,
    compute_axis_spacing,
    mid_axis_diff,
    rounded_centre,
)
from .bounds import GenerationBounds, Interval, View, WindowSize
from .bounds_manager import (
    BoundsManager,
    needs_regeneration,
    recalculate_graphing_bounds,
    visible_bounds,
)
from .config import GrapherConfig
from .errors import (
    EvaluationError,
    ExpressionError,
    GrapherError,
    IndexWidthError,
    InvalidSampleCount,
    MissingExpressionError,
)
from .expression import Evaluator, compile_expression, parse_expression
from .geometry import GridMeshes, LineMesh, PolylineMesh, RibbonMesh, index_array
from .graph_state import GeometrySink, GeometryStore, Grapher, GraphState, TickResult
from .grid_mesh import build_axis_tier, build_grid, build_main_axis
from .tessellate import curve_normals, sample_xs, tessellate_polyline, tessellate_ribbon
from .viewport import DragEvent, InputBatch, ResizeEvent, ScrollEvent, ViewportController
from .widget import InteractivePlot, plot
