"""Command-line entry point.

Usage::

    grapher "sin(x) / x" --output plot.html
    grapher "\\frac{1}{x}" --latex --scale 2 --show

A missing or empty expression, or one that fails to parse, is reported on
stderr as a single line and yields exit code 1. Invalid numeric options yield
exit code 2. :func:`main` returns the exit code instead of exiting so it can be
tested in-process.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from . import __version__
from .axis_labels import axis_labels
from .config import GrapherConfig
from .errors import ExpressionError, GrapherError, MissingExpressionError
from .expression import DEFAULT_VAR, compile_expression
from .graph_state import Grapher
from .plotly_render import PlotlyRenderer

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

EXIT_OK = 0
EXIT_EXPRESSION = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grapher",
        description="Plot a function of one variable with a zoom-aware grid.",
    )
    parser.add_argument("expression", nargs="?", default=None, help="expression to plot, e.g. 'x^2 - 1'")
    parser.add_argument("--latex", action="store_true", help="parse the expression as LaTeX")
    parser.add_argument("--var", default=DEFAULT_VAR, help="plotting variable (default: %(default)s)")
    parser.add_argument("--scale", type=float, default=None, help="half of the visible x-range")
    parser.add_argument("--centre", type=float, nargs=2, metavar=("X", "Y"), default=None, help="view centre")
    parser.add_argument("--size", type=float, nargs=2, metavar=("W", "H"), default=None, help="window size in pixels")
    parser.add_argument("--resolution", type=int, default=None, help="curve sample count")
    parser.add_argument(
        "--width-mode",
        choices=("world", "screen"),
        default=None,
        help="keep the curve width constant in world or screen space",
    )
    parser.add_argument("--output", "-o", default=None, help="write the figure to an HTML file")
    parser.add_argument("--show", action="store_true", help="open the figure in a browser")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default="WARNING",
        help="logging level (default: %(default)s)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _config_from_args(args: argparse.Namespace) -> GrapherConfig:
    width, height = args.size if args.size is not None else (None, None)
    overrides = dict(
        window_width=width,
        window_height=height,
        default_scale=args.scale,
        default_centre=tuple(args.centre) if args.centre is not None else None,
        resolution=args.resolution,
        curve_width_mode=args.width_mode,
    )
    return GrapherConfig().with_overrides(**overrides)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        evaluator = compile_expression(args.expression, var=args.var, latex=args.latex)
    except MissingExpressionError as e:
        print(e, file=sys.stderr)
        return EXIT_EXPRESSION
    except ExpressionError as e:
        reason = str(e).splitlines()[0] if str(e) else type(e).__name__
        print(f"Error in expression: {reason}", file=sys.stderr)
        return EXIT_EXPRESSION

    try:
        config = _config_from_args(args)
    except ValueError as e:
        print(f"Invalid option: {e}", file=sys.stderr)
        return EXIT_USAGE

    renderer = PlotlyRenderer(title=evaluator.text)
    try:
        grapher = Grapher(evaluator, config, sink=renderer)
    except (GrapherError, ValueError) as e:
        print(f"Error while plotting: {e}", file=sys.stderr)
        return EXIT_EXPRESSION

    state = grapher.state
    labels = []
    if state.axis_spacing is not None and state.generation_bounds is not None:
        labels = axis_labels(state.axis_spacing, state.generation_bounds)

    if args.output:
        renderer.write_html(args.output, labels)
        logger.info("wrote %s", args.output)
    if args.show or not args.output:
        renderer.figure(labels).show()
    return EXIT_OK
