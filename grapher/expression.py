"""Expression text -> batch evaluator.

Purpose
-------
The CLI accepts a single expression such as ``"sin(x) / x"`` or
``"x^2 - 2x"``. This module parses it with SymPy, checks that it only depends
on the plotting variable and compiles it to a NumPy batch function with
:mod:`grapher.numpify`.

Every failure happens here, at construction time; the resulting
:class:`Evaluator` never raises per call. Domain errors (``log(0)``,
``sqrt(-1)``) come back as ``inf``/``NaN`` samples which the tessellator
handles.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np
import sympy as sp
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication_application,
    parse_expr,
    standard_transformations,
)

from .errors import ExpressionError, MissingExpressionError
from .numpify import NumpifiedFunction, numpify
from .parse_latex import parse_latex

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

__all__ = ["DEFAULT_VAR", "Evaluator", "parse_expression", "compile_expression"]

DEFAULT_VAR = "x"

_TRANSFORMATIONS = standard_transformations + (implicit_multiplication_application, convert_xor)


def parse_expression(text: Optional[str], *, var: str = DEFAULT_VAR, latex: bool = False) -> sp.Expr:
    """Parse ``text`` into a SymPy expression of the single variable ``var``.

    Raises
    ------
    MissingExpressionError
        If ``text`` is ``None`` or blank.
    ExpressionError
        If parsing fails, the result is not a scalar expression, or it has
        free symbols other than ``var``.
    """
    if text is None or not text.strip():
        raise MissingExpressionError("No expression passed")

    symbol = sp.Symbol(var)
    try:
        if latex:
            parsed: Any = parse_latex(text)
        else:
            parsed = parse_expr(
                text,
                local_dict={"e": sp.E, var: symbol},
                transformations=_TRANSFORMATIONS,
            )
    except Exception as e:
        raise ExpressionError(f"Could not parse {text!r}: {e}") from e

    if not isinstance(parsed, sp.Expr):
        raise ExpressionError(f"{text!r} is not a scalar expression (got {type(parsed).__name__})")

    # LaTeX parsing creates its own symbols; unify by name.
    parsed = parsed.xreplace({s: symbol for s in parsed.free_symbols if s.name == var})
    extra = sorted(s.name for s in parsed.free_symbols if s != symbol)
    if extra:
        raise ExpressionError(
            f"{text!r} depends on unknown symbol(s) {', '.join(extra)}; only {var} is allowed"
        )
    return parsed


@dataclass(frozen=True)
class Evaluator:
    """Batch evaluator ``f(xs) -> ys`` for one parsed expression."""

    text: str
    expr: sp.Expr
    var: sp.Symbol
    compiled: NumpifiedFunction

    def __call__(self, xs: Any) -> np.ndarray:
        xs = np.asarray(xs, dtype=float)
        with np.errstate(all="ignore"):
            out = np.asarray(self.compiled(xs))
        if np.iscomplexobj(out):
            real = out.real.astype(float)
            real[out.imag != 0] = np.nan
            out = real
        return np.broadcast_to(out.astype(float, copy=False), xs.shape).copy()

    def __repr__(self) -> str:
        return f"Evaluator({self.text!r}, expr={self.expr!r})"


def compile_expression(text: Optional[str], *, var: str = DEFAULT_VAR, latex: bool = False) -> Evaluator:
    """Parse and compile ``text``; see :func:`parse_expression` for errors."""
    expr = parse_expression(text, var=var, latex=latex)
    symbol = sp.Symbol(var)
    try:
        compiled = numpify(expr, var=symbol)
    except (TypeError, ValueError) as e:
        raise ExpressionError(f"Could not compile {text!r}: {e}") from e
    logger.debug("compiled %r as %s", text, compiled.source.splitlines()[-1].strip())
    return Evaluator(text=str(text), expr=expr, var=symbol, compiled=compiled)
