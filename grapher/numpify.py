"""
numpify: compile a one-variable SymPy expression to a NumPy batch function
==========================================================================

Purpose
-------
The plotting core treats expression evaluation as an opaque batch function
``f(xs) -> ys``. This module produces such functions from SymPy expressions by
printing them with SymPy's :class:`~sympy.printing.numpy.NumPyPrinter` and
``exec``-ing the generated source.

Public API
----------
- :func:`numpify`
- :func:`numpify_cached`
- :class:`NumpifiedFunction`

Notes
-----
- Constant expressions are broadcast to the shape of the input so the result
  always has one value per sample.
- The generated source is kept on the returned object for inspection.
- ``exec`` is used to define the generated function; do not compile
  untrusted expressions.

Logging
-------
Silent by default. Enable with::

    import logging
    logging.getLogger("grapher.numpify").setLevel(logging.DEBUG)

Examples
--------
>>> import numpy as np
>>> import sympy as sp
>>> x = sp.Symbol("x")
>>> f = numpify(x**2, var=x)
>>> f(np.array([1.0, 2.0, 3.0]))
array([1., 4., 9.])
>>> numpify(sp.Integer(5), var=x)(np.zeros(3))
array([5., 5., 5.])
"""

from __future__ import annotations

import builtins
import keyword
import logging
import textwrap
import time
from functools import lru_cache
from typing import Any, Callable, Dict, cast

import numpy as np
import sympy as sp
from sympy.printing.numpy import NumPyPrinter

__all__ = ["NumpifiedFunction", "numpify", "numpify_cached"]


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class NumpifiedFunction:
    """Compiled SymPy -> NumPy callable of a single variable."""

    __slots__ = ("_fn", "symbolic", "var", "arg_name", "source")

    def __init__(
        self,
        fn: Callable[[Any], Any],
        symbolic: sp.Basic,
        var: sp.Symbol,
        arg_name: str,
        source: str,
    ) -> None:
        self._fn = fn
        self.symbolic = symbolic
        self.var = var
        self.arg_name = arg_name
        self.source = source

    def __call__(self, xs: Any) -> Any:
        return self._fn(xs)

    def __repr__(self) -> str:
        return f"NumpifiedFunction({self.symbolic!r}, var={self.arg_name})"


def _arg_name_for(var: sp.Symbol, reserved: set[str]) -> str:
    name = var.name
    if not name.isidentifier() or keyword.iskeyword(name):
        name = "".join(ch if (ch == "_" or ch.isalnum()) else "_" for ch in name)
        if not name or name[0].isdigit():
            name = f"_{name}"
    candidate = name
    suffix = 0
    while candidate in reserved or keyword.iskeyword(candidate):
        candidate = f"{name}__{suffix}"
        suffix += 1
    return candidate


def _require_known_functions(expr: sp.Basic, printer: NumPyPrinter) -> None:
    """Reject functions the NumPy printer can only print as bare calls."""
    missing: set[str] = set()
    for app in expr.atoms(sp.Function):
        name = app.func.__name__
        try:
            code = printer.doprint(app).strip()
        except Exception:
            missing.add(name)
            continue
        if code.startswith(f"{name}("):
            missing.add(name)
    if missing:
        raise ValueError(
            "Expression contains function(s) without a NumPy implementation: "
            + ", ".join(sorted(missing))
        )


def _numpify_uncached(expr: Any, var: sp.Symbol) -> NumpifiedFunction:
    """Compile ``expr`` as a function of ``var`` (uncached).

    Raises
    ------
    TypeError
        If ``expr`` is not SymPy-compatible or ``var`` is not a Symbol.
    ValueError
        If ``expr`` has free symbols other than ``var`` or unknown functions.
    """
    try:
        expr_sym = sp.sympify(expr)
    except Exception as e:
        raise TypeError(f"numpify expects a SymPy-compatible expression, got {type(expr)}") from e
    if not isinstance(expr_sym, sp.Basic):
        raise TypeError(f"numpify expects a SymPy expression, got {type(expr_sym)}")
    if not isinstance(var, sp.Symbol):
        raise TypeError(f"var must be a SymPy Symbol, got {type(var)}")
    expr = cast(sp.Basic, expr_sym)

    extra = sorted(s.name for s in expr.free_symbols if s != var)
    if extra:
        raise ValueError(
            f"Expression contains unbound symbols: {', '.join(extra)}; only {var.name} is allowed"
        )

    t0 = time.perf_counter()
    printer = NumPyPrinter(settings={"user_functions": {}, "allow_unknown_functions": True})
    _require_known_functions(expr, printer)

    reserved = set(keyword.kwlist) | set(dir(builtins)) | {"numpy", "np"}
    arg = _arg_name_for(var, reserved)
    expr_code = printer.doprint(expr.xreplace({var: sp.Symbol(arg)}))

    lines = [f"def _generated({arg}):", f"    {arg} = numpy.asarray({arg}, dtype=float)"]
    if var not in expr.free_symbols:
        lines.append(f"    return ({expr_code}) + numpy.zeros(numpy.shape({arg}))")
    else:
        lines.append(f"    return {expr_code}")
    src = "\n".join(lines)

    glb: Dict[str, Any] = {"numpy": np}
    loc: Dict[str, Any] = {}
    exec(src, glb, loc)
    fn = cast(Callable[[Any], Any], loc["_generated"])
    fn.__doc__ = textwrap.dedent(
        f"""
        Auto-generated NumPy function from SymPy expression.

        expr: {expr!r}
        var: {arg}
        """
    ).strip()

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("numpify: compiled %r in %.2f ms", expr, 1000.0 * (time.perf_counter() - t0))

    return NumpifiedFunction(fn=fn, symbolic=expr, var=var, arg_name=arg, source=src)


_NUMPIFY_CACHE_MAXSIZE = 64


@lru_cache(maxsize=_NUMPIFY_CACHE_MAXSIZE)
def _numpify_cached_impl(expr: sp.Basic, var: sp.Symbol) -> NumpifiedFunction:
    logger.debug("numpify_cached: cache MISS for %r", expr)
    return _numpify_uncached(expr, var)


def numpify_cached(expr: Any, var: sp.Symbol) -> NumpifiedFunction:
    """Cached version of :func:`numpify`, keyed on the sympified expression and ``var``."""
    return _numpify_cached_impl(sp.sympify(expr), var)


numpify_cached.cache_info = _numpify_cached_impl.cache_info  # type: ignore[attr-defined]
numpify_cached.cache_clear = _numpify_cached_impl.cache_clear  # type: ignore[attr-defined]


def numpify(expr: Any, *, var: sp.Symbol, cache: bool = True) -> NumpifiedFunction:
    """Compile ``expr`` into a NumPy batch function of ``var``.

    Pass ``cache=False`` to force a fresh compile.
    """
    if cache:
        return numpify_cached(expr, var)
    return _numpify_uncached(expr, var)
