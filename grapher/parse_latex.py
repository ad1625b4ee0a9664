"""LaTeX expression input for the plotter.

SymPy ships two LaTeX parsers with separate optional dependencies (``lark``
and ``antlr4``). :func:`parse_latex` tries them in :data:`BACKENDS` order and
returns the first SymPy result, so whichever parser is installed gets used.

Text copied from documents often carries math delimiters (``$...$``,
``\\(...\\)``, ``\\[...\\]``); those are stripped before parsing.
"""

from __future__ import annotations

import re
from typing import Any

from sympy import Basic
from sympy.parsing.latex import parse_latex as _sympy_parse_latex

__all__ = ["BACKENDS", "LatexParseError", "strip_math_delimiters", "parse_latex"]

BACKENDS = ("lark", "antlr")

_DELIMITERS = re.compile(r"^\s*(?:\$\$(.*)\$\$|\$(.*)\$|\\\((.*)\\\)|\\\[(.*)\\\])\s*$", re.DOTALL)


class LatexParseError(RuntimeError):
    """Raised when no SymPy LaTeX backend can parse the input."""


def strip_math_delimiters(tex: str) -> str:
    r"""Remove one pair of surrounding math delimiters, if present.

    >>> strip_math_delimiters(r"$\sin x$")
    '\\sin x'
    >>> strip_math_delimiters(r"x^2")
    'x^2'
    """
    match = _DELIMITERS.match(tex)
    if match is None:
        return tex.strip()
    return next(group for group in match.groups() if group is not None).strip()


def parse_latex(tex: str, **kwargs: Any) -> Basic:
    """Parse a LaTeX string into a SymPy expression.

    Parameters
    ----------
    tex : str
        LaTeX input, optionally wrapped in math delimiters.
    **kwargs : Any
        Forwarded to SymPy's parser. An explicit ``backend`` skips the
        fallback and is used alone.

    Raises
    ------
    LatexParseError
        If every backend fails or returns something that is not a SymPy
        object (the lark backend returns a parse tree on ambiguous input).
    """
    body = strip_math_delimiters(tex)
    explicit = kwargs.pop("backend", None)
    backends = (explicit,) if explicit is not None else BACKENDS

    failures: list[str] = []
    for backend in backends:
        try:
            result = _sympy_parse_latex(body, backend=backend, **kwargs)
        except Exception as e:
            failures.append(f"{backend}: {type(e).__name__}: {e}")
            continue
        if isinstance(result, Basic):
            return result
        failures.append(f"{backend}: returned {type(result).__name__}, not a SymPy object")

    raise LatexParseError(f"Could not parse LaTeX {tex!r}; " + "; ".join(failures))
