"""Exception types raised by the plotting core and its adapters."""

from __future__ import annotations

__all__ = [
    "GrapherError",
    "ExpressionError",
    "MissingExpressionError",
    "InvalidSampleCount",
    "EvaluationError",
    "IndexWidthError",
]


class GrapherError(Exception):
    """Base class for errors raised by ``grapher``."""


class ExpressionError(GrapherError, ValueError):
    """Raised when expression text cannot be turned into an evaluator."""


class MissingExpressionError(ExpressionError):
    """Raised when no (or only blank) expression text is supplied."""


class InvalidSampleCount(GrapherError, ValueError):
    """Raised when fewer than two curve samples are requested."""


class EvaluationError(GrapherError, ValueError):
    """Raised when an evaluator returns unusable output."""


class IndexWidthError(GrapherError, OverflowError):
    """Raised when a vertex count does not fit the configured index width."""
