from __future__ import annotations

import warnings
from typing import Any
from unittest.mock import patch

import numpy as np
import pytest
import sympy as sp

from grapher.errors import ExpressionError, MissingExpressionError
from grapher.expression import compile_expression, parse_expression
from grapher.numpify import numpify, numpify_cached
from grapher.parse_latex import LatexParseError, parse_latex, strip_math_delimiters


def test_power_and_xor() -> None:
    f = compile_expression("x^2")
    assert np.array_equal(f(np.array([1.0, 2.0, 3.0])), [1.0, 4.0, 9.0])


def test_implicit_multiplication() -> None:
    f = compile_expression("2x + 3 sin(x)")
    xs = np.array([0.0, 1.0])
    assert np.allclose(f(xs), 2 * xs + 3 * np.sin(xs))


def test_e_is_eulers_number() -> None:
    f = compile_expression("e^x")
    assert np.allclose(f(np.array([0.0, 1.0])), [1.0, np.e])


def test_constant_is_broadcast() -> None:
    f = compile_expression("3")
    out = f(np.zeros(5))
    assert out.shape == (5,)
    assert np.all(out == 3.0)


def test_domain_errors_become_nan_silently() -> None:
    f = compile_expression("sin(x)/x + sqrt(x)")
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        out = f(np.array([-1.0, 0.0, 1.0]))
    assert np.isnan(out[0])
    assert np.isnan(out[1])
    assert out[2] == pytest.approx(np.sin(1.0) + 1.0)


def test_complex_results_are_not_real() -> None:
    f = compile_expression("I*x")
    out = f(np.array([0.0, 1.0]))
    assert out.dtype == np.float64
    assert out[0] == 0.0
    assert np.isnan(out[1])


def test_custom_variable() -> None:
    f = compile_expression("t^3", var="t")
    assert np.array_equal(f(np.array([2.0])), [8.0])
    assert f.var == sp.Symbol("t")


@pytest.mark.parametrize("text", [None, "", "   "])
def test_missing_expression(text: Any) -> None:
    with pytest.raises(MissingExpressionError, match="No expression passed"):
        compile_expression(text)


@pytest.mark.parametrize("text", ["x +", "(x", "x > 1", "y + x", "f(x)"])
def test_invalid_expressions(text: str) -> None:
    with pytest.raises(ExpressionError):
        compile_expression(text)


def test_missing_is_an_expression_error() -> None:
    assert issubclass(MissingExpressionError, ExpressionError)


def test_parse_expression_returns_sympy() -> None:
    x = sp.Symbol("x")
    assert parse_expression("x^2 + 1") == x**2 + 1


def test_numpify_prints_numpy_calls() -> None:
    x = sp.Symbol("x")
    f = numpify(sp.sin(x) + sp.exp(x), var=x)
    assert "numpy.sin" in f.source
    assert "numpy.exp" in f.source
    assert np.allclose(f(np.array([0.0])), [1.0])


def test_numpify_cache() -> None:
    x = sp.Symbol("x")
    numpify_cached.cache_clear()
    first = numpify(x**3, var=x)
    second = numpify(x**3, var=x)
    assert first is second
    assert numpify_cached.cache_info().hits >= 1
    assert numpify(x**3, var=x, cache=False) is not first


def test_numpify_rejects_unbound_symbols() -> None:
    x, a = sp.symbols("x a")
    with pytest.raises(ValueError, match="unbound"):
        numpify(a * x, var=x)


def test_numpify_renames_keyword_variables() -> None:
    lam = sp.Symbol("lambda")
    f = numpify(lam + 1, var=lam, cache=False)
    assert f.arg_name != "lambda"
    assert np.array_equal(f(np.array([1.0])), [2.0])


def test_parse_latex_falls_back_to_antlr() -> None:
    calls: list[str] = []

    def fake_parse(tex: str, *args: Any, backend: str = "lark", **kwargs: Any) -> Any:
        calls.append(backend)
        if backend == "lark":
            return object()
        return sp.Symbol("x") + 1

    with patch("grapher.parse_latex._sympy_parse_latex", side_effect=fake_parse):
        result = parse_latex("x+1")

    assert calls == ["lark", "antlr"]
    assert result == sp.Symbol("x") + 1


def test_parse_latex_reports_both_failures() -> None:
    def broken(tex: str, *args: Any, backend: str = "lark", **kwargs: Any) -> Any:
        raise RuntimeError(f"{backend} unavailable")

    with patch("grapher.parse_latex._sympy_parse_latex", side_effect=broken):
        with pytest.raises(LatexParseError) as excinfo:
            parse_latex(r"\frac{1}{x}")

    message = str(excinfo.value)
    assert "lark unavailable" in message
    assert "antlr unavailable" in message


def test_latex_expression_compiles() -> None:
    with patch("grapher.expression.parse_latex", return_value=sp.Symbol("x") ** 2 + 1):
        f = compile_expression(r"x^{2} + 1", latex=True)
    assert np.array_equal(f(np.array([0.0, 2.0])), [1.0, 5.0])


def test_latex_failure_is_an_expression_error() -> None:
    with patch("grapher.expression.parse_latex", side_effect=LatexParseError("nope")):
        with pytest.raises(ExpressionError):
            compile_expression(r"\frac{", latex=True)


def test_explicit_backend_skips_fallback() -> None:
    calls: list[str] = []

    def fake_parse(tex: str, *, backend: str, **kwargs: Any) -> Any:
        calls.append(backend)
        raise ValueError("bad input")

    with patch("grapher.parse_latex._sympy_parse_latex", side_effect=fake_parse):
        with pytest.raises(LatexParseError):
            parse_latex("x", backend="antlr")

    assert calls == ["antlr"]


@pytest.mark.parametrize(
    ("tex", "body"),
    [
        (r"$x^2$", "x^2"),
        (r"$$ \frac{1}{x} $$", r"\frac{1}{x}"),
        (r"\(\sin x\)", r"\sin x"),
        (r"\[x+1\]", "x+1"),
        ("  x  ", "x"),
    ],
)
def test_strip_math_delimiters(tex: str, body: str) -> None:
    assert strip_math_delimiters(tex) == body


def test_delimiters_are_stripped_before_parsing() -> None:
    seen: list[str] = []

    def fake_parse(tex: str, *, backend: str, **kwargs: Any) -> Any:
        seen.append(tex)
        return sp.Symbol("x")

    with patch("grapher.parse_latex._sympy_parse_latex", side_effect=fake_parse):
        parse_latex(r"$x$")

    assert seen == ["x"]
