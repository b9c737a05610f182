from __future__ import annotations

import math

import pytest

from enrollment_engine.aggregate.regression import regression
from enrollment_engine.errors import InsufficientDataError, RegressionUndefinedError
from enrollment_engine.models import ScatterPoint


def test_regression_recovers_exact_line() -> None:
    points = [(x, 2 * x + 3) for x in (0.0, 1.5, 4.0, 10.0)]
    fit = regression(points)
    assert fit.slope == pytest.approx(2.0, abs=1e-9)
    assert fit.intercept == pytest.approx(3.0, abs=1e-9)
    assert fit.n == 4
    assert fit.start == pytest.approx((0.0, 3.0))
    assert fit.end == pytest.approx((10.0, 23.0))


def test_regression_accepts_scatter_points() -> None:
    points = [
        ScatterPoint(x=x, y=-x + 1, school=f"s{x}", state="CA", total=None, active=False)
        for x in (1.0, 2.0, 3.0)
    ]
    fit = regression(points)
    assert fit.slope == pytest.approx(-1.0)
    assert fit.intercept == pytest.approx(1.0)


def test_regression_needs_two_points() -> None:
    with pytest.raises(InsufficientDataError):
        regression([])
    with pytest.raises(InsufficientDataError):
        regression([(1.0, 2.0)])


def test_regression_identical_x_is_undefined() -> None:
    with pytest.raises(RegressionUndefinedError):
        regression([(0.1, 1.0), (0.1, 2.0), (0.1, 5.0)])


def test_regression_never_returns_nan() -> None:
    fit = regression([(1e-3, 1.0), (2e-3, 1.0)])
    assert not math.isnan(fit.slope)
    assert fit.slope == pytest.approx(0.0)


def test_regression_large_x_with_small_spread() -> None:
    points = [(x, 2 * x + 3) for x in (1e8, 1e8 + 1, 1e8 + 2)]
    fit = regression(points)
    assert fit.slope == pytest.approx(2.0, abs=1e-9)
    assert fit.intercept == pytest.approx(3.0, abs=1e-6)
