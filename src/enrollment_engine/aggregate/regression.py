"""Ordinary least squares fit for the scatter trend line."""
from __future__ import annotations

import math
from typing import Iterable, Sequence, Union

import numpy as np

from enrollment_engine.errors import InsufficientDataError, RegressionUndefinedError
from enrollment_engine.models import RegressionResult, ScatterPoint

Point = Union[ScatterPoint, Sequence[float]]


def _xy(points: Iterable[Point]) -> tuple[np.ndarray, np.ndarray]:
    pairs = [(p.x, p.y) if isinstance(p, ScatterPoint) else (p[0], p[1]) for p in points]
    if not pairs:
        return np.empty(0), np.empty(0)
    arr = np.asarray(pairs, dtype="float64")
    return arr[:, 0], arr[:, 1]


def regression(points: Iterable[Point]) -> RegressionResult:
    """Fit y = slope * x + intercept by least squares.

    slope     = (n*Sxy - Sx*Sy) / (n*Sxx - Sx^2)
    intercept = (Sy - slope*Sx) / n

    The slope is evaluated in the equivalent mean-centred form
    sum((x - mx)(y - my)) / sum((x - mx)^2), which does not lose precision
    when x values are large and close together.

    Args:
        points: ScatterPoint models or (x, y) pairs.

    Returns:
        RegressionResult with the fit and the line endpoints at the smallest
        and largest x.

    Raises:
        InsufficientDataError: fewer than two points, or a non-finite
            coordinate.
        RegressionUndefinedError: all x values are equal.
    """
    x, y = _xy(points)
    n = x.size
    if n < 2:
        raise InsufficientDataError(f"regression needs at least 2 points, got {n}")
    if not (np.isfinite(x).all() and np.isfinite(y).all()):
        raise InsufficientDataError("regression points must be finite")

    x_min, x_max = float(x.min()), float(x.max())
    if x_min == x_max:
        raise RegressionUndefinedError(f"all {n} points share x={x_min}")

    dx = x - x.mean()
    dy = y - y.mean()
    sxx = (dx * dx).sum()
    if sxx == 0:
        raise RegressionUndefinedError("x values have no spread")

    slope = float((dx * dy).sum() / sxx)
    intercept = float((y.sum() - slope * x.sum()) / n)
    if not (math.isfinite(slope) and math.isfinite(intercept)):
        raise RegressionUndefinedError("fit overflowed")

    return RegressionResult(
        slope=slope,
        intercept=intercept,
        n=n,
        start=(x_min, slope * x_min + intercept),
        end=(x_max, slope * x_max + intercept),
    )
