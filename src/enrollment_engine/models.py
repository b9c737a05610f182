"""Pydantic models for the selection context and the derived views.

These models define the parameters a renderer passes on every recomputation
and the JSON-serializable payloads each aggregation returns.
"""

from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from enrollment_engine.errors import InvalidFilterError

QUARTERS: tuple[str, ...] = ("Q1", "Q2", "Q3", "Q4", "Q5")
ALL_STATES = "ALL"
ALL_QUARTERS = "ALL"

Quarter = Literal["Q1", "Q2", "Q3", "Q4", "Q5"]


def check_state_filter(state_filter: object) -> str:
    """Return "ALL" or an upper-case two-letter state code.

    Raises:
        InvalidFilterError: for anything else.
    """
    if not isinstance(state_filter, str):
        raise InvalidFilterError(f"state filter must be a string, got {state_filter!r}")
    s = state_filter.strip().upper()
    if s == ALL_STATES or (len(s) == 2 and s.isalpha()):
        return s
    raise InvalidFilterError(f"state filter must be 'ALL' or a two-letter code, got {state_filter!r}")


class SelectionContext(BaseModel):
    """Caller-owned filter state threaded through every aggregation.

    Attributes:
        quarter: Reporting quarter, Q1 through Q5.
        state_filter: "ALL" or a two-letter state code (normalized upper-case).
        cutoff: Minimum quarterly total for an "active" scatter point.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)
    quarter: Quarter = "Q1"
    state_filter: str = ALL_STATES
    cutoff: float = 0.0

    @field_validator("quarter", mode="before")
    @classmethod
    def _upper_quarter(cls, v: object) -> object:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("state_filter", mode="before")
    @classmethod
    def _check_state(cls, v: object) -> str:
        return check_state_filter(v)

    @field_validator("cutoff")
    @classmethod
    def _finite_cutoff(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("cutoff must be finite")
        return v

    def cache_key(self) -> tuple[str, str, float]:
        return (self.quarter, self.state_filter, self.cutoff)


class RankedSchool(BaseModel):
    """One entry of a top-N ranking."""
    model_config = ConfigDict(extra="forbid")
    school: str
    value: float

    def as_pair(self) -> tuple[str, float]:
        return (self.school, self.value)


class QuarterSplit(BaseModel):
    """Global dependent/independent sums for one quarter."""
    model_config = ConfigDict(extra="forbid")
    quarter: Quarter
    dependent: float
    independent: float


class StateSplit(BaseModel):
    """Dependent/independent sums for one state, ranked by `total`."""
    model_config = ConfigDict(extra="forbid")
    state: str
    dependent: float
    independent: float
    total: float


class ScatterPoint(BaseModel):
    """A scatter point; inactive points are rendered dimmed, never dropped.

    Attributes:
        x: Dependent students in the selected quarter.
        y: Independent students in the selected quarter.
        school: Display/tooltip key.
        state: Two-letter state code.
        total: Quarterly total, or None when absent.
        active: True when `total` is at least the cutoff.
    """
    model_config = ConfigDict(extra="forbid")
    x: float
    y: float
    school: str
    state: str | None
    total: float | None
    active: bool


class RegressionResult(BaseModel):
    """Least squares fit plus the two endpoints used to draw the line."""
    model_config = ConfigDict(extra="forbid")
    slope: float
    intercept: float
    n: int = Field(..., ge=2)
    start: tuple[float, float]
    end: tuple[float, float]


class HistogramBin(BaseModel):
    """Histogram bin; `range_end` is exclusive except for the last bin."""
    model_config = ConfigDict(extra="forbid")
    range_start: float
    range_end: float
    count: int = Field(..., ge=0)


class GrowthMetric(BaseModel):
    """Q1 to Q5 growth for one school."""
    model_config = ConfigDict(extra="forbid")
    school: str
    state: str | None
    q1: float
    q5: float
    growth: float
    growth_rate: float


class DashboardViews(BaseModel):
    """Every derived view for one selection.

    A view that could not be computed (too few points, degenerate regression)
    is None and the reason is listed in `notices`.
    """
    model_config = ConfigDict(extra="forbid")
    selection: SelectionContext
    state_totals: dict[str, float]
    state_domain: tuple[float, float]
    histogram: list[HistogramBin]
    top_schools: list[RankedSchool]
    state_splits: list[StateSplit]
    quarter_trend: list[QuarterSplit]
    scatter: list[ScatterPoint]
    regression: RegressionResult | None
    growth: list[GrowthMetric]
    notices: list[str] = Field(default_factory=list)

    def for_school(self, school: str) -> dict[str, list]:
        """Return the entries of the per-school views that belong to `school`.

        Used by renderers to highlight one school across every chart.
        """
        return {
            "top_schools": [r for r in self.top_schools if r.school == school],
            "scatter": [p for p in self.scatter if p.school == school],
            "growth": [g for g in self.growth if g.school == school],
        }
