"""Aggregation functions for each dashboard view.

Every function here is pure: it takes the rows and explicit filter parameters,
never mutates its input, and returns the same result for the same arguments.

Missing-value policy:
- per-row views (ranking, scatter, histogram, growth) exclude rows whose
  needed field is absent
- summed views (state totals, dependent/independent sums) count absent as 0

Expectations:
- Input: anything `rowset.as_frame` accepts
- Outputs: lists/dicts of the pydantic models in `enrollment_engine.models`
"""
from __future__ import annotations

import logging
from typing import Any

import numpy as np
import pandas as pd

from enrollment_engine.aggregate.filters import check_count, check_cutoff, check_quarter, check_state_filter
from enrollment_engine.clean.transform import SCHOOL, STATE, metric_column
from enrollment_engine.models import (
    ALL_QUARTERS,
    ALL_STATES,
    QUARTERS,
    GrowthMetric,
    HistogramBin,
    QuarterSplit,
    RankedSchool,
    ScatterPoint,
    StateSplit,
)
from enrollment_engine.rowset import Rows, as_frame

log = logging.getLogger(__name__)


def _stable_desc(values: Any) -> np.ndarray:
    """Positions that sort `values` descending, ties kept in input order."""
    return np.argsort(-np.asarray(values, dtype="float64"), kind="stable")


def _none_if_nan(value: Any) -> Any:
    return None if value is None or pd.isna(value) else value


# =========================================================
# RANKINGS
# =========================================================

def top_n(rows: Rows, quarter: str, n: int = 10) -> list[RankedSchool]:
    """Return the `n` schools with the largest quarterly total.

    Args:
        rows: Row set.
        quarter: "Q1".."Q5".
        n: Maximum number of entries (default 10).

    Returns:
        Up to `n` RankedSchool entries, descending by value. Ties keep the
        original row order. Rows without a valid total are skipped.
    """
    quarter = check_quarter(quarter)
    n = check_count("n", n)
    pdf = as_frame(rows)

    col = metric_column("total", quarter)
    valid = pdf.loc[pdf[col].notna() & pdf[SCHOOL].notna(), [SCHOOL, col]]
    picked = valid.iloc[_stable_desc(valid[col])[:n]]

    return [RankedSchool(school=s, value=float(v)) for s, v in zip(picked[SCHOOL], picked[col])]


# =========================================================
# STATE TOTALS (CHOROPLETH)
# =========================================================

def state_totals(rows: Rows, quarter: str) -> dict[str, float]:
    """Sum the quarterly total per state, counting absent values as 0.

    States with no rows do not appear in the mapping; rows without a state
    are not counted.
    """
    quarter = check_quarter(quarter)
    pdf = as_frame(rows)

    col = metric_column("total", quarter)
    sums = pdf.groupby(STATE, sort=True)[col].sum(min_count=0)
    return {str(state): float(total) for state, total in sums.items()}


def state_totals_domain(totals: dict[str, float]) -> tuple[float, float]:
    """Colour-scale domain `(0, max)` for a state-total choropleth."""
    return (0.0, max(totals.values(), default=0.0))


# =========================================================
# DEPENDENT / INDEPENDENT SPLITS
# =========================================================

def dependent_independent_totals(rows: Rows, quarter: str = ALL_QUARTERS) -> list[QuarterSplit]:
    """Global dependent and independent sums per quarter.

    Args:
        rows: Row set.
        quarter: A single quarter, or "ALL" for the Q1..Q5 trend series.

    Returns:
        One QuarterSplit per requested quarter, in quarter order.
    """
    quarter = check_quarter(quarter, allow_all=True)
    pdf = as_frame(rows)

    quarters = QUARTERS if quarter == ALL_QUARTERS else (quarter,)
    return [
        QuarterSplit(
            quarter=q,
            dependent=float(pdf[metric_column("dependent", q)].sum()),
            independent=float(pdf[metric_column("independent", q)].sum()),
        )
        for q in quarters
    ]


def state_dependent_independent(rows: Rows, quarter: str, n: int = 10) -> list[StateSplit]:
    """Per-state dependent/independent sums for the top `n` states.

    States are ranked by dependent + independent, descending; ties keep the
    order in which states first appear in the rows.
    """
    quarter = check_quarter(quarter)
    n = check_count("n", n)
    pdf = as_frame(rows)

    dep = metric_column("dependent", quarter)
    ind = metric_column("independent", quarter)
    grouped = pdf.groupby(STATE, sort=False)[[dep, ind]].sum(min_count=0).reset_index()
    grouped["total"] = grouped[dep] + grouped[ind]
    picked = grouped.iloc[_stable_desc(grouped["total"])[:n]]

    return [
        StateSplit(state=str(r[STATE]), dependent=float(r[dep]), independent=float(r[ind]), total=float(r["total"]))
        for r in picked.to_dict("records")
    ]


# =========================================================
# SCATTER
# =========================================================

def scatter_data(rows: Rows, quarter: str, state_filter: str = ALL_STATES, cutoff: float = 0.0) -> list[ScatterPoint]:
    """Dependent (x) vs independent (y) points for one quarter.

    Rows need both values to appear. The cutoff never removes a point: a
    point is `active` when its quarterly total is at least `cutoff`, and rows
    with no total are inactive.

    Args:
        rows: Row set.
        quarter: "Q1".."Q5".
        state_filter: "ALL" or a two-letter state code.
        cutoff: Minimum quarterly total for an active point.
    """
    quarter = check_quarter(quarter)
    state_filter = check_state_filter(state_filter)
    cutoff = check_cutoff(cutoff)
    pdf = as_frame(rows)

    dep = metric_column("dependent", quarter)
    ind = metric_column("independent", quarter)
    tot = metric_column("total", quarter)

    mask = pdf[dep].notna() & pdf[ind].notna() & pdf[SCHOOL].notna()
    if state_filter != ALL_STATES:
        mask &= pdf[STATE] == state_filter
    sel = pdf.loc[mask, [SCHOOL, STATE, dep, ind, tot]]
    active = (sel[tot] >= cutoff).to_numpy()

    points = [
        ScatterPoint(
            x=float(r[dep]),
            y=float(r[ind]),
            school=r[SCHOOL],
            state=_none_if_nan(r[STATE]),
            total=_none_if_nan(r[tot]),
            active=bool(a),
        )
        for r, a in zip(sel.to_dict("records"), active)
    ]
    log.debug("scatter %s/%s cutoff=%s: %d points", quarter, state_filter, cutoff, len(points))
    return points


# =========================================================
# HISTOGRAM
# =========================================================

def histogram_bins(rows: Rows, quarter: str, bin_count: int = 20) -> list[HistogramBin]:
    """Bin valid quarterly totals into `bin_count` equal-width intervals.

    Bins cover [min(0, smallest value), largest value]; every bin is
    half-open except the last, which includes the largest value, so the counts
    always add up to the number of valid values. When every value sits on the
    lower bound a single zero-width bin is returned.

    Returns:
        Ordered list of HistogramBin, or an empty list if no value is valid.
    """
    quarter = check_quarter(quarter)
    bin_count = check_count("bin_count", bin_count)
    pdf = as_frame(rows)

    values = pdf[metric_column("total", quarter)].dropna().to_numpy(dtype="float64")
    if values.size == 0:
        return []

    lo = min(0.0, float(values.min()))
    hi = float(values.max())
    if hi == lo:
        return [HistogramBin(range_start=lo, range_end=hi, count=int(values.size))]

    counts, edges = np.histogram(values, bins=bin_count, range=(lo, hi))
    return [
        HistogramBin(range_start=float(edges[i]), range_end=float(edges[i + 1]), count=int(c))
        for i, c in enumerate(counts)
    ]


# =========================================================
# GROWTH
# =========================================================

def growth_metrics(rows: Rows) -> list[GrowthMetric]:
    """Q1 to Q5 growth per school.

    Growth = Q5 - Q1. GrowthRate = Growth / Q1 when Q1 > 0, otherwise 0.
    Rows missing either total are skipped.
    """
    pdf = as_frame(rows)

    q1 = metric_column("total", "Q1")
    q5 = metric_column("total", "Q5")
    sel = pdf.loc[pdf[q1].notna() & pdf[q5].notna() & pdf[SCHOOL].notna(), [SCHOOL, STATE, q1, q5]]

    out: list[GrowthMetric] = []
    for r in sel.to_dict("records"):
        first, last = float(r[q1]), float(r[q5])
        growth = last - first
        out.append(
            GrowthMetric(
                school=r[SCHOOL],
                state=_none_if_nan(r[STATE]),
                q1=first,
                q5=last,
                growth=growth,
                growth_rate=growth / first if first > 0 else 0.0,
            )
        )
    return out
