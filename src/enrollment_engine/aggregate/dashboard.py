"""Dashboard refresh: every view for one selection.

`refresh` is the single recomputation a renderer runs after the user changes
the quarter, state filter or cutoff. `DashboardSession` pairs a loaded RowSet
with a bounded cache of refresh results keyed by the selection.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Mapping

from enrollment_engine.aggregate.filters import check_cutoff, normalize_selection
from enrollment_engine.aggregate.regression import regression
from enrollment_engine.aggregate.views import (
    dependent_independent_totals,
    growth_metrics,
    histogram_bins,
    scatter_data,
    state_dependent_independent,
    state_totals,
    state_totals_domain,
    top_n,
)
from enrollment_engine.config import get_settings
from enrollment_engine.errors import InsufficientDataError, NoDataError, RegressionUndefinedError
from enrollment_engine.ingest.load_rows import load_rows
from enrollment_engine.models import ALL_QUARTERS, DashboardViews, SelectionContext
from enrollment_engine.rowset import Rows, RowSet, as_frame

log = logging.getLogger(__name__)


def refresh(
    rows: Rows,
    selection: SelectionContext | Mapping[str, Any] | None = None,
    *,
    top: int = 10,
    bin_count: int = 20,
) -> DashboardViews:
    """Compute every dashboard view for `selection`.

    The histogram, rankings and state views use the quarter only; the scatter
    and regression also honour the state filter and cutoff. A regression that
    cannot be fitted is reported as None with a notice instead of raising.

    Raises:
        InvalidFilterError: if the selection is malformed.
        NoDataError: if the row set is empty.
    """
    ctx = normalize_selection(selection)
    pdf = as_frame(rows)
    q = ctx.quarter
    notices: list[str] = []

    totals = state_totals(pdf, q)
    bins = histogram_bins(pdf, q, bin_count)
    ranking = top_n(pdf, q, top)
    splits = state_dependent_independent(pdf, q, top)
    trend = dependent_independent_totals(pdf, ALL_QUARTERS)
    points = scatter_data(pdf, q, ctx.state_filter, ctx.cutoff)

    try:
        fit = regression(points)
    except (InsufficientDataError, RegressionUndefinedError) as exc:
        fit = None
        notices.append(f"regression: {exc}")

    growth = growth_metrics(pdf)

    if not bins:
        notices.append(f"histogram: no valid totals for {q}")
    if not points:
        notices.append(f"scatter: no points for {q} / {ctx.state_filter}")

    log.debug("Refreshed %s (%d notices)", ctx.cache_key(), len(notices))
    return DashboardViews(
        selection=ctx,
        state_totals=totals,
        state_domain=state_totals_domain(totals),
        histogram=bins,
        top_schools=ranking,
        state_splits=splits,
        quarter_trend=trend,
        scatter=points,
        regression=fit,
        growth=growth,
        notices=notices,
    )


class DashboardSession:
    """A loaded RowSet plus memoized refresh results.

    The selection itself is not stored: each `refresh` call passes it in, and
    `cutoff` only fills in a selection that does not name one. Results are
    cached by `(quarter, state_filter, cutoff)` and copied on the way out so
    callers cannot alter them.
    """

    def __init__(
        self,
        rows: RowSet,
        *,
        top: int = 10,
        bin_count: int = 20,
        cutoff: float = 0.0,
        cache_size: int = 32,
    ) -> None:
        if len(rows) == 0:
            raise NoDataError("cannot start a dashboard session without rows")
        self.rows = rows
        self.top = top
        self.bin_count = bin_count
        self.cutoff = check_cutoff(cutoff)
        self._cached = lru_cache(maxsize=cache_size)(self._compute)

    @classmethod
    def from_settings(cls, source: str | None = None) -> "DashboardSession":
        """Load rows and build a session using `Settings` defaults.

        Raises:
            LoadError: if the source cannot be loaded.
        """
        s = get_settings()
        return cls(
            load_rows(source),
            top=s.top_n,
            bin_count=s.bin_count,
            cutoff=s.cutoff,
            cache_size=s.cache_size,
        )

    def _compute(self, quarter: str, state_filter: str, cutoff: float) -> DashboardViews:
        ctx = SelectionContext(quarter=quarter, state_filter=state_filter, cutoff=cutoff)
        return refresh(self.rows, ctx, top=self.top, bin_count=self.bin_count)

    def refresh(
        self,
        selection: SelectionContext | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> DashboardViews:
        """Return every view for the selection, computing it at most once.

        A selection without a cutoff uses the session default.
        """
        if isinstance(selection, SelectionContext):
            ctx = normalize_selection(selection, **overrides)
        else:
            ctx = normalize_selection({"cutoff": self.cutoff, **dict(selection or {})}, **overrides)
        return self._cached(*ctx.cache_key()).model_copy(deep=True)

    def cache_info(self) -> Any:
        return self._cached.cache_info()

    def clear_cache(self) -> None:
        self._cached.cache_clear()
