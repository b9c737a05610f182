"""enrollment_engine package.

Contains modules for loading the static institution enrollment dataset,
normalizing its numeric fields, and deriving the per-chart datasets (rankings,
state totals, dependent/independent splits, scatter points, regression fit,
histogram bins, growth metrics) consumed by a dashboard renderer.

Architecture:
- Load → Clean → Aggregate, all in memory over one immutable RowSet
- pandas/numpy carry the row set and every aggregation
- Pydantic models describe the selection context and derived views
"""

from enrollment_engine.aggregate.dashboard import DashboardSession, refresh
from enrollment_engine.aggregate.regression import regression
from enrollment_engine.aggregate.views import (
    dependent_independent_totals,
    growth_metrics,
    histogram_bins,
    scatter_data,
    state_dependent_independent,
    state_totals,
    top_n,
)
from enrollment_engine.ingest.load_rows import load_rows

__all__ = [
    "__version__",
    "DashboardSession",
    "dependent_independent_totals",
    "growth_metrics",
    "histogram_bins",
    "load_rows",
    "refresh",
    "regression",
    "scatter_data",
    "state_dependent_independent",
    "state_totals",
    "top_n",
]
__version__ = "0.1.0"
