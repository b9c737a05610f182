"""Aggregation views over the normalized row set.

This package contains the pure functions that turn the immutable RowSet and a
caller-supplied selection (quarter, state filter, cutoff) into the datasets a
dashboard draws: rankings, state totals, dependent/independent splits, scatter
points, regression fit, histogram bins and growth metrics.
"""
