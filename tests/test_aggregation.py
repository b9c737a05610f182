from __future__ import annotations

from itertools import permutations

import pandas as pd
import pytest

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
from enrollment_engine.errors import InvalidFilterError, NoDataError


def _row(school: str, state: str, **quarters: tuple[object, object, object]) -> dict[str, object]:
    """Build a source-header row; each quarter is (total, dependent, independent)."""
    row: dict[str, object] = {"School": school, "State": state}
    for q, (total, dep, ind) in quarters.items():
        row[f"Quarterly Total_{q}"] = total
        row[f"Dependent Students_{q}"] = dep
        row[f"Independent Students_{q}"] = ind
    return row


ROWS = [
    _row("Alpha U", "CA", Q1=("1,000", "600", "400"), Q5=("1,500", "900", "600")),
    _row("Beta College", "CA", Q1=("500", "300", "200"), Q5=("400", "250", "150")),
    _row("Gamma Tech", "NY", Q1=("750", "", "300"), Q5=("", "100", "100")),
    _row("Delta State", "TX", Q1=("n/a", "50", "20"), Q5=("0", "0", "0")),
    _row("Epsilon", "NY", Q1=("0", "10", "5"), Q5=("100", "60", "40")),
]


def test_top_n_parses_thousands_separators() -> None:
    rows = [
        {"School": "A", "State": "CA", "Quarterly Total_Q1": "1,000"},
        {"School": "B", "State": "CA", "Quarterly Total_Q1": "500"},
    ]
    assert [r.as_pair() for r in top_n(rows, "Q1", 10)] == [("A", 1000.0), ("B", 500.0)]


def test_top_n_limits_sorts_and_skips_invalid() -> None:
    out = top_n(ROWS, "Q1", 3)
    assert [r.school for r in out] == ["Alpha U", "Gamma Tech", "Beta College"]
    values = [r.value for r in top_n(ROWS, "Q1", 10)]
    assert len(values) == 4  # Delta State has no valid Q1 total
    assert values == sorted(values, reverse=True)


def test_top_n_ties_keep_row_order() -> None:
    rows = [_row(s, "CA", Q2=("10", "", "")) for s in ("first", "second", "third")]
    assert [r.school for r in top_n(rows, "Q2", 2)] == ["first", "second"]


def test_top_n_selection_is_invariant_under_row_order() -> None:
    base = ROWS[:4]
    expected = {r.school for r in top_n(base, "Q1", 2)}
    for perm in permutations(base):
        assert {r.school for r in top_n(list(perm), "Q1", 2)} == expected


def test_top_n_rejects_bad_quarter_and_size() -> None:
    with pytest.raises(InvalidFilterError):
        top_n(ROWS, "Q6")
    with pytest.raises(InvalidFilterError):
        top_n(ROWS, "Q1", 0)


def test_empty_row_set_is_no_data() -> None:
    with pytest.raises(NoDataError):
        top_n([], "Q1")
    with pytest.raises(NoDataError):
        state_totals(pd.DataFrame(), "Q1")


def test_state_totals_zero_fill_missing_values() -> None:
    totals = state_totals(ROWS, "Q1")
    assert totals == {"CA": 1500.0, "NY": 750.0, "TX": 0.0}
    assert "WA" not in totals
    assert state_totals_domain(totals) == (0.0, 1500.0)


def test_state_totals_match_per_state_reduce() -> None:
    pdf = pd.DataFrame(ROWS)
    totals = state_totals(pdf, "Q5")
    for state, total in totals.items():
        cells = pdf.loc[pdf["State"] == state, "Quarterly Total_Q5"]
        expected = sum(float(c.replace(",", "")) for c in cells if c not in ("", "n/a"))
        assert total == pytest.approx(expected)


def test_state_totals_does_not_mutate_input() -> None:
    pdf = pd.DataFrame(ROWS)
    before = pdf.copy()
    state_totals(pdf, "Q1")
    scatter_data(pdf, "Q1", "ALL", 100)
    pd.testing.assert_frame_equal(pdf, before)


def test_dependent_independent_totals_per_quarter_and_all() -> None:
    single = dependent_independent_totals(ROWS, "Q1")
    assert len(single) == 1
    assert single[0].dependent == 960.0
    assert single[0].independent == 925.0

    series = dependent_independent_totals(ROWS, "ALL")
    assert [s.quarter for s in series] == ["Q1", "Q2", "Q3", "Q4", "Q5"]
    assert series[1].dependent == 0.0  # no Q2 columns at all


def test_state_dependent_independent_ranks_by_combined_total() -> None:
    out = state_dependent_independent(ROWS, "Q1", 2)
    assert [s.state for s in out] == ["CA", "NY"]
    assert out[0].dependent == 900.0
    assert out[0].independent == 600.0
    assert out[0].total == 1500.0


def test_scatter_cutoff_flags_but_keeps_points() -> None:
    rows = [
        _row("Low", "CA", Q3=("400", "250", "150")),
        _row("High", "CA", Q3=("600", "350", "250")),
    ]
    points = scatter_data(rows, "Q3", "ALL", 500)
    assert [(p.school, p.active) for p in points] == [("Low", False), ("High", True)]
    assert (points[1].x, points[1].y) == (350.0, 250.0)


def test_scatter_filters_state_and_requires_both_axes() -> None:
    points = scatter_data(ROWS, "Q1", "ny", 0)
    # Gamma Tech lacks a dependent count
    assert [p.school for p in points] == ["Epsilon"]
    assert scatter_data(ROWS, "Q1", "WA", 0) == []


def test_scatter_missing_total_is_inactive() -> None:
    points = scatter_data(ROWS, "Q1", "TX", 0)
    assert len(points) == 1
    assert points[0].total is None
    assert points[0].active is False


def test_scatter_rejects_malformed_filters() -> None:
    with pytest.raises(InvalidFilterError):
        scatter_data(ROWS, "Q1", "California", 0)
    with pytest.raises(InvalidFilterError):
        scatter_data(ROWS, "Q1", "ALL", float("nan"))


def test_histogram_counts_cover_every_valid_value() -> None:
    rows = [_row(str(i), "CA", Q1=(v, "", "")) for i, v in enumerate(["0", "5", "10", "10", "20", "bad"])]
    bins = histogram_bins(rows, "Q1", 4)
    assert [(b.range_start, b.range_end, b.count) for b in bins] == [
        (0.0, 5.0, 1),
        (5.0, 10.0, 1),
        (10.0, 15.0, 2),
        (15.0, 20.0, 1),
    ]
    assert sum(b.count for b in histogram_bins(ROWS, "Q1")) == 4


def test_histogram_degenerate_and_empty() -> None:
    zeros = [_row(str(i), "CA", Q4=("0", "", "")) for i in range(3)]
    assert [(b.range_start, b.range_end, b.count) for b in histogram_bins(zeros, "Q4")] == [(0.0, 0.0, 3)]
    assert histogram_bins(ROWS, "Q2") == []


def test_growth_metrics_guard_zero_base() -> None:
    by_school = {g.school: g for g in growth_metrics(ROWS)}
    assert set(by_school) == {"Alpha U", "Beta College", "Epsilon"}
    assert by_school["Alpha U"].growth == 500.0
    assert by_school["Alpha U"].growth_rate == pytest.approx(0.5)
    assert by_school["Beta College"].growth_rate == pytest.approx(-0.2)
    assert by_school["Epsilon"].growth == 100.0
    assert by_school["Epsilon"].growth_rate == 0.0
