"""Cleaning and normalization utilities.

The output of `normalize_frame` is a pandas DataFrame with a stable schema:
`school`, `state`, and for each quarter `total_qN`, `dependent_qN`,
`independent_qN` as float64 (NaN where the source cell is missing or invalid).
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

import pandas as pd

from enrollment_engine.models import QUARTERS

log = logging.getLogger(__name__)

SCHOOL = "school"
STATE = "state"

# source header prefix -> canonical column prefix
METRIC_PREFIXES = {
    "Quarterly Total": "total",
    "Dependent Students": "dependent",
    "Independent Students": "independent",
}

SOURCE_COLUMNS: dict[str, str] = {"School": SCHOOL, "State": STATE}
for _src, _dst in METRIC_PREFIXES.items():
    for _q in QUARTERS:
        SOURCE_COLUMNS[f"{_src}_{_q}"] = f"{_dst}_{_q.lower()}"

REQUIRED_SOURCE_COLUMNS = ("School", "State")
METRIC_COLUMNS = [c for c in SOURCE_COLUMNS.values() if c not in (SCHOOL, STATE)]
CANONICAL_COLUMNS = [SCHOOL, STATE, *METRIC_COLUMNS]


def metric_column(metric: str, quarter: str) -> str:
    """Return the canonical column for `metric` ("total", "dependent",
    "independent") in `quarter`."""
    return f"{metric}_{quarter.lower()}"


def _text(value: Any) -> str | None:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    return str(value).strip() or None


def _number_text(value: Any) -> str | None:
    text = _text(value)
    return None if text is None else text.replace(",", "")


def to_number(series: pd.Series) -> pd.Series:
    """Coerce a column of numbers or comma-grouped strings to float64.

    Blank, non-numeric and infinite cells become NaN (absent), never 0.
    """
    if pd.api.types.is_numeric_dtype(series) and not pd.api.types.is_bool_dtype(series):
        out = series.astype("float64")
    else:
        text = series.astype(object).map(_number_text)
        out = pd.to_numeric(text, errors="coerce").astype("float64")
    return out.where(out.abs() != float("inf"))


def normalize_frame(raw: pd.DataFrame) -> pd.DataFrame:
    """Map a source-header DataFrame onto the canonical schema.

    Columns that are already canonical are accepted as-is, so a normalized
    frame passes through unchanged. Unknown columns are dropped; missing
    metric columns are added as all-NaN.

    Args:
        raw: DataFrame keyed by source headers (e.g. `Quarterly Total_Q1`).

    Returns:
        A new DataFrame with `CANONICAL_COLUMNS`; `raw` is not modified.
    """
    log.debug("Normalizing %d rows", len(raw))
    pdf = raw.rename(columns=lambda c: SOURCE_COLUMNS.get(str(c).strip(), str(c).strip()))
    pdf = pdf.loc[:, ~pdf.columns.duplicated()]

    out = pd.DataFrame(index=pd.RangeIndex(len(pdf)))
    # object columns holding real None, whatever string dtype pandas infers
    for col in (SCHOOL, STATE):
        if col in pdf.columns:
            values = [_text(v) for v in pdf[col].tolist()]
        else:
            values = [None] * len(pdf)
        if col == STATE:
            values = [v.upper() if v is not None else None for v in values]
        out[col] = pd.Series(values, index=out.index, dtype=object)

    for col in METRIC_COLUMNS:
        if col in pdf.columns:
            out[col] = to_number(pdf[col].reset_index(drop=True))
        else:
            out[col] = float("nan")

    return out[CANONICAL_COLUMNS]


def frame_from_records(records: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """Build a source-header DataFrame from an iterable of row mappings."""
    return pd.DataFrame.from_records(list(records))
