"""Validation utilities for normalized rows.

A field that holds text but fails numeric coercion is reported as a
`ValidationError` issue. Issues never abort a load; the field is absent.
"""
from __future__ import annotations

import logging

import pandas as pd

from enrollment_engine.clean.transform import METRIC_COLUMNS, SCHOOL, SOURCE_COLUMNS
from enrollment_engine.errors import ValidationError

log = logging.getLogger(__name__)

_CANONICAL_TO_SOURCE = {v: k for k, v in SOURCE_COLUMNS.items()}


def find_coercion_issues(raw: pd.DataFrame, normalized: pd.DataFrame) -> list[ValidationError]:
    """Compare raw and normalized frames and report fields lost in coercion.

    A cell counts as an issue when the raw value is non-blank but the
    normalized value is NaN. Blank cells are simply missing, not invalid.

    Args:
        raw: The source-header DataFrame before normalization.
        normalized: The output of `normalize_frame(raw)`.

    Returns:
        A list of `ValidationError` instances in row order.
    """
    issues: list[ValidationError] = []
    raw = raw.reset_index(drop=True)
    by_canonical = {SOURCE_COLUMNS.get(str(c).strip(), str(c).strip()): c for c in raw.columns}

    for col in METRIC_COLUMNS:
        src = by_canonical.get(col)
        if src is None:
            continue
        values = raw[src]
        blank = values.isna() | (values.astype("string").str.strip() == "")
        bad = ~blank.fillna(True) & normalized[col].isna()
        for idx in bad[bad].index:
            issues.append(
                ValidationError(
                    normalized.at[idx, SCHOOL],
                    _CANONICAL_TO_SOURCE.get(col, col),
                    values.at[idx],
                )
            )

    if issues:
        log.warning("%d numeric fields could not be parsed and were treated as absent", len(issues))
        for issue in issues:
            log.debug("%s", issue)
    return issues
