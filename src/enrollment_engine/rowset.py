"""Immutable row set shared by every aggregation.

`RowSet` wraps the normalized DataFrame produced at load time. Aggregations
accept a RowSet, a raw DataFrame keyed by source headers, or any iterable of
row mappings; `as_frame` turns all three into the canonical frame.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Union

import pandas as pd

from enrollment_engine.clean.transform import CANONICAL_COLUMNS, frame_from_records, normalize_frame
from enrollment_engine.errors import NoDataError, ValidationError


@dataclass(frozen=True, eq=False)
class RowSet:
    """Normalized rows plus the field-level issues found while loading.

    Instances compare by identity; two loads of the same file are distinct
    row sets.

    Attributes:
        frame: Canonical DataFrame (see `clean.transform.CANONICAL_COLUMNS`).
        issues: Fields that failed numeric coercion and were treated as absent.
        source: Where the rows came from, for logging.
    """
    frame: pd.DataFrame
    issues: tuple[ValidationError, ...] = field(default_factory=tuple)
    source: str | None = None

    def __post_init__(self) -> None:
        # callers get a private copy; the frame is never handed out for mutation
        object.__setattr__(self, "frame", self.frame.copy())

    def __len__(self) -> int:
        return len(self.frame)

    @property
    def states(self) -> list[str]:
        """Distinct state codes in first-seen order, for a state selector."""
        return list(self.frame["state"].dropna().drop_duplicates())

    @property
    def schools(self) -> list[str]:
        return list(self.frame["school"].dropna())


Rows = Union[RowSet, pd.DataFrame, Iterable[Mapping[str, Any]]]


def as_frame(rows: Rows) -> pd.DataFrame:
    """Return a canonical DataFrame for `rows` without modifying the input.

    Raises:
        NoDataError: if there are no rows at all.
    """
    if isinstance(rows, RowSet):
        pdf = rows.frame
    elif isinstance(rows, pd.DataFrame):
        pdf = rows if list(rows.columns) == CANONICAL_COLUMNS else normalize_frame(rows)
    else:
        pdf = normalize_frame(frame_from_records(rows))

    if pdf.empty:
        raise NoDataError("row set is empty")
    return pdf
