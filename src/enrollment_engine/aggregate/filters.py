"""Selection-context normalization.

Every view takes its filters as explicit parameters; these helpers validate
them and raise `InvalidFilterError` for malformed values.
"""

from __future__ import annotations

import math
import numbers
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from enrollment_engine.errors import InvalidFilterError
from enrollment_engine.models import ALL_QUARTERS, QUARTERS, SelectionContext, check_state_filter


def check_quarter(quarter: Any, *, allow_all: bool = False) -> str:
    """Return the canonical quarter label ("Q1".."Q5", or "ALL" if allowed)."""
    q = quarter.strip().upper() if isinstance(quarter, str) else quarter
    if q in QUARTERS or (allow_all and q == ALL_QUARTERS):
        return q
    raise InvalidFilterError(f"quarter must be one of {', '.join(QUARTERS)}, got {quarter!r}")


def check_cutoff(cutoff: Any) -> float:
    if isinstance(cutoff, bool):
        raise InvalidFilterError("cutoff must be a number")
    try:
        value = float(cutoff)
    except (TypeError, ValueError):
        raise InvalidFilterError(f"cutoff must be a number, got {cutoff!r}") from None
    if not math.isfinite(value):
        raise InvalidFilterError("cutoff must be finite")
    return value


def check_count(name: str, value: Any) -> int:
    """Return `value` as a positive int (for `n` and `bin_count`)."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < 1:
        raise InvalidFilterError(f"{name} must be a positive integer, got {value!r}")
    return int(value)


def normalize_selection(
    raw: SelectionContext | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> SelectionContext:
    """Build a `SelectionContext` from a mapping (e.g. UI query params).

    Args:
        raw: Existing context or a mapping with `quarter`, `state_filter`,
            `cutoff`. Missing keys take the model defaults.
        **overrides: Keys that replace those in `raw`.

    Raises:
        InvalidFilterError: if any value is malformed or an unknown key is given.
    """
    if isinstance(raw, SelectionContext):
        data: dict[str, Any] = raw.model_dump()
    else:
        data = dict(raw or {})
    data.update(overrides)
    try:
        return SelectionContext.model_validate(data)
    except PydanticValidationError as exc:
        raise InvalidFilterError(str(exc)) from exc
