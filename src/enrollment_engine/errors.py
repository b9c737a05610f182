"""Error taxonomy shared by the loader and the aggregation views.

Renderers are expected to catch `InsufficientDataError` (and its `NoDataError`
subclass) and `RegressionUndefinedError` and show a placeholder, while
`LoadError` and `InvalidFilterError` indicate malformed input.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for every error raised by enrollment_engine."""


class LoadError(EngineError):
    """The data source could not be fetched or parsed as a whole."""


class ValidationError(EngineError):
    """A single field failed numeric coercion.

    These are recorded on the RowSet rather than raised; the field is treated
    as absent and loading continues.
    """

    def __init__(self, school: str | None, column: str, raw_value: object) -> None:
        self.school = school
        self.column = column
        self.raw_value = raw_value
        super().__init__(f"{school!r}: cannot parse {column}={raw_value!r} as a number")


class InsufficientDataError(EngineError):
    """Fewer data points than an algorithm requires."""


class NoDataError(InsufficientDataError):
    """The row set is empty."""


class RegressionUndefinedError(EngineError):
    """Least squares fit has no unique solution (all x values are equal)."""


class InvalidFilterError(EngineError, ValueError):
    """A selection parameter (quarter, state filter, cutoff, size) is malformed."""
