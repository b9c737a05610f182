"""Load the enrollment CSV into an immutable RowSet.

The load is a single step with exactly one success/failure transition: either
every row is parsed into a RowSet or a `LoadError` is raised. There are no
retries and no partial row sets.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

import pandas as pd
import requests

from enrollment_engine.clean.transform import METRIC_COLUMNS, REQUIRED_SOURCE_COLUMNS, SOURCE_COLUMNS, normalize_frame
from enrollment_engine.clean.validate import find_coercion_issues
from enrollment_engine.config import get_settings
from enrollment_engine.errors import LoadError
from enrollment_engine.rowset import RowSet

log = logging.getLogger(__name__)


def _is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def fetch_text(url: str, timeout: int) -> str:
    """Fetch a remote CSV and return its decoded text.

    Raises:
        LoadError: on connection failure or a non-2xx status.
    """
    log.info("Downloading %s", url)
    try:
        r = requests.get(url, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as exc:
        raise LoadError(f"Unable to fetch {url}: {exc}") from exc
    log.info("Fetched %s (%d bytes)", url, len(r.content))
    return r.text


def read_source(source: str | Path, timeout: int = 60) -> pd.DataFrame:
    """Read the source CSV with every cell as text.

    Cells stay strings so that comma-grouped numbers are normalized in one
    place (`clean.transform.to_number`).

    Raises:
        LoadError: if the source cannot be reached or parsed.
    """
    opts = {"dtype": str, "keep_default_na": False, "skipinitialspace": True}
    try:
        if isinstance(source, str) and _is_url(source):
            return pd.read_csv(io.StringIO(fetch_text(source, timeout)), **opts)
        path = Path(source)
        if not path.exists():
            raise LoadError(f"Data source not found: {path}")
        return pd.read_csv(path, encoding="utf-8-sig", **opts)
    except LoadError:
        raise
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise LoadError(f"Unable to parse {source}: {exc}") from exc


def load_rows(source: str | Path | None = None) -> RowSet:
    """Load and normalize the enrollment dataset.

    Args:
        source: Path or http(s) URL of the CSV. Defaults to
            `Settings.data_source`.

    Returns:
        RowSet with the normalized frame and the fields that failed coercion.

    Raises:
        LoadError: if the source is unreachable, unparseable, has no rows, or
            lacks the `School`/`State` headers.
    """
    settings = get_settings()
    source = settings.data_source if source is None else source

    raw = read_source(source, settings.http_timeout)
    raw.columns = [str(c).strip() for c in raw.columns]

    missing = [c for c in REQUIRED_SOURCE_COLUMNS if c not in raw.columns]
    if missing:
        raise LoadError(f"{source} is missing required columns: {', '.join(missing)}")
    if raw.empty:
        raise LoadError(f"{source} contains a header but no rows")

    present = {SOURCE_COLUMNS[c] for c in raw.columns if c in SOURCE_COLUMNS}
    absent = [c for c in METRIC_COLUMNS if c not in present]
    if absent:
        log.warning("%s has no column for %d metrics; treating them as absent", source, len(absent))

    frame = normalize_frame(raw)
    issues = find_coercion_issues(raw, frame)

    log.info("Loaded %d rows from %s (%d invalid fields)", len(frame), source, len(issues))
    return RowSet(frame=frame, issues=tuple(issues), source=str(source))
