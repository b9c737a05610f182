"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads the engine defaults (data source, ranking size, histogram bins, scatter
cutoff, HTTP timeout, cache size, log level) from the environment.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
import os
from pathlib import Path

from dotenv import load_dotenv

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """Container for engine configuration read from the environment.

    Attributes:
        data_source: Default path or http(s) URL of the enrollment CSV.
        top_n: Default size of ranking views.
        bin_count: Default number of histogram bins.
        cutoff: Default minimum total for an "active" scatter point.
        http_timeout: Timeout in seconds for URL loads.
        cache_size: Memoized refresh results kept per dashboard session.
        log_level: Level name passed to `configure_logging`.
    """
    data_source: str
    top_n: int
    bin_count: int
    cutoff: float
    http_timeout: int
    cache_size: int
    log_level: str


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default)).strip()
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}.") from None
    if value <= 0:
        raise RuntimeError(f"{name} must be positive, got {value}.")
    return value


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if a numeric variable is malformed or out of range, or
            if `ENROLLMENT_LOG_LEVEL` is not a known level name.
    """
    data_source = os.getenv("ENROLLMENT_DATA_SOURCE", "data/cleaned.csv").strip()

    raw_cutoff = os.getenv("ENROLLMENT_CUTOFF", "0").strip()
    try:
        cutoff = float(raw_cutoff)
    except ValueError:
        raise RuntimeError(f"ENROLLMENT_CUTOFF must be a number, got {raw_cutoff!r}.") from None
    if not math.isfinite(cutoff):
        raise RuntimeError("ENROLLMENT_CUTOFF must be finite.")

    log_level = os.getenv("ENROLLMENT_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in LOG_LEVELS:
        raise RuntimeError(
            f"ENROLLMENT_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}."
        )

    if not data_source:
        raise RuntimeError("ENROLLMENT_DATA_SOURCE must not be empty.")

    return Settings(
        data_source=data_source,
        top_n=_positive_int("ENROLLMENT_TOP_N", 10),
        bin_count=_positive_int("ENROLLMENT_BIN_COUNT", 20),
        cutoff=cutoff,
        http_timeout=_positive_int("ENROLLMENT_HTTP_TIMEOUT", 60),
        cache_size=_positive_int("ENROLLMENT_CACHE_SIZE", 32),
        log_level=log_level,
    )
