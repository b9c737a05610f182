"""Utilities to configure consistent logging for engine callers."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from enrollment_engine.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(log_path: Path | None = None, level: int | str | None = None) -> None:
    """Configure root logging handlers and formatting.

    Calling this again replaces previously installed handlers, so a renderer
    can switch from console-only to console+file logging after startup.

    Args:
        log_path: Optional path to a file where logs will be written.
        level: Logging level as an int or a level name such as "DEBUG".
            Defaults to `Settings.log_level` (`ENROLLMENT_LOG_LEVEL`).
    """
    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level!r}")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)

    # requests' connection pool is chatty at DEBUG
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))
