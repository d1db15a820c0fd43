"""Centralized logging utilities for DupSeeker.

Provides a single place to configure logging and fetch namespaced loggers.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


LOGGER_NAMESPACE = "dupseeker"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"

# Log rotation settings
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_BACKUP_COUNT = 5

LEVEL_NAMES = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def level_from_name(name: Optional[str], default: int = logging.WARNING) -> int:
    """Translate a config level name ("info", "DEBUG", ...) to a logging level."""
    if not name:
        return default
    return LEVEL_NAMES.get(str(name).upper(), default)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> None:
    """Configure logging for the 'dupseeker' namespace.

    Args:
        level: Logging level for the application logger
        log_file: Optional path for log file output
        max_bytes: Maximum size per log file before rotation (default: 10MB)
        backup_count: Number of backup files to keep (default: 5)

    Notes:
        - Root logger kept at WARNING to suppress pysam/third-party noise
        - 'dupseeker' logger uses the requested level
        - Console handler uses concise format; file handler (if any) is detailed at DEBUG
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING)

    app_logger = logging.getLogger(LOGGER_NAMESPACE)
    app_logger.setLevel(level)
    # Avoid duplicate logs if called multiple times
    for h in list(app_logger.handlers):
        app_logger.removeHandler(h)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    app_logger.addHandler(console)

    if log_file:
        try:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
            app_logger.addHandler(file_handler)
        except OSError as e:
            import warnings

            warnings.warn(f"Failed to create log file {log_file}: {e}")

    # Do not propagate to root to avoid double-printing
    app_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a namespaced logger under 'dupseeker' root."""
    base = logging.getLogger(LOGGER_NAMESPACE)
    return base.getChild(name)


class LogTemplates:
    """Standard log message templates shared by the engine, IO adapters and CLI."""

    # Run lifecycle
    RUN_START = "Marking duplicates in {source}"
    RUN_SUCCESS = (
        "Marked {duplicates:,} duplicate units of {examined:,} examined in {duration:.1f}s"
    )

    # Record handling
    RECORDS_LOADED = "Loaded {count:,} alignment records from {path}"
    RECORDS_WRITTEN = "Wrote {count:,} alignment records to {path}"
    KEYING_STATS = (
        "Keyed {pairs:,} pairs and {fragments:,} fragments "
        "({unmapped:,} unmapped, {secondary:,} secondary/supplementary)"
    )
    GROUPING_STATS = "Grouped units into {sets:,} duplicate sets across {windows:,} windows"

    # Data quality
    ORPHANED_MATE = "Mate of {name} not found among mapped primaries; keyed as fragment"
    MALFORMED_NAME = "Could not parse tile/x/y from read name {name}: {error}"
    OPTICAL_SET_TOO_LARGE = (
        "Skipping optical clustering for a set of {size:,} pairs (limit {limit:,})"
    )

    # Outputs
    METRICS_WRITTEN = "Wrote duplication metrics to {path}"
