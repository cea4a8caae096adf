"""Discovery of dated host log files."""

from __future__ import annotations

import logging
import os
import re
from datetime import date
from pathlib import Path

from mmdvm_monitor.errors import ListingError

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "MMDVM"


def log_file_pattern(prefix: str = DEFAULT_PREFIX) -> re.Pattern[str]:
    """Regex matching ``<prefix>-YYYY-MM-DD.log`` (month/day may be one digit)."""
    return re.compile(
        rf"^{re.escape(prefix)}-(\d{{4}})-(\d\d?)-(\d\d?)\.log$", re.IGNORECASE
    )


def log_file_date(name: str, prefix: str = DEFAULT_PREFIX) -> date | None:
    """Date embedded in a log file name, or None if the name does not qualify."""
    match = log_file_pattern(prefix).match(name)
    if match is None:
        return None
    try:
        return date(*(int(part) for part in match.groups()))
    except ValueError:
        return None


def select_log_files(names: list[str], prefix: str = DEFAULT_PREFIX) -> list[str]:
    """Filter names to dated log files and order them oldest first.

    Ordering uses the parsed date, not the raw name, so ``P-2024-1-9.log``
    sorts before ``P-2024-01-10.log``.
    """
    dated = []
    for name in names:
        file_date = log_file_date(name, prefix)
        if file_date is not None:
            dated.append((file_date, name))
    dated.sort()
    return [name for _, name in dated]


def list_log_files(directory: str | Path, prefix: str = DEFAULT_PREFIX) -> list[str]:
    """List dated log files in a directory, oldest first.

    Raises:
        ListingError: The directory is missing or unreadable.
    """
    try:
        names = os.listdir(directory)
    except OSError as e:
        raise ListingError(f"Cannot list log directory {directory}: {e}", directory) from e

    files = select_log_files(names, prefix)
    logger.debug(f"Found {len(files)} log files with prefix {prefix!r} in {directory}")
    return files
