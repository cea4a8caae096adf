"""Error taxonomy for the host monitor.

All I/O-class errors are reported through the ``error`` topic of an event bus
rather than raised, so a host application decides which of them are fatal.
The only error raised directly is ConfigurationError, for invalid engine
flags.
"""

from __future__ import annotations

from pathlib import Path


class MonitorError(Exception):
    """Base class for everything the monitor reports.

    Attributes:
        path: File or directory the error relates to, if any.
    """

    def __init__(self, message: str, path: str | Path | None = None):
        super().__init__(message)
        self.path = str(path) if path is not None else None


class ListingError(MonitorError):
    """The log directory could not be listed."""


class ReadError(MonitorError):
    """A log file could not be opened or read during replay."""


class TailError(MonitorError):
    """Reading appended data from the tailed log file failed."""


class ConfigError(MonitorError):
    """The watched host configuration could not be loaded, changed or saved."""


class ConfigurationError(MonitorError, ValueError):
    """Invalid combination of monitor options."""
