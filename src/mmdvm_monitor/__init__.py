"""Status monitor for MMDVMHost repeater controllers.

Tails the host's rotating log files and its INI configuration, classifies
log lines into typed events and folds them into a queryable status tree.

Example:
    >>> from mmdvm_monitor import HostMonitor, MonitorSettings
    >>> monitor = HostMonitor(MonitorSettings(log_dir="/var/log/mmdvm"))
    >>> monitor.init()
    >>> monitor.status.dmr_net.open
"""

from __future__ import annotations

from .config_watch import ConfigWatch
from .errors import (
    ConfigError,
    ConfigurationError,
    ListingError,
    MonitorError,
    ReadError,
    TailError,
)
from .events import EventBus, EventKind, LogEvent
from .host_monitor import HostMonitor
from .logging_setup import configure_logging
from .monitoring import LineClassifier, LogIngestionEngine, list_log_files
from .settings import MonitorSettings, load_settings
from .state import StatusReducer, StatusTree

__all__ = [
    "HostMonitor",
    "MonitorSettings",
    "load_settings",
    "configure_logging",
    "ConfigWatch",
    "EventBus",
    "EventKind",
    "LogEvent",
    "LineClassifier",
    "LogIngestionEngine",
    "list_log_files",
    "StatusReducer",
    "StatusTree",
    "MonitorError",
    "ListingError",
    "ReadError",
    "TailError",
    "ConfigError",
    "ConfigurationError",
]

__version__ = "0.1.0"
