"""Log ingestion for MMDVMHost log directories.

This package finds the host's dated log files, follows the newest one across
rotations and classifies every line into a typed LogEvent.

Key Components:
    - patterns: The fixed line pattern table and typed field descriptors
    - classifier: Line -> LogEvent / ClassificationMiss
    - file_selector: Dated log file discovery, oldest first
    - log_reader: Incremental byte-offset reading of one file
    - engine: Replay, tailing and rotation polling

Example:
    >>> from mmdvm_monitor.events import EventBus
    >>> from mmdvm_monitor.monitoring import LogIngestionEngine
    >>> bus = EventBus()
    >>> engine = LogIngestionEngine("/var/log/mmdvm", bus, prefix="MMDVM")
    >>> engine.initialize(replay_current=True, tail_current=True, tail_future=True)
"""

from __future__ import annotations

from .classifier import LineClassifier
from .engine import LogIngestionEngine
from .file_selector import list_log_files, select_log_files
from .log_reader import IncrementalLogReader, LogPosition
from .patterns import PATTERNS, FieldSpec, FieldType, LinePattern

__all__ = [
    "LineClassifier",
    "LogIngestionEngine",
    "list_log_files",
    "select_log_files",
    "IncrementalLogReader",
    "LogPosition",
    "PATTERNS",
    "FieldSpec",
    "FieldType",
    "LinePattern",
]
