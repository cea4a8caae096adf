"""
LogIngestionEngine - turns a directory of rotating host logs into an event stream.

The engine replays historical files, follows the newest file as it grows and
polls the directory for a newer dated file. Every line it reads is
classified and published on an event sink:

    log_line            every classified line (LogEvent)
    <event kind>        the same LogEvent under its kind, e.g. "host_running"
    unhandled_log_line  raw text of lines no pattern matched
    error               ListingError / ReadError / TailError

All reads happen on one worker thread. The watchdog observer thread only
wakes that worker up; rotation polling and the fallback tail poll are
timeouts of the same queue wait, so events leave the engine strictly in
file order.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
import time
from pathlib import Path
from typing import Any, Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from mmdvm_monitor.errors import ConfigurationError, ListingError, MonitorError, ReadError, TailError
from mmdvm_monitor.events.models import (
    ERROR,
    LOG_LINE,
    UNHANDLED_LOG_LINE,
    Classifier,
    EventSink,
    LogEvent,
)
from mmdvm_monitor.monitoring.classifier import LineClassifier
from mmdvm_monitor.monitoring.file_selector import DEFAULT_PREFIX, list_log_files, log_file_date
from mmdvm_monitor.monitoring.log_reader import IncrementalLogReader

logger = logging.getLogger(__name__)

_WAKE = "wake"
_STOP = "stop"


class _TailEventHandler(FileSystemEventHandler):
    """Wakes the engine when the file it follows changes."""

    def __init__(self, engine: LogIngestionEngine):
        super().__init__()
        self._engine = engine

    def on_modified(self, event: FileSystemEvent) -> None:
        self._maybe_wake(event)

    def on_created(self, event: FileSystemEvent) -> None:
        self._maybe_wake(event)

    def _maybe_wake(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        if os.path.basename(os.fsdecode(event.src_path)) == self._engine.current_file:
            self._engine.notify()


class LogIngestionEngine:
    """
    Follows the dated log files of one host log directory.

    Args:
        log_dir: Directory holding ``<prefix>-YYYY-MM-DD.log`` files
        sink: Receives every notification (normally an EventBus)
        prefix: Log file name prefix
        classifier: Line classifier (default: LineClassifier())
        rotation_interval: Seconds between directory polls for a newer file
        tail_interval: Seconds between fallback reads of the followed file
        background: Start the worker thread and observer. When False the
            caller drives poll_tail() and check_rotation() itself.
        observer_factory: Creates the watchdog observer
    """

    def __init__(
        self,
        log_dir: str | Path,
        sink: EventSink,
        prefix: str = DEFAULT_PREFIX,
        classifier: Classifier | None = None,
        rotation_interval: float = 60.0,
        tail_interval: float = 1.0,
        background: bool = True,
        observer_factory: Callable[[], Any] = Observer,
    ):
        self.log_dir = Path(log_dir)
        self.prefix = prefix
        self.rotation_interval = rotation_interval
        self.tail_interval = tail_interval
        self.background = background
        self._sink = sink
        self._classifier = classifier or LineClassifier()
        self._observer_factory = observer_factory

        self._lock = threading.RLock()
        self._queue: queue.Queue[str] = queue.Queue()
        self._alive = False
        self._follow_rotation = False
        self._tail: IncrementalLogReader | None = None
        self._current_file: str | None = None
        self._worker: threading.Thread | None = None
        self._observer: Any = None

    # ============================================================================
    # Lifecycle
    # ============================================================================

    def initialize(
        self,
        replay_all: bool = False,
        replay_current: bool = False,
        tail_current: bool = False,
        tail_future: bool = False,
    ) -> None:
        """
        Replay history and start following the log directory.

        Replay is synchronous: when this returns, every replayed line has
        been published.

        Args:
            replay_all: Replay every log file, oldest first
            replay_current: Replay only the newest log file
            tail_current: Follow the newest file from its end
            tail_future: Poll for newer files and switch to them

        Raises:
            ConfigurationError: Both replay_all and replay_current were set
            RuntimeError: The engine is already running
        """
        if replay_all and replay_current:
            raise ConfigurationError("replay_all and replay_current are mutually exclusive")
        if self._alive:
            raise RuntimeError("LogIngestionEngine is already running")

        self._queue = queue.Queue()
        self._alive = True

        try:
            files = list_log_files(self.log_dir, self.prefix)
        except ListingError as e:
            self._report(e)
            files = []

        newest = files[-1] if files else None
        newest_reader = None

        if replay_all:
            for name in files:
                if not self._alive:
                    break
                reader = self._replay(name, follow=tail_current and name == newest)
                if name == newest:
                    newest_reader = reader
        elif replay_current and newest is not None:
            newest_reader = self._replay(newest, follow=tail_current)

        with self._lock:
            # A handler or another thread may have stopped the engine during replay
            if not self._alive:
                logger.info(f"Log ingestion for {self.log_dir} stopped during replay")
                return

            if tail_current and newest is not None:
                if newest_reader is None:
                    newest_reader = self._open_at_end(newest)
                if newest_reader is not None:
                    self._attach(newest, newest_reader)

            if tail_future:
                self._current_file = newest
                self._follow_rotation = True

            logger.info(
                f"Log ingestion initialized for {self.log_dir} "
                f"(files: {len(files)}, following: {self._current_file}, rotation polling: {tail_future})"
            )

            if self.background and (self._tail is not None or self._follow_rotation):
                self._start_background()

    def stop(self, timeout: float = 5.0) -> None:
        """
        Stop polling and release the tail. Safe to call repeatedly and from
        any thread, including from inside an event handler.
        """
        self._alive = False

        with self._lock:
            observer, self._observer = self._observer, None
            worker, self._worker = self._worker, None
            self._tail = None
            self._follow_rotation = False

        if observer is not None:
            observer.stop()
            if threading.current_thread() is not observer:
                observer.join(timeout)

        if worker is not None:
            self._queue.put(_STOP)
            if threading.current_thread() is not worker:
                worker.join(timeout)
                if worker.is_alive():
                    logger.warning("Log ingestion worker did not stop within timeout")

    def is_running(self) -> bool:
        return self._alive

    @property
    def current_file(self) -> str | None:
        """Name of the log file currently followed."""
        return self._current_file

    def notify(self) -> None:
        """Ask the worker to read the followed file now."""
        if self._alive:
            self._queue.put(_WAKE)

    # ============================================================================
    # Polling
    # ============================================================================

    def poll_tail(self) -> int:
        """
        Publish complete lines appended to the followed file.

        Returns:
            Number of lines read
        """
        with self._lock:
            if not self._alive or self._tail is None:
                return 0
            try:
                lines = self._tail.read_new_lines()
            except OSError as e:
                self._report(TailError(f"Failed to read {self._tail.path}: {e}", self._tail.path), e)
                return 0
            for line in lines:
                self._handle_line(line)
            return len(lines)

    def check_rotation(self) -> bool:
        """
        Switch to a newer log file if one has appeared.

        The old file is drained and released first, then the new file is
        replayed from its first byte, then followed from where the replay
        stopped. Lines written before the switch are therefore neither lost
        nor repeated.

        Only a file dated after the current one counts; if the current file
        disappears, the older files left behind are not replayed again.

        Returns:
            True if the engine moved to a new file
        """
        with self._lock:
            if not self._alive:
                return False
            try:
                files = list_log_files(self.log_dir, self.prefix)
            except ListingError as e:
                self._report(e)
                return False

            if not files or not self._is_newer(files[-1]):
                return False

            newest = files[-1]
            logger.info(f"New log file detected: {newest} (was {self._current_file})")

            self._release_tail()
            reader = self._replay(newest, follow=True)
            if reader is None:
                # Retried on the next poll
                return False
            self._attach(newest, reader)
            return True

    # ============================================================================
    # Internals
    # ============================================================================

    def _start_background(self) -> None:
        observer = self._observer_factory()
        try:
            observer.schedule(_TailEventHandler(self), str(self.log_dir), recursive=False)
            observer.start()
            self._observer = observer
        except OSError as e:
            logger.warning(f"File watch unavailable for {self.log_dir}, polling only: {e}")

        self._worker = threading.Thread(
            target=self._worker_loop,
            daemon=True,
            name=f"LogIngestion-{self.log_dir.name}",
        )
        self._worker.start()

    def _worker_loop(self) -> None:
        logger.debug("Log ingestion worker started")
        next_rotation = time.monotonic() + self.rotation_interval

        while self._alive:
            timeout = self.tail_interval
            if self._follow_rotation:
                timeout = min(timeout, max(0.0, next_rotation - time.monotonic()))
            try:
                item = self._queue.get(timeout=timeout)
            except queue.Empty:
                item = None
            if item == _STOP or not self._alive:
                break

            try:
                self.poll_tail()
                if self._follow_rotation and time.monotonic() >= next_rotation:
                    self.check_rotation()
                    next_rotation = time.monotonic() + self.rotation_interval
            except Exception as e:
                logger.critical(f"Unexpected error in log ingestion worker: {e}")

        logger.debug("Log ingestion worker exited")

    def _is_newer(self, name: str) -> bool:
        if self._current_file is None:
            return True
        current_date = log_file_date(self._current_file, self.prefix)
        return (log_file_date(name, self.prefix), name) > (current_date, self._current_file)

    def _replay(self, name: str, follow: bool) -> IncrementalLogReader | None:
        """Publish every line of a file; return the reader positioned after them."""
        reader = IncrementalLogReader(self.log_dir / name)
        try:
            lines = reader.read_new_lines(include_partial=not follow)
        except OSError as e:
            self._report(ReadError(f"Failed to read {reader.path}: {e}", reader.path), e)
            return None

        logger.info(f"Replaying {len(lines)} lines from {name}")
        for line in lines:
            if not self._alive:
                return None
            self._handle_line(line)
        return reader

    def _open_at_end(self, name: str) -> IncrementalLogReader | None:
        reader = IncrementalLogReader(self.log_dir / name)
        try:
            reader.seek_end()
        except OSError as e:
            self._report(TailError(f"Failed to open {reader.path}: {e}", reader.path), e)
            return None
        return reader

    def _attach(self, name: str, reader: IncrementalLogReader) -> None:
        self._tail = reader
        self._current_file = name
        logger.info(f"Following {name} from offset {reader.offset}")

    def _release_tail(self) -> None:
        """Drain what is left of the followed file and let it go."""
        tail, self._tail = self._tail, None
        if tail is None:
            return
        try:
            lines = tail.read_new_lines(include_partial=True)
        except OSError as e:
            self._report(TailError(f"Failed to read {tail.path}: {e}", tail.path), e)
            return
        for line in lines:
            self._handle_line(line)

    def _handle_line(self, line: str) -> None:
        if not self._alive:
            return
        result = self._classifier.classify(line)
        if isinstance(result, LogEvent):
            self._sink.publish(LOG_LINE, result)
            self._sink.publish(result.kind.value, result)
        else:
            logger.debug(f"Unhandled log line ({result.reason}): {line}")
            self._sink.publish(UNHANDLED_LOG_LINE, line)

    def _report(self, error: MonitorError, cause: BaseException | None = None) -> None:
        if cause is not None:
            error.__cause__ = cause
        logger.error(str(error))
        self._sink.publish(ERROR, error)
