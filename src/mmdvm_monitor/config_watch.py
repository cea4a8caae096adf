"""Hot-reloadable view of the host's INI configuration file.

The file is parsed with configparser, watched with watchdog, and every key
that appears or changes value is published as a ConfigChange under the
``config_update`` event type. Failures are published as ConfigError under
``error``; nothing here raises to the caller.
"""

from __future__ import annotations

import configparser
import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from mmdvm_monitor.errors import ConfigError
from mmdvm_monitor.events.models import CONFIG_UPDATE, ERROR, ConfigChange, EventSink

logger = logging.getLogger(__name__)


def _new_parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    # Host keys are CamelCase; keep them as written
    parser.optionxform = str
    return parser


class _ConfigFileHandler(FileSystemEventHandler):
    def __init__(self, watch: ConfigWatch):
        super().__init__()
        self._watch = watch

    def on_modified(self, event: FileSystemEvent) -> None:
        self._maybe_reload(event.src_path, event.is_directory)

    def on_created(self, event: FileSystemEvent) -> None:
        self._maybe_reload(event.src_path, event.is_directory)

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors that save by renaming a temp file over the original
        self._maybe_reload(event.dest_path, event.is_directory)

    def _maybe_reload(self, path: Any, is_directory: bool) -> None:
        if not is_directory and os.path.basename(os.fsdecode(path)) == self._watch.path.name:
            self._watch.reload()


class ConfigWatch:
    """
    Section/key/value store backed by the host INI file.

    Values are always strings. Keys removed from the file keep their last
    known value.

    Args:
        path: INI file to load and watch
        sink: Receives config_update and error notifications
        observer_factory: Creates the watchdog observer
    """

    def __init__(
        self,
        path: str | Path,
        sink: EventSink,
        observer_factory: Callable[[], Any] = Observer,
    ):
        self.path = Path(path)
        self._sink = sink
        self._observer_factory = observer_factory
        self._values: dict[str, dict[str, str]] = {}
        self._lock = threading.RLock()
        self._observer: Any = None

    def init(self, watch: bool = True) -> None:
        """Load the file and, optionally, reload it whenever it changes."""
        self.reload()
        if watch:
            self._start_watch()

    def reload(self) -> list[ConfigChange]:
        """
        Re-read the file and publish every new or changed value.

        Returns:
            The changes that were published
        """
        parser = _new_parser()
        try:
            with self.path.open(encoding="utf-8") as f:
                parser.read_file(f)
        except (OSError, configparser.Error) as e:
            self._report(ConfigError(f"Failed to load {self.path}: {e}", self.path), e)
            return []

        changes = []
        with self._lock:
            for section in parser.sections():
                current = self._values.setdefault(section, {})
                for key, value in parser.items(section, raw=True):
                    if current.get(key) != value:
                        current[key] = value
                        changes.append(ConfigChange(section, key, value))

        if changes:
            logger.info(f"Loaded {len(changes)} changed values from {self.path}")
        for change in changes:
            self._sink.publish(CONFIG_UPDATE, change)
        return changes

    def get(self, section: str, key: str, default: str | None = None) -> str | None:
        with self._lock:
            return self._values.get(section, {}).get(key, default)

    def as_dict(self) -> dict[str, dict[str, str]]:
        """Copy of every section and its values."""
        with self._lock:
            return {section: dict(values) for section, values in self._values.items()}

    def set(self, section: str, key: str, value: str, commit: bool = False) -> bool:
        """
        Change a value in memory, optionally writing the file.

        Non-string arguments are reported as ConfigError and change nothing.

        Returns:
            True if the value was stored (and saved, when commit is set)
        """
        if not isinstance(section, str) or not isinstance(key, str):
            self._report(ConfigError('set: "section" and "key" must be strings', self.path))
            return False
        if not isinstance(value, str):
            self._report(ConfigError('set: "value" must be a string', self.path))
            return False

        with self._lock:
            self._values.setdefault(section, {})[key] = value

        if commit:
            return self.save()
        return True

    def save(self) -> bool:
        """Write all values back to the INI file, replacing it atomically."""
        parser = _new_parser()
        with self._lock:
            for section, values in self._values.items():
                parser[section] = values

        temp_file = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with temp_file.open("w", encoding="utf-8") as f:
                parser.write(f, space_around_delimiters=False)
            temp_file.replace(self.path)
        except OSError as e:
            self._report(ConfigError(f"Failed to save {self.path}: {e}", self.path), e)
            return False

        logger.info(f"Saved configuration to {self.path}")
        return True

    def stop(self) -> None:
        observer, self._observer = self._observer, None
        if observer is not None:
            observer.stop()
            if threading.current_thread() is not observer:
                observer.join()

    def _start_watch(self) -> None:
        if self._observer is not None:
            return
        observer = self._observer_factory()
        try:
            observer.schedule(_ConfigFileHandler(self), str(self.path.parent), recursive=False)
            observer.start()
        except OSError as e:
            self._report(ConfigError(f"Cannot watch {self.path}: {e}", self.path), e)
            return
        self._observer = observer
        logger.debug(f"Watching {self.path} for changes")

    def _report(self, error: ConfigError, cause: BaseException | None = None) -> None:
        if cause is not None:
            error.__cause__ = cause
        logger.error(str(error))
        self._sink.publish(ERROR, error)
