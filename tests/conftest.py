"""Fixtures shared by every test package."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest


class RecordingSink:
    """EventSink that remembers everything published to it."""

    def __init__(self) -> None:
        self.published: list[tuple[str, Any]] = []

    def publish(self, event_type: str, payload: Any) -> None:
        self.published.append((event_type, payload))

    def of_type(self, event_type: str) -> list[Any]:
        return [payload for published_type, payload in self.published if published_type == event_type]


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def host_line() -> Callable[..., str]:
    """Build a host log line: ``host_line("Opening the MMDVM")``."""

    def build(message: str, level: str = "M", timestamp: str = "2024-01-01 10:00:00.000") -> str:
        return f"{level}: {timestamp} {message}"

    return build


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    """Empty host log directory."""
    directory = tmp_path / "logs"
    directory.mkdir()
    return directory


@pytest.fixture
def write_log(log_dir: Path) -> Callable[..., Path]:
    """Write (or append) lines to a dated log file in log_dir."""

    def write(name: str, lines: list[str], append: bool = False, newline: bool = True) -> Path:
        path = log_dir / name
        text = "\n".join(lines) + ("\n" if newline and lines else "")
        with path.open("a" if append else "w") as f:
            f.write(text)
        return path

    return write
