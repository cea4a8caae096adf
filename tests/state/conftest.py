"""Shared fixtures for status tests."""

from collections.abc import Callable
from datetime import datetime

import pytest

from mmdvm_monitor.events.models import EventKind, LogEvent
from mmdvm_monitor.state.reducer import StatusReducer


@pytest.fixture
def make_event() -> Callable[..., LogEvent]:
    """Build a LogEvent: ``make_event(EventKind.HOST_RUNNING, version="1")``."""

    def build(kind: EventKind, at: datetime = datetime(2024, 1, 1, 10, 0, 0), **fields) -> LogEvent:
        return LogEvent(kind=kind, level="M", timestamp=at, fields=fields)

    return build


@pytest.fixture
def reducer() -> StatusReducer:
    return StatusReducer()
