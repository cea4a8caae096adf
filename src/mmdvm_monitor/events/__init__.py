"""Event vocabulary and pub/sub bus for the host monitor."""

from mmdvm_monitor.events.bus import EventBus
from mmdvm_monitor.events.models import (
    CONFIG_UPDATE,
    ERROR,
    LOG_LINE,
    UNHANDLED_LOG_LINE,
    ClassificationMiss,
    Classifier,
    ConfigChange,
    EventHandler,
    EventKind,
    EventSink,
    FieldValue,
    LogEvent,
)

__all__ = [
    "EventBus",
    "EventKind",
    "LogEvent",
    "ClassificationMiss",
    "ConfigChange",
    "FieldValue",
    "Classifier",
    "EventSink",
    "EventHandler",
    "LOG_LINE",
    "UNHANDLED_LOG_LINE",
    "ERROR",
    "CONFIG_UPDATE",
]
