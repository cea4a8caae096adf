"""Event data models and capability protocols for the log pipeline."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Protocol

# Typed capture-group values; the variant is fixed per field when a pattern
# is registered.
FieldValue = int | float | str


class EventKind(str, Enum):
    """Closed vocabulary of classified host log lines."""

    HOST_STARTING = "host_starting"
    HOST_RUNNING = "host_running"
    HOST_EXITED = "host_exited"
    DEVICE_OPENING = "device_opening"
    DEVICE_CLOSING = "device_closing"
    DEVICE_PROTOCOL = "device_protocol"
    DMR_NET_OPENING = "dmr_net_opening"
    DMR_NET_CLOSING = "dmr_net_closing"
    DMR_NET_SENDING_AUTHORIZATION = "dmr_net_sending_authorization"
    DMR_NET_SENDING_CONFIGURATION = "dmr_net_sending_configuration"
    DMR_NET_LOGGED_IN = "dmr_net_logged_in"
    DMR_ID_THREAD_STARTED = "dmr_id_thread_started"
    DMR_ID_THREAD_STOPPED = "dmr_id_thread_stopped"
    DMR_RF_RX_VOICE_HEADER = "dmr_rf_rx_voice_header"
    DMR_RF_RX_VOICE_FRAME = "dmr_rf_rx_voice_frame"
    DMR_RF_RX_VOICE_END = "dmr_rf_rx_voice_end"


# Bus topics that are not event kinds
LOG_LINE = "log_line"
UNHANDLED_LOG_LINE = "unhandled_log_line"
ERROR = "error"
CONFIG_UPDATE = "config_update"


@dataclass(frozen=True)
class LogEvent:
    """
    Immutable record produced from exactly one classified log line.

    Attributes:
        kind: Which pattern matched
        level: Single-character severity taken from the line (e.g. "M", "I")
        timestamp: Date-time embedded in the line, millisecond precision
        fields: Typed capture groups, keyed by field name
        raw: The line the event was built from
    """

    kind: EventKind
    level: str
    timestamp: datetime
    fields: Mapping[str, FieldValue] = field(default_factory=dict)
    raw: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))


@dataclass(frozen=True)
class ClassificationMiss:
    """
    Diagnostic for a line that produced no event.

    Attributes:
        line: The raw line
        reason: "no_match", "invalid_field" or "slot_out_of_range"
    """

    line: str
    reason: str = "no_match"


@dataclass(frozen=True)
class ConfigChange:
    """A single (section, key) value that appeared or changed."""

    section: str
    key: str
    value: str


class Classifier(Protocol):
    """Turns a raw log line into an event or a miss."""

    def classify(self, line: str) -> LogEvent | ClassificationMiss:
        ...


class EventSink(Protocol):
    """Receives published notifications keyed by event type."""

    def publish(self, event_type: str, payload: Any) -> None:
        ...


class EventHandler(Protocol):
    """
    Protocol defining the interface for bus subscribers.

    Example:
        def on_header(event: LogEvent) -> None:
            print(event.fields["source"])

        bus.subscribe(EventKind.DMR_RF_RX_VOICE_HEADER, on_header)
    """

    def __call__(self, payload: Any) -> None:
        ...
