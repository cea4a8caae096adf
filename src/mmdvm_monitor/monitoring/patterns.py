"""Pattern table for MMDVMHost log lines.

Every host log line starts with a shared prefix::

    M: 2024-01-01 10:00:00.123 <message>

The prefix contributes the level character and the timestamp; each pattern
below matches the message part and declares how its capture groups are
typed. Patterns are compiled once, at import time.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from mmdvm_monitor.events.models import EventKind, FieldValue

LINE_PREFIX = r"^(\w?): (\d{4}-\d\d-\d\d \d\d:\d\d:\d\d\.\d{3})\s+"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

# Number of capture groups LINE_PREFIX contributes before pattern fields
PREFIX_GROUPS = 2


class FieldType(Enum):
    """Value type of a captured field."""

    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"

    def convert(self, raw: str) -> FieldValue:
        """Convert captured text; raises ValueError on malformed numbers."""
        if self is FieldType.INTEGER:
            return int(raw)
        if self is FieldType.FLOAT:
            return float(raw)
        return raw


@dataclass(frozen=True)
class FieldSpec:
    name: str
    type: FieldType = FieldType.TEXT


@dataclass(frozen=True)
class LinePattern:
    """A message pattern and the typed fields its groups map to.

    Attributes:
        kind: Event kind produced on match.
        message: Regex for the message part (after the shared prefix).
        fields: One descriptor per capture group, in group order.
        regex: Compiled, case-insensitive prefix + message expression.
    """

    kind: EventKind
    message: str
    fields: tuple[FieldSpec, ...] = ()
    regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        compiled = re.compile(LINE_PREFIX + self.message, re.IGNORECASE)
        if compiled.groups != PREFIX_GROUPS + len(self.fields):
            raise ValueError(
                f"Pattern for {self.kind.value} has {compiled.groups - PREFIX_GROUPS} "
                f"groups but declares {len(self.fields)} fields"
            )
        object.__setattr__(self, "regex", compiled)


_INT = FieldType.INTEGER
_FLOAT = FieldType.FLOAT

# Tried in order; the first match wins.
PATTERNS: tuple[LinePattern, ...] = (
    LinePattern(
        EventKind.HOST_STARTING,
        r"MMDVMHost-(\w*?) is starting",
        (FieldSpec("version"),),
    ),
    LinePattern(
        EventKind.HOST_RUNNING,
        r"MMDVMHost-(\w*?) is running",
        (FieldSpec("version"),),
    ),
    LinePattern(
        EventKind.HOST_EXITED,
        r"MMDVMHost-(\w*?) exited on receipt of (\w+?)$",
        (FieldSpec("version"), FieldSpec("signal")),
    ),
    LinePattern(EventKind.DEVICE_OPENING, r"Opening the MMDVM"),
    LinePattern(EventKind.DEVICE_CLOSING, r"Closing the MMDVM"),
    LinePattern(
        EventKind.DEVICE_PROTOCOL,
        r"MMDVM protocol version: (\w+?), description: (.*?) GitID #(\w+?)$",
        (FieldSpec("version"), FieldSpec("description"), FieldSpec("git_id")),
    ),
    LinePattern(EventKind.DMR_NET_OPENING, r"DMR, Opening DMR Network"),
    LinePattern(EventKind.DMR_NET_CLOSING, r"DMR, Closing DMR Network"),
    LinePattern(EventKind.DMR_NET_SENDING_AUTHORIZATION, r"DMR, Sending authorisation"),
    LinePattern(EventKind.DMR_NET_SENDING_CONFIGURATION, r"DMR, Sending configuration"),
    LinePattern(EventKind.DMR_NET_LOGGED_IN, r"DMR, Logged into the master successfully"),
    LinePattern(EventKind.DMR_ID_THREAD_STARTED, r"Started the DMR Id lookup reload thread"),
    LinePattern(EventKind.DMR_ID_THREAD_STOPPED, r"Stopped the DMR Id lookup reload thread"),
    LinePattern(
        EventKind.DMR_RF_RX_VOICE_HEADER,
        r"DMR Slot (\d?), received RF voice header from (\w+?) to (.*?)$",
        (FieldSpec("slot", _INT), FieldSpec("source"), FieldSpec("destination")),
    ),
    LinePattern(
        EventKind.DMR_RF_RX_VOICE_FRAME,
        r"DMR Slot (\d?), audio sequence no\. (\d+?), errs: (\d+?)/\d+ \((\d+\.\d+?)%\)",
        (
            FieldSpec("slot", _INT),
            FieldSpec("sequence", _INT),
            FieldSpec("errs", _INT),
            FieldSpec("ber", _FLOAT),
        ),
    ),
    LinePattern(
        EventKind.DMR_RF_RX_VOICE_END,
        r"DMR Slot (\d?), received RF end of voice transmission, "
        r"(\d+\.\d+?) seconds, BER: (\d+\.\d+?)%",
        (FieldSpec("slot", _INT), FieldSpec("seconds", _FLOAT), FieldSpec("ber", _FLOAT)),
    ),
)
