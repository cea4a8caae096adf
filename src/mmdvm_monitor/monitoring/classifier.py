"""Classification of raw host log lines into typed events."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from mmdvm_monitor.events.models import ClassificationMiss, LogEvent
from mmdvm_monitor.monitoring.patterns import (
    PATTERNS,
    PREFIX_GROUPS,
    TIMESTAMP_FORMAT,
    LinePattern,
)

logger = logging.getLogger(__name__)

DEFAULT_VALID_SLOTS = frozenset({1, 2})

NO_MATCH = "no_match"
INVALID_FIELD = "invalid_field"
SLOT_OUT_OF_RANGE = "slot_out_of_range"


class LineClassifier:
    """Matches lines against the pattern table.

    Stateless apart from its configuration, so one instance may be shared.

    Attributes:
        patterns: Patterns tried in order; the first match wins.
        valid_slots: Slot numbers accepted on slot-bearing lines, or None to
            accept any slot.
    """

    def __init__(
        self,
        patterns: Iterable[LinePattern] = PATTERNS,
        valid_slots: Iterable[int] | None = DEFAULT_VALID_SLOTS,
    ):
        self.patterns = tuple(patterns)
        self.valid_slots = frozenset(valid_slots) if valid_slots is not None else None

    def classify(self, line: str) -> LogEvent | ClassificationMiss:
        """Classify one line (trailing newline already removed).

        Returns:
            A LogEvent for the first matching pattern, otherwise a
            ClassificationMiss. Never raises for string input.
        """
        for pattern in self.patterns:
            match = pattern.regex.match(line)
            if match is None:
                continue

            groups = match.groups()
            try:
                timestamp = datetime.strptime(groups[1], TIMESTAMP_FORMAT)
                fields = {
                    spec.name: spec.type.convert(groups[PREFIX_GROUPS + i])
                    for i, spec in enumerate(pattern.fields)
                }
            except ValueError as e:
                logger.debug(f"Line matched {pattern.kind.value} but a field is malformed: {e}")
                return ClassificationMiss(line, INVALID_FIELD)

            slot = fields.get("slot")
            if self.valid_slots is not None and slot is not None and slot not in self.valid_slots:
                return ClassificationMiss(line, SLOT_OUT_OF_RANGE)

            return LogEvent(
                kind=pattern.kind,
                level=groups[0],
                timestamp=timestamp,
                fields=fields,
                raw=line,
            )

        return ClassificationMiss(line, NO_MATCH)
