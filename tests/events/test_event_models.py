"""Tests for event data models."""

from dataclasses import FrozenInstanceError
from datetime import datetime

import pytest

from mmdvm_monitor.events.models import ClassificationMiss, ConfigChange, EventKind, LogEvent


class TestLogEvent:
    """Tests for LogEvent."""

    def test_is_immutable(self) -> None:
        """Test attributes cannot be reassigned."""
        event = LogEvent(EventKind.HOST_RUNNING, "M", datetime(2024, 1, 1), {"version": "1"})

        with pytest.raises(FrozenInstanceError):
            event.level = "E"  # type: ignore[misc]

    def test_fields_copied_from_caller(self) -> None:
        """Test later changes to the source dict do not leak into the event."""
        fields = {"version": "1"}
        event = LogEvent(EventKind.HOST_RUNNING, "M", datetime(2024, 1, 1), fields)

        fields["version"] = "2"

        assert event.fields["version"] == "1"

    def test_defaults(self) -> None:
        """Test optional attributes."""
        event = LogEvent(EventKind.DEVICE_OPENING, "I", datetime(2024, 1, 1))

        assert dict(event.fields) == {}
        assert event.raw == ""


class TestEventKind:
    """Tests for the event vocabulary."""

    def test_vocabulary(self) -> None:
        """Test the sixteen kinds and their topic names."""
        assert len(EventKind) == 16
        assert EventKind("dmr_rf_rx_voice_frame") is EventKind.DMR_RF_RX_VOICE_FRAME
        assert EventKind.HOST_EXITED == "host_exited"


class TestDiagnostics:
    """Tests for miss and config change records."""

    def test_classification_miss_default_reason(self) -> None:
        """Test the default reason."""
        assert ClassificationMiss("x").reason == "no_match"

    def test_config_change_equality(self) -> None:
        """Test value semantics."""
        assert ConfigChange("General", "Callsign", "M0ABC") == ConfigChange("General", "Callsign", "M0ABC")
