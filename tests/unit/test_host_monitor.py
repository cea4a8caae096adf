"""Unit tests for HostMonitor."""

from collections.abc import Callable
from pathlib import Path

import pytest

from mmdvm_monitor.errors import ConfigurationError, ListingError
from mmdvm_monitor.events.bus import EventBus
from mmdvm_monitor.events.models import ConfigChange, EventKind, LogEvent
from mmdvm_monitor.host_monitor import HostMonitor
from mmdvm_monitor.settings import MonitorSettings

STARTUP = [
    "M: 2024-01-01 10:00:00.000 MMDVMHost-20240101 is starting",
    "I: 2024-01-01 10:00:00.100 Opening the MMDVM",
    "I: 2024-01-01 10:00:00.300 MMDVM protocol version: 1, description: MMDVM_HS GitID #cc451c4",
    "M: 2024-01-01 10:00:00.400 Started the DMR Id lookup reload thread",
    "M: 2024-01-01 10:00:00.500 DMR, Opening DMR Network",
    "M: 2024-01-01 10:00:01.000 MMDVMHost-20240101 is running",
    "M: 2024-01-01 10:00:01.200 DMR, Logged into the master successfully",
]


@pytest.fixture
def settings(log_dir: Path, tmp_path: Path) -> MonitorSettings:
    ini = tmp_path / "MMDVM.ini"
    ini.write_text("[General]\nCallsign=M0ABC\n")
    return MonitorSettings(log_dir=str(log_dir), config_file=str(ini))


@pytest.fixture
def monitor(settings: MonitorSettings) -> HostMonitor:
    monitor = HostMonitor(settings, background=False)
    yield monitor
    monitor.stop()


class TestStatus:
    """Status built from the host's log."""

    def test_replay_builds_status(self, monitor: HostMonitor, write_log: Callable) -> None:
        """Test a startup sequence leaves the host running and registered."""
        write_log("MMDVM-2024-01-01.log", STARTUP)

        monitor.init()

        status = monitor.status
        assert status.host.running is True
        assert status.host.starting is False
        assert status.host.version == "20240101"
        assert status.device.open is True
        assert status.device.protocol.git_id == "cc451c4"
        assert status.dmr_id.lookup_thread_running is True
        assert status.dmr_net.open is True
        assert status.dmr_net.opening is False

    def test_tailed_voice_activity(self, monitor: HostMonitor, write_log: Callable) -> None:
        """Test appended voice lines update the slot."""
        write_log("MMDVM-2024-01-01.log", STARTUP)
        monitor.init()

        write_log(
            "MMDVM-2024-01-01.log",
            [
                "M: 2024-01-01 10:05:00.000 DMR Slot 2, received RF voice header from M0ABC to TG 235",
                "M: 2024-01-01 10:05:01.000 DMR Slot 2, audio sequence no. 1, errs: 1/141 (0.71%)",
            ],
            append=True,
        )
        monitor.engine.poll_tail()

        slot = monitor.status.dmr_rf.rx[2]
        assert slot.receiving is True
        assert slot.source == "M0ABC"
        assert slot.bit_error_rate == 0.71

    def test_out_of_range_slot_is_unhandled(self, monitor: HostMonitor, write_log: Callable) -> None:
        """Test a slot outside valid_slots never reaches the tree."""
        unhandled = []
        monitor.subscribe("unhandled_log_line", unhandled.append)
        line = "M: 2024-01-01 10:05:00.000 DMR Slot 5, received RF voice header from M0ABC to TG 235"
        write_log("MMDVM-2024-01-01.log", [line])

        monitor.init()

        assert unhandled == [line]
        assert monitor.status.dmr_rf.rx == {}


class TestRelayedEvents:
    """Events host applications receive."""

    def test_handlers_see_updated_status(self, monitor: HostMonitor, write_log: Callable) -> None:
        """Test the tree is updated before the event is re-published."""
        write_log("MMDVM-2024-01-01.log", STARTUP)
        seen = []

        def on_running(event: LogEvent) -> None:
            seen.append((event.kind, monitor.status.host.running))

        monitor.subscribe(EventKind.HOST_RUNNING, on_running)
        monitor.init()

        assert seen == [(EventKind.HOST_RUNNING, True)]

    def test_log_line_for_every_event(self, monitor: HostMonitor, write_log: Callable) -> None:
        """Test the catch-all topic sees every classified line."""
        write_log("MMDVM-2024-01-01.log", STARTUP)
        lines = []
        monitor.subscribe("log_line", lambda event: lines.append(event.raw))

        monitor.init()

        assert lines == STARTUP

    def test_config_updates_relayed(self, monitor: HostMonitor) -> None:
        """Test configuration values reach monitor subscribers."""
        updates = []
        monitor.subscribe("config_update", updates.append)

        monitor.init()

        assert updates == [ConfigChange("General", "Callsign", "M0ABC")]
        assert monitor.config.get("General", "Callsign") == "M0ABC"

    def test_errors_relayed(self, tmp_path: Path) -> None:
        """Test ingestion errors reach monitor subscribers."""
        bus = EventBus()
        errors = []
        bus.subscribe("error", errors.append)
        monitor = HostMonitor(
            MonitorSettings(log_dir=str(tmp_path / "missing")), bus=bus, background=False
        )

        monitor.init()

        assert len(errors) == 1
        assert isinstance(errors[0], ListingError)
        assert monitor.config is None
        monitor.stop()

    def test_unsubscribe(self, monitor: HostMonitor, write_log: Callable) -> None:
        """Test unsubscribed handlers are no longer called."""
        write_log("MMDVM-2024-01-01.log", STARTUP)
        lines = []
        sub_id = monitor.subscribe("log_line", lines.append)

        assert monitor.unsubscribe(sub_id) is True
        monitor.init()

        assert lines == []


class TestLifecycle:
    """init and stop."""

    def test_stop_is_idempotent(self, monitor: HostMonitor, write_log: Callable) -> None:
        """Test stopping twice is harmless and halts ingestion."""
        write_log("MMDVM-2024-01-01.log", STARTUP)
        monitor.init()

        monitor.stop()
        monitor.stop()

        assert not monitor.engine.is_running()

    def test_status_unchanged_after_stop(self, monitor: HostMonitor, write_log: Callable) -> None:
        """Test lines written after stop are ignored."""
        write_log("MMDVM-2024-01-01.log", STARTUP)
        monitor.init()
        monitor.stop()

        write_log(
            "MMDVM-2024-01-01.log",
            ["M: 2024-01-01 11:00:00.000 MMDVMHost-20240101 exited on receipt of SIGTERM"],
            append=True,
        )
        monitor.engine.poll_tail()

        assert monitor.status.host.running is True

    def test_rejected_flags_stop_config_watch(self, settings: MonitorSettings) -> None:
        """Test a failed engine start leaves no config observer running."""
        monitor = HostMonitor(settings)
        settings.replay_all = True

        with pytest.raises(ConfigurationError):
            monitor.init()

        assert monitor.config._observer is None
        assert not monitor.engine.is_running()
