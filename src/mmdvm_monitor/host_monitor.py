"""
HostMonitor - status of a running MMDVMHost, built from its logs and config.

The monitor wires three parts together:

    ConfigWatch          host INI file -> config_update
    LogIngestionEngine   host log directory -> classified LogEvents
    StatusReducer        LogEvents -> StatusTree

Host applications subscribe to the monitor's own bus. Every classified event
is applied to the status tree first and then re-published, so a handler that
reads ``monitor.status`` sees the state the event produced.
"""

from __future__ import annotations

import logging
from typing import Any

from mmdvm_monitor.config_watch import ConfigWatch
from mmdvm_monitor.errors import ConfigurationError
from mmdvm_monitor.events.bus import EventBus
from mmdvm_monitor.events.models import (
    CONFIG_UPDATE,
    ERROR,
    LOG_LINE,
    UNHANDLED_LOG_LINE,
    EventHandler,
    LogEvent,
)
from mmdvm_monitor.monitoring.classifier import LineClassifier
from mmdvm_monitor.monitoring.engine import LogIngestionEngine
from mmdvm_monitor.settings import MonitorSettings
from mmdvm_monitor.state.models import StatusTree
from mmdvm_monitor.state.reducer import StatusReducer

logger = logging.getLogger(__name__)


class HostMonitor:
    """
    Monitors one MMDVMHost installation.

    Example:
        monitor = HostMonitor(MonitorSettings(log_dir="/var/log/mmdvm",
                                              config_file="/etc/MMDVM.ini"))
        monitor.subscribe("dmr_rf_rx_voice_header",
                          lambda e: print(monitor.status.dmr_rf.rx[e.fields["slot"]]))
        monitor.init()
        ...
        monitor.stop()

    Args:
        settings: Monitor settings
        bus: Bus to publish on (default: a new EventBus)
        background: Passed to the ingestion engine
    """

    def __init__(
        self,
        settings: MonitorSettings,
        bus: EventBus | None = None,
        background: bool = True,
    ):
        self.settings = settings
        self.bus = bus or EventBus()

        # Engine and config publish here; the monitor relays to self.bus
        self._inbound = EventBus()
        self._inbound.subscribe(LOG_LINE, self._on_log_line)
        self._inbound.subscribe(UNHANDLED_LOG_LINE, self._relay(UNHANDLED_LOG_LINE))
        self._inbound.subscribe(ERROR, self._relay(ERROR))
        self._inbound.subscribe(CONFIG_UPDATE, self._relay(CONFIG_UPDATE))

        self._reducer = StatusReducer(valid_slots=settings.valid_slots)
        self._engine = LogIngestionEngine(
            settings.log_dir,
            self._inbound,
            prefix=settings.log_prefix,
            classifier=LineClassifier(valid_slots=settings.valid_slots),
            rotation_interval=settings.rotation_interval_seconds,
            tail_interval=settings.tail_interval_seconds,
            background=background,
        )
        self._config = (
            ConfigWatch(settings.config_file, self._inbound) if settings.config_file else None
        )

    def init(self) -> None:
        """Load configuration, replay history and start following the host."""
        logger.info(f"Starting host monitor for {self.settings.log_dir}")
        if self._config is not None:
            self._config.init(watch=self._engine.background)
        try:
            self._engine.initialize(*self.settings.ingest_flags)
        except ConfigurationError:
            # Settings were changed after construction
            if self._config is not None:
                self._config.stop()
            raise

    def stop(self) -> None:
        if self._config is not None:
            self._config.stop()
        self._engine.stop()
        logger.info("Host monitor stopped")

    def subscribe(self, event_type: str, handler: EventHandler) -> str:
        return self.bus.subscribe(event_type, handler)

    def unsubscribe(self, subscription_id: str) -> bool:
        return self.bus.unsubscribe(subscription_id)

    @property
    def status(self) -> StatusTree:
        """Snapshot of the host status; later events do not change it."""
        return self._reducer.status

    @property
    def config(self) -> ConfigWatch | None:
        return self._config

    @property
    def engine(self) -> LogIngestionEngine:
        return self._engine

    def _on_log_line(self, event: LogEvent) -> None:
        self._reducer.apply(event)
        self.bus.publish(LOG_LINE, event)
        self.bus.publish(event.kind.value, event)

    def _relay(self, event_type: str):
        def relay(payload: Any) -> None:
            self.bus.publish(event_type, payload)

        return relay
