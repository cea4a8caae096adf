#!/usr/bin/env python3
"""Demo script printing host status as the monitor sees it change.

Usage:
    python examples/watch_host.py [settings.yaml]

Without a settings file, a stock install is assumed: logs in /var/log/mmdvm
and configuration in /opt/MMDVMHost/MMDVM.ini.
"""

import json
import signal
import sys
import threading

from mmdvm_monitor import EventKind, HostMonitor, MonitorSettings, configure_logging, load_settings
from mmdvm_monitor.events import CONFIG_UPDATE, ERROR

SUBTREE_BY_PREFIX = {
    "host_": "host",
    "device_": "device",
    "dmr_net_": "dmr_net",
    "dmr_id_": "dmr_id",
}


def main() -> None:
    if len(sys.argv) > 1:
        settings = load_settings(sys.argv[1])
    else:
        settings = MonitorSettings(config_file="/opt/MMDVMHost/MMDVM.ini")
    configure_logging(settings.log_level)

    monitor = HostMonitor(settings)

    def show(event):
        status = monitor.status.to_dict()
        if event.kind.value.startswith("dmr_rf_"):
            subtree = status["dmr_rf"]["rx"].get(str(event.fields["slot"]))
        else:
            prefix = next(p for p in SUBTREE_BY_PREFIX if event.kind.value.startswith(p))
            subtree = status[SUBTREE_BY_PREFIX[prefix]]
        print(event.timestamp, event.kind.value, json.dumps(subtree))

    for kind in EventKind:
        monitor.subscribe(kind, show)
    monitor.subscribe(ERROR, lambda error: print(f"error: {error}", file=sys.stderr))
    monitor.subscribe(CONFIG_UPDATE, lambda c: print(f"config [{c.section}] {c.key}={c.value}"))

    done = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: done.set())
    signal.signal(signal.SIGTERM, lambda *_: done.set())

    monitor.init()
    done.wait()
    monitor.stop()


if __name__ == "__main__":
    main()
