"""Settings for the host monitor.

Settings are a dataclass with defaults suited to a stock MMDVMHost install;
``load_settings`` reads overrides from a YAML file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from mmdvm_monitor.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class MonitorSettings:
    """Configuration for the host monitor.

    Attributes:
        log_dir: Directory the host writes its dated log files to (default: /var/log/mmdvm).
        log_prefix: Log file name prefix (default: MMDVM).
        config_file: Host INI file to watch, or None to skip config watching.
        rotation_interval_seconds: Seconds between polls for a newer log file (default: 60).
        tail_interval_seconds: Seconds between fallback reads of the followed file (default: 1).
        valid_slots: DMR slot numbers accepted from log lines (default: 1 and 2).
        replay_all: Replay every log file at startup.
        replay_current: Replay the newest log file at startup (default: True).
        tail_current: Follow the newest log file (default: True).
        tail_future: Switch to newer log files as they appear (default: True).
        log_level: Level for the monitor's own logging (default: INFO).
    """

    log_dir: str = "/var/log/mmdvm"
    log_prefix: str = "MMDVM"
    config_file: str | None = None
    rotation_interval_seconds: float = 60.0
    tail_interval_seconds: float = 1.0
    valid_slots: tuple[int, ...] = (1, 2)
    replay_all: bool = False
    replay_current: bool = True
    tail_current: bool = True
    tail_future: bool = True
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.replay_all and self.replay_current:
            raise ConfigurationError(
                "replay_all and replay_current are mutually exclusive; set replay_current to false"
            )

    @property
    def ingest_flags(self) -> tuple[bool, bool, bool, bool]:
        """(replay_all, replay_current, tail_current, tail_future)"""
        return self.replay_all, self.replay_current, self.tail_current, self.tail_future


def load_settings(path: str | Path) -> MonitorSettings:
    """Load monitor settings from a YAML file.

    Keys missing from the file keep their defaults.

    Raises:
        FileNotFoundError: If the settings file doesn't exist
        ValueError: If the YAML is invalid, contains unknown keys or sets
            conflicting replay flags
    """
    settings_path = Path(path)
    if not settings_path.exists():
        raise FileNotFoundError(f"Monitor settings file not found: {settings_path}")

    try:
        with open(settings_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse monitor settings YAML: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Monitor settings must be a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(MonitorSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown monitor settings: {', '.join(unknown)}")

    if "valid_slots" in data:
        data["valid_slots"] = tuple(int(slot) for slot in data["valid_slots"])

    logger.debug(f"Loaded monitor settings from {settings_path}")
    return MonitorSettings(**data)
