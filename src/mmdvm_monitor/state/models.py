"""Data models for the host status tree.

The tree is a set of plain dataclasses. Phase subtrees (host, device,
dmr_net) are replaced wholesale when their phase changes; dmr_id and the
per-slot receive state are updated field by field.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class HostStatus:
    """
    Lifecycle of the host process.

    Attributes:
        starting: Host announced it is starting
        running: Host announced it is running
        exited: Signal name the host exited on, empty while not exited
        version: Host version string from the last lifecycle line
    """

    starting: bool = False
    running: bool = False
    exited: str = ""
    version: str = ""


@dataclass
class DeviceProtocol:
    version: str = ""
    description: str = ""
    git_id: str = ""


@dataclass
class DeviceStatus:
    """Connection to the modem board."""

    opening: bool = False
    open: bool = False
    protocol: DeviceProtocol = field(default_factory=DeviceProtocol)


@dataclass
class DmrIdStatus:
    lookup_thread_running: bool = False


@dataclass
class DmrNetStatus:
    """Registration with the DMR master."""

    opening: bool = False
    sending_authorization: bool = False
    sending_configuration: bool = False
    open: bool = False


@dataclass
class SlotState:
    """
    Receive activity on one DMR time slot.

    Attributes:
        receiving: A transmission is in progress
        rx_start: Time the current or last transmission started
        elapsed_seconds: Duration reported when the transmission ended
        slot: Slot number
        source: Calling station
        destination: Called talk group or station
        bit_error_rate: Latest reported BER, percent
    """

    receiving: bool = False
    rx_start: datetime | None = None
    elapsed_seconds: float = 0.0
    slot: int = 0
    source: str = ""
    destination: str = ""
    bit_error_rate: float = 0.0


@dataclass
class DmrRfStatus:
    rx: dict[int, SlotState] = field(default_factory=dict)
    # Transmit side is not reported by any classified line yet
    tx: dict[int, SlotState] = field(default_factory=dict)


@dataclass
class StatusTree:
    """Current operational state of the monitored host."""

    host: HostStatus = field(default_factory=HostStatus)
    device: DeviceStatus = field(default_factory=DeviceStatus)
    dmr_id: DmrIdStatus = field(default_factory=DmrIdStatus)
    dmr_net: DmrNetStatus = field(default_factory=DmrNetStatus)
    dmr_rf: DmrRfStatus = field(default_factory=DmrRfStatus)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready rendering; datetimes become ISO 8601 strings."""
        return _jsonable(asdict(self))


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, datetime):
        return value.isoformat(timespec="milliseconds")
    return value
