"""Status tree and the reducer that maintains it."""

from mmdvm_monitor.state.models import (
    DeviceProtocol,
    DeviceStatus,
    DmrIdStatus,
    DmrNetStatus,
    DmrRfStatus,
    HostStatus,
    SlotState,
    StatusTree,
)
from mmdvm_monitor.state.reducer import TRANSITIONS, ResetSubtree, StatusReducer, UpdateInPlace

__all__ = [
    "StatusTree",
    "HostStatus",
    "DeviceStatus",
    "DeviceProtocol",
    "DmrIdStatus",
    "DmrNetStatus",
    "DmrRfStatus",
    "SlotState",
    "StatusReducer",
    "TRANSITIONS",
    "ResetSubtree",
    "UpdateInPlace",
]
