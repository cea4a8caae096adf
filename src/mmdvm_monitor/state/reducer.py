"""Folding of classified log events into the host status tree.

Each event kind maps to one transition in TRANSITIONS, using one of two
strategies:

    ResetSubtree   replace a phase subtree (host, device, dmr_net) with
                   defaults, then set the fields the event asserts
    UpdateInPlace  change individual fields of continuous state (dmr_id,
                   per-slot receive state)
"""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from mmdvm_monitor.events.models import EventKind, LogEvent
from mmdvm_monitor.state.models import (
    DeviceStatus,
    DmrNetStatus,
    HostStatus,
    SlotState,
    StatusTree,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResetSubtree:
    """Replace ``tree.<subtree>`` with ``factory()`` and let ``assign`` fill it in."""

    subtree: str
    factory: Callable[[], Any]
    assign: Callable[[Any, LogEvent], None] | None = None

    def apply(self, tree: StatusTree, event: LogEvent) -> None:
        fresh = self.factory()
        if self.assign is not None:
            self.assign(fresh, event)
        setattr(tree, self.subtree, fresh)


@dataclass(frozen=True)
class UpdateInPlace:
    """Mutate existing fields of the tree."""

    update: Callable[[StatusTree, LogEvent], None]

    def apply(self, tree: StatusTree, event: LogEvent) -> None:
        self.update(tree, event)


Transition = ResetSubtree | UpdateInPlace


def _host_starting(host: HostStatus, event: LogEvent) -> None:
    host.starting = True
    host.version = event.fields["version"]


def _host_running(host: HostStatus, event: LogEvent) -> None:
    host.running = True
    host.version = event.fields["version"]


def _host_exited(host: HostStatus, event: LogEvent) -> None:
    host.exited = event.fields["signal"]
    host.version = event.fields["version"]


def _device_opening(device: DeviceStatus, event: LogEvent) -> None:
    device.opening = True


def _device_protocol(device: DeviceStatus, event: LogEvent) -> None:
    device.open = True
    device.protocol.version = event.fields["version"]
    device.protocol.description = event.fields["description"]
    device.protocol.git_id = event.fields["git_id"]


def _net_flag(name: str) -> Callable[[DmrNetStatus, LogEvent], None]:
    def assign(net: DmrNetStatus, event: LogEvent) -> None:
        setattr(net, name, True)

    return assign


def _id_thread(running: bool) -> Callable[[StatusTree, LogEvent], None]:
    def update(tree: StatusTree, event: LogEvent) -> None:
        tree.dmr_id.lookup_thread_running = running

    return update


def _rx_slot(tree: StatusTree, event: LogEvent) -> SlotState:
    slot = event.fields["slot"]
    return tree.dmr_rf.rx.setdefault(slot, SlotState(slot=slot))


def _voice_header(tree: StatusTree, event: LogEvent) -> None:
    slot = event.fields["slot"]
    tree.dmr_rf.rx[slot] = SlotState(
        receiving=True,
        rx_start=event.timestamp,
        slot=slot,
        source=event.fields["source"],
        destination=event.fields["destination"],
    )


def _voice_frame(tree: StatusTree, event: LogEvent) -> None:
    state = _rx_slot(tree, event)
    if state.rx_start is None:
        # Header line was missed
        state.receiving = True
        state.rx_start = event.timestamp
    state.bit_error_rate = event.fields["ber"]


def _voice_end(tree: StatusTree, event: LogEvent) -> None:
    state = _rx_slot(tree, event)
    if state.rx_start is None:
        state.rx_start = event.timestamp
    state.receiving = False
    state.elapsed_seconds = event.fields["seconds"]
    state.bit_error_rate = event.fields["ber"]


TRANSITIONS: dict[EventKind, Transition] = {
    EventKind.HOST_STARTING: ResetSubtree("host", HostStatus, _host_starting),
    EventKind.HOST_RUNNING: ResetSubtree("host", HostStatus, _host_running),
    EventKind.HOST_EXITED: ResetSubtree("host", HostStatus, _host_exited),
    EventKind.DEVICE_OPENING: ResetSubtree("device", DeviceStatus, _device_opening),
    EventKind.DEVICE_CLOSING: ResetSubtree("device", DeviceStatus),
    EventKind.DEVICE_PROTOCOL: ResetSubtree("device", DeviceStatus, _device_protocol),
    EventKind.DMR_NET_OPENING: ResetSubtree("dmr_net", DmrNetStatus, _net_flag("opening")),
    EventKind.DMR_NET_SENDING_AUTHORIZATION: ResetSubtree(
        "dmr_net", DmrNetStatus, _net_flag("sending_authorization")
    ),
    EventKind.DMR_NET_SENDING_CONFIGURATION: ResetSubtree(
        "dmr_net", DmrNetStatus, _net_flag("sending_configuration")
    ),
    EventKind.DMR_NET_LOGGED_IN: ResetSubtree("dmr_net", DmrNetStatus, _net_flag("open")),
    EventKind.DMR_NET_CLOSING: ResetSubtree("dmr_net", DmrNetStatus),
    EventKind.DMR_ID_THREAD_STARTED: UpdateInPlace(_id_thread(True)),
    EventKind.DMR_ID_THREAD_STOPPED: UpdateInPlace(_id_thread(False)),
    EventKind.DMR_RF_RX_VOICE_HEADER: UpdateInPlace(_voice_header),
    EventKind.DMR_RF_RX_VOICE_FRAME: UpdateInPlace(_voice_frame),
    EventKind.DMR_RF_RX_VOICE_END: UpdateInPlace(_voice_end),
}


class StatusReducer:
    """Owns the StatusTree and applies events to it in arrival order.

    There is a single writer (whoever calls apply); readers only ever get
    deep copies through ``status``.

    Attributes:
        valid_slots: If set, slot events for other slot numbers are ignored.
    """

    def __init__(self, valid_slots: Iterable[int] | None = None):
        self.valid_slots = frozenset(valid_slots) if valid_slots is not None else None
        self._tree = StatusTree()
        self._lock = threading.Lock()

    def apply(self, event: LogEvent) -> bool:
        """Apply one event; returns False if it did not change the tree."""
        transition = TRANSITIONS.get(event.kind)
        if transition is None:
            logger.debug(f"No transition for event kind {event.kind}")
            return False

        slot = event.fields.get("slot")
        if slot is not None and self.valid_slots is not None and slot not in self.valid_slots:
            logger.warning(f"Ignoring {event.kind.value} for out-of-range slot {slot}")
            return False

        with self._lock:
            transition.apply(self._tree, event)
        return True

    @property
    def status(self) -> StatusTree:
        """Snapshot of the current tree."""
        with self._lock:
            return copy.deepcopy(self._tree)
