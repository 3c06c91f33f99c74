"""Per-subsystem pollers and the factory wiring them to the real collectors."""

from __future__ import annotations

from functools import partial

from sysdash import collectors, settings
from sysdash.models import SubsystemKind

from .base import Poller, PollerPhase, PollerState
from .cpu import CpuPoller
from .gpu import GpuPoller
from .network import NetworkPoller
from .processes import ProcessPoller

__all__ = [
    "CpuPoller",
    "GpuPoller",
    "NetworkPoller",
    "Poller",
    "PollerPhase",
    "PollerState",
    "ProcessPoller",
    "build_pollers",
]


def build_pollers(interface: str | None = None) -> dict[SubsystemKind, Poller]:
    """Create the four pollers backed by the system collectors."""
    interface_info = collectors.detect_interface_info(interface or settings.NETWORK_INTERFACE)
    return {
        SubsystemKind.CPU: CpuPoller(partial(collectors.collect, SubsystemKind.CPU)),
        SubsystemKind.GPU: GpuPoller(partial(collectors.collect, SubsystemKind.GPU)),
        SubsystemKind.NETWORK: NetworkPoller(collectors.read_counters, collectors.measure_download_speed, interface_info),
        SubsystemKind.PROCESSES: ProcessPoller(partial(collectors.collect, SubsystemKind.PROCESSES)),
    }
