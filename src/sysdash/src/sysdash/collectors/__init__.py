"""
Telemetry acquisition.

Collectors block (they shell out to system tools or walk ``/proc``) and never
raise for acquisition problems: a failure is reported as a snapshot carrying
sentinel values (``"N/A"``, zero, empty lists).
"""

from __future__ import annotations

from typing import Any

from sysdash import settings
from sysdash.models import SubsystemKind

from .cpu import collect_cpu
from .gpu import collect_gpu
from .network import detect_interface_info, measure_download_speed, read_counters
from .processes import collect_processes

__all__ = [
    "collect",
    "collect_cpu",
    "collect_gpu",
    "collect_processes",
    "detect_interface_info",
    "measure_download_speed",
    "read_counters",
]


def collect(kind: SubsystemKind, *, interface: str | None = None) -> Any:
    """Collect one snapshot for ``kind``; network falls back to the configured or default-route interface."""
    if kind is SubsystemKind.CPU:
        return collect_cpu()
    if kind is SubsystemKind.GPU:
        return collect_gpu()
    if kind is SubsystemKind.NETWORK:
        if interface is None:
            interface = settings.NETWORK_INTERFACE or detect_interface_info().name
        return read_counters(interface)
    if kind is SubsystemKind.PROCESSES:
        return collect_processes()
    raise ValueError(f"Unknown subsystem: {kind}")
