from __future__ import annotations

from typing import Callable

from sysdash import settings
from sysdash.models import CpuSnapshot, SubsystemKind

from .base import Poller


class CpuPoller(Poller[CpuSnapshot]):
    kind = SubsystemKind.CPU
    timer_name = "collect_cpu"

    def __init__(self, collect: Callable[[], CpuSnapshot], *, cadence: float | None = None) -> None:
        super().__init__(collect, cadence=settings.CPU_INTERVAL if cadence is None else cadence)

    def initial_snapshot(self) -> CpuSnapshot:
        return CpuSnapshot()

    def sentinel(self) -> CpuSnapshot:
        return CpuSnapshot.unavailable()
