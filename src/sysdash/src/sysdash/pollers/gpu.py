from __future__ import annotations

from typing import Callable

from sysdash import settings
from sysdash.models import GpuSnapshot, SubsystemKind

from .base import Poller


class GpuPoller(Poller[GpuSnapshot]):
    kind = SubsystemKind.GPU
    timer_name = "collect_gpu"

    def __init__(self, collect: Callable[[], GpuSnapshot], *, cadence: float | None = None) -> None:
        super().__init__(collect, cadence=settings.GPU_INTERVAL if cadence is None else cadence)

    def initial_snapshot(self) -> GpuSnapshot:
        return GpuSnapshot()

    def sentinel(self) -> GpuSnapshot:
        return GpuSnapshot.unavailable()
