from __future__ import annotations

from typing import Callable

from sysdash import settings
from sysdash.models import ProcessSnapshot, SubsystemKind

from .base import Poller


class ProcessPoller(Poller[ProcessSnapshot]):
    """Top CPU and RAM processes, sampled every two seconds by default."""

    kind = SubsystemKind.PROCESSES
    timer_name = "collect_processes"

    def __init__(self, collect: Callable[[], ProcessSnapshot], *, cadence: float | None = None) -> None:
        super().__init__(collect, cadence=settings.PROCESS_INTERVAL if cadence is None else cadence)

    def initial_snapshot(self) -> ProcessSnapshot:
        return ProcessSnapshot()

    def sentinel(self) -> ProcessSnapshot:
        return ProcessSnapshot.unavailable()
