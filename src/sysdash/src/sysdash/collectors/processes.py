"""Top processes by CPU and memory usage."""

from __future__ import annotations

from typing import Iterable

import psutil
from loguru import logger

from sysdash import settings
from sysdash.models import ProcessItem, ProcessSnapshot

_ATTRS = ["pid", "name", "cpu_percent", "memory_percent"]


def top_processes(rows: Iterable[dict], key: str, count: int) -> tuple[ProcessItem, ...]:
    """Rank ``psutil`` info dicts by ``key`` descending and keep ``count`` of them."""
    items = []
    for row in rows:
        value = row.get(key)
        if value is None:
            continue
        items.append(ProcessItem(pid=str(row.get("pid", "")), name=row.get("name") or "?", value=float(value)))
    items.sort(key=lambda item: item.value, reverse=True)
    return tuple(items[:count])


def collect_processes(count: int | None = None) -> ProcessSnapshot:
    """Sample every process once and build both top lists from the same pass."""
    if count is None:
        count = settings.TOP_PROCESSES
    try:
        rows = [proc.info for proc in psutil.process_iter(_ATTRS)]
    except Exception as e:
        logger.debug(f"Failed to list processes: {e}")
        return ProcessSnapshot.unavailable()

    return ProcessSnapshot(
        cpu_top=top_processes(rows, "cpu_percent", count),
        ram_top=top_processes(rows, "memory_percent", count),
    )
