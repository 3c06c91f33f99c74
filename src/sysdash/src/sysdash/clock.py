"""Heartbeat tick driving the spinner and the wall clock in the footer."""

from __future__ import annotations

from datetime import datetime

from common.utils.commands import Command, after

from sysdash import settings
from sysdash.messages import HeartbeatTick

SPINNER_FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
CLOCK_FORMAT = "%Y-%m-%d %I:%M:%S %p"


def heartbeat(interval: float | None = None) -> Command:
    """Tick once after ``interval``; the coordinator re-issues it on every tick."""
    return after(
        settings.HEARTBEAT_INTERVAL if interval is None else interval,
        lambda: HeartbeatTick(at=datetime.now()),
        name="heartbeat",
    )


def spinner_frame(index: int) -> str:
    return SPINNER_FRAMES[index % len(SPINNER_FRAMES)]


def format_clock(moment: datetime | None) -> str:
    if moment is None:
        return ""
    return moment.strftime(CLOCK_FORMAT)
