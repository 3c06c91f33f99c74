"""
Rich-based dashboard for live system telemetry.

Rendering is a pure function of the coordinator's view and poller states;
``SystemDashboard`` owns the asyncio message loop, the background command
tasks, the blessed key reader and the Rich ``Live`` surface.
"""

from .lifecycle import SystemDashboard
from .panels import render_view

__all__ = [
    "SystemDashboard",
    "render_view",
]
