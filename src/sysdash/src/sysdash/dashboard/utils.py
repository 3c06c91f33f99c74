"""Utility functions for the dashboard."""

SYSDASH_TITLE = "SYSDASH"


def format_speed(bytes_per_sec: float) -> str:
    """Format a transfer rate the way the network panel shows it."""
    if bytes_per_sec < 1024:
        return f"{bytes_per_sec:.0f} B/s"
    if bytes_per_sec < 1024 * 1024:
        return f"{bytes_per_sec / 1024:.2f} KB/s"
    return f"{bytes_per_sec / (1024 * 1024):.2f} MB/s"


def format_size(value: int) -> str:
    """Convert bytes into a compact human readable string."""

    units = ["B", "KB", "MB", "GB"]
    size = float(value)
    for unit in units:
        if abs(size) < 1024 or unit == units[-1]:
            return f"{size:.2f} {unit}" if unit != "B" else f"{int(size)} {unit}"
        size /= 1024
    return f"{size:.2f} {units[-1]}"


def parse_float(value: str) -> float:
    """Best-effort float for values that may be sentinels like ``"N/A"``."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def truncate(name: str, width: int) -> str:
    if len(name) > width - 2:
        return name[: width - 3] + "…"
    return name
