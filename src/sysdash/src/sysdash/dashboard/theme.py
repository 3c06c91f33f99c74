"""Color palette and small styled fragments shared by the panels."""

from __future__ import annotations

from rich.text import Text

# Dracula palette
COLOR_PRIMARY = "#bd93f9"
COLOR_SECONDARY = "#ff79c6"
COLOR_SUCCESS = "#50fa7b"
COLOR_WARNING = "#ffb86c"
COLOR_ERROR = "#ff5555"
COLOR_TEXT = "#f8f8f2"
COLOR_SUBTEXT = "#6272a4"
COLOR_CYAN = "#8be9fd"

KEY_STYLE = COLOR_SUBTEXT
VALUE_STYLE = f"bold {COLOR_TEXT}"
TITLE_STYLE = f"bold {COLOR_PRIMARY}"
HELP_STYLE = f"italic {COLOR_SUBTEXT}"

_RGB_CYAN = (139, 233, 253)
_RGB_GREEN = (80, 250, 123)
_RGB_ORANGE = (255, 184, 108)
_RGB_RED = (255, 85, 85)


def temp_color(temp: float) -> str:
    if temp < 45:
        return COLOR_CYAN
    if temp < 65:
        return COLOR_SUCCESS
    if temp < 85:
        return COLOR_WARNING
    return COLOR_ERROR


def temp_icon(temp: float) -> str:
    if temp < 45:
        return "▁"
    if temp < 65:
        return "▃"
    if temp < 85:
        return "▅"
    return "▇"


def usage_color(usage: float) -> str:
    if usage > 80:
        return COLOR_ERROR
    if usage > 50:
        return COLOR_WARNING
    return COLOR_SUCCESS


def gradient_color(ratio: float) -> str:
    """Cyan to green to orange to red across ``ratio`` in [0, 1]."""
    ratio = min(max(ratio, 0.0), 1.0)
    if ratio < 0.33:
        start, end, local = _RGB_CYAN, _RGB_GREEN, ratio / 0.33
    elif ratio < 0.66:
        start, end, local = _RGB_GREEN, _RGB_ORANGE, (ratio - 0.33) / 0.33
    else:
        start, end, local = _RGB_ORANGE, _RGB_RED, (ratio - 0.66) / 0.34
    r, g, b = (int(lo + (hi - lo) * local) for lo, hi in zip(start, end))
    return f"#{r:02x}{g:02x}{b:02x}"


def progress_bar(width: int, percentage: float) -> Text:
    percentage = min(max(percentage, 0.0), 100.0)
    filled = int(width * percentage / 100)
    bar = Text("[")
    for i in range(filled):
        ratio = i / (width - 1) if width > 1 else 0.0
        bar.append("█", style=gradient_color(ratio))
    if width - filled > 0:
        bar.append("░" * (width - filled), style=COLOR_SUBTEXT)
    bar.append("]")
    return bar
