"""Rich renderables for the menu, the four telemetry panels and the footer."""

from __future__ import annotations

from typing import Mapping

from rich.align import Align
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sysdash import settings
from sysdash.clock import format_clock, spinner_frame
from sysdash.models import (
    MENU_CHOICES,
    UNAVAILABLE,
    CpuSnapshot,
    GpuSnapshot,
    NetworkSnapshot,
    Page,
    ProcessItem,
    ProcessSnapshot,
    SubsystemKind,
    ViewState,
)
from sysdash.pollers import PollerState

from . import theme
from .utils import SYSDASH_TITLE, format_size, format_speed, parse_float, truncate

PANEL_WIDTH = 88
MIN_PANEL_WIDTH = 40
PANEL_HEIGHT = 16
KEY_WIDTH = 32
# Border plus padding around the panel body
PANEL_CHROME = 6
PANEL_VERTICAL_CHROME = 4
# Table title and header above the process rows
PROCESS_TABLE_CHROME = 2


def panel_width_for(terminal_width: int, columns: int = 1) -> int:
    """Width of one panel when ``columns`` panels share the terminal; full width when the size is unknown."""
    if terminal_width <= 0:
        return PANEL_WIDTH
    return max(min(PANEL_WIDTH, terminal_width // columns), MIN_PANEL_WIDTH)


def _stat_grid(width: int) -> Table:
    grid = Table.grid(padding=(0, 1))
    grid.add_column(width=min(KEY_WIDTH, (width - PANEL_CHROME) // 2), no_wrap=True)
    grid.add_column(no_wrap=True)
    return grid


def _stat(grid: Table, key: str, value: str | Text, style: str = theme.VALUE_STYLE) -> None:
    if isinstance(value, str):
        value = Text(value, style=style)
    grid.add_row(Text(key, style=theme.KEY_STYLE), value)


def _panel(body: RenderableType, title: str, width: int, height: int = PANEL_HEIGHT) -> Panel:
    return Panel(
        body,
        title=Text(title, style=theme.TITLE_STYLE),
        title_align="left",
        border_style=theme.COLOR_SUBTEXT,
        width=width,
        height=height,
        padding=(1, 2),
    )


def render_cpu(snapshot: CpuSnapshot, width: int = PANEL_WIDTH) -> Panel:
    grid = _stat_grid(width)
    _stat(grid, "Model:", f"{snapshot.name} @ {snapshot.frequency_mhz:.2f} MHz")
    grid.add_row("", "")

    usage = theme.progress_bar(20, snapshot.usage_percent)
    usage.append(f" {snapshot.usage_percent:.2f}%", style=f"bold {theme.usage_color(snapshot.usage_percent)}")
    _stat(grid, "Usage:", usage)
    _stat(
        grid,
        "Temp:",
        f"{theme.temp_icon(snapshot.temperature_c)} {snapshot.temperature_c:.2f} °C",
        style=f"bold {theme.temp_color(snapshot.temperature_c)}",
    )
    _stat(grid, "Fan Speed:", snapshot.fan_speed)
    grid.add_row("", "")

    _stat(grid, "RAM Total:", f"{snapshot.ram_total} MiB")
    _stat(grid, f"RAM Used ({snapshot.ram_used_percent}):", f"{snapshot.ram_used} MiB")
    _stat(grid, f"RAM Free ({snapshot.ram_free_percent}):", f"{snapshot.ram_free} MiB")
    return _panel(grid, "CPU DETAILS", width)


def render_gpu(snapshot: GpuSnapshot, width: int = PANEL_WIDTH) -> Panel:
    temperature = parse_float(snapshot.temperature)
    usage = theme.progress_bar(20, parse_float(snapshot.usage))
    usage.append(f" {snapshot.usage}%", style=theme.VALUE_STYLE)

    fans = snapshot.fans
    if "RPM" not in fans and UNAVAILABLE not in fans:
        fans += "%"

    grid = _stat_grid(width)
    _stat(grid, "Model:", snapshot.name)
    grid.add_row("", "")
    _stat(grid, "Usage:", usage)
    _stat(
        grid,
        "Temp:",
        f"{theme.temp_icon(temperature)} {snapshot.temperature}°C",
        style=f"bold {theme.temp_color(temperature)}",
    )
    _stat(grid, "Fans:", fans)
    grid.add_row("", "")
    _stat(grid, "Memory Total:", f"{snapshot.memory_total} MiB")
    _stat(grid, f"Memory Used ({snapshot.memory_used_percent}):", f"{snapshot.memory_used} MiB")
    _stat(grid, f"Memory Free ({snapshot.memory_free_percent}):", f"{snapshot.memory_free} MiB")
    return _panel(grid, "GPU DETAILS", width)


def _speedtest_line(snapshot: NetworkSnapshot) -> Text:
    if snapshot.is_speedtesting:
        return Text("Running...", style=theme.KEY_STYLE)
    if not snapshot.speedtest_time:
        return Text("Waiting...", style=theme.KEY_STYLE)
    line = Text(f"{snapshot.speedtest_download:.2f} Mbps", style=f"bold {theme.COLOR_CYAN}")
    line.append(f" (at {snapshot.speedtest_time})", style=theme.HELP_STYLE)
    return line


def render_network(snapshot: NetworkSnapshot, width: int = PANEL_WIDTH) -> Panel:
    interface = snapshot.interface
    if interface.ipv6_disabled:
        ipv6 = Text("Disabled", style=f"bold {theme.COLOR_SUCCESS}")
    else:
        ipv6 = Text("Enabled", style=f"bold {theme.COLOR_ERROR}")

    grid = _stat_grid(width)
    _stat(grid, "Interface:", interface.name)
    _stat(grid, "Type:", interface.display_type)
    _stat(grid, "IPv6:", ipv6)
    grid.add_row("", "")
    _stat(grid, "Download:", format_speed(snapshot.download_rate))
    _stat(grid, "Upload:", format_speed(snapshot.upload_rate))
    grid.add_row("", "")
    _stat(grid, "Total Rx:", format_size(snapshot.bytes_recv))
    _stat(grid, "Total Tx:", format_size(snapshot.bytes_sent))
    grid.add_row("", "")
    _stat(grid, "Speedtest:", _speedtest_line(snapshot))
    return _panel(grid, "NETWORK DETAILS", width)


def _process_table(title: str, items: tuple[ProcessItem, ...], rows: int) -> Table:
    table = Table(
        title=Text(title, style=f"bold {theme.COLOR_PRIMARY}"),
        title_justify="left",
        show_header=True,
        header_style=f"bold {theme.COLOR_SECONDARY}",
        border_style=theme.COLOR_SUBTEXT,
        box=None,
        padding=(0, 1),
    )
    table.add_column("Name", width=18, no_wrap=True)
    table.add_column("PID", width=8, no_wrap=True)
    table.add_column("Usage %", width=8, justify="right", no_wrap=True)

    if not items:
        for _ in range(rows):
            table.add_row(Text("No data...", style=theme.KEY_STYLE), "", "")
    for item in items[:rows]:
        table.add_row(truncate(item.name, 18), item.pid, f"{item.value:.1f}")
    return table


def render_processes(snapshot: ProcessSnapshot, width: int = PANEL_WIDTH, rows: int | None = None) -> Panel:
    """Both top lists side by side; ``rows`` defaults to ``SYSDASH_TOP_PROCESSES``."""
    if rows is None:
        rows = settings.TOP_PROCESSES
    grid = Table.grid(padding=(0, 2))
    grid.add_column()
    grid.add_column()
    grid.add_row(
        _process_table("Top CPU", snapshot.cpu_top, rows),
        _process_table("Top RAM", snapshot.ram_top, rows),
    )
    height = max(PANEL_HEIGHT, rows + PROCESS_TABLE_CHROME + PANEL_VERTICAL_CHROME)
    return _panel(grid, "TOP PROCESSES", width, height=height)


def render_menu(view: ViewState) -> RenderableType:
    lines = [Text(f"{SYSDASH_TITLE}: what data would you like to see?", style=f"bold {theme.COLOR_SECONDARY}"), Text("")]
    for index, choice in enumerate(MENU_CHOICES):
        marker = "*" if index in view.selection else " "
        if index == view.cursor:
            lines.append(Text(f"> {choice.value} {marker}", style=f"bold {theme.COLOR_SUCCESS}"))
        else:
            lines.append(Text(f"  {choice.value} {marker}", style=theme.COLOR_TEXT))
    lines.append(Text(""))
    lines.append(Text("[Enter] Select • [q] Quit", style=theme.HELP_STYLE))
    return Group(*lines)


_PANEL_RENDERERS = {
    SubsystemKind.CPU: render_cpu,
    SubsystemKind.GPU: render_gpu,
    SubsystemKind.NETWORK: render_network,
    SubsystemKind.PROCESSES: render_processes,
}

_SINGLE_PAGES = {
    Page.CPU: SubsystemKind.CPU,
    Page.GPU: SubsystemKind.GPU,
    Page.NETWORK: SubsystemKind.NETWORK,
    Page.PROCESSES: SubsystemKind.PROCESSES,
}


def render_subsystem(kind: SubsystemKind, state: PollerState, width: int = PANEL_WIDTH) -> Panel:
    return _PANEL_RENDERERS[kind](state.snapshot, width)


def render_all(states: Mapping[SubsystemKind, PollerState], width: int = PANEL_WIDTH) -> Table:
    """2x2 grid: CPU | GPU over Network | Processes, each ``width`` columns wide."""
    grid = Table.grid()
    grid.add_column()
    grid.add_column()
    grid.add_row(
        render_subsystem(SubsystemKind.CPU, states[SubsystemKind.CPU], width),
        render_subsystem(SubsystemKind.GPU, states[SubsystemKind.GPU], width),
    )
    grid.add_row(
        render_subsystem(SubsystemKind.NETWORK, states[SubsystemKind.NETWORK], width),
        render_subsystem(SubsystemKind.PROCESSES, states[SubsystemKind.PROCESSES], width),
    )
    return grid


def render_footer(view: ViewState) -> Text:
    footer = Text(f" {spinner_frame(view.frame)} {format_clock(view.clock)}", style=f"bold {theme.COLOR_SUCCESS}")
    if view.page is not Page.MENU:
        footer.append("   [Space] Return to Menu", style=theme.HELP_STYLE)
    return footer


def render_view(view: ViewState, states: Mapping[SubsystemKind, PollerState]) -> RenderableType:
    """Render the active page plus the heartbeat footer; no side effects."""
    if view.page is Page.MENU:
        content: RenderableType = render_menu(view)
    elif view.page is Page.ALL:
        content = render_all(states, panel_width_for(view.width, columns=2))
    else:
        kind = _SINGLE_PAGES[view.page]
        content = render_subsystem(kind, states[kind], panel_width_for(view.width))

    body = Group(content, render_footer(view))
    if view.width > 0 and view.height > 0:
        return Align.center(body, vertical="middle", width=None, height=view.height)
    return body


def render_error(error: Exception) -> Panel:
    return Panel(f"Dashboard rendering error: {type(error).__name__}: {error}", style="red")
