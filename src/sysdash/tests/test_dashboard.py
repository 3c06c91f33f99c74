import asyncio
from datetime import datetime
from types import SimpleNamespace

import pytest
from rich.console import Console

from common.test_utils import FakeCollector

from sysdash import settings
from sysdash.coordinator import Coordinator
from sysdash.dashboard import SystemDashboard, render_view
from sysdash.dashboard.key_router import normalize_key
from sysdash.dashboard.panels import (
    panel_width_for,
    render_error,
    render_gpu,
    render_menu,
    render_network,
    render_processes,
)
from sysdash.dashboard.utils import format_size, format_speed, truncate
from sysdash.messages import UserInput
from sysdash.models import (
    CpuSnapshot,
    GpuSnapshot,
    InterfaceInfo,
    NetworkSample,
    NetworkSnapshot,
    Page,
    ProcessItem,
    ProcessSnapshot,
    SubsystemKind,
    ViewState,
)
from sysdash.pollers import CpuPoller, GpuPoller, NetworkPoller, ProcessPoller


def _text(renderable) -> str:
    console = Console(record=True, width=200, color_system=None)
    console.print(renderable)
    return console.export_text()


def _coordinator(heartbeat_interval: float = 0.01) -> Coordinator:
    pollers = {
        SubsystemKind.CPU: CpuPoller(FakeCollector([], default=CpuSnapshot(name="Fake CPU", usage_percent=25.0)), cadence=0.01),
        SubsystemKind.GPU: GpuPoller(FakeCollector([], default=GpuSnapshot(name="Fake GPU", usage="10", fans="40")), cadence=0.01),
        SubsystemKind.NETWORK: NetworkPoller(
            FakeCollector([], default=NetworkSample(bytes_recv=2048, bytes_sent=1024, timestamp=1.0)),
            FakeCollector([], default=88.0),
            InterfaceInfo(name="eth0", net_type="Wired"),
            cadence=0.01,
            speedtest_interval=300.0,
        ),
        SubsystemKind.PROCESSES: ProcessPoller(
            FakeCollector([], default=ProcessSnapshot(cpu_top=(ProcessItem(pid="42", name="python", value=9.5),))),
            cadence=0.02,
        ),
    }
    return Coordinator(pollers, heartbeat_interval=heartbeat_interval)


def test_menu_marks_cursor_and_selection():
    text = _text(render_menu(ViewState(cursor=2, selection=frozenset({1}))))
    assert "what data would you like to see?" in text
    assert "> cpu" in text
    assert "  network *" in text
    assert "[q] Quit" in text


def test_gpu_panel_appends_percent_to_numeric_fans():
    assert "40%" in _text(render_gpu(GpuSnapshot(name="RTX", fans="40")))
    assert "940 RPM" in _text(render_gpu(GpuSnapshot(name="RTX", fans="940 RPM")))
    unavailable = _text(render_gpu(GpuSnapshot.unavailable()))
    fans_line = next(line for line in unavailable.splitlines() if "Fans:" in line)
    assert "N/A%" not in fans_line


def test_network_panel_speedtest_states():
    interface = InterfaceInfo(name="wlan0", net_type="WiFi", wifi_band="5GHz", ipv6_disabled=True)

    running = _text(render_network(NetworkSnapshot(interface=interface, is_speedtesting=True)))
    assert "Running..." in running
    assert "WiFi (5GHz)" in running
    assert "Disabled" in running

    waiting = _text(render_network(NetworkSnapshot(interface=interface)))
    assert "Waiting..." in waiting

    done = _text(render_network(NetworkSnapshot(speedtest_download=123.4, speedtest_time="14:05", download_rate=2048)))
    assert "123.40 Mbps (at 14:05)" in done
    assert "2.00 KB/s" in done
    assert "Enabled" in done


def test_process_panel_placeholder_rows():
    text = _text(render_processes(ProcessSnapshot(), rows=5))
    assert "TOP PROCESSES" in text
    assert text.count("No data...") == 10


def test_process_panel_rows_follow_top_processes_setting(monkeypatch):
    monkeypatch.setattr(settings, "TOP_PROCESSES", 8)
    items = tuple(ProcessItem(pid=str(100 + i), name=f"worker-{i}", value=float(50 - i)) for i in range(8))
    text = _text(render_processes(ProcessSnapshot(cpu_top=items, ram_top=items)))

    for i in range(8):
        assert text.count(f"worker-{i}") == 2
    assert "No data..." not in text


def test_process_panel_grows_for_long_lists():
    items = tuple(ProcessItem(pid=str(i), name=f"task-{i:02d}", value=1.0) for i in range(12))
    text = _text(render_processes(ProcessSnapshot(cpu_top=items), rows=12))

    for i in range(12):
        assert f"task-{i:02d}" in text
    assert text.count("No data...") == 0


@pytest.mark.parametrize(
    ("terminal_width", "columns", "expected"),
    [(0, 2, 88), (120, 2, 60), (300, 2, 88), (50, 2, 40), (70, 1, 70)],
)
def test_panel_width_for(terminal_width, columns, expected):
    assert panel_width_for(terminal_width, columns) == expected


def test_all_page_fits_terminal_width():
    coordinator = _coordinator()
    view = ViewState(page=Page.ALL, width=120, height=40)
    console = Console(record=True, width=120, color_system=None)
    console.print(render_view(view, coordinator.states))
    lines = console.export_text().splitlines()

    top_row = next(line for line in lines if "CPU DETAILS" in line)
    assert "GPU DETAILS" in top_row
    assert top_row.count("╮") == 2
    bottom_row = next(line for line in lines if "NETWORK DETAILS" in line)
    assert "TOP PROCESSES" in bottom_row
    assert bottom_row.count("╮") == 2


def test_render_view_all_page_shows_every_panel():
    coordinator = _coordinator()
    view = ViewState(page=Page.ALL, clock=datetime(2024, 5, 6, 13, 7, 8))
    text = _text(render_view(view, coordinator.states))

    for title in ("CPU DETAILS", "GPU DETAILS", "NETWORK DETAILS", "TOP PROCESSES"):
        assert title in text
    assert "2024-05-06 01:07:08 PM" in text
    assert "[Space] Return to Menu" in text


def test_render_falls_back_to_error_panel():
    def broken(view, states):
        raise KeyError("missing")

    dashboard = SystemDashboard(_coordinator(), render=broken)
    assert "Dashboard rendering error: KeyError" in _text(dashboard.render())
    assert "boom" in _text(render_error(ValueError("boom")))


@pytest.mark.parametrize(
    ("keystroke", "expected"),
    [
        (SimpleNamespace(is_sequence=True, name="KEY_UP"), "up"),
        (SimpleNamespace(is_sequence=True, name="KEY_ENTER"), "enter"),
        (SimpleNamespace(is_sequence=True, name="KEY_F12"), None),
        (" ", "space"),
        ("\r", "enter"),
        ("\x03", "ctrl+c"),
        ("q", "q"),
        ("", None),
    ],
)
def test_normalize_key(keystroke, expected):
    assert normalize_key(keystroke) == expected


def test_formatting_helpers():
    assert format_speed(512) == "512 B/s"
    assert format_speed(1536) == "1.50 KB/s"
    assert format_speed(3 * 1024 * 1024) == "3.00 MB/s"
    assert format_size(100) == "100 B"
    assert format_size(5 * 1024 ** 3) == "5.00 GB"
    assert truncate("a-very-long-process-name", 10) == "a-very-…"


def test_post_requires_started_dashboard():
    dashboard = SystemDashboard(_coordinator())
    with pytest.raises(RuntimeError):
        dashboard.post(UserInput(key="q"))


def test_dashboard_message_loop_end_to_end():
    coordinator = _coordinator()
    dashboard = SystemDashboard(coordinator)

    async def scenario():
        await dashboard.start()
        try:
            dashboard.post(UserInput(key="enter"))
            for _ in range(200):
                await asyncio.wait_for(dashboard.step(), timeout=1.0)
                states = coordinator.states
                if (
                    all(state.generation == 1 and state.last_sample_time is not None for state in states.values())
                    and states[SubsystemKind.NETWORK].snapshot.speedtest_download == 88.0
                    and coordinator.view.frame > 0
                ):
                    break

            assert coordinator.view.page is Page.ALL
            assert coordinator.states[SubsystemKind.CPU].snapshot.name == "Fake CPU"
            assert coordinator.states[SubsystemKind.NETWORK].snapshot.speedtest_download == 88.0
            assert coordinator.view.frame > 0
            assert "Fake GPU" in _text(dashboard.render())

            dashboard.post(UserInput(key="space"))
            await dashboard.step()
            assert coordinator.view.page is Page.MENU
            assert all(not state.polling for state in coordinator.states.values())

            dashboard.post(UserInput(key="q"))
            await dashboard.step()
            assert coordinator.quit_requested is True
        finally:
            await dashboard.stop()
        assert dashboard.pending_tasks == 0

    asyncio.run(scenario())
