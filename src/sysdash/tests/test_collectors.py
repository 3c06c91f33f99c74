import pytest

from sysdash import collectors, settings
from sysdash.collectors import cpu, gpu, network, processes
from sysdash.collectors.shell import run_command
from sysdash.models import GpuSnapshot, InterfaceInfo, NetworkSample, SubsystemKind

NVIDIA_SMI_ROW = "NVIDIA GeForce RTX 3080, 37, 61, 45, 10240, 2048, 8192\n"

SENSORS_OUTPUT = """\
it8792-isa-0a60
Adapter: ISA adapter
cpu_fan:     1180 RPM  (min =    0 RPM)
gpu_fan:      940 RPM  (min =    0 RPM)
"""


def _fake_run(outputs):
    def _run(args, timeout=None):
        return outputs.get(args[0])

    return _run


def test_parse_nvidia_smi_output():
    snapshot = gpu.parse_nvidia_smi_output(NVIDIA_SMI_ROW)
    assert snapshot.name == "NVIDIA GeForce RTX 3080"
    assert snapshot.usage == "37"
    assert snapshot.temperature == "61"
    assert snapshot.fans == "45"
    assert snapshot.memory_total == "10240"
    assert snapshot.memory_used_percent == "20%"
    assert snapshot.memory_free_percent == "80%"


def test_parse_nvidia_smi_uses_first_gpu_only():
    raw = NVIDIA_SMI_ROW + "Second GPU, 99, 99, 99, 100, 100, 0\n"
    assert gpu.parse_nvidia_smi_output(raw).name == "NVIDIA GeForce RTX 3080"


@pytest.mark.parametrize("raw", ["", "garbage", "a, b, c"])
def test_parse_nvidia_smi_rejects_short_rows(raw):
    snapshot = gpu.parse_nvidia_smi_output(raw)
    assert snapshot.name == "Error parsing"
    assert snapshot.usage == "N/A"


def test_parse_fan_speed():
    assert cpu.parse_fan_speed(SENSORS_OUTPUT) == "1180 RPM"
    assert cpu.parse_fan_speed(SENSORS_OUTPUT, label="gpu_fan") == "940 RPM"
    assert cpu.parse_fan_speed("no fans here") is None


def test_parse_speedtest_csv():
    row = "18531,Provider,City,2024-01-01T00:00:00.000000Z,12.5,8.1,123400000.0,0,,1.2.3.4"
    assert network.parse_speedtest_csv(row) == pytest.approx(123.4)
    assert network.parse_speedtest_csv("") == 0.0
    assert network.parse_speedtest_csv("a,b,c,d,e,f,not-a-number") == 0.0


def test_parse_route_interface():
    output = "1.1.1.1 via 192.168.1.1 dev wlp3s0 src 192.168.1.20 uid 1000\n    cache\n"
    assert network.parse_route_interface(output) == "wlp3s0"
    assert network.parse_route_interface("unreachable") is None


def test_parse_wifi_band():
    assert network.parse_wifi_band("Connected to aa:bb\n\tfreq: 5180\n") == "5GHz"
    assert network.parse_wifi_band("Connected to aa:bb\n\tfreq: 2437\n") == "2.4GHz"
    assert network.parse_wifi_band("Not connected.") == ""


def test_collect_gpu_without_nvidia_smi(monkeypatch):
    monkeypatch.setattr(gpu, "run_command", _fake_run({}))
    assert gpu.collect_gpu() == GpuSnapshot.unavailable()


def test_collect_gpu_prefers_sensors_fan_rpm(monkeypatch):
    monkeypatch.setattr(gpu, "run_command", _fake_run({"nvidia-smi": NVIDIA_SMI_ROW, "sensors": SENSORS_OUTPUT}))
    snapshot = gpu.collect_gpu()
    assert snapshot.fans == "940 RPM"
    assert snapshot.usage == "37"


def test_collect_cpu_without_sensors(monkeypatch):
    monkeypatch.setattr(cpu, "run_command", _fake_run({}))
    snapshot = cpu.collect_cpu()
    assert snapshot.fan_speed == "N/A"
    assert snapshot.usage_percent >= 0.0
    assert snapshot.ram_total != "Loading..."


def test_measure_download_speed_without_speedtest_cli(monkeypatch):
    monkeypatch.setattr(network, "run_command", _fake_run({}))
    assert network.measure_download_speed() == 0.0


def test_detect_interface_falls_back_to_eth0(monkeypatch):
    monkeypatch.setattr(network, "run_command", _fake_run({}))
    info = network.detect_interface_info()
    assert info.name == "eth0"


def test_read_counters_for_missing_interface():
    sample = network.read_counters("definitely-not-an-interface0")
    assert sample.available is False
    assert sample.bytes_recv == 0


def test_top_processes_ranks_descending_and_skips_missing():
    rows = [
        {"pid": 1, "name": "init", "cpu_percent": 0.5},
        {"pid": 2, "name": "python", "cpu_percent": 40.0},
        {"pid": 3, "name": None, "cpu_percent": 12.0},
        {"pid": 4, "name": "zombie", "cpu_percent": None},
    ]
    top = processes.top_processes(rows, "cpu_percent", 2)
    assert [(item.pid, item.name, item.value) for item in top] == [("2", "python", 40.0), ("3", "?", 12.0)]


def test_collect_processes_limits_both_lists():
    snapshot = processes.collect_processes(count=3)
    assert len(snapshot.cpu_top) <= 3
    assert len(snapshot.ram_top) <= 3


def test_collect_network_falls_back_to_default_route_interface(monkeypatch):
    reads = []

    def read_counters(name):
        reads.append(name)
        return NetworkSample(bytes_recv=1, bytes_sent=2, timestamp=3.0)

    monkeypatch.setattr(settings, "NETWORK_INTERFACE", None)
    monkeypatch.setattr(collectors, "detect_interface_info", lambda: InterfaceInfo(name="wlan9", net_type="WiFi"))
    monkeypatch.setattr(collectors, "read_counters", read_counters)

    sample = collectors.collect(SubsystemKind.NETWORK)
    assert reads == ["wlan9"]
    assert sample.bytes_sent == 2


def test_collect_network_prefers_configured_interface(monkeypatch):
    reads = []
    monkeypatch.setattr(settings, "NETWORK_INTERFACE", "eth7")
    monkeypatch.setattr(collectors, "read_counters", lambda name: reads.append(name) or NetworkSample.unavailable(0.0))

    collectors.collect(SubsystemKind.NETWORK)
    assert reads == ["eth7"]


def test_collect_network_reports_sentinel_for_missing_interface(monkeypatch):
    monkeypatch.setattr(settings, "NETWORK_INTERFACE", "definitely-not-an-interface0")

    sample = collectors.collect(SubsystemKind.NETWORK)
    assert sample.available is False
    assert sample.bytes_recv == 0


def test_run_command_missing_binary_returns_none():
    assert run_command(["sysdash-no-such-binary-xyz"]) is None


def test_run_command_nonzero_exit_returns_none():
    assert run_command(["false"]) is None
