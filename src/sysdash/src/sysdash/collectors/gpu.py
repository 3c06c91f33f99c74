"""NVIDIA GPU acquisition through ``nvidia-smi``."""

from __future__ import annotations

from dataclasses import replace

from sysdash.models import GpuSnapshot

from .cpu import parse_fan_speed
from .shell import run_command

NVIDIA_SMI_QUERY = [
    "nvidia-smi",
    "--query-gpu=name,utilization.gpu,temperature.gpu,fan.speed,memory.total,memory.used,memory.free",
    "--format=csv,noheader,nounits",
]


def _percent(part: str, total: float) -> str:
    try:
        return f"{float(part) / total * 100:.0f}%"
    except ValueError:
        return "0%"


def parse_nvidia_smi_output(raw_output: str) -> GpuSnapshot:
    """Convert one ``nvidia-smi`` CSV row into a snapshot; only the first GPU is used."""
    line = raw_output.strip().splitlines()[0] if raw_output.strip() else ""
    fields = [value.strip() for value in line.split(", ")]
    if len(fields) < 7:
        return GpuSnapshot.unavailable(name="Error parsing")

    name, usage, temperature, fans, total, used, free = fields[:7]
    used_percent = free_percent = "0%"
    try:
        total_value = float(total)
    except ValueError:
        total_value = 0.0
    if total_value > 0:
        used_percent = _percent(used, total_value)
        free_percent = _percent(free, total_value)

    return GpuSnapshot(
        name=name,
        usage=usage,
        temperature=temperature,
        fans=fans,
        memory_total=total,
        memory_used=used,
        memory_free=free,
        memory_used_percent=used_percent,
        memory_free_percent=free_percent,
    )


def collect_gpu() -> GpuSnapshot:
    """Sample the first NVIDIA GPU; a ``sensors`` gpu_fan reading overrides the fan percent."""
    output = run_command(NVIDIA_SMI_QUERY)
    if output is None:
        return GpuSnapshot.unavailable()

    snapshot = parse_nvidia_smi_output(output)
    if snapshot.name == "Error parsing":
        return snapshot

    sensors_output = run_command(["sensors"])
    if sensors_output:
        fan_rpm = parse_fan_speed(sensors_output, label="gpu_fan")
        if fan_rpm:
            snapshot = replace(snapshot, fans=fan_rpm)
    return snapshot
