"""CPU, temperature, fan and RAM acquisition."""

from __future__ import annotations

import platform
import re

import psutil
from loguru import logger

from sysdash.models import UNAVAILABLE, CpuSnapshot

from .shell import run_command

_MIB = 1024 * 1024


def parse_fan_speed(sensors_output: str, label: str = "cpu_fan") -> str | None:
    """Extract ``"<n> RPM"`` for ``label`` from ``sensors`` output."""
    match = re.search(rf"{re.escape(label)}:\s+(\d+\s+RPM)", sensors_output)
    return match.group(1) if match else None


def _cpu_name() -> str:
    try:
        with open("/proc/cpuinfo", encoding="utf-8") as handle:
            for line in handle:
                if line.startswith("model name"):
                    return line.split(":", 1)[1].strip()
    except OSError:
        pass
    return platform.processor() or "Unknown"


def _first_temperature() -> float:
    sensors_temperatures = getattr(psutil, "sensors_temperatures", None)
    if sensors_temperatures is None:
        return 0.0
    try:
        temps = sensors_temperatures()
    except Exception as e:
        logger.debug(f"Failed to read temperatures: {e}")
        return 0.0
    for entries in temps.values():
        if entries:
            return float(entries[0].current)
    return 0.0


def collect_cpu() -> CpuSnapshot:
    """Sample CPU usage, frequency, temperature, fan speed and RAM."""
    fan_speed = UNAVAILABLE
    sensors_output = run_command(["sensors"])
    if sensors_output:
        fan_speed = parse_fan_speed(sensors_output) or UNAVAILABLE

    try:
        usage = float(psutil.cpu_percent(interval=None))
    except Exception as e:
        logger.debug(f"Failed to read cpu usage: {e}")
        usage = 0.0

    try:
        freq = psutil.cpu_freq()
        frequency = float(freq.current) if freq is not None else 0.0
        name = _cpu_name()
    except Exception as e:
        logger.debug(f"Failed to read cpu info: {e}")
        name, frequency = UNAVAILABLE, 0.0

    try:
        vm = psutil.virtual_memory()
    except Exception as e:
        logger.debug(f"Failed to read virtual memory: {e}")
        ram_total = ram_used = ram_free = UNAVAILABLE
        ram_used_percent = ram_free_percent = "0%"
    else:
        ram_total = f"{vm.total / _MIB:.2f}"
        ram_used = f"{vm.used / _MIB:.2f}"
        ram_free = f"{vm.free / _MIB:.2f}"
        ram_used_percent = f"{vm.used / vm.total * 100:.0f}%" if vm.total else "0%"
        ram_free_percent = f"{vm.free / vm.total * 100:.0f}%" if vm.total else "0%"

    return CpuSnapshot(
        name=name,
        frequency_mhz=frequency,
        usage_percent=usage,
        temperature_c=_first_temperature(),
        fan_speed=fan_speed,
        ram_total=ram_total,
        ram_used=ram_used,
        ram_free=ram_free,
        ram_used_percent=ram_used_percent,
        ram_free_percent=ram_free_percent,
    )
