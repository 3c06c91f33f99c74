"""Network interface detection, byte counters and download speed measurement."""

from __future__ import annotations

import os
import re
import time

import psutil
from loguru import logger

from sysdash import settings
from sysdash.models import InterfaceInfo, NetworkSample

from .shell import run_command

_ROUTE_DEV_PATTERN = re.compile(r"\bdev\s+(\S+)")
_FALLBACK_INTERFACE = "eth0"
_IPV6_DISABLE_PATH = "/proc/sys/net/ipv6/conf/all/disable_ipv6"


def parse_route_interface(route_output: str) -> str | None:
    """Return the device name from ``ip route get`` output."""
    match = _ROUTE_DEV_PATTERN.search(route_output)
    return match.group(1) if match else None


def parse_wifi_band(iw_output: str) -> str:
    """Classify the band from ``iw dev <iface> link`` output; empty when unknown."""
    if "5.0 MHz" in iw_output or "5180" in iw_output or "freq: 5" in iw_output:
        return "5GHz"
    if "freq: 2" in iw_output:
        return "2.4GHz"
    return ""


def detect_interface_info(interface: str | None = None) -> InterfaceInfo:
    """Find the default-route interface, whether it is wireless, and the IPv6 status."""
    name = interface
    if name is None:
        route_output = run_command(["ip", "route", "get", "1.1.1.1"])
        name = parse_route_interface(route_output) if route_output else None
    if not name:
        name = _FALLBACK_INTERFACE

    net_type, wifi_band = "Wired", ""
    if os.path.isdir(f"/sys/class/net/{name}/wireless"):
        net_type = "WiFi"
        wifi_band = parse_wifi_band(run_command(["iw", "dev", name, "link"]) or "")

    ipv6_disabled = False
    try:
        with open(_IPV6_DISABLE_PATH, encoding="utf-8") as handle:
            ipv6_disabled = handle.read().strip() == "1"
    except OSError as e:
        logger.debug(f"Could not read IPv6 status: {e}")

    info = InterfaceInfo(name=name, net_type=net_type, wifi_band=wifi_band, ipv6_disabled=ipv6_disabled)
    logger.info(f"Network interface detected: {info}")
    return info


def read_counters(interface: str) -> NetworkSample:
    """Read cumulative byte counters for ``interface``; zeros if it is not present."""
    timestamp = time.monotonic()
    try:
        counters = psutil.net_io_counters(pernic=True)
    except Exception as e:
        logger.debug(f"Failed to read network counters: {e}")
        return NetworkSample.unavailable(timestamp)

    counter = counters.get(interface)
    if counter is None:
        return NetworkSample.unavailable(timestamp)
    return NetworkSample(bytes_recv=counter.bytes_recv, bytes_sent=counter.bytes_sent, timestamp=timestamp)


def parse_speedtest_csv(raw_output: str) -> float:
    """Return download Mbps from ``speedtest-cli --csv`` output (7th field, bits/s); 0.0 if unusable."""
    fields = raw_output.split(",")
    if len(fields) < 7:
        return 0.0
    try:
        download_bits = float(fields[6].strip())
    except ValueError:
        return 0.0
    return download_bits / 1_000_000.0


def measure_download_speed(server: str | None = None, timeout: float | None = None) -> float:
    """Run a download-only speedtest; may block for a long time."""
    args = ["speedtest-cli", "--csv", "--no-upload", "--server", server or settings.SPEEDTEST_SERVER]
    output = run_command(args, timeout=timeout if timeout is not None else settings.SPEEDTEST_TIMEOUT)
    if output is None:
        return 0.0
    return parse_speedtest_csv(output)
