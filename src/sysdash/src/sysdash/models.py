"""Data models shared by the collectors, pollers and the dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

LOADING = "Loading..."
UNAVAILABLE = "N/A"


class SubsystemKind(str, Enum):
    CPU = "cpu"
    GPU = "gpu"
    NETWORK = "network"
    PROCESSES = "processes"


class Page(str, Enum):
    MENU = "menu"
    ALL = "all"
    NETWORK = "network"
    CPU = "cpu"
    GPU = "gpu"
    PROCESSES = "processes"


# Menu order
MENU_CHOICES: tuple[Page, ...] = (Page.ALL, Page.NETWORK, Page.CPU, Page.GPU, Page.PROCESSES)

PAGE_SUBSYSTEMS: dict[Page, tuple[SubsystemKind, ...]] = {
    Page.MENU: (),
    Page.ALL: (SubsystemKind.CPU, SubsystemKind.GPU, SubsystemKind.NETWORK, SubsystemKind.PROCESSES),
    Page.NETWORK: (SubsystemKind.NETWORK,),
    Page.CPU: (SubsystemKind.CPU,),
    Page.GPU: (SubsystemKind.GPU,),
    Page.PROCESSES: (SubsystemKind.PROCESSES,),
}


@dataclass(frozen=True, slots=True)
class CpuSnapshot:
    """CPU and RAM figures; RAM values are MiB strings."""

    name: str = LOADING
    frequency_mhz: float = 0.0
    usage_percent: float = 0.0
    temperature_c: float = 0.0
    fan_speed: str = LOADING
    ram_total: str = LOADING
    ram_used: str = LOADING
    ram_free: str = LOADING
    ram_used_percent: str = "0%"
    ram_free_percent: str = "0%"

    @classmethod
    def unavailable(cls) -> "CpuSnapshot":
        return cls(
            name=UNAVAILABLE,
            fan_speed=UNAVAILABLE,
            ram_total=UNAVAILABLE,
            ram_used=UNAVAILABLE,
            ram_free=UNAVAILABLE,
        )


@dataclass(frozen=True, slots=True)
class GpuSnapshot:
    """Values exactly as reported by ``nvidia-smi`` (no units)."""

    name: str = LOADING
    usage: str = LOADING
    temperature: str = LOADING
    fans: str = LOADING
    memory_total: str = LOADING
    memory_used: str = LOADING
    memory_free: str = LOADING
    memory_used_percent: str = "0%"
    memory_free_percent: str = "0%"

    @classmethod
    def unavailable(cls, name: str = UNAVAILABLE) -> "GpuSnapshot":
        return cls(
            name=name,
            usage=UNAVAILABLE,
            temperature=UNAVAILABLE,
            fans=UNAVAILABLE,
            memory_total=UNAVAILABLE,
            memory_used=UNAVAILABLE,
            memory_free=UNAVAILABLE,
        )


@dataclass(frozen=True, slots=True)
class InterfaceInfo:
    name: str = "Detecting..."
    net_type: str = "Unknown"  # "Wired", "WiFi" or "Unknown"
    wifi_band: str = ""  # "2.4GHz", "5GHz" or ""
    ipv6_disabled: bool = False

    @property
    def display_type(self) -> str:
        if self.net_type == "WiFi" and self.wifi_band:
            return f"{self.net_type} ({self.wifi_band})"
        return self.net_type


@dataclass(frozen=True, slots=True)
class NetworkSample:
    """Raw interface counters captured at ``timestamp`` (monotonic seconds)."""

    bytes_recv: int
    bytes_sent: int
    timestamp: float
    available: bool = True

    @classmethod
    def unavailable(cls, timestamp: float) -> "NetworkSample":
        return cls(bytes_recv=0, bytes_sent=0, timestamp=timestamp, available=False)


@dataclass(frozen=True, slots=True)
class NetworkSnapshot:
    interface: InterfaceInfo = field(default_factory=InterfaceInfo)
    download_rate: float = 0.0  # bytes per second
    upload_rate: float = 0.0  # bytes per second
    bytes_recv: int = 0
    bytes_sent: int = 0
    last_check: Optional[float] = None
    speedtest_download: float = 0.0  # Mbps
    speedtest_time: str = ""
    is_speedtesting: bool = False


@dataclass(frozen=True, slots=True)
class ProcessItem:
    pid: str
    name: str
    value: float
    unit: str = "%"


@dataclass(frozen=True, slots=True)
class ProcessSnapshot:
    cpu_top: tuple[ProcessItem, ...] = ()
    ram_top: tuple[ProcessItem, ...] = ()

    @classmethod
    def unavailable(cls) -> "ProcessSnapshot":
        return cls()


@dataclass(frozen=True, slots=True)
class ViewState:
    """Everything the coordinator owns besides the poller states."""

    page: Page = Page.MENU
    cursor: int = 0
    selection: frozenset[int] = frozenset()
    width: int = 0
    height: int = 0
    frame: int = 0
    clock: Optional[datetime] = None

    @property
    def highlighted(self) -> Page:
        return MENU_CHOICES[self.cursor]
