"""
Messages delivered to the coordinator inbox.

Every result of an asynchronous command carries the generation captured when
the command was issued, so the owning poller can drop results from an older
polling session. Terminal events and heartbeat ticks carry no generation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Union

from .models import SubsystemKind


@dataclass(frozen=True, slots=True)
class TickResult:
    kind: SubsystemKind
    generation: int
    payload: Any


@dataclass(frozen=True, slots=True)
class SpeedtestTrigger:
    generation: int


@dataclass(frozen=True, slots=True)
class SpeedtestResult:
    generation: int
    download_mbps: float


@dataclass(frozen=True, slots=True)
class HeartbeatTick:
    at: datetime


@dataclass(frozen=True, slots=True)
class UserInput:
    key: str


@dataclass(frozen=True, slots=True)
class Resize:
    width: int
    height: int


Message = Union[TickResult, SpeedtestTrigger, SpeedtestResult, HeartbeatTick, UserInput, Resize]
