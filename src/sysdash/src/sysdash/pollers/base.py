"""
Generation-guarded polling state machine.

A poller never mutates anything: ``start``, ``stop`` and ``handle`` take a
``PollerState`` and return a new one, plus the next command to run when there
is one. Every command is tagged with the generation current when it was
issued. ``start`` bumps the generation, so results produced for an earlier
session no longer match and are dropped without rescheduling. Only the result
handler issues the next tick, which keeps at most one tick in flight per
subsystem.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, ClassVar, Generic, Optional, TypeVar

from common.utils.commands import Command, CommandLike, after
from common.utils.timer_logger import TIMER_NAMES, TimerLogger
from loguru import logger

from sysdash.messages import Message, TickResult
from sysdash.models import SubsystemKind

SnapshotT = TypeVar("SnapshotT")


class PollerPhase(str, Enum):
    IDLE = "idle"
    ARMED = "armed"


@dataclass(frozen=True, slots=True)
class PollerState(Generic[SnapshotT]):
    """Latest snapshot and polling lifecycle of one subsystem."""

    snapshot: SnapshotT
    generation: int = 0
    polling: bool = False
    last_sample_time: Optional[datetime] = None

    @property
    def phase(self) -> PollerPhase:
        return PollerPhase.ARMED if self.polling else PollerPhase.IDLE


class Poller(Generic[SnapshotT]):
    """Owns the transition rules for one telemetry domain."""

    kind: ClassVar[SubsystemKind]
    timer_name: ClassVar[TIMER_NAMES]

    def __init__(self, collect: Callable[[], Any], *, cadence: float) -> None:
        self._collect = collect
        self.cadence = cadence

    # --- Snapshot hooks ----------------------------------------------------

    def initial_snapshot(self) -> SnapshotT:
        raise NotImplementedError

    def sentinel(self) -> Any:
        """Payload substituted when the collector raises instead of reporting sentinels itself."""
        raise NotImplementedError

    def merge(self, snapshot: SnapshotT, payload: Any) -> SnapshotT:
        return payload

    # --- Transitions -------------------------------------------------------

    def initial_state(self) -> PollerState[SnapshotT]:
        return PollerState(snapshot=self.initial_snapshot())

    def start(self, state: PollerState[SnapshotT]) -> tuple[PollerState[SnapshotT], CommandLike]:
        """Arm polling under a fresh generation and collect immediately."""
        armed = replace(state, generation=state.generation + 1, polling=True)
        logger.debug(f"{self.kind.value} poller armed at generation {armed.generation}")
        return armed, self.collect_command(armed.generation)

    def stop(self, state: PollerState[SnapshotT]) -> PollerState[SnapshotT]:
        """Disarm polling; the in-flight result, if any, is still applied once."""
        logger.debug(f"{self.kind.value} poller disarmed at generation {state.generation}")
        return replace(state, polling=False)

    def handle(self, state: PollerState[SnapshotT], message: Message) -> tuple[PollerState[SnapshotT], Command | None]:
        if not isinstance(message, TickResult) or message.kind is not self.kind:
            return state, None
        if self.is_stale(state, message.generation):
            return state, None

        updated = replace(
            state,
            snapshot=self.merge(state.snapshot, message.payload),
            last_sample_time=datetime.now(tz=timezone.utc),
        )
        if not updated.polling:
            return updated, None
        return updated, self.collect_command(updated.generation, delay=self.cadence)

    def is_stale(self, state: PollerState[SnapshotT], generation: int) -> bool:
        if generation == state.generation:
            return False
        logger.debug(
            f"Discarding stale {self.kind.value} message: generation {generation} != current {state.generation}"
        )
        return True

    # --- Commands ----------------------------------------------------------

    def collect_command(self, generation: int, delay: float = 0.0) -> Command:
        """One collection tagged with ``generation``, run on a worker thread."""
        kind = self.kind

        async def _collect() -> TickResult:
            try:
                async with TimerLogger(self.timer_name, metadata={"kind": kind.value, "generation": generation}):
                    payload = await asyncio.to_thread(self._collect)
            except Exception as e:
                logger.exception(f"{kind.value} collector raised, using sentinel snapshot: {e}")
                payload = self.sentinel()
            return TickResult(kind=kind, generation=generation, payload=payload)

        return after(delay, _collect, name=f"{kind.value}-tick")
