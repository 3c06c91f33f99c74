"""
Network poller with the nested speedtest sub-loop.

Byte counters are sampled at the regular cadence and turned into rates. A
download speed measurement runs once when polling starts and then every
``speedtest_interval`` seconds: the result handler schedules a
``SpeedtestTrigger`` and the trigger handler starts the next measurement,
both guarded by the same generation as the counter ticks.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import replace
from datetime import datetime
from functools import partial
from typing import Callable

from common.utils.commands import Command, CommandLike, after, batch, immediate
from common.utils.timer_logger import TimerLogger
from loguru import logger

from sysdash import settings
from sysdash.messages import Message, SpeedtestResult, SpeedtestTrigger
from sysdash.models import InterfaceInfo, NetworkSample, NetworkSnapshot, SubsystemKind

from .base import Poller, PollerState

NetworkState = PollerState[NetworkSnapshot]


class NetworkPoller(Poller[NetworkSnapshot]):
    kind = SubsystemKind.NETWORK
    timer_name = "collect_network"

    def __init__(
        self,
        read_counters: Callable[[str], NetworkSample],
        measure: Callable[[], float],
        interface: InterfaceInfo,
        *,
        cadence: float | None = None,
        speedtest_interval: float | None = None,
    ) -> None:
        super().__init__(
            partial(read_counters, interface.name),
            cadence=settings.NETWORK_INTERVAL if cadence is None else cadence,
        )
        self._measure = measure
        self.interface = interface
        self.speedtest_interval = settings.SPEEDTEST_INTERVAL if speedtest_interval is None else speedtest_interval

    def initial_snapshot(self) -> NetworkSnapshot:
        return NetworkSnapshot(interface=self.interface)

    def sentinel(self) -> NetworkSample:
        return NetworkSample.unavailable(time.monotonic())

    def merge(self, snapshot: NetworkSnapshot, payload: NetworkSample) -> NetworkSnapshot:
        if not payload.available:
            # Forget the baseline so the next real sample does not show a spike
            return replace(snapshot, download_rate=0.0, upload_rate=0.0, last_check=None)

        download_rate = upload_rate = 0.0
        if snapshot.last_check is not None:
            duration = payload.timestamp - snapshot.last_check
            if duration > 0:
                download_rate = max(payload.bytes_recv - snapshot.bytes_recv, 0) / duration
                upload_rate = max(payload.bytes_sent - snapshot.bytes_sent, 0) / duration

        return replace(
            snapshot,
            download_rate=download_rate,
            upload_rate=upload_rate,
            bytes_recv=payload.bytes_recv,
            bytes_sent=payload.bytes_sent,
            last_check=payload.timestamp,
        )

    def start(self, state: NetworkState) -> tuple[NetworkState, CommandLike]:
        armed, tick = super().start(state)
        armed = replace(
            armed,
            snapshot=replace(
                armed.snapshot,
                download_rate=0.0,
                upload_rate=0.0,
                last_check=None,
                is_speedtesting=True,
            ),
        )
        return armed, batch(tick, self.speedtest_command(armed.generation))

    def handle(self, state: NetworkState, message: Message) -> tuple[NetworkState, Command | None]:
        if isinstance(message, SpeedtestTrigger):
            return self._on_speedtest_trigger(state, message)
        if isinstance(message, SpeedtestResult):
            return self._on_speedtest_result(state, message)
        return super().handle(state, message)

    # --- Speedtest sub-loop ------------------------------------------------

    def _on_speedtest_trigger(self, state: NetworkState, message: SpeedtestTrigger) -> tuple[NetworkState, Command | None]:
        if self.is_stale(state, message.generation):
            return state, None
        if not state.polling:
            logger.debug("Speedtest trigger ignored, network polling is disarmed")
            return state, None
        updated = replace(state, snapshot=replace(state.snapshot, is_speedtesting=True))
        return updated, self.speedtest_command(state.generation)

    def _on_speedtest_result(self, state: NetworkState, message: SpeedtestResult) -> tuple[NetworkState, Command | None]:
        if self.is_stale(state, message.generation):
            return state, None
        logger.info(f"Speedtest finished: {message.download_mbps:.2f} Mbps")
        updated = replace(
            state,
            snapshot=replace(
                state.snapshot,
                speedtest_download=message.download_mbps,
                speedtest_time=datetime.now().strftime("%H:%M"),
                is_speedtesting=False,
            ),
        )
        return updated, self.trigger_command(state.generation)

    def speedtest_command(self, generation: int) -> Command:
        async def _measure() -> SpeedtestResult:
            try:
                async with TimerLogger("speedtest", metadata={"generation": generation}):
                    download = await asyncio.to_thread(self._measure)
            except Exception as e:
                logger.exception(f"Speedtest raised, reporting 0 Mbps: {e}")
                download = 0.0
            return SpeedtestResult(generation=generation, download_mbps=download)

        return immediate(_measure, name="speedtest")

    def trigger_command(self, generation: int) -> Command:
        return after(self.speedtest_interval, partial(SpeedtestTrigger, generation), name="speedtest-trigger")
