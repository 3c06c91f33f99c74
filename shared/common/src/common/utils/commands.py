"""
Deferred units of work for the message loop.

A ``Command`` wraps a producer that builds exactly one message. The runtime
executes every command as an independent task and feeds the produced message
back into a single inbox. Periodic polling is built by having the message
handler return a fresh ``after(...)`` command each time it processes a result;
there is no timer thread and no external loop controller.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Union

Producer = Callable[[], Any]

__all__ = ["Batch", "Command", "CommandLike", "after", "batch", "immediate", "in_thread"]


@dataclass(frozen=True, slots=True)
class Command:
    """Produce one message, optionally after a delay."""

    producer: Producer
    delay: float = 0.0
    name: str = "command"

    @property
    def is_immediate(self) -> bool:
        return self.delay <= 0

    async def run(self) -> Any:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        result = self.producer()
        if inspect.isawaitable(result):
            result = await result
        return result


@dataclass(frozen=True, slots=True)
class Batch:
    """Independent commands issued together (fan-out)."""

    commands: tuple[Command, ...]

    def __iter__(self):
        return iter(self.commands)

    def __len__(self) -> int:
        return len(self.commands)


CommandLike = Union[Command, Batch]


def after(delay: float, producer: Producer, *, name: str | None = None) -> Command:
    """Build a command that waits ``delay`` seconds before producing its message."""
    if delay < 0:
        raise ValueError("delay must be non-negative")
    return Command(producer=producer, delay=delay, name=name or _producer_name(producer))


def immediate(producer: Producer, *, name: str | None = None) -> Command:
    """Build a command that fires as soon as the runtime schedules it."""
    return Command(producer=producer, delay=0.0, name=name or _producer_name(producer))


def in_thread(func: Callable[..., Any], *args: Any) -> Callable[[], Awaitable[Any]]:
    """Wrap a blocking call so it runs on a worker thread when the command fires."""

    async def _produce() -> Any:
        return await asyncio.to_thread(func, *args)

    _produce.__name__ = getattr(func, "__name__", "in_thread")
    return _produce


def batch(*commands: CommandLike | None) -> CommandLike | None:
    """
    Combine commands into a single fan-out unit.

    ``None`` entries are dropped and nested batches are flattened. Returns
    ``None`` when nothing is left and the bare command when only one remains.
    """
    flat = list(_flatten(commands))
    if not flat:
        return None
    if len(flat) == 1:
        return flat[0]
    return Batch(commands=tuple(flat))


def _flatten(commands: Iterable[CommandLike | None]) -> Iterable[Command]:
    for command in commands:
        if command is None:
            continue
        if isinstance(command, Batch):
            yield from command.commands
        else:
            yield command


def _producer_name(producer: Producer) -> str:
    return getattr(producer, "__name__", None) or type(producer).__name__
