"""Lifecycle management for the dashboard."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Any, Callable

from common.utils.commands import Batch, Command, CommandLike
from loguru import logger
from rich.console import Console, RenderableType
from rich.live import Live

from sysdash.coordinator import Coordinator
from sysdash.messages import Message

from .key_router import KeyRouter
from .panels import render_error, render_view


class SystemDashboard:
    """Runs commands as background tasks and feeds their messages through the coordinator one at a time."""

    def __init__(
        self,
        coordinator: Coordinator,
        *,
        console: Console | None = None,
        terminal: Any = None,
        render: Callable[..., RenderableType] = render_view,
    ) -> None:
        self._coordinator = coordinator
        self._console = console
        self._terminal = terminal
        self._render = render
        self._inbox: asyncio.Queue[Message] | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._key_router: KeyRouter | None = None
        self._started = False

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    async def start(self) -> None:
        """Create the inbox, start the key reader and issue the coordinator's startup commands."""
        if self._started:
            return

        self._inbox = asyncio.Queue()
        if self._terminal is not None:
            self._key_router = KeyRouter(loop=asyncio.get_running_loop(), queue=self._inbox, terminal=self._terminal)
            self._key_router.start()
        self._started = True
        self.dispatch(self._coordinator.init())
        logger.info("Dashboard started - message loop and key reader created")

    async def stop(self) -> None:
        """Stop the dashboard."""
        if not self._started:
            return

        if self._key_router is not None:
            self._key_router.stop()
            self._key_router = None
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._tasks.clear()
        self._inbox = None
        self._started = False
        logger.info("Dashboard stopped")

    def post(self, message: Message) -> None:
        """Put a message into the inbox as if a command had produced it."""
        if self._inbox is None:
            raise RuntimeError("Dashboard is not started")
        self._inbox.put_nowait(message)

    def dispatch(self, command: CommandLike | None) -> None:
        if command is None:
            return
        if isinstance(command, Batch):
            for item in command:
                self._spawn(item)
        else:
            self._spawn(command)

    async def step(self) -> None:
        """Wait for one message, then apply it and everything else already queued."""
        if self._inbox is None:
            raise RuntimeError("Dashboard is not started")
        self._apply(await self._inbox.get())
        while True:
            try:
                message = self._inbox.get_nowait()
            except asyncio.QueueEmpty:
                break
            self._apply(message)

    def render(self) -> RenderableType:
        try:
            return self._render(self._coordinator.view, self._coordinator.states)
        except Exception as e:
            logger.exception(f"Error rendering dashboard: {e}")
            return render_error(e)

    async def run(self) -> None:
        """Run the dashboard with live updates until quit is requested."""
        await self.start()
        try:
            with contextlib.ExitStack() as stack:
                if self._terminal is not None:
                    stack.enter_context(self._terminal.cbreak())
                live = stack.enter_context(
                    Live(self.render(), console=self._console, screen=True, auto_refresh=False)
                )
                while not self._coordinator.quit_requested:
                    await self.step()
                    live.update(self.render(), refresh=True)
        finally:
            await self.stop()

    # --- Internal helpers --------------------------------------------------

    def _apply(self, message: Message) -> None:
        self.dispatch(self._coordinator.update(message))

    def _spawn(self, command: Command) -> None:
        task = asyncio.create_task(self._execute(command), name=f"sysdash-{command.name}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _execute(self, command: Command) -> None:
        try:
            message = await command.run()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(f"Command {command.name} failed: {e}")
            return
        if message is None or self._inbox is None:
            return
        self._inbox.put_nowait(message)
