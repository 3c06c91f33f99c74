"""
Root state holder for the dashboard.

The coordinator is the single place where messages are applied. It owns the
view state and the four poller states, matches each incoming message once by
type, and hands telemetry results to the owning poller. Whatever command the
poller (or the page transition) returns goes back to the runtime to execute.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Mapping

from common.utils.commands import CommandLike, batch
from loguru import logger

from .clock import heartbeat
from .messages import HeartbeatTick, Message, Resize, SpeedtestResult, SpeedtestTrigger, TickResult, UserInput
from .models import MENU_CHOICES, PAGE_SUBSYSTEMS, Page, SubsystemKind, ViewState
from .pollers import Poller, PollerState

UP_KEYS = frozenset({"up", "k"})
DOWN_KEYS = frozenset({"down", "j"})
RETURN_KEYS = frozenset({"space", "esc"})
QUIT_KEYS = frozenset({"q", "ctrl+c"})


class Coordinator:
    """Routes messages to pollers and manages page selection."""

    def __init__(self, pollers: Mapping[SubsystemKind, Poller], *, heartbeat_interval: float | None = None) -> None:
        self.pollers = dict(pollers)
        self.states: dict[SubsystemKind, PollerState] = {kind: poller.initial_state() for kind, poller in self.pollers.items()}
        self.view = ViewState()
        self.quit_requested = False
        self._heartbeat_interval = heartbeat_interval

    @property
    def active_kinds(self) -> tuple[SubsystemKind, ...]:
        return PAGE_SUBSYSTEMS[self.view.page]

    def init(self) -> CommandLike | None:
        """Start the heartbeat and prime every panel with one unarmed collection."""
        primes = [poller.collect_command(self.states[kind].generation) for kind, poller in self.pollers.items()]
        return batch(heartbeat(self._heartbeat_interval), *primes)

    def update(self, message: Message) -> CommandLike | None:
        if isinstance(message, HeartbeatTick):
            self.view = replace(self.view, frame=self.view.frame + 1, clock=message.at)
            return heartbeat(self._heartbeat_interval)
        if isinstance(message, Resize):
            self.view = replace(self.view, width=message.width, height=message.height)
            return None
        if isinstance(message, UserInput):
            return self._on_key(message.key)
        if isinstance(message, TickResult):
            return self._route(message.kind, message)
        if isinstance(message, (SpeedtestTrigger, SpeedtestResult)):
            return self._route(SubsystemKind.NETWORK, message)
        logger.warning(f"Ignoring unknown message: {message!r}")
        return None

    # --- Page transitions --------------------------------------------------

    def enter_page(self, page: Page) -> CommandLike | None:
        """Open ``page`` and arm its pollers; "all" fans out one batch for the four of them."""
        commands = []
        for kind in PAGE_SUBSYSTEMS[page]:
            poller = self.pollers.get(kind)
            if poller is None:
                continue
            self.states[kind], command = poller.start(self.states[kind])
            commands.append(command)
        self.view = replace(self.view, page=page)
        logger.info(f"Entered {page.value} page")
        return batch(*commands)

    def return_to_menu(self) -> None:
        for kind in self.active_kinds:
            poller = self.pollers.get(kind)
            if poller is not None:
                self.states[kind] = poller.stop(self.states[kind])
        logger.info(f"Left {self.view.page.value} page")
        self.view = replace(self.view, page=Page.MENU)

    # --- Internal helpers --------------------------------------------------

    def _route(self, kind: SubsystemKind, message: Message) -> CommandLike | None:
        poller = self.pollers.get(kind)
        if poller is None:
            return None
        self.states[kind], command = poller.handle(self.states[kind], message)
        return command

    def _on_key(self, key: str) -> CommandLike | None:
        if key in QUIT_KEYS and (key == "ctrl+c" or self.view.page is Page.MENU):
            self.quit_requested = True
            return None
        if self.view.page is not Page.MENU:
            if key in RETURN_KEYS:
                self.return_to_menu()
            return None

        view = self.view
        if key in UP_KEYS:
            self.view = replace(view, cursor=max(view.cursor - 1, 0))
        elif key in DOWN_KEYS:
            self.view = replace(view, cursor=min(view.cursor + 1, len(MENU_CHOICES) - 1))
        elif key == "space":
            self.view = replace(view, selection=frozenset({view.cursor}))
        elif key == "enter":
            return self.enter_page(view.highlighted)
        return None
