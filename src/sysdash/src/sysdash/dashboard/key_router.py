"""Key router forwarding terminal input to the dashboard inbox."""

from __future__ import annotations

import asyncio
import threading
from typing import Any

from loguru import logger

from sysdash.messages import Message, Resize, UserInput

_SEQUENCE_NAMES = {
    "KEY_UP": "up",
    "KEY_DOWN": "down",
    "KEY_LEFT": "left",
    "KEY_RIGHT": "right",
    "KEY_ENTER": "enter",
    "KEY_ESCAPE": "esc",
    "KEY_BACKSPACE": "backspace",
}

_CHAR_NAMES = {
    " ": "space",
    "\n": "enter",
    "\r": "enter",
    "\x03": "ctrl+c",
    "\x1b": "esc",
}


def normalize_key(keystroke: Any) -> str | None:
    """Map a blessed ``Keystroke`` to the key names the coordinator understands."""
    if getattr(keystroke, "is_sequence", False):
        return _SEQUENCE_NAMES.get(getattr(keystroke, "name", None))
    text = str(keystroke)
    if not text:
        return None
    return _CHAR_NAMES.get(text, text)


class KeyRouter:
    """Read keystrokes and size changes on a daemon thread and post them as messages."""

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        queue: "asyncio.Queue[Message]",
        terminal: Any,
        poll_interval: float = 0.1,
    ) -> None:
        self._loop = loop
        self._queue = queue
        self._terminal = terminal
        self._poll_interval = poll_interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="sysdash-keys", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self._poll_interval * 5)
            self._thread = None

    def _run(self) -> None:
        size = (self._terminal.width, self._terminal.height)
        self._enqueue(Resize(width=size[0], height=size[1]))
        while not self._stop.is_set():
            try:
                keystroke = self._terminal.inkey(timeout=self._poll_interval)
            except Exception as e:
                logger.exception(f"Key reader stopped: {e}")
                return
            key = normalize_key(keystroke)
            if key is not None:
                self._enqueue(UserInput(key=key))

            current = (self._terminal.width, self._terminal.height)
            if current != size:
                size = current
                self._enqueue(Resize(width=size[0], height=size[1]))

    def _enqueue(self, message: Message) -> None:
        if self._loop.is_closed():
            return
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, message)
        except RuntimeError:
            # Loop closed between the check and the call
            pass
