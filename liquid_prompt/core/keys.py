#!/usr/bin/env python3
import threading
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Iterator, List, Optional

from prompt_toolkit.input import Input, create_input
from prompt_toolkit.key_binding import KeyPress
from prompt_toolkit.keys import Keys

from ..config import Config


class KeyKind(Enum):
    CHAR = "char"
    BACKSPACE = "backspace"
    DELETE = "delete"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    TAB = "tab"
    ENTER = "enter"
    LIST_DIRECTORY = "list_directory"
    INTERRUPT = "interrupt"
    UNHANDLED = "unhandled"


@dataclass(frozen=True)
class KeyEvent:
    kind: KeyKind
    char: str = ""
    name: str = ""

    @classmethod
    def printable(cls, char: str) -> "KeyEvent":
        return cls(KeyKind.CHAR, char=char, name=char)

    @classmethod
    def of(cls, kind: KeyKind) -> "KeyEvent":
        return cls(kind, name=kind.value)


KEY_KINDS = {
    Keys.ControlH: KeyKind.BACKSPACE,
    Keys.Delete: KeyKind.DELETE,
    Keys.Left: KeyKind.LEFT,
    Keys.Right: KeyKind.RIGHT,
    Keys.Up: KeyKind.UP,
    Keys.Down: KeyKind.DOWN,
    Keys.ControlI: KeyKind.TAB,
    Keys.ControlM: KeyKind.ENTER,
    Keys.ControlJ: KeyKind.ENTER,
    Keys.ControlL: KeyKind.LIST_DIRECTORY,
    Keys.ControlC: KeyKind.INTERRUPT,
}

# Terminal reports and mouse events, not keystrokes.
IGNORED_KEYS = {Keys.CPRResponse, Keys.Vt100MouseEvent, Keys.WindowsMouseEvent, Keys.Ignore}


def translate(key_press: KeyPress) -> List[KeyEvent]:
    key = key_press.key

    if key == Keys.BracketedPaste:
        return [KeyEvent.printable(char) for char in key_press.data if char.isprintable()]

    if isinstance(key, Keys):
        if key in IGNORED_KEYS:
            return []
        kind = KEY_KINDS.get(key)
        if kind is not None:
            return [KeyEvent(kind, name=key.value)]
        return [KeyEvent(KeyKind.UNHANDLED, name=key.value)]

    if len(key) == 1 and key.isprintable():
        return [KeyEvent.printable(key)]

    return [KeyEvent(KeyKind.UNHANDLED, name=repr(key))]


class ConsoleKeyReader:
    """Blocking key-at-a-time reader on top of prompt_toolkit's raw input."""

    def __init__(
        self,
        input: Optional[Input] = None,
        poll_interval: Optional[float] = None,
        escape_timeout: float = 0.5,
    ) -> None:
        self._input = input
        self.poll_interval = poll_interval or Config.KEY_POLL_INTERVAL
        self.escape_timeout = escape_timeout
        self._pending: Deque[KeyEvent] = deque()

    @property
    def input(self) -> Input:
        if self._input is None:
            self._input = create_input()
        return self._input

    @contextmanager
    def raw_mode(self) -> Iterator[None]:
        with self.input.raw_mode():
            yield

    def read(self, cancel: threading.Event) -> Optional[KeyEvent]:
        """Return the next key, or ``None`` once ``cancel`` is set."""
        idle_since = time.monotonic()
        while not self._pending:
            if cancel.is_set():
                return None

            for key_press in self.input.read_keys():
                self._pending.extend(translate(key_press))

            if self._pending:
                break

            # A lone Escape stays buffered in the parser until flushed.
            if time.monotonic() - idle_since >= self.escape_timeout:
                for key_press in self.input.flush_keys():
                    self._pending.extend(translate(key_press))
                idle_since = time.monotonic()

            if not self._pending:
                cancel.wait(self.poll_interval)

        return self._pending.popleft()
