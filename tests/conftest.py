"""Shared test fixtures."""

from __future__ import annotations

import io
from contextlib import contextmanager

import pytest
from prompt_toolkit.data_structures import Size
from prompt_toolkit.output import DummyOutput
from rich.console import Console

from liquid_prompt.config import Config
from liquid_prompt.core.keys import KeyEvent, KeyKind
from liquid_prompt.core.session import Session
from liquid_prompt.core.terminal import Terminal
from liquid_prompt.ui.manager import UIManager

ENV_VARS = (
    "LIQUID_PROMPT_SHELL",
    "LIQUID_PROMPT_DEBUG",
    "LIQUID_PROMPT_PIPE_INPUT",
    "LIQUID_PROMPT_LOG_LEVEL",
)


class RecordingOutput(DummyOutput):
    """prompt_toolkit output that records what would reach the terminal."""

    def __init__(self, columns: int = 80) -> None:
        self.columns = columns
        self.events: list[tuple] = []

    def get_size(self) -> Size:
        return Size(rows=24, columns=self.columns)

    def write(self, data: str) -> None:
        self.events.append(("write", data))

    def write_raw(self, data: str) -> None:
        self.events.append(("write_raw", data))

    def cursor_up(self, amount: int) -> None:
        self.events.append(("up", amount))

    def cursor_down(self, amount: int) -> None:
        self.events.append(("down", amount))

    def cursor_forward(self, amount: int) -> None:
        self.events.append(("forward", amount))

    def cursor_backward(self, amount: int) -> None:
        self.events.append(("backward", amount))

    def bell(self) -> None:
        self.events.append(("bell",))

    @property
    def written(self) -> str:
        return "".join(event[1] for event in self.events if event[0] == "write")

    def count(self, kind: str) -> int:
        return sum(1 for event in self.events if event[0] == kind)


class ScriptedKeyReader:
    """Key reader replaying a fixed list of events, then cancelling."""

    def __init__(self, events=()) -> None:
        self.events = list(events)

    @contextmanager
    def raw_mode(self):
        yield

    def read(self, cancel):
        if cancel.is_set():
            return None
        if not self.events:
            cancel.set()
            return None
        return self.events.pop(0)


def keys_for(text: str) -> list[KeyEvent]:
    return [KeyEvent.printable(char) for char in text]


def enter() -> KeyEvent:
    return KeyEvent.of(KeyKind.ENTER)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    saved = {name: getattr(Config, name) for name in dir(Config) if name.isupper()}
    yield
    for name, value in saved.items():
        setattr(Config, name, value)


@pytest.fixture
def output():
    return RecordingOutput()


@pytest.fixture
def console():
    return Console(
        file=io.StringIO(),
        width=80,
        force_terminal=False,
        color_system=None,
        highlight=False,
    )


@pytest.fixture
def console_text(console):
    return lambda: console.file.getvalue()


@pytest.fixture
def terminal(output, console):
    return Terminal(output, console)


@pytest.fixture
def ui(console):
    return UIManager(console)


@pytest.fixture
def session(tmp_path):
    return Session(working_directory=tmp_path)
