#!/usr/bin/env python3
import threading
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from .buffer import EditBuffer
from .history import CommandHistory

if TYPE_CHECKING:
    from ..process.engine import ProcessHandle


class SessionBusyError(RuntimeError):
    pass


@dataclass
class Session:
    """Everything one interactive shell run mutates, passed around explicitly."""

    working_directory: Path = field(default_factory=Path.cwd)
    cancel_event: threading.Event = field(default_factory=threading.Event)
    buffer: EditBuffer = field(default_factory=EditBuffer)
    history: CommandHistory = field(default_factory=CommandHistory)
    last_elapsed: timedelta = timedelta(0)
    active_process: Optional["ProcessHandle"] = None

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        self.cancel_event.set()

    def attach_process(self, handle: "ProcessHandle") -> None:
        current = self.active_process
        if current is not None and current.is_running():
            raise SessionBusyError(
                f"process {current.pid} is still running; wait for it first"
            )
        self.active_process = handle

    def detach_process(self, handle: "ProcessHandle") -> None:
        if self.active_process is handle:
            self.active_process = None
