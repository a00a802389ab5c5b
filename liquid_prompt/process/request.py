#!/usr/bin/env python3
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Optional, Union


class PrivilegeMode(Enum):
    NORMAL = "normal"
    ELEVATED_PROGRAM = "elevated_program"
    ELEVATED_SHELL = "elevated_shell"


@dataclass(frozen=True)
class Direct:
    pass


@dataclass(frozen=True)
class ElevatedProgram:
    pass


@dataclass(frozen=True)
class ElevatedShell:
    # cd + echo + command, joined into one shell instruction.
    compound_command: str


@dataclass(frozen=True)
class Piped:
    pass


Strategy = Union[Direct, ElevatedProgram, ElevatedShell, Piped]


@dataclass(frozen=True)
class ExecutionRequest:
    target: str
    arguments: str
    working_directory: Path
    strategy: Strategy
    cancel_event: threading.Event
    mode: PrivilegeMode = PrivilegeMode.NORMAL

    @property
    def command_line(self) -> str:
        if self.arguments:
            return f"{self.target} {self.arguments}"
        return self.target


@dataclass(frozen=True)
class ExecutionResult:
    exit_code: Optional[int]
    start_time: datetime
    end_time: datetime
    pid: Optional[int] = None
    cancelled: bool = False
    # Console byte read for the child but never delivered to it.
    unread_input: Optional[bytes] = None

    @property
    def elapsed(self) -> timedelta:
        return max(self.end_time - self.start_time, timedelta(0))
