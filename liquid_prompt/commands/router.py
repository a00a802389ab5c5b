#!/usr/bin/env python3
import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ..process.request import PrivilegeMode

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s")

EXIT_COMMAND = "exit"
CHANGE_DIRECTORY_PREFIX = "cd "
ELEVATED_PROGRAM_PREFIXES = ("sudo ",)
ELEVATED_SHELL_PREFIXES = ("sudoc ", "sudocommand ")


class CommandKind(Enum):
    EMPTY = "empty"
    EXIT = "exit"
    CHANGE_DIRECTORY = "change_directory"
    EXECUTE = "execute"


@dataclass(frozen=True)
class RoutedCommand:
    kind: CommandKind
    line: str = ""
    target: str = ""
    arguments: str = ""
    mode: PrivilegeMode = PrivilegeMode.NORMAL
    # Resolved destination for CHANGE_DIRECTORY; None when navigation failed.
    directory: Optional[Path] = None


def _is_child_directory(parent: Path, name: str) -> bool:
    try:
        with os.scandir(parent) as entries:
            return any(entry.name == name and entry.is_dir() for entry in entries)
    except OSError:
        return False


def traverse_directories(current: Path, path: str) -> Optional[Path]:
    """Walk ``path`` one segment at a time from ``current``.

    Only ``.``, ``..`` and names of existing immediate subdirectories are
    accepted. Returns ``None`` on the first segment that cannot be followed.
    """
    if path.startswith("/"):
        return None

    location = current
    for segment in path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            parent = location.parent
            if parent == location:
                return None
            location = parent
            continue
        if not _is_child_directory(location, segment):
            return None
        location = location / segment
    return location


def split_command(text: str) -> tuple:
    parts = _WHITESPACE.split(text, maxsplit=1)
    target = parts[0]
    arguments = parts[1] if len(parts) > 1 else ""
    return target, arguments


class CommandRouter:
    def route(self, line: str, working_directory: Path) -> RoutedCommand:
        text = line.strip()
        if not text:
            return RoutedCommand(CommandKind.EMPTY, line=line)

        if text == EXIT_COMMAND:
            return RoutedCommand(CommandKind.EXIT, line=text)

        if text.startswith(CHANGE_DIRECTORY_PREFIX):
            path = text[len(CHANGE_DIRECTORY_PREFIX) :].strip()
            destination = traverse_directories(working_directory, path)
            if destination is None:
                logger.debug("cd %r from %s failed", path, working_directory)
            return RoutedCommand(
                CommandKind.CHANGE_DIRECTORY, line=text, directory=destination
            )

        mode = PrivilegeMode.NORMAL
        for prefixes, prefix_mode in (
            (ELEVATED_PROGRAM_PREFIXES, PrivilegeMode.ELEVATED_PROGRAM),
            (ELEVATED_SHELL_PREFIXES, PrivilegeMode.ELEVATED_SHELL),
        ):
            prefix = next((p for p in prefixes if text.startswith(p)), None)
            if prefix is not None:
                text = text[len(prefix) :].strip()
                mode = prefix_mode
                break

        if not text:
            return RoutedCommand(CommandKind.EMPTY, line=line)

        target, arguments = split_command(text)
        return RoutedCommand(
            CommandKind.EXECUTE,
            line=text,
            target=target,
            arguments=arguments,
            mode=mode,
        )
