#!/usr/bin/env python3
import ctypes
import logging
import os
import shlex
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


def is_elevated() -> bool:
    if os.name == "nt":
        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except (AttributeError, OSError):
            logger.debug("cannot query administrator state", exc_info=True)
            return False
    return os.geteuid() == 0


def split_arguments(arguments: str) -> List[str]:
    if not arguments.strip():
        return []
    return shlex.split(arguments, posix=os.name != "nt")


def compose_shell_command(target: str, arguments: str, working_directory: Path) -> str:
    """Build ``cd <cwd> && echo <cmd> @ <cwd> && <cmd>`` for the host shell."""
    command_line = f"{target} {arguments}".strip()
    directory = str(working_directory)

    if os.name == "nt":
        parts = [
            f"cd /D {directory}",
            f"echo {command_line} @ {directory}",
            command_line,
        ]
    else:
        parts = [
            f"cd {shlex.quote(directory)}",
            f"echo {shlex.quote(f'{command_line} @ {directory}')}",
            command_line,
        ]
    return " && ".join(parts)


def _powershell_quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _run_as_argv(file_path: str, arguments: str, working_directory: Path) -> List[str]:
    command = [
        "Start-Process",
        "-FilePath",
        _powershell_quote(file_path),
        "-WorkingDirectory",
        _powershell_quote(str(working_directory)),
        "-Verb",
        "RunAs",
    ]
    if arguments:
        command.extend(["-ArgumentList", _powershell_quote(arguments)])
    return ["powershell.exe", "-NoProfile", "-Command", " ".join(command)]


def elevated_program_argv(
    target: str,
    arguments: str,
    working_directory: Path,
    elevation_command: str,
) -> List[str]:
    if os.name == "nt":
        return _run_as_argv(target, arguments, working_directory)
    return [*shlex.split(elevation_command), target, *split_arguments(arguments)]


def elevated_shell_argv(
    shell: str,
    compound_command: str,
    working_directory: Path,
    elevation_command: str,
) -> List[str]:
    if os.name == "nt":
        return _run_as_argv(shell, f"/K {compound_command}", working_directory)
    return [*shlex.split(elevation_command), shell, "-c", compound_command]
