#!/usr/bin/env python3
import logging
from typing import Callable, Dict, Optional, Type

from ..commands.router import CommandKind, RoutedCommand
from ..config import Config
from ..core.session import Session
from .elevation import compose_shell_command, is_elevated
from .engine import (
    DirectExecutor,
    ElevatedProgramExecutor,
    ElevatedShellExecutor,
    Executor,
    LineCallback,
)
from .piping import PipedExecutor
from .request import (
    Direct,
    ElevatedProgram,
    ElevatedShell,
    ExecutionRequest,
    ExecutionResult,
    Piped,
    PrivilegeMode,
    Strategy,
)

logger = logging.getLogger(__name__)


class ProcessLauncher:
    """Turns a routed command into a request and runs it with its strategy."""

    def __init__(
        self,
        session: Session,
        on_output: Optional[LineCallback] = None,
        on_error: Optional[LineCallback] = None,
        elevated: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.session = session
        self._is_elevated = elevated or is_elevated
        executor_args = dict(
            session=session,
            on_output=on_output,
            on_error=on_error,
            poll_interval=Config.PROCESS_POLL_INTERVAL,
        )
        self.executors: Dict[Type, Executor] = {
            Direct: DirectExecutor(**executor_args),
            ElevatedProgram: ElevatedProgramExecutor(**executor_args),
            ElevatedShell: ElevatedShellExecutor(**executor_args),
            Piped: PipedExecutor(**executor_args),
        }

    def select_strategy(self, command: RoutedCommand) -> Strategy:
        mode = command.mode
        if mode is not PrivilegeMode.NORMAL and self._is_elevated():
            logger.debug("already elevated, running %s directly", command.target)
            mode = PrivilegeMode.NORMAL

        if mode is PrivilegeMode.ELEVATED_PROGRAM:
            return ElevatedProgram()
        if mode is PrivilegeMode.ELEVATED_SHELL:
            return ElevatedShell(
                compose_shell_command(
                    command.target, command.arguments, self.session.working_directory
                )
            )
        if Config.is_pipe_input_enabled():
            return Piped()
        return Direct()

    def build(self, command: RoutedCommand) -> ExecutionRequest:
        if command.kind is not CommandKind.EXECUTE:
            raise ValueError(f"{command.kind.value} commands are not executed")

        return ExecutionRequest(
            target=command.target,
            arguments=command.arguments,
            working_directory=self.session.working_directory,
            strategy=self.select_strategy(command),
            cancel_event=self.session.cancel_event,
            mode=command.mode,
        )

    def inherits_console(self, request: ExecutionRequest) -> bool:
        executor = self.executors.get(type(request.strategy))
        return executor is not None and not executor.capture_output

    def launch(self, request: ExecutionRequest) -> ExecutionResult:
        executor = self.executors.get(type(request.strategy))
        if executor is None:
            raise TypeError(f"no executor for strategy {request.strategy!r}")

        logger.debug(
            "launching %r with %s", request.command_line, type(request.strategy).__name__
        )
        return executor.execute(request)
