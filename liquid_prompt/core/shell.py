#!/usr/bin/env python3
import logging
import signal
from datetime import timedelta
from typing import Optional

from prompt_toolkit.output import Output, create_output
from rich.console import Console

from ..commands.router import CommandKind, CommandRouter
from ..config import Config
from ..process.launcher import ProcessLauncher
from ..ui.git_status import GitStatusProvider, StatusProvider
from ..ui.manager import UIManager, create_console
from ..ui.prompt import PromptRenderer
from .input_controller import InputController, UnhandledKeyError
from .keys import ConsoleKeyReader
from .session import Session
from .terminal import Terminal

logger = logging.getLogger(__name__)


class LiquidShell:
    def __init__(
        self,
        session: Optional[Session] = None,
        console: Optional[Console] = None,
        output: Optional[Output] = None,
        reader: Optional[ConsoleKeyReader] = None,
        provider: Optional[StatusProvider] = None,
        launcher: Optional[ProcessLauncher] = None,
    ) -> None:
        self.session = session or Session()
        self.console = console or create_console()
        self.ui = UIManager(self.console)
        self.terminal = Terminal(output or create_output(), self.console)
        self.reader = reader or ConsoleKeyReader()
        self.controller = InputController(self.terminal, self.ui)
        self.router = CommandRouter()
        self.provider = provider if provider is not None else GitStatusProvider()
        self.renderer = PromptRenderer(self.provider)
        self.launcher = launcher or ProcessLauncher(
            self.session,
            on_output=self.ui.display_output,
            on_error=self.ui.display_error_output,
        )

    def draw_prompt(self) -> None:
        self.terminal.reset()
        self.terminal.write_segments(
            self.renderer.build(
                self.session.working_directory, self.session.last_elapsed
            )
        )

    def run(self) -> int:
        self.ui.show_welcome(Config.get_shell())
        previous_handler = self._install_termination_handler()
        try:
            while not self.session.cancelled:
                self.run_once()
        finally:
            if previous_handler is not None:
                signal.signal(signal.SIGTERM, previous_handler)

        self.ui.display_goodbye()
        return 0

    def run_once(self) -> None:
        try:
            with self.reader.raw_mode():
                line = self.controller.read_line(
                    self.session, self.reader, self.draw_prompt
                )
        except UnhandledKeyError as error:
            logger.debug("line abandoned: %s", error)
            return
        except KeyboardInterrupt:
            self.terminal.newline()
            return
        except Exception as error:
            logger.exception("prompt cycle failed")
            self.terminal.newline()
            self.ui.display_execution_error(error)
            return

        if line is None:
            return
        self.handle_line(line)

    def handle_line(self, line: str) -> None:
        command = self.router.route(line, self.session.working_directory)

        if command.kind is CommandKind.EMPTY:
            self.session.last_elapsed = timedelta(0)
            return

        if command.kind is CommandKind.EXIT:
            self.session.cancel()
            return

        if command.kind is CommandKind.CHANGE_DIRECTORY:
            if command.directory is not None:
                self.session.working_directory = command.directory
                logger.debug("working directory is now %s", command.directory)
            return

        self.session.history.append(command.line)
        self.execute(command)

    def execute(self, command) -> None:
        self.session.last_elapsed = timedelta(0)
        try:
            request = self.launcher.build(command)
            try:
                result = self.launcher.launch(request)
            finally:
                if self.launcher.inherits_console(request):
                    # The child wrote straight to the console; start the prompt on a fresh row.
                    self.terminal.newline()
        except KeyboardInterrupt:
            self.ui.display_interrupt()
            return
        except Exception as error:
            logger.exception("command %r failed", command.line)
            self.ui.display_execution_error(error)
            return
        finally:
            invalidate = getattr(self.provider, "invalidate", None)
            if invalidate is not None:
                invalidate()

        self.session.last_elapsed = result.elapsed
        if result.unread_input:
            # Nothing replays console input into the next prompt.
            logger.debug("discarding unread input %r", result.unread_input)

    def _install_termination_handler(self):
        def handle_termination(signum, frame):
            logger.info("received signal %s, cancelling session", signum)
            self.session.cancel()

        try:
            return signal.signal(signal.SIGTERM, handle_termination)
        except ValueError:
            # Not on the main thread.
            return None
