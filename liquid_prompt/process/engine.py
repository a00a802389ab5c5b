#!/usr/bin/env python3
import logging
import subprocess
import threading
import time
from datetime import datetime, timedelta
from typing import IO, Callable, List, Optional, Sequence

import psutil

from ..config import Config
from ..core.session import Session, SessionBusyError
from .elevation import elevated_program_argv, elevated_shell_argv, split_arguments
from .request import ElevatedShell, ExecutionRequest, ExecutionResult

logger = logging.getLogger(__name__)

LineCallback = Callable[[str], None]

TERMINATE_TIMEOUT = 3.0


def _decode(raw) -> str:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    return raw.rstrip("\r\n")


def _pump(stream: IO, callback: LineCallback) -> None:
    try:
        while True:
            raw = stream.readline()
            if not raw:
                break
            callback(_decode(raw))
    except (OSError, ValueError):
        # Stream closed underneath us while the child was torn down.
        logger.debug("output pump stopped early", exc_info=True)
    finally:
        try:
            stream.close()
        except OSError:
            pass


def terminate_children(pid: int, timeout: float = TERMINATE_TIMEOUT) -> None:
    try:
        children = psutil.Process(pid).children(recursive=True)
    except psutil.NoSuchProcess:
        return

    for child in children:
        try:
            child.terminate()
        except psutil.NoSuchProcess:
            pass

    _, alive = psutil.wait_procs(children, timeout=timeout)
    for child in alive:
        try:
            child.kill()
        except psutil.NoSuchProcess:
            pass


class ProcessHandle:
    """A spawned child plus the threads streaming its output."""

    def __init__(
        self,
        process: subprocess.Popen,
        on_output: Optional[LineCallback] = None,
        on_error: Optional[LineCallback] = None,
        poll_interval: Optional[float] = None,
    ) -> None:
        self.process = process
        self.pid = process.pid
        self.poll_interval = poll_interval or Config.PROCESS_POLL_INTERVAL
        self.cancelled = False
        self._pumps: List[threading.Thread] = []

        for stream, callback, name in (
            (process.stdout, on_output, "stdout"),
            (process.stderr, on_error, "stderr"),
        ):
            if stream is None or callback is None:
                continue
            thread = threading.Thread(
                target=_pump,
                args=(stream, callback),
                name=f"pump-{name}-{self.pid}",
                daemon=True,
            )
            thread.start()
            self._pumps.append(thread)

    def is_running(self) -> bool:
        return self.process.poll() is None

    def wait(self, cancel: threading.Event) -> Optional[int]:
        try:
            while self.process.poll() is None:
                if cancel.is_set():
                    self.cancelled = True
                    logger.info("cancelling pid %s", self.pid)
                    self.terminate()
                    break
                cancel.wait(self.poll_interval)
        except KeyboardInterrupt:
            self.cancelled = True
            self.terminate()
            self.join_pumps()
            raise

        self.join_pumps()
        return self.process.poll()

    def terminate(self, timeout: float = TERMINATE_TIMEOUT) -> None:
        terminate_children(self.pid, timeout)
        if self.process.poll() is not None:
            return

        self.process.terminate()
        try:
            self.process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            self.process.kill()
            self.process.wait()

    def join_pumps(self, timeout: float = TERMINATE_TIMEOUT) -> None:
        for thread in self._pumps:
            thread.join(timeout)


class Executor:
    """Runs one kind of ``ExecutionRequest`` to completion."""

    capture_output = True

    def __init__(
        self,
        session: Session,
        on_output: Optional[LineCallback] = None,
        on_error: Optional[LineCallback] = None,
        poll_interval: Optional[float] = None,
    ) -> None:
        self.session = session
        self.on_output = on_output
        self.on_error = on_error
        self.poll_interval = poll_interval

    def build_argv(self, request: ExecutionRequest) -> Sequence[str]:
        raise NotImplementedError

    def spawn(self, request: ExecutionRequest, argv: Sequence[str]) -> subprocess.Popen:
        pipe = subprocess.PIPE if self.capture_output else None
        return subprocess.Popen(
            list(argv),
            cwd=str(request.working_directory),
            stdout=pipe,
            stderr=pipe,
        )

    def start(self, request: ExecutionRequest) -> ProcessHandle:
        process = self.spawn(request, self.build_argv(request))
        handle = ProcessHandle(
            process,
            on_output=self.on_output if self.capture_output else None,
            on_error=self.on_error if self.capture_output else None,
            poll_interval=self.poll_interval,
        )
        try:
            self.session.attach_process(handle)
        except SessionBusyError:
            handle.terminate()
            raise

        logger.info("started pid %s: %s", handle.pid, request.command_line)
        return handle

    def finish(
        self,
        handle: ProcessHandle,
        exit_code: Optional[int],
        start_time: datetime,
        started: float,
        unread_input: Optional[bytes] = None,
    ) -> ExecutionResult:
        end_time = start_time + timedelta(seconds=time.monotonic() - started)
        logger.info(
            "pid %s finished with %s after %.3fs%s",
            handle.pid,
            exit_code,
            (end_time - start_time).total_seconds(),
            " (cancelled)" if handle.cancelled else "",
        )
        return ExecutionResult(
            exit_code=exit_code,
            start_time=start_time,
            end_time=end_time,
            pid=handle.pid,
            cancelled=handle.cancelled,
            unread_input=unread_input,
        )

    def execute(self, request: ExecutionRequest) -> ExecutionResult:
        start_time = datetime.now()
        started = time.monotonic()

        handle = self.start(request)
        try:
            exit_code = handle.wait(request.cancel_event)
        finally:
            self.session.detach_process(handle)

        return self.finish(handle, exit_code, start_time, started)


class DirectExecutor(Executor):
    def build_argv(self, request: ExecutionRequest) -> Sequence[str]:
        return [request.target, *split_arguments(request.arguments)]


class ElevatedProgramExecutor(Executor):
    # The elevation prompt owns the console, so output is not captured.
    capture_output = False

    def build_argv(self, request: ExecutionRequest) -> Sequence[str]:
        return elevated_program_argv(
            request.target,
            request.arguments,
            request.working_directory,
            Config.ELEVATION_COMMAND,
        )


class ElevatedShellExecutor(Executor):
    capture_output = False

    def build_argv(self, request: ExecutionRequest) -> Sequence[str]:
        strategy = request.strategy
        if not isinstance(strategy, ElevatedShell):
            raise TypeError(f"expected an ElevatedShell strategy, got {strategy!r}")
        return elevated_shell_argv(
            Config.get_shell(),
            strategy.compound_command,
            request.working_directory,
            Config.ELEVATION_COMMAND,
        )
