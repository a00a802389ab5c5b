#!/usr/bin/env python3
import logging
import os
import select
import subprocess
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import IO, Optional, Sequence

try:
    import msvcrt
except ImportError:
    msvcrt = None

from ..config import Config
from .engine import DirectExecutor, ProcessHandle
from .request import ExecutionRequest, ExecutionResult

logger = logging.getLogger(__name__)


class InputForwarder:
    """Copies console input to a child's stdin one byte at a time.

    One-byte reads keep the stop event observed between every transfer. A
    byte that was read but could not be delivered is kept in ``buffer`` and
    flagged by ``has_unread``.
    """

    def __init__(
        self,
        source_fd: Optional[int] = None,
        poll_interval: Optional[float] = None,
    ) -> None:
        self.source_fd = source_fd
        self.poll_interval = poll_interval or Config.PROCESS_POLL_INTERVAL
        self.has_unread = False
        self.buffer = b""

    def _fd(self) -> int:
        if self.source_fd is None:
            self.source_fd = sys.stdin.fileno()
        return self.source_fd

    def read_byte(self, stop: threading.Event) -> Optional[bytes]:
        """One byte, ``b""`` at end of input, ``None`` when nothing arrived in time."""
        if msvcrt is not None and self.source_fd is None:
            if msvcrt.kbhit():
                return msvcrt.getch()
            stop.wait(self.poll_interval)
            return None

        fd = self._fd()
        ready, _, _ = select.select([fd], [], [], self.poll_interval)
        if not ready:
            return None
        return os.read(fd, 1)

    def forward(self, sink: IO[bytes], stop: threading.Event) -> Optional[bytes]:
        while not stop.is_set():
            try:
                byte = self.read_byte(stop)
            except OSError:
                logger.debug("console input closed", exc_info=True)
                break
            if byte is None:
                continue
            if not byte:
                break

            self.has_unread = True
            self.buffer = byte
            if stop.is_set():
                break

            try:
                sink.write(byte)
                sink.flush()
            except (BrokenPipeError, OSError, ValueError):
                logger.debug("child stdin closed before byte %r was delivered", byte)
                break
            self.has_unread = False

        return self.buffer if self.has_unread else None


class PipedExecutor(DirectExecutor):
    """Direct execution with live console input piped to the child."""

    def __init__(self, *args, source_fd: Optional[int] = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.source_fd = source_fd

    def spawn(self, request: ExecutionRequest, argv: Sequence[str]) -> subprocess.Popen:
        return subprocess.Popen(
            list(argv),
            cwd=str(request.working_directory),
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            bufsize=0,
        )

    def execute(self, request: ExecutionRequest) -> ExecutionResult:
        start_time = datetime.now()
        started = time.monotonic()

        handle = self.start(request)
        forwarder = InputForwarder(self.source_fd, self.poll_interval)
        exited = threading.Semaphore(0)
        stop = threading.Event()

        def watch_exit() -> None:
            handle.process.wait()
            exited.release()

        watcher = threading.Thread(
            target=watch_exit, name=f"exit-watch-{handle.pid}", daemon=True
        )
        watcher.start()

        try:
            with ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="stdin-forward"
            ) as pool:
                future = pool.submit(forwarder.forward, handle.process.stdin, stop)
                try:
                    self._wait_for_exit(handle, exited, request)
                finally:
                    stop.set()
                unread_input = future.result()
        finally:
            self.session.detach_process(handle)
            self._close_stdin(handle.process)

        handle.join_pumps()
        if unread_input is not None:
            logger.debug("piped run of pid %s left unread input %r", handle.pid, unread_input)
        return self.finish(
            handle, handle.process.poll(), start_time, started, unread_input=unread_input
        )

    def _wait_for_exit(
        self,
        handle: ProcessHandle,
        exited: threading.Semaphore,
        request: ExecutionRequest,
    ) -> None:
        interval = handle.poll_interval
        try:
            while not exited.acquire(timeout=interval):
                if request.cancel_event.is_set() and not handle.cancelled:
                    handle.cancelled = True
                    logger.info("cancelling piped pid %s", handle.pid)
                    handle.terminate()
        except KeyboardInterrupt:
            handle.cancelled = True
            handle.terminate()
            raise

    @staticmethod
    def _close_stdin(process: subprocess.Popen) -> None:
        if process.stdin is None:
            return
        try:
            process.stdin.close()
        except OSError:
            pass
