"""Tests for the interactively piped strategy."""

from __future__ import annotations

import io
import os
import shlex
import sys
import threading
import time
from unittest.mock import MagicMock, patch

import pytest

from liquid_prompt.process.piping import InputForwarder, PipedExecutor
from liquid_prompt.process.request import ExecutionRequest, Piped

pytestmark = pytest.mark.skipif(os.name == "nt", reason="select() on pipes is POSIX only")


@pytest.fixture
def pipe():
    read_fd, write_fd = os.pipe()
    yield read_fd, write_fd
    for fd in (read_fd, write_fd):
        try:
            os.close(fd)
        except OSError:
            pass


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


class TestInputForwarder:
    def test_forwards_every_byte(self, pipe):
        read_fd, write_fd = pipe
        os.write(write_fd, b"ab")
        sink = io.BytesIO()
        stop = threading.Event()
        forwarder = InputForwarder(read_fd, poll_interval=0.01)

        results = []
        worker = threading.Thread(target=lambda: results.append(forwarder.forward(sink, stop)))
        worker.start()
        assert wait_for(lambda: sink.getvalue() == b"ab")
        stop.set()
        worker.join(5)

        assert results == [None]
        assert not forwarder.has_unread

    def test_end_of_input_stops_forwarding(self, pipe):
        read_fd, write_fd = pipe
        os.write(write_fd, b"z")
        os.close(write_fd)
        sink = io.BytesIO()

        result = InputForwarder(read_fd, poll_interval=0.01).forward(sink, threading.Event())
        assert result is None
        assert sink.getvalue() == b"z"

    def test_undeliverable_byte_is_returned(self, pipe):
        read_fd, write_fd = pipe
        os.write(write_fd, b"x")
        sink = MagicMock()
        sink.write.side_effect = BrokenPipeError

        forwarder = InputForwarder(read_fd, poll_interval=0.01)
        assert forwarder.forward(sink, threading.Event()) == b"x"
        assert forwarder.has_unread

    def test_byte_read_after_stop_is_kept(self):
        forwarder = InputForwarder(0, poll_interval=0.01)
        stop = threading.Event()
        sink = MagicMock()

        def read_and_stop(event):
            event.set()
            return b"q"

        with patch.object(forwarder, "read_byte", side_effect=read_and_stop):
            assert forwarder.forward(sink, stop) == b"q"
        sink.write.assert_not_called()

    def test_stop_is_observed_while_idle(self, pipe):
        read_fd, _ = pipe
        stop = threading.Event()
        forwarder = InputForwarder(read_fd, poll_interval=0.01)
        threading.Timer(0.1, stop.set).start()

        started = time.monotonic()
        assert forwarder.forward(io.BytesIO(), stop) is None
        assert time.monotonic() - started < 5


class TestPipedExecutor:
    def request(self, session, code):
        return ExecutionRequest(
            target=sys.executable,
            arguments=shlex.join(["-c", code]),
            working_directory=session.working_directory,
            strategy=Piped(),
            cancel_event=session.cancel_event,
        )

    def test_console_input_reaches_child(self, session, pipe):
        read_fd, write_fd = pipe
        os.write(write_fd, b"hello\n")
        lines = []
        executor = PipedExecutor(
            session, on_output=lines.append, poll_interval=0.02, source_fd=read_fd
        )

        code = "import sys; print(sys.stdin.readline().strip().upper())"
        result = executor.execute(self.request(session, code))

        assert result.exit_code == 0
        assert lines == ["HELLO"]
        assert result.unread_input is None
        assert session.active_process is None

    def test_cancellation(self, session, pipe):
        read_fd, _ = pipe
        executor = PipedExecutor(session, poll_interval=0.02, source_fd=read_fd)
        timer = threading.Timer(0.2, session.cancel)
        timer.start()
        try:
            result = executor.execute(self.request(session, "import time; time.sleep(30)"))
        finally:
            timer.cancel()

        assert result.cancelled
        assert result.elapsed.total_seconds() < 10
