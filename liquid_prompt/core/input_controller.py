#!/usr/bin/env python3
import logging
from typing import Callable, Optional

from rich.cells import cell_len

from ..completion import CompletionEngine, CompletionKind, list_directory
from ..config import Config
from ..ui.manager import UIManager
from .buffer import EditBuffer
from .keys import ConsoleKeyReader, KeyEvent, KeyKind
from .session import Session
from .terminal import Terminal

logger = logging.getLogger(__name__)

DrawPrompt = Callable[[], None]


class UnhandledKeyError(RuntimeError):
    def __init__(self, key_name: str) -> None:
        super().__init__(f"Missing special key handling: {key_name}")
        self.key_name = key_name


class InputController:
    """Line editor keeping the edit buffer and the on-screen cursor in step."""

    def __init__(
        self,
        terminal: Terminal,
        ui: UIManager,
        completion: Optional[CompletionEngine] = None,
    ) -> None:
        self.terminal = terminal
        self.ui = ui
        self.completion = completion or CompletionEngine()

    def read_line(
        self,
        session: Session,
        reader: ConsoleKeyReader,
        draw_prompt: DrawPrompt,
    ) -> Optional[str]:
        """Edit one line; ``None`` when the session is cancelled mid-edit."""
        session.buffer.clear()
        session.history.reset_cursor()
        draw_prompt()

        while True:
            event = reader.read(session.cancel_event)
            if event is None:
                return None
            if self.handle_key(event, session, draw_prompt):
                return session.buffer.text

    def handle_key(
        self,
        event: KeyEvent,
        session: Session,
        draw_prompt: Optional[DrawPrompt] = None,
    ) -> bool:
        """Apply one key; returns True when the line is committed."""
        buffer = session.buffer
        kind = event.kind

        if kind is KeyKind.CHAR:
            self._insert(buffer, event.char)
        elif kind is KeyKind.BACKSPACE:
            self._backspace(buffer)
        elif kind is KeyKind.DELETE:
            self._delete(buffer)
        elif kind is KeyKind.LEFT:
            if buffer.move_left():
                self.terminal.move(-cell_len(buffer.char_at(buffer.cursor)))
        elif kind is KeyKind.RIGHT:
            if buffer.move_right():
                self.terminal.move(cell_len(buffer.char_at(buffer.cursor - 1)))
        elif kind is KeyKind.UP:
            entry = session.history.older()
            if entry is not None:
                self._replace_tail(buffer, 0, entry)
        elif kind is KeyKind.DOWN:
            self._replace_tail(buffer, 0, session.history.newer())
        elif kind is KeyKind.TAB:
            self._complete(session)
        elif kind is KeyKind.ENTER:
            self.terminal.newline()
            return True
        elif kind is KeyKind.INTERRUPT:
            self.terminal.write("^C")
            self.terminal.newline()
            buffer.clear()
            return True
        elif kind is KeyKind.LIST_DIRECTORY:
            self.terminal.newline()
            self.ui.display_listing(list_directory(session.working_directory))
            self._redraw(buffer, draw_prompt)
        else:
            self._unhandled(event, buffer, draw_prompt)
        return False

    def _insert(self, buffer: EditBuffer, text: str) -> None:
        buffer.insert(text)
        tail = buffer.tail()
        self.terminal.write(text + tail)
        self.terminal.move(-cell_len(tail))

    def _backspace(self, buffer: EditBuffer) -> None:
        removed = buffer.delete_before()
        if not removed:
            return
        self.terminal.move(-cell_len(removed))
        self._redraw_tail(buffer, cell_len(removed))

    def _delete(self, buffer: EditBuffer) -> None:
        removed = buffer.delete_at()
        if removed:
            self._redraw_tail(buffer, cell_len(removed))

    def _redraw_tail(self, buffer: EditBuffer, removed_cells: int) -> None:
        # Trailing blanks erase the cells that slid off the end.
        tail = buffer.tail() + " " * removed_cells
        self.terminal.write(tail)
        self.terminal.move(-cell_len(tail))

    def _replace_tail(self, buffer: EditBuffer, start: int, text: str) -> None:
        self.terminal.move(-cell_len(buffer.text[start : buffer.cursor]))
        old_cells = cell_len(buffer.tail(start))
        if old_cells:
            self.terminal.write(" " * old_cells)
            self.terminal.move(-old_cells)
        buffer.replace_tail(start, text)
        self.terminal.write(text)

    def _complete(self, session: Session) -> None:
        buffer = session.buffer
        skipped = buffer.tail()
        buffer.move_to_end()
        self.terminal.move(cell_len(skipped))

        result = self.completion.complete(buffer.text, session.working_directory)
        if result.kind is CompletionKind.NO_MATCH:
            self.terminal.bell()
        elif result.kind is CompletionKind.EXTEND:
            self._insert(buffer, result.text)
        else:
            self._replace_tail(buffer, len(buffer) - len(result.token), result.text)

    def _redraw(self, buffer: EditBuffer, draw_prompt: Optional[DrawPrompt]) -> None:
        if draw_prompt is not None:
            draw_prompt()
        else:
            self.terminal.reset()
        self.terminal.write(buffer.text)
        self.terminal.move(-cell_len(buffer.tail()))

    def _unhandled(
        self,
        event: KeyEvent,
        buffer: EditBuffer,
        draw_prompt: Optional[DrawPrompt],
    ) -> None:
        error = UnhandledKeyError(event.name)
        logger.warning("%s", error)
        self.terminal.newline()
        self.ui.display_alert(str(error))
        self._redraw(buffer, draw_prompt)
        if Config.is_debug_enabled():
            raise error
