#!/usr/bin/env python3
from typing import Iterable, Tuple

from prompt_toolkit.output import Output
from rich.cells import cell_len
from rich.console import Console
from rich.text import Text

DEFAULT_WIDTH = 80


def reposition(column: int, row: int, delta: int, width: int) -> Tuple[int, int]:
    """Apply a signed step to a cursor on a wrapping terminal of ``width`` columns."""
    if width <= 0:
        raise ValueError(f"terminal width must be positive, got {width}")

    column += delta
    while column < 0:
        column += width
        row -= 1
    while column >= width:
        column -= width
        row += 1
    return column, row


class Terminal:
    """Cursor bookkeeping for the single logical line being edited.

    ``row`` is relative to the row where the current prompt started.
    """

    def __init__(self, output: Output, console: Console) -> None:
        self.output = output
        self.console = console
        self.column = 0
        self.row = 0

    @property
    def width(self) -> int:
        try:
            columns = self.output.get_size().columns
        except Exception:
            columns = 0
        return columns if columns > 0 else DEFAULT_WIDTH

    def write(self, text: str) -> None:
        if not text:
            return
        self.output.write(text)
        self._advance(cell_len(text))
        self.output.flush()

    def write_segments(self, segments: Iterable[Tuple[str, str]]) -> None:
        rendered = Text()
        for content, style in segments:
            rendered.append(content, style=style or None)
        if not rendered.plain:
            return

        self.output.flush()
        self.console.print(rendered, end="", soft_wrap=True, highlight=False)
        self.console.file.flush()
        self._advance(cell_len(rendered.plain))
        self.output.flush()

    def move(self, delta: int) -> None:
        if delta == 0:
            return

        column, row = reposition(self.column, self.row, delta, self.width)
        if row < self.row:
            self.output.cursor_up(self.row - row)
        elif row > self.row:
            self.output.cursor_down(row - self.row)

        if column > self.column:
            self.output.cursor_forward(column - self.column)
        elif column < self.column:
            self.output.cursor_backward(self.column - column)

        self.column, self.row = column, row
        self.output.flush()

    def reset(self) -> None:
        """Forget tracked position; the cursor is at the start of a fresh row."""
        self.column = 0
        self.row = 0

    def newline(self) -> None:
        self.output.write_raw("\r\n")
        self.output.flush()
        self.reset()

    def bell(self) -> None:
        self.output.bell()
        self.output.flush()

    def _advance(self, cells: int) -> None:
        column, row = reposition(self.column, self.row, cells, self.width)
        if cells > 0 and column == 0:
            # Terminals hold the cursor on the last cell until the next write;
            # force the wrap so relative moves start from the tracked cell.
            self.output.write_raw("\r\n")
        self.column, self.row = column, row
