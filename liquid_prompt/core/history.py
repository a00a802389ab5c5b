#!/usr/bin/env python3
from typing import List, Optional, Tuple


class CommandHistory:
    """Append-only, in-memory log of submitted lines with a navigation cursor.

    The cursor ranges over ``0..len(entries)``; ``len(entries)`` is the fresh
    line below the newest entry.
    """

    def __init__(self) -> None:
        self._entries: List[str] = []
        self.cursor = 0

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    def append(self, line: str) -> None:
        if line.strip():
            self._entries.append(line)
        self.reset_cursor()

    def reset_cursor(self) -> None:
        self.cursor = len(self._entries)

    def older(self) -> Optional[str]:
        if self.cursor <= 0:
            return None
        self.cursor -= 1
        return self._entries[self.cursor]

    def newer(self) -> str:
        if not self._entries or self.cursor >= len(self._entries):
            return ""
        self.cursor += 1
        if self.cursor < len(self._entries):
            return self._entries[self.cursor]
        return ""
