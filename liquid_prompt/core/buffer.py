#!/usr/bin/env python3
from typing import List


class EditBuffer:
    """The in-progress input line and the cursor index inside it."""

    def __init__(self, text: str = "") -> None:
        self._chars: List[str] = list(text)
        self.cursor = len(self._chars)

    def __len__(self) -> int:
        return len(self._chars)

    def __str__(self) -> str:
        return self.text

    @property
    def text(self) -> str:
        return "".join(self._chars)

    def tail(self, start: int | None = None) -> str:
        begin = self.cursor if start is None else start
        return "".join(self._chars[begin:])

    @property
    def at_start(self) -> bool:
        return self.cursor == 0

    @property
    def at_end(self) -> bool:
        return self.cursor == len(self._chars)

    def insert(self, text: str) -> None:
        self._chars[self.cursor : self.cursor] = list(text)
        self.cursor += len(text)

    def char_at(self, index: int) -> str:
        return self._chars[index]

    def delete_before(self) -> str:
        """Remove the character before the cursor; "" when there is none."""
        if self.cursor == 0:
            return ""
        self.cursor -= 1
        return self._chars.pop(self.cursor)

    def delete_at(self) -> str:
        if self.cursor >= len(self._chars):
            return ""
        return self._chars.pop(self.cursor)

    def move_left(self) -> bool:
        if self.cursor <= 0:
            return False
        self.cursor -= 1
        return True

    def move_right(self) -> bool:
        if self.cursor >= len(self._chars):
            return False
        self.cursor += 1
        return True

    def move_to_end(self) -> int:
        delta = len(self._chars) - self.cursor
        self.cursor = len(self._chars)
        return delta

    def replace_tail(self, start: int, text: str) -> str:
        """Drop everything from ``start`` on, append ``text`` and park the cursor at the end."""
        if not 0 <= start <= len(self._chars):
            raise ValueError(f"tail start {start} outside buffer of length {len(self)}")
        removed = "".join(self._chars[start:])
        del self._chars[start:]
        self._chars.extend(text)
        self.cursor = len(self._chars)
        return removed

    def set_text(self, text: str) -> None:
        self.replace_tail(0, text)

    def clear(self) -> None:
        self._chars.clear()
        self.cursor = 0
