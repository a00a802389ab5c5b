#!/usr/bin/env python3
import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s")
KEY_VALUE_SEPARATOR = "="


class CompletionKind(Enum):
    NO_MATCH = "no_match"
    EXTEND = "extend"
    CYCLE = "cycle"


@dataclass(frozen=True)
class CompletionResult:
    kind: CompletionKind
    token: str
    # Suffix to append for EXTEND, full candidate name for CYCLE.
    text: str = ""
    candidates: Tuple[str, ...] = field(default_factory=tuple)
    index: Optional[int] = None


def list_directory(path: Path) -> List[str]:
    try:
        names = os.listdir(path)
    except (PermissionError, FileNotFoundError, NotADirectoryError) as error:
        logger.debug("cannot list %s for completion: %s", path, error)
        return []
    return sorted(names)


class CompletionEngine:
    def __init__(self, lister: Callable[[Path], List[str]] = list_directory) -> None:
        self._lister = lister

    @staticmethod
    def current_token(text: str) -> str:
        token = _WHITESPACE.split(text)[-1] if text else ""
        if KEY_VALUE_SEPARATOR in token:
            token = token.split(KEY_VALUE_SEPARATOR, 1)[1]
        return token

    def complete(self, text: str, directory: Path) -> CompletionResult:
        token = self.current_token(text)
        candidates = tuple(self._lister(directory))

        match_index = next(
            (index for index, name in enumerate(candidates) if name.startswith(token)),
            None,
        )
        if match_index is None:
            return CompletionResult(CompletionKind.NO_MATCH, token, candidates=candidates)

        match = candidates[match_index]
        if match != token:
            return CompletionResult(
                CompletionKind.EXTEND,
                token,
                text=match[len(token) :],
                candidates=candidates,
                index=match_index,
            )

        next_index = (match_index + 1) % len(candidates)
        return CompletionResult(
            CompletionKind.CYCLE,
            token,
            text=candidates[next_index],
            candidates=candidates,
            index=next_index,
        )
