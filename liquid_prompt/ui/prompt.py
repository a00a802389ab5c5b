#!/usr/bin/env python3
import logging
from datetime import timedelta
from pathlib import Path
from typing import Iterable, List, NamedTuple, Optional

from ..config import Config
from .git_status import RepositoryStatus, StatusProvider
from .theme import Theme

logger = logging.getLogger(__name__)


class Segment(NamedTuple):
    text: str
    style: str


def coalesce(segments: Iterable[Segment]) -> List[Segment]:
    """Merge neighbours that share a style so each style is written once."""
    merged: List[Segment] = []
    for segment in segments:
        if not segment.text:
            continue
        if merged and merged[-1].style == segment.style:
            merged[-1] = Segment(merged[-1].text + segment.text, segment.style)
        else:
            merged.append(segment)
    return merged


class PromptRenderer:
    def __init__(self, provider: Optional[StatusProvider] = None) -> None:
        self.provider = provider

    @staticmethod
    def _segment(text: str, kind: str = "default") -> Segment:
        return Segment(text, Theme.segment_style(kind))

    def build(self, working_directory: Path, elapsed: timedelta) -> List[Segment]:
        segments = [
            self._segment(Config.PROMPT_LEADER, "leader"),
            self._segment(str(working_directory), "path"),
        ]

        status = self.repository_status(working_directory)
        if status is not None:
            segments.extend(self.repository_segments(status))

        seconds = elapsed.total_seconds()
        if seconds * 1000 > Config.ELAPSED_THRESHOLD_MS:
            segments.append(self._segment(f" {seconds:.1f}s", "elapsed"))

        segments.append(self._segment(Config.PROMPT_TERMINATOR))
        return coalesce(segments)

    def repository_status(self, working_directory: Path) -> Optional[RepositoryStatus]:
        if self.provider is None:
            return None
        try:
            return self.provider.status(working_directory)
        except Exception:
            # Draw the prompt without the repository part.
            logger.warning(
                "repository status failed for %s", working_directory, exc_info=True
            )
            return None

    def repository_segments(self, status: RepositoryStatus) -> List[Segment]:
        segments = [self._segment(f" [{status.branch}")]

        if status.stash_count > 0:
            segments.append(self._segment(f"[{status.stash_count}]"))

        delta = status.delta
        if delta > 0:
            segments.append(self._segment(f"(+{delta})", "ahead"))
        elif delta < 0:
            segments.append(self._segment(f"({delta})", "behind"))

        if status.is_dirty:
            segments.append(self._segment(" ("))
            segments.extend(self.change_segments(status))
            segments.append(self._segment(")"))

        segments.append(self._segment("]"))
        return segments

    def change_segments(self, status: RepositoryStatus) -> List[Segment]:
        tokens: List[Segment] = []
        for count, symbol, kind in (
            (status.added, "+", "added"),
            (status.modified, "~", "modified"),
            (status.removed, "-", "removed"),
        ):
            if count:
                tokens.append(self._segment(f"{symbol}{count}", kind))

        working_tree = bool(tokens)
        if working_tree and (status.staged or status.untracked):
            tokens.append(self._segment("|"))

        for count, symbol, kind in (
            (status.staged, "@", "staged"),
            (status.untracked, "?", "untracked"),
            (status.missing, "x", "missing"),
        ):
            if count:
                tokens.append(self._segment(f"{symbol}{count}", kind))

        separated: List[Segment] = []
        for index, token in enumerate(tokens):
            if index:
                separated.append(self._segment(" "))
            separated.append(token)
        return separated
