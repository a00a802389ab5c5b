#!/usr/bin/env python3
import logging
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional, Protocol, Tuple

from ..config import Config

logger = logging.getLogger(__name__)

DETACHED_BRANCH = "(no branch)"


@dataclass
class RepositoryStatus:
    branch: str
    stash_count: int = 0
    ahead_by: Optional[int] = None
    behind_by: Optional[int] = None
    added: int = 0
    staged: int = 0
    removed: int = 0
    modified: int = 0
    untracked: int = 0
    missing: int = 0

    @property
    def is_dirty(self) -> bool:
        return any(
            (
                self.added,
                self.staged,
                self.removed,
                self.modified,
                self.untracked,
                self.missing,
            )
        )

    @property
    def delta(self) -> int:
        return (self.ahead_by or 0) - (self.behind_by or 0)


class StatusProvider(Protocol):
    def status(self, directory: Path) -> Optional[RepositoryStatus]:
        ...


class GitStatusProvider:
    """Repository status from the ``git`` CLI, cached per directory."""

    def __init__(
        self,
        git: str = "git",
        update_interval: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.git = git
        self.update_interval = (
            Config.GIT_STATUS_UPDATE_INTERVAL if update_interval is None else update_interval
        )
        self.timeout = Config.GIT_TIMEOUT if timeout is None else timeout
        self._cache: Dict[Path, Tuple[float, Optional[RepositoryStatus]]] = {}

    def should_update(self, directory: Path) -> bool:
        cached = self._cache.get(directory)
        if cached is None:
            return True
        return time.monotonic() - cached[0] >= self.update_interval

    def invalidate(self) -> None:
        self._cache.clear()

    def status(self, directory: Path) -> Optional[RepositoryStatus]:
        if not Config.GIT_STATUS_ENABLED:
            return None

        if not self.should_update(directory):
            return self._cache[directory][1]

        value = self._query(directory)
        self._cache[directory] = (time.monotonic(), value)
        return value

    def _run(self, directory: Path, *args: str) -> Optional[str]:
        try:
            completed = subprocess.run(
                [self.git, *args],
                cwd=str(directory),
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as error:
            logger.debug("git %s failed in %s: %s", args[0], directory, error)
            return None

        if completed.returncode != 0:
            logger.debug(
                "git %s exited %s in %s: %s",
                args[0],
                completed.returncode,
                directory,
                completed.stderr.strip(),
            )
            return None
        return completed.stdout

    def _query(self, directory: Path) -> Optional[RepositoryStatus]:
        output = self._run(
            directory,
            "status",
            "--porcelain=v2",
            "--branch",
            "--untracked-files=all",
        )
        if output is None:
            return None

        status = self.parse_porcelain_v2(output.splitlines())
        stashes = self._run(directory, "stash", "list")
        if stashes is not None:
            status.stash_count = len([line for line in stashes.splitlines() if line])
        return status

    @staticmethod
    def parse_porcelain_v2(lines: Iterable[str]) -> RepositoryStatus:
        status = RepositoryStatus(branch=DETACHED_BRANCH)

        for line in lines:
            if line.startswith("# branch.head "):
                head = line[len("# branch.head ") :].strip()
                status.branch = DETACHED_BRANCH if head == "(detached)" else head
            elif line.startswith("# branch.ab "):
                ahead, behind = line[len("# branch.ab ") :].split()
                status.ahead_by = int(ahead.lstrip("+"))
                status.behind_by = int(behind.lstrip("-"))
            elif line.startswith("? "):
                status.untracked += 1
            elif line[:2] in ("1 ", "2 "):
                index, worktree = line[2], line[3]
                if index == "A":
                    status.added += 1
                elif index in "MRCT":
                    status.staged += 1
                elif index == "D":
                    status.removed += 1

                if worktree in "MT":
                    status.modified += 1
                elif worktree == "D":
                    status.missing += 1
            elif line.startswith("u "):
                # Unmerged paths still need attention in the work tree.
                status.modified += 1

        return status
