#!/usr/bin/env python3
import logging
from pathlib import Path

from .config import Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str | None = None, log_file: Path | None = None) -> None:
    """Send log records to the shell log file, never to the interactive console."""
    level_name = (level or Config.get_log_level()).upper()
    target = Path(log_file or Config.LOG_FILE).expanduser()

    handlers: list[logging.Handler] = []
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(str(target), encoding="utf-8"))
    except OSError:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
