#!/usr/bin/env python3
import logging

from .config import Config
from .core.shell import LiquidShell
from .logging_setup import configure_logging

logger = logging.getLogger(__name__)


def main() -> int:
    Config.ensure_directories()
    configure_logging()
    logger.info("starting shell, host shell %s", Config.get_shell())

    shell = LiquidShell()
    return shell.run()


if __name__ == "__main__":
    raise SystemExit(main())
