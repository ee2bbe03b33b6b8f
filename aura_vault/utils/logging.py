"""Logging setup for Aura Vault.

Everything logs under the ``aura_vault`` logger. Console output goes through
Rich on stderr so command output on stdout stays clean; a log file can be
added for troubleshooting.

Vault code logs lock-state changes, record ids and record counts. It never
passes a passphrase, key or decrypted content to a logger, and the file
handler creates its file readable by the owner only.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


# Shared console for log output
console = Console(stderr=True)

ROOT_LOGGER_NAME = "aura_vault"

FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
CONSOLE_FORMAT = "%(message)s"
PLAIN_FORMAT = "%(levelname)s %(name)s: %(message)s"


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[Path] = None,
    rich_output: bool = True,
) -> logging.Logger:
    """
    Configure the ``aura_vault`` logger.

    Calling it again replaces the handlers from the previous call, so the
    CLI can reconfigure on every invocation.

    Args:
        level: Console log level name; unknown names fall back to WARNING
        log_file: Optional file that receives DEBUG and above
        rich_output: Rich console handler if True, plain stderr stream if False

    Returns:
        The package logger
    """
    console_level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.handlers.clear()
    logger.propagate = False

    if rich_output:
        console_handler: logging.Handler = RichHandler(
            console=console,
            show_time=False,
            show_path=False,
            markup=False,
        )
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(PLAIN_FORMAT))

    console_handler.setLevel(console_level)
    logger.addHandler(console_handler)

    logger_level = console_level
    if log_file:
        log_file = Path(log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        # Owner-only, even though secrets are never logged
        fd = os.open(log_file, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        os.close(fd)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)
        logger_level = logging.DEBUG

    logger.setLevel(logger_level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module, e.g. ``get_logger(__name__)``."""
    return logging.getLogger(name)
