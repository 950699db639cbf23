"""Loguru setup for the CLI and any embedding application.

httpx and other libraries log through stdlib ``logging``; those records are
forwarded into loguru so everything shares one sink and one format.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from loguru import logger

_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

_NOISY_LOGGERS = ("httpx", "httpcore")


class _StdlibForwarder(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so the record points at the caller.
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """Replace loguru's sinks with stderr (and ``log_file``, rotated at 1 MB)."""
    level = level.upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=_FORMAT)
    if log_file is not None:
        logger.add(log_file, level=level, rotation="1 MB", retention=3, encoding="utf-8")

    logging.basicConfig(handlers=[_StdlibForwarder()], level=0, force=True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging at {}{}", level, f", also to {log_file}" if log_file else "")
