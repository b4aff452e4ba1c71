"""Logging configuration for applications embedding the steady engine."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _has_handler(logger: logging.Logger, marker: str) -> bool:
    return any(getattr(h, "_steady", None) == marker for h in logger.handlers)


def setup_logging(
    level: str | int = "INFO",
    log_file: Path | str | None = None,
    max_bytes: int = 5_000_000,
    backup_count: int = 3,
) -> logging.Logger:
    """Configure the ``steady`` logger with a console handler and optional rotating file.

    Repeated calls update the level and add a file handler once one is
    requested; neither handler is ever added twice.
    """
    logger = logging.getLogger("steady")
    logger.setLevel(level if isinstance(level, int) else level.upper())
    formatter = logging.Formatter(LOG_FORMAT)

    if not _has_handler(logger, "console"):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        console._steady = "console"
        logger.addHandler(console)

    if log_file is not None and not _has_handler(logger, "file"):
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        handler.setFormatter(formatter)
        handler._steady = "file"
        logger.addHandler(handler)
    return logger
