"""Logging setup for the sandboxgen logger hierarchy."""

from __future__ import annotations

import logging
from pathlib import Path

ROOT_LOGGER = "sandboxgen"

CONSOLE_FORMAT = "[%(name)s] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(component: str | None = None) -> logging.Logger:
    """Return ``sandboxgen.<component>``, or the root sandboxgen logger."""
    if not component:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{component}")


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route sandboxgen records to stderr, plus ``log_file`` when given.

    Calling this again replaces the previously installed handlers.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    logger.addHandler(_handler(logging.StreamHandler(), level, CONSOLE_FORMAT))
    if log_file is not None:
        logger.addHandler(
            _handler(logging.FileHandler(log_file, encoding="utf-8"), level, FILE_FORMAT)
        )
    return logger


__all__ = ["configure_logging", "get_logger"]
