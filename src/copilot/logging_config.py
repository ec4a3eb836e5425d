"""Loguru logging configuration for the copilot layer.

Provider adapters talk to vendors through the openai client, which logs
through stdlib ``logging`` (retries under ``openai``, one line per request
under ``httpx``).  ``setup_logging()`` routes those records into loguru and
keeps the per-request lines out of non-debug output.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

# Stdlib loggers emitted by the vendor client stack.
VENDOR_LOGGERS = ("openai", "httpx")


class InterceptHandler(logging.Handler):
    """Redirect stdlib logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(*, level: str = "INFO", json: bool = False) -> None:
    """Configure loguru as the single logging backend.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ...).
        json: If True, emit structured JSON to stderr.
    """
    logger.remove()

    if json:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(
            sys.stderr,
            level=level,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
                "<level>{message}</level>"
            ),
            colorize=True,
        )

    intercept = InterceptHandler()
    vendor_level = logging.DEBUG if level.upper() == "DEBUG" else logging.WARNING
    for name in VENDOR_LOGGERS:
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = [intercept]
        stdlib_logger.propagate = False
        stdlib_logger.setLevel(vendor_level)

    logging.root.handlers = [intercept]
    logging.root.setLevel(logging.DEBUG)
