"""Logger hierarchy and handler setup for the repoctx CLI."""

from __future__ import annotations

import logging
from pathlib import Path

ROOT_LOGGER = "repoctx"

_CONSOLE_FORMAT = "[repoctx] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``repoctx.<name>``, or the package logger when ``name`` is empty."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send repoctx records to stderr and, when ``log_file`` is given, to that file.

    Console records are DEBUG with ``verbose`` and INFO otherwise. The file sink
    always records DEBUG so a log file captures store activity for later review.
    """
    package_logger = logging.getLogger(ROOT_LOGGER)
    package_logger.propagate = False
    for existing in list(package_logger.handlers):
        package_logger.removeHandler(existing)
        existing.close()

    console_level = logging.DEBUG if verbose else logging.INFO
    package_logger.addHandler(
        _handler(logging.StreamHandler(), console_level, _CONSOLE_FORMAT)
    )
    lowest = console_level

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        package_logger.addHandler(
            _handler(logging.FileHandler(log_file, encoding="utf-8"), logging.DEBUG, _FILE_FORMAT)
        )
        lowest = logging.DEBUG

    package_logger.setLevel(lowest)
    return package_logger


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


__all__ = ["configure_logging", "get_logger"]
