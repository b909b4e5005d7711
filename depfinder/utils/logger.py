"""
Logging utilities for depfinder.

All depfinder loggers live below the ``depfinder`` namespace. Library code
only ever calls :func:`get_logger`; handlers are installed by the CLI via
:func:`setup_logging`, so embedding applications keep full control over
where depfinder's records go.
"""

from __future__ import annotations

import os
import sys
import copy
import logging
import threading
from typing import IO, Optional

from depfinder.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

ROOT_LOGGER_NAME = "depfinder"

_logging_configured: bool = False
_lock = threading.Lock()


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name with ANSI escapes on a TTY."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
        stream: Optional[IO[str]] = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color
        self.stream = stream

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname)
        if not (color and self.use_color and self._stream_supports_color()):
            return super().format(record)

        # Other handlers may format the same record; color a private copy.
        colored = copy.copy(record)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)

    def _stream_supports_color(self) -> bool:
        if os.environ.get("NO_COLOR") or os.environ.get("CI"):
            return False
        stream = self.stream or sys.stderr
        try:
            return stream.isatty()
        except (AttributeError, OSError, ValueError):
            return False


def verbosity_to_level(verbose: int) -> int:
    """Map a ``-v`` count to a logging level (0=WARNING, 1=INFO, 2+=DEBUG)."""
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(
    *,
    level: int = logging.INFO,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
) -> None:
    """Install a single stream handler on the ``depfinder`` logger.

    Safe to call repeatedly; previous handlers are replaced.

    Args:
        level: Logging level (e.g. ``logging.INFO``).
        verbose: Use the timestamped format including logger names.
        stream: Output stream; defaults to ``sys.stderr``.
    """
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.setLevel(level)

        target = stream or sys.stderr
        handler = logging.StreamHandler(target)
        handler.setLevel(level)
        handler.setFormatter(
            ColoredFormatter(
                LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT,
                datefmt=LOG_DATE_FORMAT,
                use_color=not os.environ.get("NO_COLOR"),
                stream=target,
            )
        )

        root_logger.addHandler(handler)
        root_logger.propagate = False
        _logging_configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger within the depfinder namespace.

    ``get_logger("http")`` and ``get_logger("depfinder.http")`` return the
    same logger.
    """
    if not name or name == ROOT_LOGGER_NAME:
        logger = logging.getLogger(ROOT_LOGGER_NAME)
    elif name.startswith(ROOT_LOGGER_NAME + "."):
        logger = logging.getLogger(name)
    else:
        logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

    if not logger.handlers and (not logger.parent or not logger.parent.handlers):
        logger.addHandler(logging.NullHandler())

    return logger


def is_logging_configured() -> bool:
    """Return True if :func:`setup_logging` has run."""
    return _logging_configured


def disable_logging() -> None:
    """Silence all depfinder logging output."""
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.addHandler(logging.NullHandler())
        root_logger.setLevel(logging.NOTSET)
        _logging_configured = False
