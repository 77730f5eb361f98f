"""Logger hierarchy and handler setup for documentation runs.

Every module logs through `get_logger(<module>)`, which lives under the
`apidoc` logger. The CLI calls `configure_logging` once per invocation to
attach a console handler and, with `--log-file`, a timestamped file sink.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

_LOGGER_NAME = "apidoc"

CONSOLE_FORMAT = f"[{_LOGGER_NAME}] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return `apidoc.<name>`, or the package logger itself."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def _console_handler(level: int, stream: TextIO | None) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def _file_handler(path: Path, level: int) -> logging.Handler:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Route `apidoc.*` records to `stream` (stderr by default) and `log_file`.

    Page-by-page progress is logged at DEBUG and only shown with `verbose`;
    the run summary is logged at INFO. Handlers from an earlier call are
    closed and replaced.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_console_handler(level, stream))
    if log_file is not None:
        logger.addHandler(_file_handler(log_file, level))
    return logger


__all__ = ["CONSOLE_FORMAT", "FILE_FORMAT", "configure_logging", "get_logger"]
