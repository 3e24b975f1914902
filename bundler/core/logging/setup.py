# bundler/core/logging/setup.py
from __future__ import annotations
import logging
import logging.handlers
from pathlib import Path

from .formatters import DevFormatter, JsonFormatter

__all__ = ["configureLogging"]

_LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
_LOG_FILE_BACKUPS = 3



def configureLogging(*, devMode: bool = False, logFile: str | Path | None = None) -> None:
    """
    Replaces the root logger's handlers for one bundler run.

    Console lines go to stderr through DevFormatter; in dev mode (--debug) the
    level drops to DEBUG and logger names are shown. With `logFile`, the same
    records are also written as JSON lines to a size-rotated file.
    """
    level = logging.DEBUG if devMode else logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    handlers[0].setFormatter(DevFormatter(showLogger=devMode))

    if logFile:
        fileHandler = logging.handlers.RotatingFileHandler(
            Path(logFile),
            maxBytes=_LOG_FILE_MAX_BYTES,
            backupCount=_LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        fileHandler.setFormatter(JsonFormatter())
        handlers.append(fileHandler)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        handler.setLevel(level)
        root.addHandler(handler)
    root.setLevel(level)
