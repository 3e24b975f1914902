# bundler/core/logging/formatters.py
from __future__ import annotations

import logging
from typing import Any

from bundler.core.jsonutils import safeJsonDumps
from .context import getLogContext

__all__ = ["JsonFormatter", "DevFormatter", "contextSuffix"]

# Context keys shown on console lines, outermost first
_CONSOLE_CONTEXT_KEYS = ("bundle", "reference")



def contextSuffix() -> str:
    """' [My App/main.js]' for the current bundle/reference, '' when neither is set."""
    ctx = getLogContext() or {}
    parts = [str(ctx[key]) for key in _CONSOLE_CONTEXT_KEYS if ctx.get(key)]
    return f" [{'/'.join(parts)}]" if parts else ""



class JsonFormatter(logging.Formatter):
    """One JSON object per line, for the --log-file output."""
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": int(record.created * 1000),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
            "ctx": dict(getLogContext() or {}),
        }
        if record.exc_info and record.exc_info[1] is not None:
            err = record.exc_info[1]
            entry["exc"] = {
                "type": type(err).__name__,
                "message": str(err),
                "stack": self.formatException(record.exc_info),
            }
        return safeJsonDumps(entry)



class DevFormatter(logging.Formatter):
    """
    Console lines: "LEVEL: message [bundle/reference]".
    With `showLogger` (debug runs) the logger name goes in front of the message.
    """
    def __init__(self, *, showLogger: bool = True):
        super().__init__()
        self.showLogger = showLogger

    def format(self, record: logging.LogRecord) -> str:
        head = f"{record.levelname}: [{record.name}] " if self.showLogger else f"{record.levelname}: "
        lines = [head + record.getMessage() + contextSuffix()]
        if record.exc_info:
            lines.append(self.formatException(record.exc_info))
        if record.stack_info:
            lines.append(self.formatStack(record.stack_info))
        return "\n".join(lines)
