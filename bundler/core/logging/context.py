# bundler/core/logging/context.py
from __future__ import annotations
import contextvars

__all__ = ["setLogContext", "dropLogContext", "clearLogContext", "getLogContext"]

# "bundle" is set by the assembler, "reference" by the resolver while a file is inlined
_logContext: contextvars.ContextVar[dict[str, object] | None] = contextvars.ContextVar("bundler.logctx", default=None)



def setLogContext(**values: object) -> None:
    """Adds or replaces context keys. None values are ignored."""
    merged = dict(_logContext.get() or {})
    merged.update({key: value for key, value in values.items() if value is not None})
    _logContext.set(merged)



def dropLogContext(*keys: str) -> None:
    remaining = {key: value for key, value in (_logContext.get() or {}).items() if key not in keys}
    _logContext.set(remaining or None)



def clearLogContext() -> None:
    _logContext.set(None)



def getLogContext() -> dict[str, object] | None:
    return _logContext.get()
