"""Context management for structured logging.

Request-scoped fields (request id, operation name, ...) live in a
``ContextVar`` and are injected into every log record by
``ContextInjectingFilter``. Asyncio tasks inherit the variable
automatically; code that hops onto another thread gets it back through
``LogContextAccessor`` (see ``features.graphql.execution.context``), which
extracts and restores ``log_context_var``.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any

log_context_var: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Add fields to the logging context of the current task/thread.

    Example:
        set_log_context(request_id="abc-123", operation_name="ProjectReleases")
        logger.info("Executing")  # Includes request_id and operation_name
    """
    current = log_context_var.get().copy()
    current.update(kwargs)
    log_context_var.set(current)


def get_log_context() -> dict[str, Any]:
    """Get a copy of the current logging context."""
    return log_context_var.get().copy()


def clear_log_context() -> None:
    """Clear the logging context for the current task/thread."""
    log_context_var.set({})


def remove_from_log_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    current = log_context_var.get().copy()
    for key in keys:
        current.pop(key, None)
    log_context_var.set(current)


class ContextInjectingFilter(logging.Filter):
    """Logging filter that copies the log context onto each LogRecord.

    Attached to the queue handler so every logger benefits. Existing record
    attributes are never overwritten.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in log_context_var.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
