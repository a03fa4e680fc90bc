"""Logging infrastructure.

Provides structured logging with:
- JSONL format for Loki/Elasticsearch ingestion
- Automatic context injection (request_id, operation_name, ...)
- QueueHandler + QueueListener for non-blocking I/O
- OpenTelemetry trace correlation

Basic usage:
    from graphql_service.infra.logging import set_log_context
    import logging

    logger = logging.getLogger(__name__)

    set_log_context(request_id="abc-123")
    logger.info("Processing request")  # Automatically includes request_id
"""

from graphql_service.infra.logging.config import configure_logging, setup_logging, shutdown
from graphql_service.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    log_context_var,
    remove_from_log_context,
    set_log_context,
)
from graphql_service.infra.logging.formatters import JSONFormatter

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "log_context_var",
    "remove_from_log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
