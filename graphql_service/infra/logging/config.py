"""Logging configuration setup.

Provides logging configuration using:
- dictConfig for formatters, filters and the root level
- QueueHandler + QueueListener for non-blocking I/O
- ContextInjectingFilter on the queue handler for automatic context propagation
- JSONL format for machine parsing (Loki-ready)
"""

from __future__ import annotations

import atexit
import logging
import logging.config
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import Queue
from typing import TYPE_CHECKING, Any

from graphql_service.infra.logging.context import ContextInjectingFilter
from graphql_service.infra.logging.formatters import JSONFormatter

if TYPE_CHECKING:
    from graphql_service.core.settings.logs import LoggingSettings

_log_queue: Queue[logging.LogRecord] | None = None
_listener: QueueListener | None = None
_queue_handler: QueueHandler | None = None
_LOGGING_INITIALIZED = False

logger = logging.getLogger(__name__)

_TEXT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
_TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def shutdown() -> None:
    """Stop the QueueListener and flush pending records.

    Registered with atexit on first configuration; safe to call twice.
    """
    global _log_queue, _listener

    if _listener is not None:
        _listener.stop()
        _listener = None

    _log_queue = None


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from graphql_service.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    log_config = {**settings_obj.to_logging_kwargs(), **configure_kwargs}
    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    file_path: str | Path | None = None,
    json_logs: bool = True,
    console_enabled: bool = True,
    include_context: bool = True,
    capture_warnings: bool = True,
    file_max_bytes: int = 10 * 1024 * 1024,
    file_backup_count: int = 5,
    service_name: str = "graphql-service",
) -> None:
    """Configure logging with dictConfig and the QueueHandler pattern.

    All output handlers hang off a QueueListener thread; the root logger only
    carries a QueueHandler, so logging calls from the event loop never block
    on I/O.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file_path: Path to a rotating log file. None disables file logging.
        json_logs: Emit JSON Lines instead of human-readable text.
        console_enabled: Enable console/stderr logging.
        include_context: Inject the contextvars log context into records.
        capture_warnings: Forward Python warnings to logging.
        file_max_bytes: Maximum log file size before rotation.
        file_backup_count: Number of rotated log files to keep.
        service_name: Static ``service`` field of JSON records.
    """
    global _log_queue, _listener, _queue_handler

    if capture_warnings:
        logging.captureWarnings(True)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "root": {"level": log_level.upper(), "handlers": []},
        }
    )

    if _listener is not None:
        _listener.stop()
    if _queue_handler is not None:
        logging.getLogger().removeHandler(_queue_handler)

    path = Path(file_path) if file_path else None
    if path:
        path.parent.mkdir(parents=True, exist_ok=True)

    handlers = _build_handlers(
        console_enabled=console_enabled,
        file_path=path,
        json_logs=json_logs,
        file_max_bytes=file_max_bytes,
        file_backup_count=file_backup_count,
        service_name=service_name,
    )

    _log_queue = Queue()
    if handlers:
        _listener = QueueListener(_log_queue, *handlers, respect_handler_level=True)
        _listener.start()
        atexit.register(shutdown)

    _queue_handler = QueueHandler(_log_queue)
    if include_context:
        # Handler-level so records propagated from child loggers are enriched too
        _queue_handler.addFilter(ContextInjectingFilter())
    logging.getLogger().addHandler(_queue_handler)


def _build_handlers(
    *,
    console_enabled: bool,
    file_path: Path | None,
    json_logs: bool,
    file_max_bytes: int,
    file_backup_count: int,
    service_name: str,
) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []

    def _formatter() -> logging.Formatter:
        if json_logs:
            return JSONFormatter(static={"service": service_name})
        return logging.Formatter(fmt=_TEXT_FORMAT, datefmt=_TEXT_DATEFMT)

    if console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(_formatter())
        handlers.append(console_handler)

    if file_path:
        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=file_max_bytes,
            backupCount=file_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(_formatter())
        handlers.append(file_handler)

    return handlers
