"""Application lifespan management.

Startup configures logging before anything else logs; shutdown stops the
logging queue listener so buffered records are flushed.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from graphql_service.core.settings import get_app_settings, get_logging_settings
from graphql_service.infra.logging.config import setup_logging, shutdown

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging on startup and flush it on shutdown.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_app_settings()
    setup_logging(log_settings=get_logging_settings(), force=True)

    logger.info(
        "Application starting",
        extra={
            "service": settings.service_name,
            "version": settings.version,
            "environment": settings.environment,
        },
    )

    try:
        yield
    finally:
        logger.info("Application shutting down", extra={"service": settings.service_name})
        shutdown()
