"""FastAPI application factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI

from graphql_service.app.exception_handlers import configure_exception_handlers
from graphql_service.app.graphql import build_execution_service, build_web_handler
from graphql_service.app.lifespan import lifespan
from graphql_service.app.middleware import configure_middleware
from graphql_service.app.router import setup_routers
from graphql_service.core.settings import get_settings

if TYPE_CHECKING:
    from graphql_service.features.graphql.web import WebGraphQlHandler


def create_app(handler: WebGraphQlHandler | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Uses unified settings from core.settings for all configuration.

    Args:
        handler: Web handler to serve. Defaults to one built around the
            projects schema.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()
    app_settings = settings.app

    if handler is None:
        handler = build_web_handler(build_execution_service(settings.graphql))

    app = FastAPI(
        title=app_settings.title,
        version=app_settings.version,
        root_path=app_settings.root_path,
        debug=app_settings.debug,
        lifespan=lifespan,
    )
    app.state.graphql_handler = handler

    # Exception handlers before middleware
    configure_exception_handlers(app)
    configure_middleware(app)
    setup_routers(app, handler, app_settings, settings.graphql)

    return app


# Application instance for uvicorn
app = create_app()
