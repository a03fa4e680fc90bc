"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from graphql_service.core.settings import get_app_settings, get_graphql_settings
from graphql_service.features.graphql.web.graphiql import create_graphiql_router
from graphql_service.features.graphql.web.router import create_graphql_router
from graphql_service.features.metrics.router import router as metrics_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from graphql_service.core.settings.app import AppSettings
    from graphql_service.core.settings.graphql import GraphQLSettings
    from graphql_service.features.graphql.web import WebGraphQlHandler

logger = logging.getLogger(__name__)


def setup_routers(
    app: FastAPI,
    handler: WebGraphQlHandler,
    app_settings: AppSettings | None = None,
    graphql_settings: GraphQLSettings | None = None,
) -> None:
    """Register the GraphQL transports, GraphiQL and metrics with the application.

    Args:
        app: FastAPI application instance.
        handler: Web handler shared by the HTTP and WebSocket transports.
        app_settings: Optional application settings override.
        graphql_settings: Optional override controlling GraphQL availability.
    """
    app_settings = app_settings or get_app_settings()
    graphql_settings = graphql_settings or get_graphql_settings()

    if graphql_settings.metrics_enabled:
        app.include_router(metrics_router, tags=["observability"])

    if not graphql_settings.enabled:
        logger.info("GraphQL endpoints disabled")
        return

    subscriptions_path = None
    if graphql_settings.websocket_enabled:
        subscriptions_path = graphql_settings.subscriptions_path
    shared_path = subscriptions_path == graphql_settings.path

    app.include_router(
        create_graphql_router(
            handler,
            path=graphql_settings.path,
            websocket=shared_path,
            connection_init_timeout=graphql_settings.connection_init_timeout,
        )
    )
    if subscriptions_path is not None and not shared_path:
        app.include_router(
            create_graphql_router(
                handler,
                path=subscriptions_path,
                http=False,
                connection_init_timeout=graphql_settings.connection_init_timeout,
            )
        )

    if graphql_settings.graphiql_enabled:
        app.include_router(
            create_graphiql_router(
                graphiql_path=graphql_settings.graphiql_path,
                graphql_path=graphql_settings.path,
                title=app_settings.title,
                subscriptions_path=subscriptions_path,
            )
        )

    logger.info(
        "GraphQL endpoints registered",
        extra={
            "graphql_path": graphql_settings.path,
            "websocket_path": subscriptions_path,
            "graphiql": graphql_settings.graphiql_enabled,
        },
    )
