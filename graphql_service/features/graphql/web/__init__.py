"""Web layer: interception chain and HTTP/WebSocket transports."""

from graphql_service.features.graphql.web.handler import WebGraphQlHandler, WebGraphQlHandlerBuilder
from graphql_service.features.graphql.web.interceptor import WebInterceptor
from graphql_service.features.graphql.web.io import WebInput, WebOutput, WebOutputBuilder
from graphql_service.features.graphql.web.request_logging import RequestLoggingInterceptor
from graphql_service.features.graphql.web.router import WebGraphQlSchema, create_graphql_router

__all__ = [
    "RequestLoggingInterceptor",
    "WebGraphQlHandler",
    "WebGraphQlHandlerBuilder",
    "WebGraphQlSchema",
    "WebInput",
    "WebInterceptor",
    "WebOutput",
    "WebOutputBuilder",
    "create_graphql_router",
]
