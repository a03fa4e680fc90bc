"""Assembly of the GraphQL execution service and web handler."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from graphql_service.core.settings import get_graphql_settings
from graphql_service.features.graphql.execution import (
    AppExceptionResolver,
    ExecutionGraphQlService,
    GraphQlSource,
    LogContextAccessor,
)
from graphql_service.features.graphql.web import RequestLoggingInterceptor, WebGraphQlHandler
from graphql_service.infra.metrics import PrometheusGraphQlObserver

if TYPE_CHECKING:
    from collections.abc import Iterable

    from graphql_service.core.settings.graphql import GraphQLSettings
    from graphql_service.features.graphql.execution import (
        DataFetcherExceptionResolver,
        GraphQlObserver,
    )
    from graphql_service.features.graphql.web import WebInterceptor


def build_execution_service(
    graphql_settings: GraphQLSettings | None = None,
    *,
    schema: Any = None,
    exception_resolvers: Iterable[DataFetcherExceptionResolver] = (),
    observers: Iterable[GraphQlObserver] | None = None,
) -> ExecutionGraphQlService:
    """Build the execution service for ``schema`` (the projects schema by default).

    Application resolvers run before ``AppExceptionResolver``, which maps the
    ``AppException`` hierarchy. Prometheus observation is installed when
    metrics are enabled and no explicit observers are given.
    """
    graphql_settings = graphql_settings or get_graphql_settings()
    if schema is None:
        from graphql_service.features.projects.schema import schema

    if observers is None:
        observers = [PrometheusGraphQlObserver()] if graphql_settings.metrics_enabled else []

    return ExecutionGraphQlService(
        GraphQlSource.from_strawberry(schema),
        exception_resolvers=[*exception_resolvers, AppExceptionResolver()],
        observers=observers,
        resolution_timeout=graphql_settings.exception_resolution_timeout,
    )


def build_web_handler(
    service: ExecutionGraphQlService,
    interceptors: Iterable[WebInterceptor] = (),
) -> WebGraphQlHandler:
    """Web handler with request logging first and log context propagation."""
    return (
        WebGraphQlHandler.builder(service)
        .interceptor(RequestLoggingInterceptor(), *interceptors)
        .context_accessor(LogContextAccessor())
        .build()
    )


__all__ = ["build_execution_service", "build_web_handler"]
