"""Entry point shared by the HTTP and WebSocket transports.

``WebGraphQlHandler.builder(service)`` collects interceptors and context
accessors; ``build()`` folds the interceptors into a single callable ending
with the execution service. Interceptors see the request in registration
order and the response in reverse order.

Example:
    handler = (
        WebGraphQlHandler.builder(service)
        .interceptor(RequestLoggingInterceptor())
        .context_accessor(LogContextAccessor())
        .build()
    )
    output = await handler.handle(web_input)
"""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING

from graphql_service.features.graphql.execution.context import (
    CompositeContextAccessor,
    bind_snapshot,
    extract,
)
from graphql_service.features.graphql.web.io import WebOutput

if TYPE_CHECKING:
    from collections.abc import Callable

    from graphql import GraphQLSchema

    from graphql_service.features.graphql.execution.context import ContextAccessor
    from graphql_service.features.graphql.execution.service import ExecutionGraphQlService
    from graphql_service.features.graphql.web.interceptor import Chain, WebInterceptor
    from graphql_service.features.graphql.web.io import WebInput

logger = logging.getLogger(__name__)


class WebGraphQlHandler:
    """Runs a ``WebInput`` through the interceptors and the execution service."""

    def __init__(
        self,
        chain: Chain,
        accessor: ContextAccessor | None = None,
        schema: GraphQLSchema | None = None,
    ) -> None:
        self._chain = chain
        self._accessor = accessor
        self._schema = schema

    @staticmethod
    def builder(service: ExecutionGraphQlService) -> WebGraphQlHandlerBuilder:
        return WebGraphQlHandlerBuilder(service)

    @property
    def schema(self) -> GraphQLSchema | None:
        """Schema the execution service runs against."""
        return self._schema

    async def handle(self, web_input: WebInput) -> WebOutput:
        snapshot = extract(self._accessor)
        logger.debug(
            "Handling GraphQL request",
            extra={"uri": web_input.uri, "operation_name": web_input.operation_name},
        )
        with bind_snapshot(snapshot):
            return await self._chain(web_input)


class WebGraphQlHandlerBuilder:
    def __init__(self, service: ExecutionGraphQlService) -> None:
        self._service = service
        self._interceptors: list[WebInterceptor] = []
        self._accessors: list[ContextAccessor] = []

    def interceptor(self, *interceptors: WebInterceptor) -> WebGraphQlHandlerBuilder:
        self._interceptors.extend(interceptors)
        return self

    def interceptors(
        self, configure: Callable[[list[WebInterceptor]], None]
    ) -> WebGraphQlHandlerBuilder:
        """Edit the registered interceptors in place (reorder, remove, insert)."""
        configure(self._interceptors)
        return self

    def context_accessor(self, *accessors: ContextAccessor) -> WebGraphQlHandlerBuilder:
        self._accessors.extend(accessors)
        return self

    def context_accessors(
        self, configure: Callable[[list[ContextAccessor]], None]
    ) -> WebGraphQlHandlerBuilder:
        configure(self._accessors)
        return self

    def build(self) -> WebGraphQlHandler:
        chain: Chain = self._execute
        for interceptor in reversed(self._interceptors):
            chain = functools.partial(_intercept, interceptor, chain)
        return WebGraphQlHandler(chain, self._build_accessor(), self._service.source.schema)

    def _build_accessor(self) -> ContextAccessor | None:
        if not self._accessors:
            return None
        if len(self._accessors) == 1:
            return self._accessors[0]
        return CompositeContextAccessor(self._accessors)

    async def _execute(self, web_input: WebInput) -> WebOutput:
        result = await self._service.execute(web_input.to_execution_input())
        return WebOutput(web_input, result)


async def _intercept(interceptor: WebInterceptor, chain: Chain, web_input: WebInput) -> WebOutput:
    return await interceptor.intercept(web_input, chain)


__all__ = ["WebGraphQlHandler", "WebGraphQlHandlerBuilder"]
