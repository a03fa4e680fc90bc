"""GraphQL over HTTP and WebSocket on Strawberry's FastAPI router.

Strawberry's ``GraphQLRouter`` owns the wire protocols: JSON over ``GET`` and
``POST``, multipart subscriptions over HTTP and ``graphql-transport-ws`` over
WebSocket. It talks to a schema through ``execute`` and ``subscribe``;
``WebGraphQlSchema`` implements both by building a ``WebInput`` from the
connection in the Strawberry context and running it through a
``WebGraphQlHandler``, so every transport goes through the interception chain
and the execution service.

Example:
    router = create_graphql_router(handler, path="/graphql")
    app.include_router(router)
"""

from __future__ import annotations

import logging
from contextlib import aclosing
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from fastapi.routing import APIRoute, APIWebSocketRoute
from graphql import GraphQLError, parse, print_schema
from strawberry.exceptions import MissingQueryError
from strawberry.fastapi import GraphQLRouter
from strawberry.schema.base import BaseSchema
from strawberry.schema.config import StrawberryConfig
from strawberry.schema.exceptions import InvalidOperationTypeError
from strawberry.subscriptions import GRAPHQL_TRANSPORT_WS_PROTOCOL
from strawberry.types import ExecutionResult
from strawberry.types.execution import PreExecutionError
from strawberry.types.graphql import OperationType
from strawberry.utils.operation import get_operation_type

from graphql_service.features.graphql.execution.errors import ErrorType, GraphQlErrorBuilder
from graphql_service.features.graphql.execution.service import stream_error
from graphql_service.features.graphql.web.io import WebInput

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Iterable

    import strawberry

    from graphql_service.features.graphql.web.handler import WebGraphQlHandler
    from graphql_service.features.graphql.web.io import WebOutput

logger = logging.getLogger(__name__)

DEFAULT_URL = "http://localhost/graphql"


class WebGraphQlSchema(BaseSchema):
    """Strawberry schema whose operations run through a ``WebGraphQlHandler``.

    ``definition`` is the ``strawberry.Schema`` the service was built from,
    when there is one; type lookups and configuration come from it.
    """

    def __init__(
        self,
        handler: WebGraphQlHandler,
        definition: strawberry.Schema | None = None,
    ) -> None:
        self._handler = handler
        self._definition = definition
        self.config = definition.config if definition is not None else StrawberryConfig()
        if definition is not None:
            self.query = definition.query
            self.mutation = definition.mutation
            self.subscription = definition.subscription
            self.schema_directives = definition.schema_directives

    @property
    def handler(self) -> WebGraphQlHandler:
        return self._handler

    async def execute(
        self,
        query: str | None,
        variable_values: dict[str, Any] | None = None,
        context_value: Any | None = None,
        root_value: Any | None = None,
        operation_name: str | None = None,
        allowed_operation_types: Iterable[OperationType] | None = None,
        operation_extensions: dict[str, Any] | None = None,
    ) -> ExecutionResult:
        if query is None:
            raise MissingQueryError
        operation_type = _operation_type(query, operation_name)
        if operation_type is OperationType.SUBSCRIPTION or (
            operation_type is not None
            and allowed_operation_types is not None
            and operation_type not in allowed_operation_types
        ):
            raise InvalidOperationTypeError(operation_type)

        web_input = _web_input(context_value, query, operation_name, variable_values)
        if isinstance(web_input, PreExecutionError):
            return web_input
        output = await self._handler.handle(web_input)
        _copy_response_headers(context_value, output)
        if output.is_subscription:
            await output.data.aclose()
            raise InvalidOperationTypeError(OperationType.SUBSCRIPTION)
        return _to_result(output)

    def execute_sync(self, query: str | None, *args: Any, **kwargs: Any) -> ExecutionResult:
        msg = "WebGraphQlSchema only executes asynchronously"
        raise NotImplementedError(msg)

    async def subscribe(
        self,
        query: str,
        variable_values: dict[str, Any] | None = None,
        context_value: Any | None = None,
        root_value: Any | None = None,
        operation_name: str | None = None,
        operation_extensions: dict[str, Any] | None = None,
    ) -> AsyncGenerator[ExecutionResult, None]:
        return self._results(context_value, query, operation_name, variable_values)

    async def _results(
        self,
        context_value: Any,
        query: str,
        operation_name: str | None,
        variables: dict[str, Any] | None,
    ) -> AsyncGenerator[ExecutionResult, None]:
        web_input = _web_input(context_value, query, operation_name, variables)
        if isinstance(web_input, PreExecutionError):
            yield web_input
            return
        output = await self._handler.handle(web_input)
        if not output.is_subscription:
            yield _to_result(output)
            return
        async with aclosing(output.data) as events:
            try:
                async for result in events:
                    yield ExecutionResult(result.data, result.errors, result.extensions)
            except Exception as exc:
                logger.info(
                    "Subscription stream failed",
                    extra={"operation_name": operation_name, "error": str(exc)},
                    exc_info=True,
                )
                yield ExecutionResult(None, [stream_error(exc)])

    def get_type_by_name(self, name: str) -> Any:
        if self._definition is None:
            return None
        return self._definition.get_type_by_name(name)

    def get_directive_by_name(self, graphql_name: str) -> Any:
        if self._definition is None:
            return None
        return self._definition.get_directive_by_name(graphql_name)

    def as_str(self) -> str:
        if self._definition is not None:
            return self._definition.as_str()
        if self._handler.schema is None:
            return ""
        return print_schema(self._handler.schema)

    def __str__(self) -> str:
        return self.as_str()


def _operation_type(query: str, operation_name: str | None) -> OperationType | None:
    """Operation type of a parsable document; the service reports the others."""
    try:
        return get_operation_type(parse(query), operation_name)
    except (GraphQLError, RuntimeError):
        return None


def _web_input(
    context: Any,
    query: str,
    operation_name: str | None,
    variables: dict[str, Any] | None,
) -> WebInput | PreExecutionError:
    connection = _connection(context)
    uri = str(connection.url) if connection is not None else DEFAULT_URL
    headers = dict(connection.headers) if connection is not None else {}
    body = {"query": query, "operationName": operation_name, "variables": variables}
    try:
        return WebInput(uri, headers, body)
    except ValueError as exc:
        error = GraphQlErrorBuilder.new_error().message(str(exc)).error_type(ErrorType.BAD_REQUEST)
        return PreExecutionError(None, [error.build()])


def _connection(context: Any) -> Any:
    if isinstance(context, dict):
        return context.get("request")
    return getattr(context, "request", None)


def _copy_response_headers(context: Any, output: WebOutput) -> None:
    if not output.response_headers:
        return
    response = context.get("response") if isinstance(context, dict) else None
    if response is not None:
        response.headers.update(output.response_headers)


def _to_result(output: WebOutput) -> ExecutionResult:
    if output.errors and not output.is_data_present:
        return PreExecutionError(None, output.errors, output.extensions)
    return ExecutionResult(output.data, output.errors or None, output.extensions)


def create_graphql_router(
    handler: WebGraphQlHandler,
    *,
    path: str = "/graphql",
    http: bool = True,
    websocket: bool = True,
    connection_init_timeout: float = 60,
    definition: strawberry.Schema | None = None,
) -> GraphQLRouter:
    """Strawberry router serving ``handler`` on ``path``.

    ``http`` and ``websocket`` select which of the router's routes are kept,
    so the two transports can be mounted on different paths.
    """
    router = GraphQLRouter(
        WebGraphQlSchema(handler, definition),
        path=path,
        graphql_ide=None,
        subscription_protocols=(GRAPHQL_TRANSPORT_WS_PROTOCOL,),
        connection_init_wait_timeout=timedelta(seconds=connection_init_timeout),
    )
    kept: list[type] = []
    if http:
        kept.append(APIRoute)
    if websocket:
        kept.append(APIWebSocketRoute)
    router.routes[:] = [route for route in router.routes if isinstance(route, tuple(kept))]
    return router


__all__ = ["WebGraphQlSchema", "create_graphql_router"]
