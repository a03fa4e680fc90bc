"""GraphQL execution service.

Runs an ``ExecutionInput`` against the schema through graphql-core:
parse, validate, then execute with the data fetcher middleware installed.
Syntax and validation failures are returned as an ``ExecutionResult`` with
errors, never raised.

Subscriptions return an ``ExecutionResult`` whose ``data`` is an async
iterator of per-event ``ExecutionResult``s. Each event is executed with the
same middleware, so exception resolution and context restoration apply to
subscription payload fields as well.

Example:
    service = ExecutionGraphQlService(
        GraphQlSource.from_strawberry(schema),
        exception_resolvers=[AppExceptionResolver()],
    )
    result = await service.execute(RequestInput("{ projects { slug } }").to_execution_input())
"""

from __future__ import annotations

import logging
import time
from inspect import isawaitable
from typing import TYPE_CHECKING, Any

from graphql import (
    ExecutionResult,
    GraphQLError,
    MiddlewareManager,
    OperationType,
    execute,
    get_operation_ast,
    parse,
    validate,
)
from graphql.execution import create_source_event_stream

from graphql_service.features.graphql.execution.context import (
    attach_to_execution,
    current_snapshot,
)
from graphql_service.features.graphql.execution.errors import (
    CLASSIFICATION_KEY,
    ErrorType,
    GraphQlErrorBuilder,
)
from graphql_service.features.graphql.execution.exceptions import ExceptionResolverChain
from graphql_service.features.graphql.execution.middleware import (
    DataFetcherMiddleware,
    ResolvingExecutionContext,
)
from graphql_service.features.graphql.execution.observation import ObserverGroup, Outcome

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable

    from graphql import DocumentNode, GraphQLSchema

    from graphql_service.features.graphql.execution.exceptions import (
        DataFetcherExceptionResolver,
    )
    from graphql_service.features.graphql.execution.input import ExecutionInput
    from graphql_service.features.graphql.execution.observation import GraphQlObserver

logger = logging.getLogger(__name__)


class GraphQlSource:
    """Holds the executable schema."""

    def __init__(self, schema: GraphQLSchema) -> None:
        self._schema = schema

    @classmethod
    def from_schema(cls, schema: GraphQLSchema) -> GraphQlSource:
        return cls(schema)

    @classmethod
    def from_strawberry(cls, schema: Any) -> GraphQlSource:
        """Use the graphql-core schema behind a ``strawberry.Schema``."""
        return cls(schema._schema)

    @property
    def schema(self) -> GraphQLSchema:
        return self._schema


class ExecutionGraphQlService:
    """Executes requests with exception resolution and context propagation."""

    def __init__(
        self,
        source: GraphQlSource,
        exception_resolvers: Iterable[DataFetcherExceptionResolver] = (),
        observers: Iterable[GraphQlObserver] = (),
        resolution_timeout: float | None = None,
    ) -> None:
        self._source = source
        self._chain = ExceptionResolverChain(exception_resolvers, timeout=resolution_timeout)
        self._observers = ObserverGroup(observers)
        self._middleware = MiddlewareManager(DataFetcherMiddleware(self._chain, self._observers))

    @property
    def source(self) -> GraphQlSource:
        return self._source

    async def execute(self, execution_input: ExecutionInput) -> ExecutionResult:
        if execution_input is None:
            msg = "execution_input is required"
            raise TypeError(msg)

        attach_to_execution(current_snapshot(), execution_input)
        start = time.perf_counter()
        label = execution_input.operation_name or "anonymous"

        try:
            document = parse(execution_input.query)
        except GraphQLError as error:
            return self._finish(ExecutionResult(None, [_classify(error)]), label, start)

        validation_errors = validate(self._source.schema, document)
        if validation_errors:
            errors = [_classify(error) for error in validation_errors]
            return self._finish(ExecutionResult(None, errors), label, start)

        operation = get_operation_ast(document, execution_input.operation_name)
        if operation is not None and operation.operation == OperationType.SUBSCRIPTION:
            return await self._subscribe(document, execution_input, label, start)

        result = self._execute_document(document, execution_input, execution_input.root_value)
        if isawaitable(result):
            result = await result
        return self._finish(result, label, start)

    def _execute_document(
        self, document: DocumentNode, execution_input: ExecutionInput, root_value: Any
    ) -> Any:
        return execute(
            self._source.schema,
            document,
            root_value=root_value,
            context_value=execution_input.context,
            variable_values=execution_input.variables,
            operation_name=execution_input.operation_name,
            middleware=self._middleware,
            execution_context_class=ResolvingExecutionContext,
        )

    async def _subscribe(
        self,
        document: DocumentNode,
        execution_input: ExecutionInput,
        label: str,
        start: float,
    ) -> ExecutionResult:
        stream: Any = create_source_event_stream(
            self._source.schema,
            document,
            root_value=execution_input.root_value,
            context_value=execution_input.context,
            variable_values=execution_input.variables,
            operation_name=execution_input.operation_name,
        )
        if isawaitable(stream):
            stream = await stream
        if isinstance(stream, ExecutionResult):
            errors = [_classify(error) for error in stream.errors or []]
            return self._finish(ExecutionResult(None, errors), label, start)
        self._observers.request_completed(label, Outcome.SUCCESS, time.perf_counter() - start)
        return ExecutionResult(self._map_events(stream, document, execution_input), None)

    async def _map_events(
        self, stream: Any, document: DocumentNode, execution_input: ExecutionInput
    ) -> AsyncIterator[ExecutionResult]:
        try:
            async for event in stream:
                result = self._execute_document(document, execution_input, event)
                if isawaitable(result):
                    result = await result
                if result.errors:
                    self._observers.errors_reported(result.errors)
                yield result
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

    def _finish(self, result: ExecutionResult, label: str, start: float) -> ExecutionResult:
        outcome = Outcome.ERROR if result.errors else Outcome.SUCCESS
        self._observers.request_completed(label, outcome, time.perf_counter() - start)
        if result.errors:
            self._observers.errors_reported(result.errors)
            logger.debug(
                "GraphQL execution completed with errors",
                extra={"operation": label, "error_count": len(result.errors)},
            )
        return result


def _classify(error: GraphQLError) -> GraphQLError:
    """Classify request errors: BAD_REQUEST for syntax and validation, INTERNAL_ERROR otherwise."""
    if error.extensions and CLASSIFICATION_KEY in error.extensions:
        return error
    error_type = ErrorType.BAD_REQUEST if error.original_error is None else ErrorType.INTERNAL_ERROR
    error.extensions = {**(error.extensions or {}), CLASSIFICATION_KEY: error_type.value}
    return error


def stream_error(exc: BaseException) -> GraphQLError:
    """Error reported when a subscription source stream fails mid-flight."""
    return GraphQlErrorBuilder.new_error().message(str(exc)).error_type(ErrorType.INTERNAL_ERROR).build()


__all__ = ["ExecutionGraphQlService", "GraphQlSource", "stream_error"]
