"""Execution layer: engine input, context propagation, exception resolution."""

from graphql_service.features.graphql.execution.context import (
    CompositeContextAccessor,
    ContextAccessor,
    ContextSnapshot,
    ContextVarAccessor,
    LogContextAccessor,
    ThreadLocalAccessor,
    run_in_executor,
)
from graphql_service.features.graphql.execution.errors import (
    CustomErrorType,
    ErrorType,
    GraphQlErrorBuilder,
    classification_of,
)
from graphql_service.features.graphql.execution.exceptions import (
    AppExceptionResolver,
    DataFetcherExceptionResolver,
    DataFetcherExceptionResolverAdapter,
    ExceptionResolverChain,
)
from graphql_service.features.graphql.execution.input import ExecutionInput, ExecutionInputBuilder
from graphql_service.features.graphql.execution.observation import GraphQlObserver, Outcome
from graphql_service.features.graphql.execution.service import (
    ExecutionGraphQlService,
    GraphQlSource,
)

__all__ = [
    "AppExceptionResolver",
    "CompositeContextAccessor",
    "ContextAccessor",
    "ContextSnapshot",
    "ContextVarAccessor",
    "CustomErrorType",
    "DataFetcherExceptionResolver",
    "DataFetcherExceptionResolverAdapter",
    "ErrorType",
    "ExceptionResolverChain",
    "ExecutionGraphQlService",
    "ExecutionInput",
    "ExecutionInputBuilder",
    "GraphQlErrorBuilder",
    "GraphQlObserver",
    "GraphQlSource",
    "LogContextAccessor",
    "Outcome",
    "ThreadLocalAccessor",
    "classification_of",
    "run_in_executor",
]
