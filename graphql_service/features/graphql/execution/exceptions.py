"""Data fetcher exception resolution.

When a data fetcher raises, the exception is handed to an ordered chain of
``DataFetcherExceptionResolver``s. The first resolver that returns a list
(even an empty one) decides the errors reported for that field; resolvers
returning ``None`` defer to the next one. If nobody resolves the exception,
or the chain itself fails, a single ``INTERNAL_ERROR`` carrying the
exception message is reported instead. Resolution never fails the request.

Usage:
    class ProjectNotFoundResolver(DataFetcherExceptionResolverAdapter):
        def resolve_to_single_error(self, exc, info):
            if isinstance(exc, ProjectNotFound):
                return (
                    GraphQlErrorBuilder.new_error(info)
                    .message(str(exc))
                    .error_type(ErrorType.NOT_FOUND)
                    .build()
                )
            return None

    chain = ExceptionResolverChain([ProjectNotFoundResolver()])
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from inspect import isawaitable
from typing import TYPE_CHECKING, Any

from graphql import GraphQLError

from graphql_service.core.exceptions import AppException
from graphql_service.features.graphql.execution.context import restored, snapshot_from
from graphql_service.features.graphql.execution.errors import ErrorType, GraphQlErrorBuilder

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from graphql import GraphQLResolveInfo

logger = logging.getLogger(__name__)


class DataFetcherExceptionResolver(ABC):
    """Strategy that turns a data fetcher exception into GraphQL errors."""

    @abstractmethod
    async def resolve_exception(
        self, exc: BaseException, info: GraphQLResolveInfo
    ) -> list[GraphQLError] | None:
        """Return the errors for ``exc``, or ``None`` to defer to the next resolver."""

    @staticmethod
    def for_single_error(
        resolve: Callable[[BaseException, GraphQLResolveInfo], GraphQLError | None],
    ) -> DataFetcherExceptionResolver:
        """Adapt a plain function returning one error (or ``None``)."""
        return _FunctionResolver(resolve)


class DataFetcherExceptionResolverAdapter(DataFetcherExceptionResolver):
    """Base class for synchronous resolvers.

    Override ``resolve_to_single_error`` or, for several errors,
    ``resolve_to_multiple_errors``. With ``context_aware=True`` the request's
    ambient context is restored around the call, for resolvers that read
    thread-local state.
    """

    def __init__(self, *, context_aware: bool = False) -> None:
        self.context_aware = context_aware

    async def resolve_exception(
        self, exc: BaseException, info: GraphQLResolveInfo
    ) -> list[GraphQLError] | None:
        if not self.context_aware:
            return self.resolve_to_multiple_errors(exc, info)
        with restored(snapshot_from(info)):
            return self.resolve_to_multiple_errors(exc, info)

    def resolve_to_multiple_errors(
        self, exc: BaseException, info: GraphQLResolveInfo
    ) -> list[GraphQLError] | None:
        error = self.resolve_to_single_error(exc, info)
        return [error] if error is not None else None

    def resolve_to_single_error(
        self, exc: BaseException, info: GraphQLResolveInfo
    ) -> GraphQLError | None:
        return None


class _FunctionResolver(DataFetcherExceptionResolverAdapter):
    def __init__(
        self, resolve: Callable[[BaseException, GraphQLResolveInfo], GraphQLError | None]
    ) -> None:
        super().__init__()
        self._resolve = resolve

    def resolve_to_single_error(
        self, exc: BaseException, info: GraphQLResolveInfo
    ) -> GraphQLError | None:
        return self._resolve(exc, info)


class AppExceptionResolver(DataFetcherExceptionResolverAdapter):
    """Resolves ``AppException`` subclasses to the classification they declare.

    ``AppException.detail`` becomes the message; ``extra`` is exposed under
    the error extensions. Other exceptions are left to later resolvers.
    """

    def resolve_to_single_error(
        self, exc: BaseException, info: GraphQLResolveInfo
    ) -> GraphQLError | None:
        if not isinstance(exc, AppException):
            return None
        return (
            GraphQlErrorBuilder.new_error(info)
            .message(exc.detail)
            .error_type(ErrorType(exc.classification))
            .extensions(dict(exc.extra))
            .build()
        )


def unwrap_exception(exc: BaseException) -> BaseException:
    """Strip engine and concurrency wrappers down to the underlying cause."""
    while True:
        if isinstance(exc, GraphQLError) and exc.original_error is not None:
            exc = exc.original_error
        elif isinstance(exc, BaseExceptionGroup) and len(exc.exceptions) == 1:
            exc = exc.exceptions[0]
        else:
            return exc


class ExceptionResolverChain:
    """Invokes resolvers in registration order until one returns a result.

    The chain is awaited from the data fetcher middleware, so the engine's
    field completion waits for it. ``timeout`` bounds that wait; ``None``
    (the default) waits as long as the resolvers take.
    """

    def __init__(
        self,
        resolvers: Iterable[DataFetcherExceptionResolver] = (),
        *,
        timeout: float | None = None,
    ) -> None:
        self._resolvers = tuple(resolvers)
        self._timeout = timeout

    @property
    def resolvers(self) -> tuple[DataFetcherExceptionResolver, ...]:
        return self._resolvers

    async def resolve(self, exc: BaseException, info: GraphQLResolveInfo) -> list[GraphQLError]:
        exc = unwrap_exception(exc)
        try:
            errors = await asyncio.wait_for(self._invoke_chain(exc, info), self._timeout)
        except Exception:
            logger.warning(
                "Failed to resolve exception, applying default handling",
                extra={
                    "exception_type": type(exc).__name__,
                    "field_path": _format_path(info),
                },
                exc_info=True,
            )
            return [self.default_error(exc, info)]
        if errors is None:
            return [self.default_error(exc, info)]
        return errors

    async def _invoke_chain(
        self, exc: BaseException, info: GraphQLResolveInfo
    ) -> list[GraphQLError] | None:
        snapshot = snapshot_from(info)
        for resolver in self._resolvers:
            with restored(snapshot):
                result: Any = resolver.resolve_exception(exc, info)
                if isawaitable(result):
                    # Runs in a copy of the restored context; awaited after the reset
                    result = asyncio.ensure_future(result)
            if isawaitable(result):
                result = await result
            if result is not None:
                return list(result)
        return None


    @staticmethod
    def default_error(exc: BaseException, info: GraphQLResolveInfo) -> GraphQLError:
        return (
            GraphQlErrorBuilder.new_error(info)
            .message(str(exc))
            .error_type(ErrorType.INTERNAL_ERROR)
            .build()
        )


def _format_path(info: GraphQLResolveInfo) -> str:
    return ".".join(str(key) for key in info.path.as_list())


__all__ = [
    "AppExceptionResolver",
    "DataFetcherExceptionResolver",
    "DataFetcherExceptionResolverAdapter",
    "ExceptionResolverChain",
    "unwrap_exception",
]
