"""Engine middleware wrapping every data fetcher.

graphql-core calls ``DataFetcherMiddleware.resolve`` in place of each field
resolver. Around the call it:

- restores the request's context snapshot for the synchronous call, so
  thread-local and context-variable state captured at the transport is
  visible; async results complete in a task that inherits the restored
  context variables;
- collects async iterables returned by fields of queries and mutations into
  lists, since the engine only completes synchronous iterables;
- times non-trivial fetchers for the observers;
- hands exceptions to the ``ExceptionResolverChain``.

The engine's error hook is synchronous, so a failure is turned into an
awaitable that runs the chain and raises ``FieldErrorsResolved`` carrying the
resolved errors. ``ResolvingExecutionContext.build_response`` swaps those
placeholders for the resolved errors when the response is assembled.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterable
from inspect import isawaitable
from typing import TYPE_CHECKING, Any

from graphql import ExecutionContext, GraphQLError, OperationType

from graphql_service.features.graphql.execution.context import reset, restore, snapshot_from
from graphql_service.features.graphql.execution.observation import ObserverGroup, Outcome

if TYPE_CHECKING:
    from collections.abc import Callable

    from graphql import ExecutionResult, GraphQLResolveInfo

    from graphql_service.features.graphql.execution.exceptions import ExceptionResolverChain


class FieldErrorsResolved(Exception):
    """Placeholder carrying the errors the resolver chain produced for one field."""

    def __init__(self, errors: list[GraphQLError]) -> None:
        super().__init__("; ".join(error.message for error in errors) or "resolved")
        self.errors = errors


class ResolvingExecutionContext(ExecutionContext):
    """Execution context that expands resolved field errors into the response."""

    def build_response(  # type: ignore[override]
        self, data: dict[str, Any] | None, errors: list[GraphQLError]
    ) -> ExecutionResult:
        return super().build_response(data, expand_resolved_errors(errors))


def expand_resolved_errors(errors: list[GraphQLError]) -> list[GraphQLError]:
    expanded: list[GraphQLError] = []
    seen: set[int] = set()
    for error in errors:
        marker = error.original_error
        if isinstance(marker, FieldErrorsResolved):
            if id(marker) in seen:
                continue
            seen.add(id(marker))
            expanded.extend(marker.errors)
        else:
            expanded.append(error)
    return expanded


def is_trivial_fetcher(info: GraphQLResolveInfo) -> bool:
    """True for fields resolved by the engine's default attribute lookup."""
    field = info.parent_type.fields.get(info.field_name)
    return field is None or field.resolve is None


def format_path(info: GraphQLResolveInfo) -> str:
    return ".".join(str(key) for key in info.path.as_list())


class DataFetcherMiddleware:
    def __init__(
        self,
        chain: ExceptionResolverChain,
        observers: ObserverGroup | None = None,
    ) -> None:
        self._chain = chain
        self._observers = observers or ObserverGroup()

    def resolve(
        self, next_: Callable[..., Any], root: Any, info: GraphQLResolveInfo, **args: Any
    ) -> Any:
        snapshot = snapshot_from(info)
        timed = bool(self._observers) and not is_trivial_fetcher(info)
        start = time.perf_counter()
        restoration = restore(snapshot)
        try:
            result = next_(root, info, **args)
            if isawaitable(result) or (
                _should_aggregate(info) and isinstance(result, AsyncIterable)
            ):
                completion = self._complete(result, info, start, timed)
                if restoration is None:
                    return completion
                # The task copies the restored context; nothing is restored across the await
                return asyncio.ensure_future(completion)
        except Exception as exc:
            self._record(info, Outcome.ERROR, start, timed)
            return self._resolve_failure(exc, info)
        finally:
            reset(restoration)

        self._record(info, Outcome.SUCCESS, start, timed)
        return result

    async def _complete(
        self,
        result: Any,
        info: GraphQLResolveInfo,
        start: float,
        timed: bool,
    ) -> Any:
        try:
            if isawaitable(result):
                result = await result
            if _should_aggregate(info) and isinstance(result, AsyncIterable):
                result = [item async for item in result]
        except Exception as exc:
            self._record(info, Outcome.ERROR, start, timed)
            errors = await self._chain.resolve(exc, info)
            raise FieldErrorsResolved(errors) from exc
        self._record(info, Outcome.SUCCESS, start, timed)
        return result

    async def _resolve_failure(self, exc: Exception, info: GraphQLResolveInfo) -> Any:
        errors = await self._chain.resolve(exc, info)
        raise FieldErrorsResolved(errors) from exc

    def _record(self, info: GraphQLResolveInfo, outcome: Outcome, start: float, timed: bool) -> None:
        if timed:
            self._observers.data_fetcher_completed(
                format_path(info), outcome, time.perf_counter() - start
            )


def _should_aggregate(info: GraphQLResolveInfo) -> bool:
    # The root field of a subscription event resolves to the event itself
    return not (info.operation.operation == OperationType.SUBSCRIPTION and info.path.prev is None)


__all__ = [
    "DataFetcherMiddleware",
    "FieldErrorsResolved",
    "ResolvingExecutionContext",
    "expand_resolved_errors",
    "is_trivial_fetcher",
]
