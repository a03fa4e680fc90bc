"""Ambient context propagation across execution boundaries.

Request-scoped state captured at the transport boundary (log context,
security principal, locale, ...) must be visible to data fetchers and
exception resolvers, which may run on another thread than the one that
received the request. Asyncio tasks inherit ``contextvars`` on their own;
thread pools and thread-locals do not.

The bridge works on explicit snapshots:

1. ``extract(accessor)`` asks a ``ContextAccessor`` for the values it can see
   and records the thread they were read on.
2. The web handler binds the snapshot for the request (``bind_snapshot``) and
   the execution service stores it in the engine context
   (``attach_to_execution``).
3. Around each data fetcher and exception resolver call, ``restored(snapshot)``
   re-establishes the values and resets them afterwards on every exit path.

``restore_values`` returns whatever its accessor needs to undo the restore
(a ``Token``, the previous attribute value) and the caller hands it back to
``reset_values``. No undo state is shared between restores, so concurrent
fields interleaving on one event loop thread never reset each other's values.
A restore is never held across an ``await``: continuations are scheduled as
tasks inside the restored block and run in a copy of that context.

Restore and reset are skipped on the thread the values were extracted on,
because nothing was lost there.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar

from graphql_service.infra.logging.context import log_context_var

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Mapping
    from concurrent.futures import Executor

    from graphql_service.features.graphql.execution.input import ExecutionInput

logger = logging.getLogger(__name__)

SNAPSHOT_KEY = "graphql_service.context_snapshot"

_MISSING = object()


class ContextAccessor(ABC):
    """Knows how to read, re-establish and clear one kind of ambient state."""

    @abstractmethod
    def extract_values(self, container: dict[str, Any]) -> None:
        """Copy the values visible in the current scope into ``container``."""

    @abstractmethod
    def restore_values(self, values: Mapping[str, Any]) -> Any:
        """Re-establish previously extracted values in the current scope.

        Returns the state ``reset_values`` needs to undo this restore.
        """

    @abstractmethod
    def reset_values(self, values: Mapping[str, Any], previous: Any = None) -> None:
        """Undo the ``restore_values`` call that returned ``previous``."""


class ContextVarAccessor(ContextAccessor):
    """Propagates a ``ContextVar``; the undo state is the ``Token`` from ``set``."""

    def __init__(self, var: ContextVar[Any], key: str | None = None) -> None:
        self._var = var
        self._key = key or var.name

    @property
    def key(self) -> str:
        return self._key

    def extract_values(self, container: dict[str, Any]) -> None:
        value = self._var.get(_MISSING)
        if value is not _MISSING:
            container[self._key] = value

    def restore_values(self, values: Mapping[str, Any]) -> Any:
        if self._key not in values:
            return None
        return self._var.set(values[self._key])

    def reset_values(self, values: Mapping[str, Any], previous: Any = None) -> None:
        if previous is not None:
            self._var.reset(previous)


class LogContextAccessor(ContextVarAccessor):
    """Propagates the structured-logging context (request id and friends)."""

    def __init__(self) -> None:
        super().__init__(log_context_var, key="log_context")

    def extract_values(self, container: dict[str, Any]) -> None:
        value = log_context_var.get(_MISSING)
        if value is not _MISSING and value:
            container[self.key] = dict(value)


class ThreadLocalAccessor(ContextAccessor):
    """Propagates one attribute of a ``threading.local``.

    Reset puts back the value the attribute held before the restore, or
    deletes the attribute if it had none.
    """

    def __init__(self, local: threading.local, attribute: str, key: str | None = None) -> None:
        self._local = local
        self._attribute = attribute
        self._key = key or attribute

    def extract_values(self, container: dict[str, Any]) -> None:
        value = getattr(self._local, self._attribute, _MISSING)
        if value is not _MISSING:
            container[self._key] = value

    def restore_values(self, values: Mapping[str, Any]) -> Any:
        if self._key not in values:
            return _MISSING
        previous = getattr(self._local, self._attribute, _MISSING)
        setattr(self._local, self._attribute, values[self._key])
        return previous

    def reset_values(self, values: Mapping[str, Any], previous: Any = None) -> None:
        if self._key not in values:
            return
        if previous is _MISSING:
            if hasattr(self._local, self._attribute):
                delattr(self._local, self._attribute)
        else:
            setattr(self._local, self._attribute, previous)


class CompositeContextAccessor(ContextAccessor):
    """Delegates to several accessors; resets run in reverse order."""

    def __init__(self, accessors: Iterable[ContextAccessor]) -> None:
        self._accessors = tuple(accessors)

    @property
    def accessors(self) -> tuple[ContextAccessor, ...]:
        return self._accessors

    def extract_values(self, container: dict[str, Any]) -> None:
        for accessor in self._accessors:
            accessor.extract_values(container)

    def restore_values(self, values: Mapping[str, Any]) -> Any:
        return [accessor.restore_values(values) for accessor in self._accessors]

    def reset_values(self, values: Mapping[str, Any], previous: Any = None) -> None:
        states = previous if previous is not None else [None] * len(self._accessors)
        for accessor, state in reversed(list(zip(self._accessors, states, strict=True))):
            accessor.reset_values(values, state)


@dataclass(frozen=True)
class ContextSnapshot:
    """Values captured by an accessor plus the thread they were captured on."""

    values: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    accessor: ContextAccessor | None = None
    origin: int | None = None

    EMPTY: ClassVar[ContextSnapshot]

    @property
    def is_empty(self) -> bool:
        return self.accessor is None or not self.values

    def is_origin_thread(self) -> bool:
        return self.origin == threading.get_ident()


ContextSnapshot.EMPTY = ContextSnapshot()

_current_snapshot: ContextVar[ContextSnapshot] = ContextVar(
    "graphql_context_snapshot", default=ContextSnapshot.EMPTY
)


def extract(accessor: ContextAccessor | None) -> ContextSnapshot:
    """Capture the values ``accessor`` sees in the current scope."""
    if accessor is None:
        return ContextSnapshot.EMPTY
    values: dict[str, Any] = {}
    accessor.extract_values(values)
    if not values:
        return ContextSnapshot.EMPTY
    return ContextSnapshot(
        values=MappingProxyType(values),
        accessor=accessor,
        origin=threading.get_ident(),
    )


def current_snapshot() -> ContextSnapshot:
    """Snapshot bound to the request being handled by the current task."""
    return _current_snapshot.get()


@contextmanager
def bind_snapshot(snapshot: ContextSnapshot) -> Iterator[ContextSnapshot]:
    """Make ``snapshot`` the current one for the enclosed block."""
    token = _current_snapshot.set(snapshot)
    try:
        yield snapshot
    finally:
        _current_snapshot.reset(token)


def attach_to_execution(snapshot: ContextSnapshot, execution_input: ExecutionInput) -> None:
    """Store ``snapshot`` in the engine context so resolvers can retrieve it."""
    if not snapshot.is_empty:
        execution_input.context[SNAPSHOT_KEY] = snapshot


def snapshot_from(source: Any) -> ContextSnapshot:
    """Retrieve the snapshot from resolve info, an engine context dict or an input."""
    context = getattr(source, "context", source)
    if isinstance(context, dict):
        snapshot = context.get(SNAPSHOT_KEY)
        if isinstance(snapshot, ContextSnapshot):
            return snapshot
    return ContextSnapshot.EMPTY


@dataclass(frozen=True)
class Restoration:
    """Undo state of one ``restore`` call, consumed by the matching ``reset``."""

    snapshot: ContextSnapshot
    state: Any = None


def restore(snapshot: ContextSnapshot) -> Restoration | None:
    """Re-establish the snapshot values; ``None`` when nothing was restored."""
    if snapshot.is_empty or snapshot.is_origin_thread():
        return None
    state = snapshot.accessor.restore_values(snapshot.values)  # type: ignore[union-attr]
    return Restoration(snapshot, state)


def reset(restoration: Restoration | None) -> None:
    if restoration is None:
        return
    snapshot = restoration.snapshot
    snapshot.accessor.reset_values(snapshot.values, restoration.state)  # type: ignore[union-attr]


@contextmanager
def restored(snapshot: ContextSnapshot) -> Iterator[ContextSnapshot]:
    """Restore ``snapshot`` for the enclosed block and always reset it afterwards.

    The block must not ``await``; schedule the continuation as a task inside
    the block instead so it runs in a copy of the restored context.
    """
    restoration = restore(snapshot)
    try:
        yield snapshot
    finally:
        reset(restoration)


def run_in_executor(
    fn: Callable[..., Any] | None = None,
    *,
    executor: Executor | None = None,
) -> Any:
    """Run a blocking data fetcher on a worker thread with its context restored.

    The wrapped resolver becomes a coroutine function; the call is handed to
    ``loop.run_in_executor`` and, on the worker, the request snapshot is
    restored before the call and reset after it.

    Example:
        @strawberry.field
        @run_in_executor
        def releases(self, info: Info) -> list[Release]:
            return legacy_client.fetch_releases(self.slug)
    """

    def decorate(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            snapshot = _snapshot_for_call(args, kwargs)

            def call() -> Any:
                with restored(snapshot):
                    return func(*args, **kwargs)

            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(executor, call)

        return wrapper

    if fn is not None:
        return decorate(fn)
    return decorate


def _snapshot_for_call(args: tuple[Any, ...], kwargs: dict[str, Any]) -> ContextSnapshot:
    info = kwargs.get("info")
    if info is None:
        info = next(
            (arg for arg in args if hasattr(arg, "context") and hasattr(arg, "field_name")),
            None,
        )
    if info is not None:
        snapshot = snapshot_from(info)
        if not snapshot.is_empty:
            return snapshot
    return current_snapshot()


__all__ = [
    "SNAPSHOT_KEY",
    "CompositeContextAccessor",
    "ContextAccessor",
    "ContextSnapshot",
    "ContextVarAccessor",
    "LogContextAccessor",
    "Restoration",
    "ThreadLocalAccessor",
    "attach_to_execution",
    "bind_snapshot",
    "current_snapshot",
    "extract",
    "reset",
    "restore",
    "restored",
    "run_in_executor",
    "snapshot_from",
]
