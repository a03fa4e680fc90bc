"""Tests for ambient context propagation."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from contextvars import ContextVar, copy_context
from typing import Any

from graphql_service.features.graphql.execution.context import (
    CompositeContextAccessor,
    ContextAccessor,
    ContextSnapshot,
    ContextVarAccessor,
    LogContextAccessor,
    ThreadLocalAccessor,
    attach_to_execution,
    bind_snapshot,
    current_snapshot,
    extract,
    reset,
    restore,
    restored,
    run_in_executor,
    snapshot_from,
)
from graphql_service.features.graphql.execution.input import ExecutionInput
from graphql_service.infra.logging.context import clear_log_context, get_log_context, set_log_context

principal: ContextVar[str] = ContextVar("principal")


def _on_worker(fn: Any) -> Any:
    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(fn).result()


class RecordingAccessor(ContextAccessor):
    def __init__(self, name: str, calls: list[str]) -> None:
        self.name = name
        self.calls = calls

    def extract_values(self, container: dict[str, Any]) -> None:
        container[self.name] = self.name

    def restore_values(self, values: Any) -> str:
        self.calls.append(f"restore {self.name}")
        return f"undo {self.name}"

    def reset_values(self, values: Any, previous: Any = None) -> None:
        self.calls.append(f"reset {self.name} with {previous}")


def test_extract_without_accessor_is_empty() -> None:
    assert extract(None) is ContextSnapshot.EMPTY
    assert ContextSnapshot.EMPTY.is_empty


def test_context_var_restored_on_worker_thread_and_reset_after() -> None:
    token = principal.set("rossen")
    try:
        snapshot = extract(ContextVarAccessor(principal))
    finally:
        principal.reset(token)

    def work() -> tuple[str | None, str | None]:
        with restored(snapshot):
            inside = principal.get(None)
        return inside, principal.get(None)

    assert _on_worker(work) == ("rossen", None)


def test_restore_skipped_on_origin_thread() -> None:
    calls: list[str] = []
    snapshot = extract(RecordingAccessor("a", calls))

    with restored(snapshot):
        pass

    assert snapshot.is_origin_thread()
    assert calls == []


def test_composite_resets_in_reverse_order() -> None:
    calls: list[str] = []
    accessor = CompositeContextAccessor(
        [RecordingAccessor("a", calls), RecordingAccessor("b", calls)]
    )
    snapshot = extract(accessor)

    def work() -> None:
        with restored(snapshot):
            calls.append("fetch")

    _on_worker(work)

    assert calls == [
        "restore a",
        "restore b",
        "fetch",
        "reset b with undo b",
        "reset a with undo a",
    ]


def test_reset_runs_when_block_raises() -> None:
    local = threading.local()
    local.user = "rstoyanchev"
    snapshot = extract(ThreadLocalAccessor(local, "user"))

    def work() -> tuple[str | None, bool]:
        seen = None
        try:
            with restored(snapshot):
                seen = local.user
                raise RuntimeError("fetch failed")
        except RuntimeError:
            pass
        return seen, hasattr(local, "user")

    assert _on_worker(work) == ("rstoyanchev", False)


def test_log_context_accessor_copies_context() -> None:
    set_log_context(request_id="abc-123")
    try:
        snapshot = extract(LogContextAccessor())
    finally:
        clear_log_context()

    def work() -> dict[str, Any]:
        with restored(snapshot):
            return get_log_context()

    assert _on_worker(work) == {"request_id": "abc-123"}


def test_bind_snapshot_scopes_current_snapshot() -> None:
    snapshot = extract(RecordingAccessor("a", []))

    with bind_snapshot(snapshot):
        assert current_snapshot() is snapshot
    assert current_snapshot() is ContextSnapshot.EMPTY


def test_attach_and_read_back_from_engine_context() -> None:
    snapshot = extract(RecordingAccessor("a", []))
    execution_input = ExecutionInput(query="{ a }")

    attach_to_execution(snapshot, execution_input)

    assert snapshot_from(execution_input) is snapshot
    assert snapshot_from(execution_input.context) is snapshot
    assert snapshot_from({}) is ContextSnapshot.EMPTY


def test_empty_snapshot_not_attached() -> None:
    execution_input = ExecutionInput(query="{ a }")

    attach_to_execution(ContextSnapshot.EMPTY, execution_input)

    assert execution_input.context == {}


async def test_run_in_executor_restores_bound_snapshot() -> None:
    local = threading.local()
    local.user = "rossen"
    snapshot = extract(ThreadLocalAccessor(local, "user"))
    @run_in_executor
    def blocking_fetch() -> tuple[str | None, str]:
        return getattr(local, "user", None), threading.current_thread().name

    with bind_snapshot(snapshot):
        user, thread_name = await blocking_fetch()

    assert user == "rossen"
    assert thread_name != threading.current_thread().name


def _snapshot_from_other_thread(accessor: ContextAccessor, value: str) -> ContextSnapshot:
    def capture() -> ContextSnapshot:
        principal.set(value)
        return extract(accessor)

    return _on_worker(lambda: copy_context().run(capture))


def test_interleaved_restores_in_separate_contexts_reset_independently() -> None:
    accessor = ContextVarAccessor(principal)
    first = _snapshot_from_other_thread(accessor, "acme")
    second = _snapshot_from_other_thread(accessor, "globex")
    first_context, second_context = copy_context(), copy_context()

    first_restoration = first_context.run(restore, first)
    second_restoration = second_context.run(restore, second)
    first_context.run(reset, first_restoration)
    seen_by_second = second_context.run(principal.get, None)
    second_context.run(reset, second_restoration)

    assert seen_by_second == "globex"
    assert first_context.run(principal.get, None) is None
    assert second_context.run(principal.get, None) is None


def test_thread_local_reset_puts_back_previous_value() -> None:
    local = threading.local()
    local.user = "rossen"
    snapshot = extract(ThreadLocalAccessor(local, "user"))

    def work() -> tuple[str, str]:
        local.user = "worker"
        with restored(snapshot):
            inside = local.user
        return inside, local.user

    assert _on_worker(work) == ("rossen", "worker")
