"""Tests for logging configuration, context and formatting."""

from __future__ import annotations

import json
import logging
from logging.handlers import QueueHandler
from typing import TYPE_CHECKING

import pytest

from graphql_service.infra.logging import (
    ContextInjectingFilter,
    JSONFormatter,
    clear_log_context,
    configure_logging,
    get_log_context,
    remove_from_log_context,
    set_log_context,
    shutdown,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _clean_log_context() -> Iterator[None]:
    clear_log_context()
    yield
    clear_log_context()


def _record(message: str = "hello", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("tests.logger", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLogContext:
    def test_set_merges_fields(self) -> None:
        set_log_context(request_id="abc")
        set_log_context(operation_name="Releases")

        assert get_log_context() == {"request_id": "abc", "operation_name": "Releases"}

    def test_get_returns_copy(self) -> None:
        set_log_context(request_id="abc")
        get_log_context()["request_id"] = "changed"

        assert get_log_context()["request_id"] == "abc"

    def test_remove_and_clear(self) -> None:
        set_log_context(request_id="abc", operation_name="Releases")

        remove_from_log_context("operation_name", "missing")
        assert get_log_context() == {"request_id": "abc"}

        clear_log_context()
        assert get_log_context() == {}

    def test_filter_injects_without_overwriting(self) -> None:
        set_log_context(request_id="abc", operation_name="Releases")
        record = _record(operation_name="explicit")

        assert ContextInjectingFilter().filter(record)
        assert record.request_id == "abc"
        assert record.operation_name == "explicit"


class TestJSONFormatter:
    def test_standard_fields(self) -> None:
        data = json.loads(JSONFormatter(static={"service": "graphql-service"}).format(_record("a %s")))

        assert data["level"] == "INFO"
        assert data["logger"] == "tests.logger"
        assert data["message"] == "a %s"
        assert data["service"] == "graphql-service"
        assert data["timestamp"].endswith("Z")
        assert "trace_id" not in data

    def test_extra_fields_are_top_level(self) -> None:
        data = json.loads(JSONFormatter().format(_record(request_id="abc", duration_ms=1.5)))

        assert data["request_id"] == "abc"
        assert data["duration_ms"] == 1.5
        assert "msg" not in data
        assert "args" not in data

    def test_exception_is_single_line(self) -> None:
        try:
            raise ValueError("boom")
        except ValueError:
            import sys

            record = logging.LogRecord(
                "tests.logger", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
            )

        output = JSONFormatter().format(record)

        assert "\n" not in output
        assert "ValueError: boom" in json.loads(output)["exception"]

    def test_thread_info_is_optional(self) -> None:
        data = json.loads(JSONFormatter(include_thread_info=True).format(_record()))

        assert data["thread_name"]


class TestConfigureLogging:
    def test_root_logger_gets_queue_handler_and_writes_jsonl(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "service.jsonl"
        root = logging.getLogger()
        previous_level = root.level

        configure_logging(
            log_level="debug",
            file_path=log_file,
            console_enabled=False,
            capture_warnings=False,
            service_name="graphql-tests",
        )
        queue_handlers = [h for h in root.handlers if isinstance(h, QueueHandler)]
        try:
            assert len(queue_handlers) == 1
            assert root.level == logging.DEBUG

            set_log_context(request_id="req-1")
            logging.getLogger("graphql_service.tests").info("Configured", extra={"answer": 42})
        finally:
            shutdown()
            for handler in queue_handlers:
                root.removeHandler(handler)
            root.setLevel(previous_level)

        records = [json.loads(line) for line in log_file.read_text().splitlines()]
        configured = next(r for r in records if r["message"] == "Configured")
        assert configured["request_id"] == "req-1"
        assert configured["answer"] == 42
        assert configured["service"] == "graphql-tests"

    def test_shutdown_is_idempotent(self) -> None:
        shutdown()
        shutdown()
