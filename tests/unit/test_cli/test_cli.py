"""Tests for the graphql-service command line."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest
from click.testing import CliRunner

from graphql_service.cli.main import cli

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "1.0.0" in result.output


def test_execute_prints_json_response(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["execute", '{ project(slug: "spring-framework") { name } }'])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"data": {"project": {"name": "Spring Framework"}}}


def test_execute_with_variables_and_operation_name(runner: CliRunner) -> None:
    document = (
        "query All { projects { slug } } "
        "query One($slug: String!) { project(slug: $slug) { slug } }"
    )

    result = runner.invoke(
        cli,
        ["execute", document, "-o", "One", "-v", '{"slug": "spring-graphql"}', "-H", "X-Tenant: acme"],
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["data"] == {"project": {"slug": "spring-graphql"}}


def test_execute_reads_document_from_file(runner: CliRunner, tmp_path: Path) -> None:
    query_file = tmp_path / "projects.graphql"
    query_file.write_text("{ projects { slug } }")

    result = runner.invoke(cli, ["execute", "--file", str(query_file)])

    assert result.exit_code == 0, result.output
    slugs = [p["slug"] for p in json.loads(result.stdout)["data"]["projects"]]
    assert slugs == ["spring-framework", "spring-graphql"]


def test_execute_exits_with_one_on_errors(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["execute", '{ project(slug: "unknown") { name } }'])

    assert result.exit_code == 1
    body: dict[str, Any] = json.loads(result.stdout)
    assert body["errors"][0]["extensions"]["classification"] == "NOT_FOUND"
    assert "Response contains errors" in result.stderr


def test_execute_streams_subscription_events(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["execute", "subscription { greetings }"])

    assert result.exit_code == 0, result.output
    events = [json.loads(line) for line in result.stdout.splitlines()]
    assert [event["data"]["greetings"] for event in events] == ["Hi", "Bonjour", "Hola"]


@pytest.mark.parametrize(
    ("args", "message"),
    [
        (["execute"], "Provide a DOCUMENT argument or --file"),
        (["execute", "{ projects { slug } }", "-v", "{broken"], "not valid JSON"),
        (["execute", "{ projects { slug } }", "-v", "[1, 2]"], "'variables' must be an object"),
        (["execute", "{ projects { slug } }", "-H", "no-separator"], "expected 'Name: value'"),
    ],
)
def test_execute_rejects_bad_input(runner: CliRunner, args: list[str], message: str) -> None:
    result = runner.invoke(cli, args)

    assert result.exit_code == 2
    assert message in result.stderr


def test_schema_prints_sdl(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["schema"])

    assert result.exit_code == 0
    assert "type Query {" in result.stdout
    assert "project(slug: String!): Project" in result.stdout
    assert "greetings: String!" in result.stdout


def test_serve_runs_uvicorn(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, dict[str, Any]]] = []
    monkeypatch.setattr("uvicorn.run", lambda app, **kwargs: calls.append((app, kwargs)))

    result = runner.invoke(cli, ["serve", "--port", "9000", "--log-level", "debug"])

    assert result.exit_code == 0, result.output
    assert calls == [
        (
            "graphql_service.app.main:app",
            {"host": "0.0.0.0", "port": 9000, "reload": False, "log_level": "debug"},
        )
    ]
