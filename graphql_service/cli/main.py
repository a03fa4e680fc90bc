"""Main CLI entry point for graphql-service commands."""

from __future__ import annotations

import json

import click
from graphql import print_schema

from graphql_service.cli.utils import coro, error, info, success, warning
from graphql_service.core.settings import get_app_settings
from graphql_service.infra.logging.config import setup_logging


@click.group()
@click.version_option(version="1.0.0", prog_name="graphql-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """GraphQL Service CLI.

    \b
    Commands:
      serve   Run the HTTP/WebSocket server
      execute Execute a GraphQL document in-process
      schema  Print the schema in SDL
    """
    ctx.ensure_object(dict)


@cli.command()
@click.option("--host", default=None, help="Host to bind (default: from settings)")
@click.option("--port", default=None, type=int, help="Port to bind (default: from settings)")
@click.option("--reload/--no-reload", default=False, help="Enable auto-reload on code changes")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["critical", "error", "warning", "info", "debug", "trace"]),
    help="Uvicorn log level",
)
def serve(host: str | None, port: int | None, reload: bool, log_level: str) -> None:
    """Run the server with uvicorn."""
    import uvicorn

    settings = get_app_settings()
    host = host or settings.host
    port = port or settings.port

    info(f"Server will run at: http://{host}:{port}")
    info(f"Environment: {settings.environment}")
    uvicorn.run(
        "graphql_service.app.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


@cli.command()
@click.argument("document", required=False)
@click.option(
    "--file",
    "-f",
    "document_file",
    type=click.File("r"),
    help="Read the GraphQL document from a file ('-' for stdin)",
)
@click.option("--operation-name", "-o", default=None, help="Operation to execute")
@click.option("--variables", "-v", default=None, help="Variables as a JSON object")
@click.option("--header", "-H", "headers", multiple=True, help="Request header as 'Name: value'")
@coro
async def execute(
    document: str | None,
    document_file: click.utils.LazyFile | None,
    operation_name: str | None,
    variables: str | None,
    headers: tuple[str, ...],
) -> None:
    """Execute a GraphQL DOCUMENT in-process and print the JSON response.

    Subscriptions print one JSON document per event. Exits with status 1
    when the response contains errors.
    """
    from graphql_service.app.graphql import build_execution_service, build_web_handler
    from graphql_service.features.graphql.web.io import WebInput, result_to_dict

    if document_file is not None:
        document = document_file.read()
    if not document:
        raise click.UsageError("Provide a DOCUMENT argument or --file")

    body: dict = {"query": document, "operationName": operation_name}
    if variables:
        try:
            body["variables"] = json.loads(variables)
        except ValueError as exc:
            raise click.BadParameter(f"not valid JSON: {exc}", param_hint="--variables") from exc

    handler = build_web_handler(build_execution_service())
    try:
        web_input = WebInput("cli:///graphql", _parse_headers(headers), body)
    except ValueError as exc:
        error(str(exc))
        raise click.exceptions.Exit(2)

    output = await handler.handle(web_input)
    failed = bool(output.errors)
    if output.is_subscription:
        events = 0
        async for result in output.data:
            events += 1
            failed = failed or bool(result.errors)
            click.echo(json.dumps(result_to_dict(result)))
        info(f"Subscription completed after {events} event(s)")
    else:
        click.echo(json.dumps(output.to_dict(), indent=2))

    if failed:
        warning("Response contains errors")
        raise click.exceptions.Exit(1)
    success("Query executed")


@cli.command()
def schema() -> None:
    """Print the schema in SDL."""
    from graphql_service.features.projects.schema import schema as projects_schema

    click.echo(print_schema(projects_schema._schema))


def _parse_headers(headers: tuple[str, ...]) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for header in headers:
        name, sep, value = header.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected 'Name: value', got {header!r}", param_hint="--header")
        parsed[name.strip().lower()] = value.strip()
    return parsed


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
