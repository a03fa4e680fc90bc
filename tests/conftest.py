"""Pytest configuration and shared fixtures.

Organization:
    - Application Fixtures: FastAPI app and HTTP client
    - GraphQL Fixtures: execution service, web handler and testers
    - Utility Fixtures: resolve info stand-ins for resolver unit tests
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any

import pytest
from graphql.pyutils import Path
from httpx import ASGITransport, AsyncClient

from graphql_service.app.graphql import build_execution_service, build_web_handler
from graphql_service.core.settings.graphql import GraphQLSettings
from graphql_service.testing import GraphQlTester

if TYPE_CHECKING:
    from collections.abc import Callable

    from fastapi import FastAPI

    from graphql_service.features.graphql.execution import ExecutionGraphQlService
    from graphql_service.features.graphql.web import WebGraphQlHandler

# Keep test output quiet and deterministic
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("LOG_CONSOLE_ENABLED", "false")
os.environ.setdefault("GRAPHQL_METRICS_ENABLED", "false")


# ============================================================================
# GraphQL Fixtures
# ============================================================================


@pytest.fixture
def graphql_settings() -> GraphQLSettings:
    """GraphQL settings with metrics disabled."""
    return GraphQLSettings(metrics_enabled=False)


@pytest.fixture
def service(graphql_settings: GraphQLSettings) -> ExecutionGraphQlService:
    """Execution service for the projects schema."""
    return build_execution_service(graphql_settings)


@pytest.fixture
def handler(service: ExecutionGraphQlService) -> WebGraphQlHandler:
    """Web handler with the default interceptors and context accessors."""
    return build_web_handler(service)


@pytest.fixture
def tester(handler: WebGraphQlHandler) -> GraphQlTester:
    """In-process tester.

    Example:
        async def test_projects(tester):
            response = await tester.query("{ projects { slug } }").execute()
            response.path("projects[*].slug").entity_list(str).contains("spring-graphql")
    """
    return GraphQlTester.create(handler, timeout=2)


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app(handler: WebGraphQlHandler) -> FastAPI:
    """Create a FastAPI application serving ``handler``."""
    from graphql_service.app.main import create_app

    return create_app(handler)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client bound to the application through ASGITransport."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def http_tester(client: AsyncClient) -> GraphQlTester:
    """Tester posting to ``/graphql`` over HTTP."""
    return GraphQlTester.create_for_http(client, "/graphql", timeout=2)


# ============================================================================
# Utility Fixtures
# ============================================================================


@pytest.fixture
def make_info() -> Callable[..., Any]:
    """Build a minimal stand-in for ``GraphQLResolveInfo``.

    Carries what the resolver chain reads: ``path``, ``field_nodes`` and
    ``context``.
    """

    def factory(*keys: str | int, context: dict[str, Any] | None = None) -> Any:
        path = None
        for key in keys or ("field",):
            path = Path(path, key, None)
        return SimpleNamespace(
            path=path,
            field_nodes=[],
            context=context if context is not None else {},
            field_name=str(keys[-1]) if keys else "field",
        )

    return factory
