"""GraphQL integration layer on top of graphql-core.

This module provides:
- Request model and engine input configuration
- Exception resolution chain with error classification
- Context propagation to data fetchers on other threads
- Web interception chain shared by the HTTP and WebSocket transports
"""

from __future__ import annotations

from typing import Any

__all__ = ["ExecutionGraphQlService", "GraphQlSource", "RequestInput", "WebGraphQlHandler"]


def __getattr__(name: str) -> Any:
    if name == "RequestInput":
        from graphql_service.features.graphql.request import RequestInput

        return RequestInput
    if name in ("ExecutionGraphQlService", "GraphQlSource"):
        from graphql_service.features.graphql.execution import service

        return getattr(service, name)
    if name == "WebGraphQlHandler":
        from graphql_service.features.graphql.web.handler import WebGraphQlHandler

        return WebGraphQlHandler
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
