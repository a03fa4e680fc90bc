"""Sample project catalogue exposed through GraphQL."""

from __future__ import annotations

from typing import Any

__all__ = ["schema"]


def __getattr__(name: str) -> Any:
    if name == "schema":
        from graphql_service.features.projects.schema import schema as projects_schema

        return projects_schema
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
