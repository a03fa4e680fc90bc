"""Sample Strawberry schema: projects with releases and a greetings subscription.

Data fetchers look up the ``ProjectRepository`` in the engine context under
``REPOSITORY_KEY`` and fall back to the built-in catalogue, so tests and
interceptors can swap the data per request:

    request.configure_execution_input(
        lambda current, builder: builder.context({REPOSITORY_KEY: repository}).build()
    )
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from enum import Enum
from typing import Any

import strawberry
from strawberry.types import Info

from graphql_service.features.projects import repository as project_data
from graphql_service.features.projects.repository import ProjectRecord, ProjectRepository

REPOSITORY_KEY = "projects.repository"

_default_repository = ProjectRepository()


def get_repository(info: Info[Any, Any]) -> ProjectRepository:
    context = info.context
    if isinstance(context, dict) and isinstance(context.get(REPOSITORY_KEY), ProjectRepository):
        return context[REPOSITORY_KEY]
    return _default_repository


@strawberry.enum
class ReleaseStatus(Enum):
    GENERAL_AVAILABILITY = "GENERAL_AVAILABILITY"
    MILESTONE = "MILESTONE"
    SNAPSHOT = "SNAPSHOT"


@strawberry.type(description="A released version of a project")
class Release:
    version: str
    status: ReleaseStatus
    current: bool


@strawberry.type(description="A project and its releases")
class Project:
    slug: str
    name: str
    repository_url: str

    @strawberry.field(description="Releases, newest first")
    def releases(self, info: Info[Any, Any]) -> list[Release]:
        # Async stream; the engine middleware collects it into a list
        return _stream_releases(get_repository(info), self.slug)  # type: ignore[return-value]

    @staticmethod
    def from_record(record: ProjectRecord) -> Project:
        return Project(slug=record.slug, name=record.name, repository_url=record.repository_url)


@strawberry.type
class Query:
    @strawberry.field(description="Look up a project by slug")
    def project(self, info: Info[Any, Any], slug: str) -> Project | None:
        return Project.from_record(get_repository(info).get(slug))

    @strawberry.field(description="All known projects")
    def projects(self, info: Info[Any, Any]) -> list[Project]:
        return [Project.from_record(record) for record in get_repository(info).list_projects()]


@strawberry.type
class Subscription:
    @strawberry.subscription(description="Greetings in several languages")
    async def greetings(self) -> AsyncGenerator[str, None]:
        async for greeting in project_data.greetings():
            yield greeting


async def _stream_releases(repository: ProjectRepository, slug: str) -> AsyncGenerator[Release, None]:
    async for record in repository.stream_releases(slug):
        yield Release(
            version=record.version,
            status=ReleaseStatus(record.status),
            current=record.current,
        )


schema = strawberry.Schema(query=Query, subscription=Subscription)

__all__ = ["REPOSITORY_KEY", "Project", "Query", "Release", "Subscription", "schema"]
