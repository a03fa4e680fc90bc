"""In-memory project catalogue backing the sample schema."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from graphql_service.core.exceptions import NotFoundException

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable


@dataclass(frozen=True)
class ReleaseRecord:
    version: str
    status: str = "GENERAL_AVAILABILITY"
    current: bool = False


@dataclass(frozen=True)
class ProjectRecord:
    slug: str
    name: str
    repository_url: str
    releases: tuple[ReleaseRecord, ...] = field(default_factory=tuple)


DEFAULT_PROJECTS: tuple[ProjectRecord, ...] = (
    ProjectRecord(
        slug="spring-framework",
        name="Spring Framework",
        repository_url="https://github.com/spring-projects/spring-framework",
        releases=(
            ReleaseRecord("5.3.9", current=True),
            ReleaseRecord("5.2.16"),
            ReleaseRecord("6.0.0-M1", status="MILESTONE"),
        ),
    ),
    ProjectRecord(
        slug="spring-graphql",
        name="Spring GraphQL",
        repository_url="https://github.com/spring-projects/spring-graphql",
        releases=(ReleaseRecord("1.0.0-M1", status="MILESTONE", current=True),),
    ),
)


class ProjectRepository:
    def __init__(self, projects: Iterable[ProjectRecord] = DEFAULT_PROJECTS) -> None:
        self._projects = {project.slug: project for project in projects}

    def list_projects(self) -> list[ProjectRecord]:
        return list(self._projects.values())

    def get(self, slug: str) -> ProjectRecord:
        project = self._projects.get(slug)
        if project is None:
            raise NotFoundException(f"Project '{slug}' not found", extra={"slug": slug})
        return project

    async def stream_releases(self, slug: str) -> AsyncIterator[ReleaseRecord]:
        """Emit releases one at a time, the way a remote paging API would."""
        for release in self.get(slug).releases:
            await asyncio.sleep(0)
            yield release


GREETINGS: tuple[str, ...] = ("Hi", "Bonjour", "Hola")


async def greetings(values: Iterable[str] = GREETINGS) -> AsyncIterator[str]:
    for value in values:
        await asyncio.sleep(0)
        yield value
