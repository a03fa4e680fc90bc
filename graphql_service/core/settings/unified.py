"""Unified settings composition for convenient access.

Composes the domain settings into a single object. Each nested settings
class still loads from its own environment prefix (APP_, GRAPHQL_, LOG_).

Usage:
    from graphql_service.core.settings import get_settings

    settings = get_settings()
    print(settings.graphql.path)
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .app import AppSettings
from .graphql import GraphQLSettings
from .logs import LoggingSettings


class Settings(BaseSettings):
    """Unified settings composing all domain settings.

    Example:
        settings = Settings()
        assert settings.graphql.path == "/graphql"
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=AppSettings)
    graphql: GraphQLSettings = Field(default_factory=GraphQLSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached unified settings."""
    return Settings()
