"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process.

Testing:
    In tests, clear the cache to force reload:
    get_graphql_settings.cache_clear()

    Or build a settings object directly:
    settings = GraphQLSettings(path="/api/graphql")
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .graphql import GraphQLSettings
from .logs import LoggingSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings.

    Returns:
        Validated and frozen AppSettings instance.
    """
    return AppSettings()


@lru_cache(maxsize=1)
def get_graphql_settings() -> GraphQLSettings:
    """Get cached GraphQL settings.

    Returns:
        Validated and frozen GraphQLSettings instance.
    """
    return GraphQLSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()
