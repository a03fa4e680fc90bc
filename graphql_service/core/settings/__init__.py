"""Modular Pydantic Settings v2 configuration.

Each domain (app, graphql, logging) has its own frozen settings model loaded
from environment variables with a dedicated prefix. Import settings through
the cached loaders:

    from graphql_service.core.settings import get_graphql_settings

    settings = get_graphql_settings()
    print(settings.path)

Or use the unified view when several domains are needed:

    from graphql_service.core.settings import get_settings

    settings = get_settings()
    print(settings.app.port)

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file (development only)
"""

from __future__ import annotations

from .loader import get_app_settings, get_graphql_settings, get_logging_settings
from .unified import Settings, get_settings

__all__ = [
    "Settings",
    "get_app_settings",
    "get_graphql_settings",
    "get_logging_settings",
    "get_settings",
]
