"""GraphQL server configuration settings.

Controls the HTTP and WebSocket endpoints, GraphiQL, exception resolution
and the test harness wait bound.
Environment variables use GRAPHQL_ prefix.
"""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GraphQLSettings(BaseSettings):
    """GraphQL server configuration.

    Environment variables use GRAPHQL_ prefix.
    Example: GRAPHQL_ENABLED=true, GRAPHQL_PATH=/graphql
    """

    # Enable/disable GraphQL
    enabled: bool = Field(
        default=True,
        description="Enable GraphQL endpoints",
    )

    # HTTP endpoint configuration
    path: str = Field(
        default="/graphql",
        min_length=1,
        max_length=255,
        pattern=r"^/.*$",
        description="GraphQL HTTP endpoint path",
    )

    # GraphiQL
    graphiql_enabled: bool = Field(
        default=True,
        description="Serve the GraphiQL page",
    )
    graphiql_path: str = Field(
        default="/graphiql",
        min_length=1,
        max_length=255,
        pattern=r"^/.*$",
        description="GraphiQL page path",
    )

    # WebSocket (graphql-transport-ws)
    websocket_enabled: bool = Field(
        default=True,
        description="Enable GraphQL over WebSocket for subscriptions",
    )
    websocket_path: str | None = Field(
        default=None,
        max_length=255,
        pattern=r"^/.*$",
        description="WebSocket endpoint path (defaults to the HTTP path)",
    )
    connection_init_timeout: float = Field(
        default=60.0,
        gt=0.0,
        le=600.0,
        description="Seconds a client has to send connection_init after connecting",
    )

    # Exception resolution
    exception_resolution_timeout: float | None = Field(
        default=None,
        gt=0.0,
        description="Upper bound in seconds for resolving one data fetcher exception (None waits indefinitely)",
    )

    # Test harness
    tester_timeout: float = Field(
        default=5.0,
        gt=0.0,
        le=300.0,
        description="Seconds the in-process tester waits for a response",
    )

    # Metrics
    metrics_enabled: bool = Field(
        default=True,
        description="Record Prometheus metrics for requests, data fetchers and errors",
    )

    model_config = SettingsConfigDict(
        env_prefix="GRAPHQL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @model_validator(mode="after")
    def validate_paths_distinct(self) -> GraphQLSettings:
        """GraphiQL cannot shadow the GraphQL endpoint."""
        if self.graphiql_enabled and self.graphiql_path == self.path:
            msg = "graphiql_path must differ from the GraphQL path"
            raise ValueError(msg)
        return self

    @property
    def subscriptions_path(self) -> str:
        """Path of the WebSocket endpoint."""
        return self.websocket_path or self.path
