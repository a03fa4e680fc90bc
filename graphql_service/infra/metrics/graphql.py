"""Prometheus metrics for GraphQL execution.

Usage:
    from graphql_service.infra.metrics.graphql import PrometheusGraphQlObserver

    service = ExecutionGraphQlService(source, observers=[PrometheusGraphQlObserver()])
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prometheus_client import Counter, Histogram

from graphql_service.features.graphql.execution.errors import classification_for_error
from graphql_service.infra.metrics.prometheus import (
    DATAFETCHER_LATENCY_BUCKETS,
    DEFAULT_LATENCY_BUCKETS,
    REGISTRY,
)

if TYPE_CHECKING:
    from graphql import GraphQLError
    from prometheus_client import CollectorRegistry

    from graphql_service.features.graphql.execution.observation import Outcome

__all__ = ["GRAPHQL_METRICS", "GraphQlMetrics", "PrometheusGraphQlObserver"]


class GraphQlMetrics:
    """Container for the GraphQL Prometheus metrics of one registry."""

    def __init__(self, registry: CollectorRegistry) -> None:
        self.request_seconds = Histogram(
            "graphql_request_seconds",
            "GraphQL request execution time in seconds",
            labelnames=["operation", "outcome"],
            buckets=DEFAULT_LATENCY_BUCKETS,
            registry=registry,
        )

        self.datafetcher_seconds = Histogram(
            "graphql_datafetcher_seconds",
            "Execution time of non-trivial data fetchers in seconds",
            labelnames=["path", "outcome"],
            buckets=DATAFETCHER_LATENCY_BUCKETS,
            registry=registry,
        )

        self.error_total = Counter(
            "graphql_error_total",
            "Number of GraphQL errors reported in responses",
            labelnames=["error_type", "path"],
            registry=registry,
        )


GRAPHQL_METRICS = GraphQlMetrics(REGISTRY)


class PrometheusGraphQlObserver:
    """Records execution observations into ``GraphQlMetrics``.

    List indices are dropped from field paths (``project.releases.0.version``
    becomes ``project.releases.version``) to keep label cardinality bounded.
    """

    def __init__(self, metrics: GraphQlMetrics | None = None) -> None:
        self.metrics = metrics or GRAPHQL_METRICS

    def request_completed(self, operation: str, outcome: Outcome, duration: float) -> None:
        self.metrics.request_seconds.labels(operation=operation, outcome=outcome.value).observe(
            duration
        )

    def data_fetcher_completed(self, path: str, outcome: Outcome, duration: float) -> None:
        self.metrics.datafetcher_seconds.labels(
            path=_field_path(path.split(".")), outcome=outcome.value
        ).observe(duration)

    def error_reported(self, error: GraphQLError) -> None:
        self.metrics.error_total.labels(
            error_type=classification_for_error(error).value,
            path=_field_path(error.path or []),
        ).inc()


def _field_path(segments: list[str | int] | list[str]) -> str:
    return ".".join(str(s) for s in segments if not (isinstance(s, int) or str(s).isdigit()))
