"""Metrics infrastructure for Prometheus monitoring."""

from __future__ import annotations

from prometheus_client import generate_latest

from graphql_service.infra.metrics.graphql import GRAPHQL_METRICS, PrometheusGraphQlObserver
from graphql_service.infra.metrics.prometheus import REGISTRY

__all__ = [
    "GRAPHQL_METRICS",
    "REGISTRY",
    "PrometheusGraphQlObserver",
    "generate_latest",
]
