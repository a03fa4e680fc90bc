"""Prometheus registry shared by the service."""

from __future__ import annotations

from prometheus_client import CollectorRegistry

# Custom registry so only service metrics are exposed
REGISTRY = CollectorRegistry()

# Covers response times from 1ms to 10s
DEFAULT_LATENCY_BUCKETS = (
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
)

# Data fetchers are usually much faster than whole requests
DATAFETCHER_LATENCY_BUCKETS = (
    0.0005,
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
)
