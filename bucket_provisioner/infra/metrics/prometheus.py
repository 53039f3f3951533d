"""Prometheus registry shared by every metric in the service."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Info

# Custom registry so tests and the /metrics endpoint see only our metrics
REGISTRY = CollectorRegistry()

# Backend round trips: 10ms to 30s
DEFAULT_LATENCY_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)

app_info = Info(
    "app",
    "Application information",
    registry=REGISTRY,
)
