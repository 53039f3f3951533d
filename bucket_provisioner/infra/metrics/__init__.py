"""Metrics infrastructure for Prometheus monitoring."""

from __future__ import annotations

from prometheus_client import generate_latest

from bucket_provisioner.infra.metrics.prometheus import REGISTRY, app_info

__all__ = [
    "REGISTRY",
    "app_info",
    "generate_latest",
]
