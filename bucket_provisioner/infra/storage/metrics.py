"""Provisioning metrics for Prometheus monitoring.

Every RPC handled by the provisioning service records one sample in each of:

- ``provisioner_operations_total{operation, outcome}``: outcome is ``success``
  or the ErrorKind value the call failed with
- ``provisioner_operation_duration_seconds{operation}``

All metrics are registered with the shared REGISTRY so they are exposed via
the /metrics endpoint.

Usage:
    from bucket_provisioner.infra.storage.metrics import track_operation

    async with track_operation("grant_access"):
        ...
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from prometheus_client import Counter, Histogram

from bucket_provisioner.infra.metrics.prometheus import DEFAULT_LATENCY_BUCKETS, REGISTRY
from bucket_provisioner.infra.storage.exceptions import ErrorKind, ProvisioningError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

SUCCESS = "success"

provisioner_operations_total = Counter(
    "provisioner_operations_total",
    "Total provisioning operations",
    ["operation", "outcome"],  # outcome: success or an ErrorKind value
    registry=REGISTRY,
)

provisioner_operation_duration_seconds = Histogram(
    "provisioner_operation_duration_seconds",
    "Provisioning operation duration in seconds",
    ["operation"],
    buckets=DEFAULT_LATENCY_BUCKETS,
    registry=REGISTRY,
)


def record_operation(operation: str, outcome: str, duration_seconds: float) -> None:
    """Record one finished provisioning operation.

    Args:
        operation: The RPC name (e.g. 'create_bucket', 'grant_access')
        outcome: 'success' or the ErrorKind value of the failure
        duration_seconds: Wall time of the whole operation

    Example:
        >>> record_operation("create_bucket", "success", 0.12)
        >>> record_operation("grant_access", "internal", 1.5)
    """
    provisioner_operations_total.labels(operation=operation, outcome=outcome).inc()
    provisioner_operation_duration_seconds.labels(operation=operation).observe(duration_seconds)


@asynccontextmanager
async def track_operation(operation: str) -> AsyncIterator[None]:
    """Time the enclosed block and record its outcome.

    ProvisioningError is recorded under its kind; any other exception counts
    as ``internal``. Exceptions always propagate.
    """
    start = time.perf_counter()
    try:
        yield
    except ProvisioningError as e:
        record_operation(operation, e.kind.value, time.perf_counter() - start)
        raise
    except Exception:
        record_operation(operation, ErrorKind.INTERNAL.value, time.perf_counter() - start)
        raise
    record_operation(operation, SUCCESS, time.perf_counter() - start)
