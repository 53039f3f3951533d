"""Logging infrastructure.

Structured JSONL logging on the standard library:
- dictConfig + QueueHandler/QueueListener for non-blocking I/O
- Automatic context injection (operation, bucket, account) via contextvars
- OpenTelemetry trace correlation in the JSON formatter

Basic usage:
    from bucket_provisioner.infra.logging import set_log_context
    import logging

    logger = logging.getLogger(__name__)

    set_log_context(operation="grant_access", bucket="b1")
    logger.info("Fetching bucket policy")  # Includes operation and bucket
"""

from bucket_provisioner.infra.logging.config import (
    configure_logging,
    setup_logging,
    shutdown,
)
from bucket_provisioner.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    set_log_context,
)
from bucket_provisioner.infra.logging.formatters import JSONFormatter

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
