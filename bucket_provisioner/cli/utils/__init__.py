"""CLI utilities for running async operations and formatting output."""

from bucket_provisioner.cli.utils.async_runner import coro
from bucket_provisioner.cli.utils.formatters import error, info, success, warning
from bucket_provisioner.cli.utils.params import param_option, parse_params

__all__ = [
    "coro",
    "error",
    "info",
    "param_option",
    "parse_params",
    "success",
    "warning",
]
