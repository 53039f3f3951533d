"""RGW admin ops backend for account administration."""

from .admin import RGWAdminClient, SigV4Auth

__all__ = ["RGWAdminClient", "SigV4Auth"]
