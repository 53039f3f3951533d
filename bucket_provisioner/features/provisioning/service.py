"""Provisioning service: the four operations exposed over the API.

The service is stateless. Each call validates its input, resolves backend
parameters, opens a fresh pair of backend clients and delegates to the
bucket or access manager. Backend calls run strictly one after another and
nothing is retried here; INTERNAL failures are left to the caller's retry
loop with its own backoff.

An inline ``tlsCert`` is written to a temporary file for botocore on every
call; that write and its removal run in a worker thread.

Usage:
    from bucket_provisioner.features.provisioning.service import get_provisioning_service

    service = get_provisioning_service()
    bucket_id = await service.create_bucket("b1", {"endpoint": "https://rgw"})
    grant = await service.grant_access("b1", "alice")
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from bucket_provisioner.core.settings import get_provisioner_settings
from bucket_provisioner.infra.logging import set_log_context
from bucket_provisioner.infra.storage.backends.factory import BackendClientFactory
from bucket_provisioner.infra.storage.backends.protocol import SUBUSER_SEPARATOR
from bucket_provisioner.infra.storage.exceptions import invalid_argument
from bucket_provisioner.infra.storage.metrics import track_operation

from .access import AccessGrantManager, GrantResult
from .buckets import BucketLifecycleManager
from .parameters import (
    BucketMetadataStore,
    DefaultBucketMetadataStore,
    GrantParameters,
    ParameterResolver,
)

if TYPE_CHECKING:
    from contextlib import AbstractAsyncContextManager

    from bucket_provisioner.core.settings.provisioner import ProvisionerSettings
    from bucket_provisioner.infra.storage.backends.factory import BackendClients, ClientFactory

logger = logging.getLogger(__name__)

SUPPORTED_PROTOCOLS = frozenset({"s3"})


def _require(value: str, field: str, operation: str) -> None:
    if not value or not value.strip():
        raise invalid_argument(f"{field} is required", operation=operation, field=field)


def _reject_separator(value: str | None, field: str, operation: str) -> None:
    # The separator only ever joins a parent and a sub-account name.
    if value and SUBUSER_SEPARATOR in value:
        raise invalid_argument(
            f"{field} must not contain '{SUBUSER_SEPARATOR}'",
            operation=operation,
            field=field,
        )


class ProvisioningService:
    """Create/delete buckets and grant/revoke access to them.

    Handles:
    - Input validation (before any backend call)
    - Parameter resolution against configured defaults
    - Backend client lifecycle, one client pair per call
    - Metrics and log context for every operation
    """

    def __init__(
        self,
        settings: ProvisionerSettings,
        factory: ClientFactory | None = None,
        metadata_store: BucketMetadataStore | None = None,
    ) -> None:
        """Initialize the provisioning service.

        Args:
            settings: Provisioner settings (defaults and allow-list)
            factory: Backend client factory (defaults to the S3/RGW factory)
            metadata_store: Parameters stored per bucket, used by delete and
                revoke requests that carry none
        """
        self.settings = settings
        self.factory = factory or BackendClientFactory(settings)
        self.resolver = ParameterResolver(settings)
        self.metadata_store = metadata_store or DefaultBucketMetadataStore()

    def _open(self, params: GrantParameters) -> AbstractAsyncContextManager[BackendClients]:
        return self.factory.build(
            params.endpoint,
            params.access_key,
            params.secret_key.get_secret_value(),
            region=params.region,
            tls_cert=params.tls_cert,
        )

    async def _stored_parameters(
        self,
        bucket_id: str,
        raw: Mapping[str, str] | None,
    ) -> GrantParameters:
        if not raw:
            raw = await self.metadata_store.get(bucket_id)
        return self.resolver.resolve(raw)

    async def create_bucket(
        self,
        name: str,
        parameters: Mapping[str, str] | None = None,
        protocol: str | None = None,
    ) -> str:
        """Create a bucket.

        Returns:
            The bucket id.

        Raises:
            ProvisioningError: INVALID_ARGUMENT, ALREADY_EXISTS or INTERNAL.
        """
        set_log_context(operation="create_bucket", bucket=name)
        async with track_operation("create_bucket"):
            _require(name, "name", "create_bucket")
            if protocol and protocol.lower() not in SUPPORTED_PROTOCOLS:
                raise invalid_argument(
                    "only S3 protocol supported",
                    operation="create_bucket",
                    protocol=protocol,
                )
            params = self.resolver.resolve(parameters)
            async with self._open(params) as clients:
                return await BucketLifecycleManager(clients.storage).create_bucket(name)

    async def delete_bucket(
        self,
        bucket_id: str,
        parameters: Mapping[str, str] | None = None,
    ) -> None:
        """Delete a bucket.

        Raises:
            ProvisioningError: INVALID_ARGUMENT, NOT_FOUND,
                FAILED_PRECONDITION or INTERNAL.
        """
        set_log_context(operation="delete_bucket", bucket=bucket_id)
        async with track_operation("delete_bucket"):
            _require(bucket_id, "bucketId", "delete_bucket")
            params = await self._stored_parameters(bucket_id, parameters)
            async with self._open(params) as clients:
                await BucketLifecycleManager(clients.storage).delete_bucket(bucket_id)

    async def grant_access(
        self,
        bucket_id: str,
        name: str,
        parameters: Mapping[str, str] | None = None,
    ) -> GrantResult:
        """Grant ``name`` access to a bucket and return its credentials.

        Raises:
            ProvisioningError: INVALID_ARGUMENT, NOT_FOUND or INTERNAL. No
                credentials are returned on failure.
        """
        set_log_context(operation="grant_access", bucket=bucket_id, account=name)
        async with track_operation("grant_access"):
            _require(bucket_id, "bucketId", "grant_access")
            _require(name, "name", "grant_access")
            _reject_separator(name, "name", "grant_access")
            params = self.resolver.resolve(parameters)
            _reject_separator(params.parent_identity, "parentIdentity", "grant_access")
            async with self._open(params) as clients:
                manager = AccessGrantManager(
                    clients.storage,
                    clients.admin,
                    self.settings.allowed_actions,
                )
                return await manager.grant_access(bucket_id, name, params)

    async def revoke_access(
        self,
        bucket_id: str,
        account_id: str,
        parameters: Mapping[str, str] | None = None,
    ) -> None:
        """Remove the identity behind ``account_id``; succeeds if it is already gone.

        Raises:
            ProvisioningError: INVALID_ARGUMENT or INTERNAL.
        """
        set_log_context(operation="revoke_access", bucket=bucket_id, account=account_id)
        async with track_operation("revoke_access"):
            _require(bucket_id, "bucketId", "revoke_access")
            _require(account_id, "accountId", "revoke_access")
            params = await self._stored_parameters(bucket_id, parameters)
            async with self._open(params) as clients:
                manager = AccessGrantManager(
                    clients.storage,
                    clients.admin,
                    self.settings.allowed_actions,
                )
                # Only a parent named by the caller marks a plain id as a sub-account.
                parent = (parameters or {}).get("parentIdentity")
                await manager.revoke_access(bucket_id, account_id, parent)


_provisioning_service: ProvisioningService | None = None


def get_provisioning_service() -> ProvisioningService:
    """Get the singleton provisioning service, built from cached settings."""
    global _provisioning_service
    if _provisioning_service is None:
        _provisioning_service = ProvisioningService(get_provisioner_settings())
    return _provisioning_service


def reset_provisioning_service() -> None:
    """Reset the singleton instance (for testing only)."""
    global _provisioning_service
    _provisioning_service = None
