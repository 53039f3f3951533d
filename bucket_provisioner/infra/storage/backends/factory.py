"""Backend client factory.

Builds the object-storage and identity-admin clients for one set of
connection parameters and closes both when the caller is done.
"""

from __future__ import annotations

import asyncio
import logging
import os
import ssl
import tempfile
from contextlib import AbstractAsyncContextManager, AsyncExitStack, asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from bucket_provisioner.infra.storage.exceptions import invalid_argument

from .protocol import IdentityAdminClient, ObjectStorageClient
from .rgw.admin import RGWAdminClient
from .s3.backend import S3PolicyBackend

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from bucket_provisioner.core.settings.provisioner import ProvisionerSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackendClients:
    """The pair of clients one provisioning call works with."""

    storage: ObjectStorageClient
    admin: IdentityAdminClient


class ClientFactory(Protocol):
    """Anything that can open a BackendClients pair."""

    def build(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        *,
        region: str = "us-east-1",
        tls_cert: str | None = None,
    ) -> AbstractAsyncContextManager[BackendClients]: ...


def _write_ca_bundle(pem: str) -> str:
    fd, path = tempfile.mkstemp(prefix="bucket-provisioner-ca-", suffix=".pem")
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        fh.write(pem)
    return path


@asynccontextmanager
async def _ca_bundle_file(pem: str) -> AsyncIterator[str]:
    """Write a PEM bundle to a temporary file for botocore, removing it afterwards.

    The file I/O runs in a worker thread, off the event loop.
    """
    path = await asyncio.to_thread(_write_ca_bundle, pem)
    try:
        yield path
    finally:
        await asyncio.to_thread(os.unlink, path)


def _ca_context(pem: str) -> ssl.SSLContext:
    """SSL context trusting the CA certificates in ``pem``.

    Raises:
        ProvisioningError: INVALID_ARGUMENT when ``pem`` holds no usable certificate.
    """
    try:
        return ssl.create_default_context(cadata=pem)
    except (ssl.SSLError, ValueError) as e:
        raise invalid_argument("tlsCert is not a valid PEM bundle", field="tlsCert") from e


class BackendClientFactory:
    """Create S3 and RGW admin clients from resolved connection parameters.

    Example:
        factory = BackendClientFactory(get_provisioner_settings())
        async with factory.build(endpoint, access, secret) as clients:
            await clients.storage.create_bucket("b1")
    """

    def __init__(self, settings: ProvisionerSettings) -> None:
        self.settings = settings

    @asynccontextmanager
    async def build(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        *,
        region: str = "us-east-1",
        tls_cert: str | None = None,
    ) -> AsyncIterator[BackendClients]:
        """Open both backend clients.

        Args:
            endpoint: Backend endpoint URL.
            access_key: Access key id.
            secret_key: Secret access key.
            region: Region for request signing.
            tls_cert: Optional PEM CA bundle used to verify the endpoint.

        Yields:
            BackendClients with open storage and admin clients.

        Raises:
            ProvisioningError: INVALID_ARGUMENT for a malformed ``tls_cert``.
        """
        async with AsyncExitStack() as stack:
            s3_verify: bool | str = True
            admin_verify: bool | ssl.SSLContext = True
            if tls_cert:
                admin_verify = _ca_context(tls_cert)
                s3_verify = await stack.enter_async_context(_ca_bundle_file(tls_cert))

            storage = await stack.enter_async_context(
                S3PolicyBackend(
                    endpoint,
                    region,
                    access_key,
                    secret_key,
                    verify=s3_verify,
                    timeout=self.settings.request_timeout,
                    max_attempts=self.settings.max_attempts,
                )
            )
            admin = await stack.enter_async_context(
                RGWAdminClient(
                    endpoint,
                    access_key,
                    secret_key,
                    region=region,
                    admin_path=self.settings.admin_path,
                    verify=admin_verify,
                    timeout=self.settings.request_timeout,
                )
            )
            logger.debug("Backend clients opened", extra={"endpoint": endpoint})
            yield BackendClients(storage=storage, admin=admin)
