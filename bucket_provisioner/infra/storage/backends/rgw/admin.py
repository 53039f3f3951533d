"""HTTP client for the RGW admin ops API (accounts and sub-accounts).

Implements the IdentityAdminClient protocol on httpx. Requests are signed
with AWS Signature V4 (service ``s3``) by :class:`SigV4Auth`, an httpx
auth flow backed by botocore's signer.

Endpoints used (all under ``admin_path``, ``format=json``):

    PUT    /user?uid=..&display-name=..          create account
    GET    /user?uid=..                          fetch account and keys
    DELETE /user?uid=..                          remove account
    PUT    /user?uid=..&subuser=..&access=full   create sub-account
    DELETE /user?uid=..&subuser=..&purge-keys    remove sub-account
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from typing import TYPE_CHECKING, Any

import httpx
from botocore.auth import S3SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials

from bucket_provisioner.infra.storage.backends.protocol import Account, AccountKey
from bucket_provisioner.infra.storage.exceptions import (
    ErrorKind,
    ProvisioningError,
    classify_admin_error,
)

if TYPE_CHECKING:
    import ssl
    from types import TracebackType

logger = logging.getLogger(__name__)

_SIGNED_HEADERS = ("Authorization", "X-Amz-Date", "X-Amz-Content-SHA256", "X-Amz-Security-Token")


class SigV4Auth(httpx.Auth):
    """httpx auth flow signing each request with AWS Signature V4."""

    requires_request_body = True

    def __init__(self, access_key: str, secret_key: str, region: str, service: str = "s3") -> None:
        self._credentials = Credentials(access_key, secret_key)
        self._region = region
        self._service = service

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        aws_request = AWSRequest(
            method=request.method,
            url=str(request.url),
            data=request.content,
        )
        S3SigV4Auth(self._credentials, self._service, self._region).add_auth(aws_request)
        for header in _SIGNED_HEADERS:
            if header in aws_request.headers:
                request.headers[header] = aws_request.headers[header]
        yield request


def parse_account(payload: dict[str, Any]) -> Account:
    """Build an Account from the admin API user JSON."""
    keys = tuple(
        AccountKey(
            user=str(key.get("user", "")),
            access_key=str(key.get("access_key", "")),
            secret_key=str(key.get("secret_key", "")),
        )
        for key in payload.get("keys") or []
    )
    subusers = tuple(str(sub.get("id", "")) for sub in payload.get("subusers") or [])
    return Account(
        user_id=str(payload.get("user_id", "")),
        display_name=str(payload.get("display_name", "")),
        keys=keys,
        subusers=subusers,
    )


def _error_code(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP{response.status_code}"
    if isinstance(body, dict) and body.get("Code"):
        return str(body["Code"])
    return f"HTTP{response.status_code}"


class RGWAdminClient:
    """Async client for account administration.

    Example:
        async with RGWAdminClient(endpoint, access, secret) as admin:
            account = await admin.create_user("alice")
            await admin.create_subuser("alice", "bob")
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        *,
        region: str = "us-east-1",
        admin_path: str = "/admin",
        verify: bool | ssl.SSLContext = True,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize admin client.

        Args:
            endpoint: RGW endpoint URL.
            access_key: Admin access key id.
            secret_key: Admin secret access key.
            region: Region used for signing.
            admin_path: URL path of the admin API.
            verify: TLS verification flag or SSL context.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        self.endpoint = endpoint
        self.admin_path = admin_path.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=endpoint,
            timeout=httpx.Timeout(timeout),
            verify=verify,
            auth=SigV4Auth(access_key, secret_key, region),
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client and release connections."""
        await self.client.aclose()

    async def __aenter__(self) -> RGWAdminClient:
        """Enter async context manager."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context manager and close client."""
        await self.close()

    async def _call(
        self,
        method: str,
        operation: str,
        params: dict[str, str],
    ) -> Any:
        """Issue one admin API call and classify any failure.

        Returns:
            Decoded JSON body, or None for an empty body.

        Raises:
            ProvisioningError: Classified admin error.
        """
        context = {k: v for k, v in params.items() if k in ("uid", "subuser")}
        try:
            response = await self.client.request(
                method,
                f"{self.admin_path}/user",
                params={**params, "format": "json"},
            )
        except httpx.HTTPError as e:
            logger.warning(
                "Identity admin API request failed",
                extra={"operation": operation, "error": str(e), **context},
            )
            raise classify_admin_error(None, operation, **context) from e

        if response.is_error:
            raise classify_admin_error(
                _error_code(response),
                operation,
                status_code=response.status_code,
                **context,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ProvisioningError(
                ErrorKind.INTERNAL,
                f"{operation} failed: unparsable admin API response",
                metadata={"operation": operation, **context},
            ) from e

    async def create_user(self, uid: str, display_name: str | None = None) -> Account:
        """Create a top-level account."""
        # TODO: pass max-buckets=0 once per-account bucket quotas are configurable
        payload = await self._call(
            "PUT",
            "create_user",
            {"uid": uid, "display-name": display_name or uid},
        )
        logger.info("Account created", extra={"uid": uid})
        return parse_account(payload or {"user_id": uid})

    async def get_user(self, uid: str) -> Account:
        """Fetch an account and the keys of its sub-accounts."""
        payload = await self._call("GET", "get_user", {"uid": uid})
        if not isinstance(payload, dict):
            raise ProvisioningError(
                ErrorKind.INTERNAL,
                "get_user failed: empty admin API response",
                metadata={"operation": "get_user", "uid": uid},
            )
        return parse_account(payload)

    async def remove_user(self, uid: str) -> None:
        """Remove an account."""
        await self._call("DELETE", "remove_user", {"uid": uid, "purge-data": "false"})
        logger.info("Account removed", extra={"uid": uid})

    async def create_subuser(self, uid: str, subuser: str, access: str = "full") -> None:
        """Create a sub-account with a generated S3 key pair."""
        await self._call(
            "PUT",
            "create_subuser",
            {
                "uid": uid,
                "subuser": subuser,
                "access": access,
                "key-type": "s3",
                "generate-secret": "true",
            },
        )
        logger.info("Sub-account created", extra={"uid": uid, "subuser": subuser})

    async def remove_subuser(self, uid: str, subuser: str) -> None:
        """Remove a sub-account and its keys."""
        await self._call(
            "DELETE",
            "remove_subuser",
            {"uid": uid, "subuser": subuser, "purge-keys": "true"},
        )
        logger.info("Sub-account removed", extra={"uid": uid, "subuser": subuser})
