"""S3-compatible object-storage client for bucket lifecycle and bucket policies.

Implements the ObjectStorageClient protocol on aioboto3. Only bucket-level
calls are made here; the object data path is not used.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import aioboto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from bucket_provisioner.infra.storage.exceptions import (
    ErrorKind,
    ProvisioningError,
    classify_s3_error,
    s3_error_code,
)
from bucket_provisioner.infra.storage.policy import PolicyDocument

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)

NO_SUCH_BUCKET_POLICY = "NoSuchBucketPolicy"


class S3PolicyBackend:
    """S3-compatible bucket and bucket-policy client.

    Attributes:
        endpoint: S3 endpoint URL
        region: Region used for request signing
        backend_name: Name identifier for this backend ("s3")
        is_ready: Whether the underlying client is open

    Example:
        async with S3PolicyBackend(endpoint, "us-east-1", access, secret) as s3:
            await s3.create_bucket("b1")
            policy = await s3.get_bucket_policy("b1")
    """

    def __init__(
        self,
        endpoint: str,
        region: str,
        access_key: str,
        secret_key: str,
        *,
        verify: bool | str = True,
        timeout: float = 30.0,
        max_attempts: int = 1,
    ) -> None:
        """Initialize S3 backend.

        Args:
            endpoint: S3 endpoint URL
            region: Region for signing
            access_key: Access key id
            secret_key: Secret access key
            verify: TLS verification flag or path to a CA bundle
            timeout: Connect/read timeout in seconds
            max_attempts: Total botocore attempts per call
        """
        self.endpoint = endpoint
        self.region = region
        self._access_key = access_key
        self._secret_key = secret_key
        self._verify = verify
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._session = aioboto3.Session()
        self._client: Any = None
        self._client_context: Any = None

    @property
    def backend_name(self) -> str:
        """Backend name identifier."""
        return "s3"

    @property
    def is_ready(self) -> bool:
        """Check if backend is initialized and ready."""
        return self._client is not None

    # ========================================================================
    # Lifecycle Management
    # ========================================================================

    async def startup(self) -> None:
        """Open the aioboto3 client."""
        if self._client is not None:
            logger.debug("S3 backend already initialized")
            return

        logger.debug(
            "Initializing S3 backend",
            extra={"endpoint": self.endpoint, "region": self.region},
        )

        boto_config = Config(
            retries={"max_attempts": self._max_attempts, "mode": "standard"},
            connect_timeout=self._timeout,
            read_timeout=self._timeout,
            s3={"addressing_style": "path"},
        )

        try:
            self._client_context = self._session.client(
                "s3",
                endpoint_url=self.endpoint,
                region_name=self.region,
                aws_access_key_id=self._access_key,
                aws_secret_access_key=self._secret_key,
                verify=self._verify,
                config=boto_config,
            )
            self._client = await self._client_context.__aenter__()
        except (BotoCoreError, ValueError) as e:
            self._client_context = None
            logger.exception("Failed to initialize S3 backend", extra={"error": str(e)})
            raise classify_s3_error(e, operation="connect") from e

    async def shutdown(self) -> None:
        """Close the aioboto3 client."""
        if self._client_context is None:
            return

        try:
            await self._client_context.__aexit__(None, None, None)
        finally:
            self._client = None
            self._client_context = None

    def _ensure_client(self) -> Any:
        """Return the open client.

        Raises:
            ProvisioningError: INTERNAL if startup() was not called.
        """
        if self._client is None:
            msg = "S3 backend not initialized. Call startup() first."
            raise ProvisioningError(ErrorKind.INTERNAL, msg)
        return self._client

    # ========================================================================
    # Bucket Management
    # ========================================================================

    async def create_bucket(self, bucket: str) -> None:
        """Create a new bucket.

        Args:
            bucket: Bucket name

        Raises:
            ProvisioningError: ALREADY_EXISTS if the name is taken, INTERNAL otherwise.
        """
        client = self._ensure_client()

        try:
            await client.create_bucket(Bucket=bucket)
        except (ClientError, BotoCoreError) as e:
            error = classify_s3_error(e, operation="create_bucket", bucket=bucket)
            logger.warning(
                "Failed to create bucket",
                extra={"bucket": bucket, "kind": error.kind.value, "detail": error.detail},
            )
            raise error from e

        logger.info("Bucket created", extra={"bucket": bucket})

    async def delete_bucket(self, bucket: str) -> None:
        """Delete a bucket.

        Args:
            bucket: Bucket name

        Raises:
            ProvisioningError: NOT_FOUND, FAILED_PRECONDITION if not empty, INTERNAL otherwise.
        """
        client = self._ensure_client()

        try:
            await client.delete_bucket(Bucket=bucket)
        except (ClientError, BotoCoreError) as e:
            error = classify_s3_error(e, operation="delete_bucket", bucket=bucket)
            logger.warning(
                "Failed to delete bucket",
                extra={"bucket": bucket, "kind": error.kind.value, "detail": error.detail},
            )
            raise error from e

        logger.info("Bucket deleted", extra={"bucket": bucket})

    # ========================================================================
    # Bucket Policy
    # ========================================================================

    async def get_bucket_policy(self, bucket: str) -> PolicyDocument | None:
        """Fetch the bucket policy.

        Args:
            bucket: Bucket name

        Returns:
            The parsed policy, or None when the bucket has no policy yet

        Raises:
            ProvisioningError: NOT_FOUND if the bucket does not exist, INTERNAL otherwise.
        """
        client = self._ensure_client()

        try:
            response = await client.get_bucket_policy(Bucket=bucket)
        except ClientError as e:
            if s3_error_code(e) == NO_SUCH_BUCKET_POLICY:
                logger.debug("Bucket has no policy", extra={"bucket": bucket})
                return None
            raise classify_s3_error(e, operation="get_bucket_policy", bucket=bucket) from e
        except BotoCoreError as e:
            raise classify_s3_error(e, operation="get_bucket_policy", bucket=bucket) from e

        try:
            return PolicyDocument.from_json(response["Policy"])
        except (KeyError, ValueError) as e:
            raise ProvisioningError(
                ErrorKind.INTERNAL,
                f"get_bucket_policy failed: unparsable policy on bucket {bucket}",
                metadata={"operation": "get_bucket_policy", "bucket": bucket, "error": str(e)},
            ) from e

    async def put_bucket_policy(self, bucket: str, policy: PolicyDocument) -> None:
        """Replace the bucket policy.

        Args:
            bucket: Bucket name
            policy: Full policy document to store

        Raises:
            ProvisioningError: NOT_FOUND if the bucket does not exist, INTERNAL otherwise.
        """
        client = self._ensure_client()

        try:
            await client.put_bucket_policy(Bucket=bucket, Policy=policy.to_json())
        except (ClientError, BotoCoreError) as e:
            raise classify_s3_error(e, operation="put_bucket_policy", bucket=bucket) from e

        logger.debug(
            "Bucket policy written",
            extra={"bucket": bucket, "statements": len(policy.statements)},
        )

    # ========================================================================
    # Context Manager Support
    # ========================================================================

    async def __aenter__(self) -> S3PolicyBackend:
        """Async context manager entry."""
        await self.startup()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit."""
        await self.shutdown()
