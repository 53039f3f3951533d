"""Provisioning error taxonomy and backend error classification.

Every error raised by a backend call is classified exactly once, at the
client boundary, into an :class:`ErrorKind`. Code above the clients matches
on ``error.kind`` and never inspects vendor error shapes.

Example:
    ```python
    from bucket_provisioner.infra.storage.exceptions import (
        ErrorKind,
        ProvisioningError,
        classify_s3_error,
    )

    try:
        await client.delete_bucket(Bucket=bucket)
    except ClientError as e:
        raise classify_s3_error(e, operation="delete_bucket", bucket=bucket) from e
    ```
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from bucket_provisioner.core.exceptions import AppException

if TYPE_CHECKING:
    from botocore.exceptions import ClientError


class ErrorKind(str, Enum):
    """Canonical outcome of a failed provisioning step."""

    INVALID_ARGUMENT = "invalid-argument"
    NOT_FOUND = "not-found"
    ALREADY_EXISTS = "already-exists"
    FAILED_PRECONDITION = "failed-precondition"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        """HTTP status code used when the error reaches the API surface."""
        return _STATUS_CODES[self]

    @property
    def retryable(self) -> bool:
        """Whether the caller may retry the same request with backoff."""
        return self is ErrorKind.INTERNAL


_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ALREADY_EXISTS: 409,
    ErrorKind.FAILED_PRECONDITION: 412,
    ErrorKind.INTERNAL: 500,
}


class ProvisioningError(AppException):
    """Error raised by any provisioning operation.

    Attributes:
        kind: Canonical error kind; drives status code and retry semantics.
        message: Short human-readable message.
        extra: Context (operation, bucket, backend error code, ...).

    Example:
        ```python
        raise ProvisioningError(
            ErrorKind.INVALID_ARGUMENT,
            "bucket name is empty",
            metadata={"operation": "create_bucket"},
        )
        ```
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Initialize provisioning error.

        Args:
            kind: Canonical error kind.
            message: Human-readable error message.
            metadata: Additional error context.
        """
        self.kind = kind
        self.message = message
        super().__init__(
            status_code=kind.status_code,
            detail=message,
            type=kind.value,
            extra=metadata or {},
        )

    @property
    def retryable(self) -> bool:
        """Whether the caller may retry the request."""
        return self.kind.retryable


def invalid_argument(message: str, **metadata: Any) -> ProvisioningError:
    """Build an ``INVALID_ARGUMENT`` error for a malformed request."""
    return ProvisioningError(ErrorKind.INVALID_ARGUMENT, message, metadata=metadata)


# S3 error codes with a non-internal meaning. Everything else is INTERNAL.
S3_ERROR_KINDS: dict[str, ErrorKind] = {
    "NoSuchBucket": ErrorKind.NOT_FOUND,
    "BucketAlreadyExists": ErrorKind.ALREADY_EXISTS,
    "BucketAlreadyOwnedByYou": ErrorKind.ALREADY_EXISTS,
    "BucketNotEmpty": ErrorKind.FAILED_PRECONDITION,
}

# Error codes returned by the RGW admin ops API.
ADMIN_ERROR_KINDS: dict[str, ErrorKind] = {
    "UserAlreadyExists": ErrorKind.ALREADY_EXISTS,
    "SubuserExists": ErrorKind.ALREADY_EXISTS,
    "KeyExists": ErrorKind.ALREADY_EXISTS,
    "NoSuchUser": ErrorKind.NOT_FOUND,
    "NoSuchSubUser": ErrorKind.NOT_FOUND,
    "NoSuchKey": ErrorKind.NOT_FOUND,
}


def s3_error_code(error: ClientError) -> str:
    """Extract the S3 error code from a botocore ClientError."""
    response = getattr(error, "response", None) or {}
    return str(response.get("Error", {}).get("Code", "Unknown"))


def classify_s3_error(
    error: Exception,
    operation: str,
    bucket: str | None = None,
) -> ProvisioningError:
    """Map an object-storage error to a ProvisioningError.

    Args:
        error: botocore ``ClientError``, ``BotoCoreError`` or any other
            exception raised by the S3 client.
        operation: The backend operation being performed (e.g. "create_bucket").
        bucket: Bucket the operation targeted.

    Returns:
        ProvisioningError with the kind looked up in ``S3_ERROR_KINDS``,
        ``INTERNAL`` for unknown codes and transport failures.
    """
    metadata: dict[str, Any] = {"operation": operation}
    if bucket:
        metadata["bucket"] = bucket

    response = getattr(error, "response", None)
    if isinstance(response, dict) and "Error" in response:
        code = s3_error_code(error)  # type: ignore[arg-type]
        backend_message = response["Error"].get("Message") or code
        metadata["backend_error_code"] = code
        if response.get("ResponseMetadata", {}).get("RequestId"):
            metadata["request_id"] = response["ResponseMetadata"]["RequestId"]
        kind = S3_ERROR_KINDS.get(code, ErrorKind.INTERNAL)
        return ProvisioningError(
            kind,
            f"{operation} failed: {backend_message}",
            metadata=metadata,
        )

    metadata["error"] = str(error)
    return ProvisioningError(
        ErrorKind.INTERNAL,
        f"{operation} failed: object storage unreachable",
        metadata=metadata,
    )


def classify_admin_error(
    code: str | None,
    operation: str,
    status_code: int | None = None,
    **context: Any,
) -> ProvisioningError:
    """Map an identity-administration error code to a ProvisioningError.

    Args:
        code: The ``Code`` field of the admin API error body, or None when the
            request never produced a parsable response.
        operation: The admin operation being performed (e.g. "create_user").
        status_code: HTTP status returned by the admin API, if any.
        **context: Extra metadata (uid, subuser, ...).

    Returns:
        ProvisioningError with the kind looked up in ``ADMIN_ERROR_KINDS``.
    """
    metadata: dict[str, Any] = {"operation": operation, **context}
    if status_code is not None:
        metadata["backend_status"] = status_code
    if code is None:
        return ProvisioningError(
            ErrorKind.INTERNAL,
            f"{operation} failed: identity admin API unreachable",
            metadata=metadata,
        )
    metadata["backend_error_code"] = code
    kind = ADMIN_ERROR_KINDS.get(code, ErrorKind.INTERNAL)
    return ProvisioningError(kind, f"{operation} failed: {code}", metadata=metadata)
