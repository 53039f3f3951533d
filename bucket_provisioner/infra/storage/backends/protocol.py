"""Backend client protocols and normalized data structures.

This module defines:
- ObjectStorageClient: bucket lifecycle and bucket policy operations
- IdentityAdminClient: account and sub-account administration
- Normalized account/key structures returned by the admin client

Clients are injected into the managers at construction time. Any class with
matching methods satisfies the protocols; see ``infra.storage.testing`` for
in-memory implementations.

Every method raises ``ProvisioningError`` on failure, already classified.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from bucket_provisioner.infra.storage.policy import PolicyDocument

SUBUSER_SEPARATOR = ":"


def subuser_id(parent: str, name: str) -> str:
    """Identifier of sub-account ``name`` under ``parent``."""
    return f"{parent}{SUBUSER_SEPARATOR}{name}"


def split_subuser_id(account_id: str) -> tuple[str, str] | None:
    """Split ``parent:name`` into its parts, or None for a top-level account id."""
    parent, sep, name = account_id.partition(SUBUSER_SEPARATOR)
    if not sep or not parent or not name:
        return None
    return parent, name


# ============================================================================
# Normalized Data Structures
# ============================================================================


@dataclass(frozen=True)
class AccountKey:
    """An S3 key pair owned by an account or sub-account.

    Attributes:
        user: Owning identity (``uid`` or ``uid:subuser``)
        access_key: Access key id
        secret_key: Secret access key
    """

    user: str
    access_key: str
    secret_key: str = field(repr=False)


@dataclass(frozen=True)
class Account:
    """A top-level object-store account as reported by the admin API.

    Attributes:
        user_id: Account identifier
        display_name: Display name
        keys: S3 keys of the account and of all its sub-accounts
        subusers: Sub-account identifiers (``uid:name``)
    """

    user_id: str
    display_name: str = ""
    keys: tuple[AccountKey, ...] = ()
    subusers: tuple[str, ...] = ()

    def key_for(self, owner: str) -> AccountKey | None:
        """First key whose owning identity equals ``owner``."""
        for key in self.keys:
            if key.user == owner:
                return key
        return None


# ============================================================================
# Client Protocols
# ============================================================================


@runtime_checkable
class ObjectStorageClient(Protocol):
    """Bucket lifecycle and bucket policy operations."""

    async def create_bucket(self, bucket: str) -> None:
        """Create a bucket.

        Raises:
            ProvisioningError: ALREADY_EXISTS when the name is taken (by the
                caller or anyone else), INTERNAL otherwise.
        """
        ...

    async def delete_bucket(self, bucket: str) -> None:
        """Delete an empty bucket.

        Raises:
            ProvisioningError: NOT_FOUND, FAILED_PRECONDITION (not empty) or INTERNAL.
        """
        ...

    async def get_bucket_policy(self, bucket: str) -> PolicyDocument | None:
        """Fetch the bucket policy, or None when the bucket has no policy.

        Raises:
            ProvisioningError: NOT_FOUND when the bucket does not exist.
        """
        ...

    async def put_bucket_policy(self, bucket: str, policy: PolicyDocument) -> None:
        """Replace the bucket policy with ``policy``."""
        ...


@runtime_checkable
class IdentityAdminClient(Protocol):
    """Account administration operations."""

    async def create_user(self, uid: str, display_name: str | None = None) -> Account:
        """Create a top-level account with one generated S3 key.

        Raises:
            ProvisioningError: ALREADY_EXISTS when the account exists.
        """
        ...

    async def get_user(self, uid: str) -> Account:
        """Fetch an account, including its sub-accounts' keys.

        Raises:
            ProvisioningError: NOT_FOUND when the account does not exist.
        """
        ...

    async def remove_user(self, uid: str) -> None:
        """Remove an account and its keys."""
        ...

    async def create_subuser(self, uid: str, subuser: str, access: str = "full") -> None:
        """Create sub-account ``uid:subuser`` with a generated S3 key.

        Raises:
            ProvisioningError: ALREADY_EXISTS when the sub-account exists.
        """
        ...

    async def remove_subuser(self, uid: str, subuser: str) -> None:
        """Remove sub-account ``uid:subuser`` and its keys."""
        ...
