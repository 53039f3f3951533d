"""Access grant and revoke.

A grant is a strictly sequential read-modify-write:

    1. fetch the bucket policy (NOT_FOUND if the bucket is missing,
       empty document if it has no policy yet)
    2. provision the identity (idempotent)
    3. build the Allow statement keyed by the identity's id
    4. merge it into the fetched document, replacing any statement with the same Sid
    5. write the whole document back
    6. return the credentials

There is no cross-backend transaction. If step 5 fails, the identity from
step 2 stays provisioned and the call fails with INTERNAL. Retrying the
whole grant is safe because steps 2 to 4 converge on the same end state.

The policy write is not conditional. Two grants racing on the same bucket
can both read the same document, and the later write drops the earlier
grant's statement (last write wins). Callers that need every concurrent
grant to stick must serialize grants per bucket.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bucket_provisioner.infra.storage.backends.protocol import split_subuser_id, subuser_id
from bucket_provisioner.infra.storage.exceptions import ErrorKind, ProvisioningError
from bucket_provisioner.infra.storage.policy import build_access_statement, merge_statement

from .identity import IdentityProvisioner

if TYPE_CHECKING:
    from collections.abc import Sequence

    from bucket_provisioner.infra.storage.backends.protocol import (
        IdentityAdminClient,
        ObjectStorageClient,
    )

    from .parameters import GrantParameters

logger = logging.getLogger(__name__)

S3_PROVIDER = "s3"


@dataclass(frozen=True)
class Credential:
    """Connection details and key pair issued to a grantee."""

    endpoint: str
    region: str
    access_key_id: str
    access_secret_key: str = field(repr=False)


@dataclass(frozen=True)
class GrantResult:
    """Outcome of a successful grant."""

    account_id: str
    credentials: dict[str, Credential]


class AccessGrantManager:
    """Grant and revoke bucket access for accounts and sub-accounts."""

    def __init__(
        self,
        storage: ObjectStorageClient,
        admin: IdentityAdminClient,
        allowed_actions: Sequence[str],
    ) -> None:
        self.storage = storage
        self.admin = admin
        self.allowed_actions = tuple(allowed_actions)
        self.identities = IdentityProvisioner(admin)

    async def grant_access(
        self,
        bucket_id: str,
        name: str,
        params: GrantParameters,
    ) -> GrantResult:
        """Grant ``name`` access to ``bucket_id`` and issue its credentials.

        With ``params.parent_identity`` set, ``name`` becomes a sub-account of
        the parent. The statement Sid is then ``parent:name`` while the
        principal is the parent account, since the backend evaluates bucket
        policies against accounts.

        Raises:
            ProvisioningError: NOT_FOUND for a missing bucket or identity key,
                INTERNAL for backend failures.
        """
        parent = params.parent_identity or None

        document = await self.storage.get_bucket_policy(bucket_id)

        key = await self.identities.provision(name, parent)

        account_id = subuser_id(parent, name) if parent else name
        statement = build_access_statement(
            sid=account_id,
            principal=parent or name,
            bucket=bucket_id,
            actions=self.allowed_actions,
        )
        document = merge_statement(document, statement)

        await self.storage.put_bucket_policy(bucket_id, document)
        logger.info(
            "Access granted",
            extra={"bucket": bucket_id, "account": account_id, "statements": len(document.statements)},
        )

        return GrantResult(
            account_id=account_id,
            credentials={
                S3_PROVIDER: Credential(
                    endpoint=params.endpoint,
                    region=params.region,
                    access_key_id=key.access_key,
                    access_secret_key=key.secret_key,
                )
            },
        )

    async def revoke_access(
        self,
        bucket_id: str,
        account_id: str,
        parent: str | None = None,
    ) -> None:
        """Remove the identity behind ``account_id``.

        ``parent:name`` ids, or a plain name with ``parent`` given, remove a
        sub-account; anything else removes a top-level account. An identity
        that is already gone counts as removed.

        The bucket policy is left as it is: the statement for the removed
        identity stays in the document.
        """
        split = split_subuser_id(account_id)
        if split is None and parent:
            split = (parent, account_id)

        try:
            if split is not None:
                await self.admin.remove_subuser(*split)
            else:
                await self.admin.remove_user(account_id)
        except ProvisioningError as e:
            if e.kind is not ErrorKind.NOT_FOUND:
                raise
            logger.info(
                "Identity already removed",
                extra={"bucket": bucket_id, "account": account_id},
            )
            return

        logger.info("Access revoked", extra={"bucket": bucket_id, "account": account_id})
