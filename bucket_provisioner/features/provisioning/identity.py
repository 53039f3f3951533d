"""Idempotent provisioning of accounts and sub-accounts."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bucket_provisioner.infra.storage.backends.protocol import subuser_id
from bucket_provisioner.infra.storage.exceptions import ErrorKind, ProvisioningError

if TYPE_CHECKING:
    from bucket_provisioner.infra.storage.backends.protocol import (
        AccountKey,
        IdentityAdminClient,
    )

logger = logging.getLogger(__name__)


class IdentityProvisioner:
    """Create-or-fetch an identity and return its key pair.

    Creation is idempotent from the caller's point of view: an identity that
    already exists is looked up instead of failing, so a retried grant ends
    in the same state as a first attempt.
    """

    def __init__(self, admin: IdentityAdminClient) -> None:
        self.admin = admin

    async def provision(self, name: str, parent: str | None = None) -> AccountKey:
        """Provision ``name``, under ``parent`` when one is given.

        Returns:
            The key pair owned by the provisioned identity.

        Raises:
            ProvisioningError: NOT_FOUND when the identity has no key,
                INTERNAL on backend failure.
        """
        if parent:
            return await self._provision_subuser(parent, name)
        return await self._provision_user(name)

    async def _provision_user(self, uid: str) -> AccountKey:
        try:
            account = await self.admin.create_user(uid)
        except ProvisioningError as e:
            if e.kind is not ErrorKind.ALREADY_EXISTS:
                raise
            logger.info("Account already exists, reusing it", extra={"uid": uid})
            account = await self.admin.get_user(uid)

        if not account.keys:
            # Some admin API versions omit keys from the create response.
            account = await self.admin.get_user(uid)

        # Only a key owned by the account itself; the list also holds sub-account keys.
        key = account.key_for(uid)
        if key is None:
            raise ProvisioningError(
                ErrorKind.NOT_FOUND,
                f"no key found for account {uid}",
                metadata={"uid": uid},
            )
        return key

    async def _provision_subuser(self, parent: str, name: str) -> AccountKey:
        try:
            await self.admin.create_subuser(parent, name, access="full")
        except ProvisioningError as e:
            if e.kind is not ErrorKind.ALREADY_EXISTS:
                raise
            logger.info(
                "Sub-account already exists, reusing it",
                extra={"uid": parent, "subuser": name},
            )

        # Sub-account keys are only listed on the parent account.
        account = await self.admin.get_user(parent)
        owner = subuser_id(parent, name)
        key = account.key_for(owner)
        if key is None:
            raise ProvisioningError(
                ErrorKind.NOT_FOUND,
                f"no key found for sub-account {owner}",
                metadata={"uid": parent, "subuser": name},
            )
        return key
