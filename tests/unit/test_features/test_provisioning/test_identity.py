"""Unit tests for IdentityProvisioner."""

from unittest.mock import AsyncMock

import pytest

from bucket_provisioner.features.provisioning.identity import IdentityProvisioner
from bucket_provisioner.infra.storage.backends.protocol import Account, AccountKey
from bucket_provisioner.infra.storage.exceptions import ErrorKind, ProvisioningError
from bucket_provisioner.infra.storage.testing import InMemoryIdentityAdmin


@pytest.fixture
def admin() -> InMemoryIdentityAdmin:
    return InMemoryIdentityAdmin()


class TestTopLevelAccounts:
    """Test provisioning without a parent."""

    async def test_creates_account(self, admin):
        key = await IdentityProvisioner(admin).provision("alice")

        assert key.user == "alice"
        assert admin.accounts["alice"].keys == (key,)

    async def test_existing_account_is_reused(self, admin):
        first = await IdentityProvisioner(admin).provision("alice")
        second = await IdentityProvisioner(admin).provision("alice")

        assert second == first
        assert [name for name, _ in admin.calls] == [
            "create_user",
            "create_user",
            "get_user",
        ]

    async def test_backend_failure_propagates(self, admin):
        admin.fail("create_user", ErrorKind.INTERNAL)

        with pytest.raises(ProvisioningError) as exc_info:
            await IdentityProvisioner(admin).provision("alice")

        assert exc_info.value.kind is ErrorKind.INTERNAL

    async def test_refetches_when_create_returns_no_keys(self):
        admin = AsyncMock()
        admin.create_user.return_value = Account(user_id="alice")
        admin.get_user.return_value = Account(
            user_id="alice",
            keys=(AccountKey(user="alice", access_key="AK", secret_key="SK"),),
        )

        key = await IdentityProvisioner(admin).provision("alice")

        assert key.access_key == "AK"
        admin.get_user.assert_awaited_once_with("alice")

    async def test_account_without_keys_is_not_found(self):
        admin = AsyncMock()
        admin.create_user.return_value = Account(user_id="alice")
        admin.get_user.return_value = Account(user_id="alice")

        with pytest.raises(ProvisioningError) as exc_info:
            await IdentityProvisioner(admin).provision("alice")

        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert exc_info.value.retryable is False

    async def test_sub_account_key_is_not_used_for_the_account(self):
        admin = AsyncMock()
        admin.create_user.side_effect = ProvisioningError(ErrorKind.ALREADY_EXISTS, "exists")
        admin.get_user.return_value = Account(
            user_id="alice",
            keys=(AccountKey(user="alice:bob", access_key="AK-BOB", secret_key="SK-BOB"),),
            subusers=("alice:bob",),
        )

        with pytest.raises(ProvisioningError) as exc_info:
            await IdentityProvisioner(admin).provision("alice")

        assert exc_info.value.kind is ErrorKind.NOT_FOUND


class TestSubAccounts:
    """Test provisioning under a parent account."""

    async def test_looks_up_key_owned_by_parent_colon_name(self):
        admin = AsyncMock()
        admin.get_user.return_value = Account(
            user_id="alice",
            keys=(
                AccountKey(user="alice", access_key="AK-ALICE", secret_key="SK-ALICE"),
                AccountKey(user="alice:bob", access_key="AK-BOB", secret_key="SK-BOB"),
            ),
            subusers=("alice:bob",),
        )

        key = await IdentityProvisioner(admin).provision("bob", parent="alice")

        assert key.user == "alice:bob"
        assert key.access_key == "AK-BOB"
        admin.create_subuser.assert_awaited_once_with("alice", "bob", access="full")
        admin.get_user.assert_awaited_once_with("alice")

    async def test_existing_subuser_is_reused(self, admin):
        await admin.create_user("alice")
        first = await IdentityProvisioner(admin).provision("bob", parent="alice")

        second = await IdentityProvisioner(admin).provision("bob", parent="alice")

        assert second == first

    async def test_missing_subuser_key_is_not_found(self):
        admin = AsyncMock()
        admin.get_user.return_value = Account(
            user_id="alice",
            keys=(AccountKey(user="alice", access_key="AK", secret_key="SK"),),
        )

        with pytest.raises(ProvisioningError) as exc_info:
            await IdentityProvisioner(admin).provision("bob", parent="alice")

        assert exc_info.value.kind is ErrorKind.NOT_FOUND

    async def test_missing_parent_propagates(self, admin):
        with pytest.raises(ProvisioningError) as exc_info:
            await IdentityProvisioner(admin).provision("bob", parent="alice")

        assert exc_info.value.kind is ErrorKind.NOT_FOUND
