"""Unit tests for ProvisioningService with in-memory backends."""

import pytest

from bucket_provisioner.infra.logging import get_log_context
from bucket_provisioner.infra.metrics.prometheus import REGISTRY
from bucket_provisioner.infra.storage.exceptions import ErrorKind, ProvisioningError


def operation_count(operation: str, outcome: str) -> float:
    value = REGISTRY.get_sample_value(
        "provisioner_operations_total",
        {"operation": operation, "outcome": outcome},
    )
    return value or 0.0


class TestCreateBucket:
    """Test CreateBucket."""

    async def test_create_then_already_exists(self, service, backends):
        assert await service.create_bucket("b1") == "b1"

        with pytest.raises(ProvisioningError) as exc_info:
            await service.create_bucket("b1")

        assert exc_info.value.kind is ErrorKind.ALREADY_EXISTS
        assert backends.storage.buckets == {"b1"}

    async def test_empty_name_makes_no_backend_call(self, service, backends):
        with pytest.raises(ProvisioningError) as exc_info:
            await service.create_bucket("  ")

        assert exc_info.value.kind is ErrorKind.INVALID_ARGUMENT
        assert backends.calls == []
        assert backends.builds == []

    async def test_unsupported_protocol(self, service, backends):
        with pytest.raises(ProvisioningError) as exc_info:
            await service.create_bucket("b1", protocol="azure")

        assert exc_info.value.kind is ErrorKind.INVALID_ARGUMENT
        assert backends.calls == []

    async def test_s3_protocol_accepted(self, service):
        assert await service.create_bucket("b1", protocol="S3") == "b1"

    async def test_request_parameters_reach_factory(self, service, backends):
        await service.create_bucket("b1", {"endpoint": "https://rgw-2", "region": "eu-1"})

        assert backends.builds[0]["endpoint"] == "https://rgw-2"
        assert backends.builds[0]["region"] == "eu-1"

    async def test_records_metrics(self, service):
        before_ok = operation_count("create_bucket", "success")
        before_conflict = operation_count("create_bucket", "already-exists")

        await service.create_bucket("b1")
        with pytest.raises(ProvisioningError):
            await service.create_bucket("b1")

        assert operation_count("create_bucket", "success") == before_ok + 1
        assert operation_count("create_bucket", "already-exists") == before_conflict + 1


class TestDeleteBucket:
    """Test DeleteBucket."""

    async def test_delete(self, service, backends):
        backends.storage.add_bucket("b1")

        await service.delete_bucket("b1")

        assert backends.storage.buckets == set()

    async def test_delete_missing(self, service):
        with pytest.raises(ProvisioningError) as exc_info:
            await service.delete_bucket("b1")

        assert exc_info.value.kind is ErrorKind.NOT_FOUND

    async def test_stored_parameters_used_without_inline_parameters(
        self, service, backends, metadata_store
    ):
        backends.storage.add_bucket("b1")
        metadata_store.put("b1", {"endpoint": "https://rgw-b1"})

        await service.delete_bucket("b1")

        assert backends.builds[0]["endpoint"] == "https://rgw-b1"


class TestGrantAccess:
    """Test GrantAccess scenarios."""

    async def test_grant_on_bucket_without_policy(self, service, backends):
        await service.create_bucket("b1")

        result = await service.grant_access("b1", "alice")

        assert result.account_id == "alice"
        assert set(result.credentials) == {"s3"}
        assert result.credentials["s3"].endpoint == "http://rgw.test:8080"
        assert backends.storage.policies["b1"].sids == ["alice"]

    async def test_repeat_grant(self, service, backends):
        await service.create_bucket("b1")

        first = await service.grant_access("b1", "alice")
        second = await service.grant_access("b1", "alice")

        assert second == first
        assert backends.storage.policies["b1"].sids == ["alice"]

    @pytest.mark.parametrize(("bucket", "name"), [("", "alice"), ("b1", "")])
    async def test_empty_names_make_no_backend_call(self, service, backends, bucket, name):
        with pytest.raises(ProvisioningError) as exc_info:
            await service.grant_access(bucket, name)

        assert exc_info.value.kind is ErrorKind.INVALID_ARGUMENT
        assert backends.calls == []

    async def test_missing_credentials_are_invalid_argument(self, backends):
        from bucket_provisioner.core.settings import ProvisionerSettings
        from bucket_provisioner.features.provisioning.service import ProvisioningService

        service = ProvisioningService(ProvisionerSettings(), factory=backends)

        with pytest.raises(ProvisioningError) as exc_info:
            await service.grant_access("b1", "alice")

        assert exc_info.value.kind is ErrorKind.INVALID_ARGUMENT
        assert backends.builds == []

    @pytest.mark.parametrize(
        ("name", "parameters", "field"),
        [
            ("team:bob", None, "name"),
            ("bob", {"parentIdentity": "team:ops"}, "parentIdentity"),
        ],
    )
    async def test_separator_in_identity_names_rejected(
        self, service, backends, name, parameters, field
    ):
        backends.storage.add_bucket("b1")

        with pytest.raises(ProvisioningError) as exc_info:
            await service.grant_access("b1", name, parameters)

        assert exc_info.value.kind is ErrorKind.INVALID_ARGUMENT
        assert exc_info.value.extra["field"] == field
        assert backends.calls == []
        assert backends.admin.accounts == {}

    async def test_malformed_tls_cert_is_invalid_argument(self, provisioner_settings):
        from bucket_provisioner.features.provisioning.service import ProvisioningService

        service = ProvisioningService(provisioner_settings)

        with pytest.raises(ProvisioningError) as exc_info:
            await service.grant_access("b1", "alice", {"tlsCert": "not a pem"})

        assert exc_info.value.kind is ErrorKind.INVALID_ARGUMENT
        assert exc_info.value.retryable is False

    async def test_write_failure_returns_no_credentials(self, service, backends):
        await service.create_bucket("b1")
        backends.storage.fail("put_bucket_policy", ErrorKind.INTERNAL)

        with pytest.raises(ProvisioningError) as exc_info:
            await service.grant_access("b1", "alice")

        assert exc_info.value.kind is ErrorKind.INTERNAL
        assert exc_info.value.retryable is True

    async def test_sets_log_context(self, service):
        await service.create_bucket("b1")
        await service.grant_access("b1", "alice")

        assert get_log_context() == {
            "operation": "grant_access",
            "bucket": "b1",
            "account": "alice",
        }


class TestRevokeAccess:
    """Test RevokeAccess."""

    async def test_revoke_after_grant(self, service, backends):
        await service.create_bucket("b1")
        await service.grant_access("b1", "alice")

        await service.revoke_access("b1", "alice")
        await service.revoke_access("b1", "alice")

        assert "alice" not in backends.admin.accounts

    async def test_revoke_keeps_policy_statement(self, service, backends):
        await service.create_bucket("b1")
        await service.grant_access("b1", "alice")

        await service.revoke_access("b1", "alice")

        # The statement for the removed account stays in the policy
        assert backends.storage.policies["b1"].sids == ["alice"]

    async def test_revoke_subuser_with_parent_parameter(self, service, backends):
        await service.create_bucket("b1")
        await backends.admin.create_user("alice")
        await service.grant_access("b1", "bob", {"parentIdentity": "alice"})

        await service.revoke_access("b1", "bob", {"parentIdentity": "alice"})

        assert backends.calls[-1] == ("remove_subuser", ("alice", "bob"))

    async def test_granted_account_id_revokes_the_granted_identity(self, service, backends):
        await service.create_bucket("b1")
        await backends.admin.create_user("team")
        grant = await service.grant_access("b1", "bob", {"parentIdentity": "team"})

        await service.revoke_access("b1", grant.account_id)

        assert grant.account_id == "team:bob"
        assert backends.calls[-1] == ("remove_subuser", ("team", "bob"))
        assert "team:bob" not in backends.admin.accounts["team"].subusers

    async def test_empty_account_id(self, service, backends):
        with pytest.raises(ProvisioningError) as exc_info:
            await service.revoke_access("b1", "")

        assert exc_info.value.kind is ErrorKind.INVALID_ARGUMENT
        assert backends.calls == []
