"""Unit tests for BucketLifecycleManager."""

import pytest

from bucket_provisioner.features.provisioning.buckets import BucketLifecycleManager
from bucket_provisioner.infra.storage.exceptions import ErrorKind, ProvisioningError
from bucket_provisioner.infra.storage.testing import InMemoryObjectStorage


@pytest.fixture
def storage() -> InMemoryObjectStorage:
    return InMemoryObjectStorage()


class TestBucketLifecycle:
    """Test create and delete pass-through."""

    async def test_create_returns_bucket_id(self, storage):
        bucket_id = await BucketLifecycleManager(storage).create_bucket("b1")

        assert bucket_id == "b1"
        assert "b1" in storage.buckets

    async def test_create_twice_is_already_exists(self, storage):
        manager = BucketLifecycleManager(storage)
        await manager.create_bucket("b1")

        with pytest.raises(ProvisioningError) as exc_info:
            await manager.create_bucket("b1")

        assert exc_info.value.kind is ErrorKind.ALREADY_EXISTS
        assert storage.buckets == {"b1"}

    async def test_delete(self, storage):
        storage.add_bucket("b1")

        await BucketLifecycleManager(storage).delete_bucket("b1")

        assert storage.buckets == set()

    async def test_delete_missing_is_not_found(self, storage):
        with pytest.raises(ProvisioningError) as exc_info:
            await BucketLifecycleManager(storage).delete_bucket("b1")

        assert exc_info.value.kind is ErrorKind.NOT_FOUND

    async def test_delete_non_empty_is_failed_precondition(self, storage):
        storage.add_bucket("b1")
        storage.non_empty.add("b1")

        with pytest.raises(ProvisioningError) as exc_info:
            await BucketLifecycleManager(storage).delete_bucket("b1")

        assert exc_info.value.kind is ErrorKind.FAILED_PRECONDITION
        assert "b1" in storage.buckets
