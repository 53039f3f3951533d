"""Unit tests for parameter resolution and bucket metadata stores."""

import pytest

from bucket_provisioner.core.settings import ProvisionerSettings
from bucket_provisioner.features.provisioning.parameters import (
    DefaultBucketMetadataStore,
    ParameterResolver,
)
from bucket_provisioner.infra.storage.exceptions import ErrorKind, ProvisioningError
from bucket_provisioner.infra.storage.testing import InMemoryBucketMetadataStore


class TestParameterResolver:
    """Test overlaying request parameters on configured defaults."""

    def test_defaults_only(self, provisioner_settings):
        params = ParameterResolver(provisioner_settings).resolve(None)

        assert params.endpoint == "http://rgw.test:8080"
        assert params.access_key == "admin-access"
        assert params.secret_key.get_secret_value() == "admin-secret"
        assert params.parent_identity is None

    def test_request_overrides_defaults(self, provisioner_settings):
        params = ParameterResolver(provisioner_settings).resolve(
            {"endpoint": "https://other:8443", "region": "eu-1", "parentIdentity": "alice"}
        )

        assert params.endpoint == "https://other:8443"
        assert params.region == "eu-1"
        assert params.parent_identity == "alice"
        assert params.access_key == "admin-access"

    def test_empty_values_do_not_override(self, provisioner_settings):
        params = ParameterResolver(provisioner_settings).resolve({"endpoint": ""})

        assert params.endpoint == "http://rgw.test:8080"

    def test_missing_required_is_invalid_argument(self):
        resolver = ParameterResolver(ProvisionerSettings())

        with pytest.raises(ProvisioningError) as exc_info:
            resolver.resolve({"endpoint": "http://rgw"})

        assert exc_info.value.kind is ErrorKind.INVALID_ARGUMENT
        assert exc_info.value.extra["missing"] == ["accessKey", "secretKey"]

    def test_resolved_parameters_are_frozen(self, provisioner_settings):
        params = ParameterResolver(provisioner_settings).resolve(None)

        with pytest.raises(ValueError):
            params.endpoint = "http://elsewhere"  # type: ignore[misc]

    def test_secret_not_in_repr(self, provisioner_settings):
        params = ParameterResolver(provisioner_settings).resolve(None)

        assert "admin-secret" not in repr(params)


class TestBucketMetadataStores:
    """Test the stores used by delete and revoke."""

    async def test_default_store_is_empty(self):
        assert await DefaultBucketMetadataStore().get("b1") == {}

    async def test_in_memory_store(self):
        store = InMemoryBucketMetadataStore()
        store.put("b1", {"endpoint": "http://rgw-b"})

        assert await store.get("b1") == {"endpoint": "http://rgw-b"}
        assert await store.get("b2") == {}
