"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: provisioner settings with test defaults
    - Backend Fixtures: in-memory object storage and identity admin
    - Service Fixtures: ProvisioningService wired to the in-memory backends
    - Application Fixtures: FastAPI app and HTTP client

No test talks to a real object store; every backend is an in-memory fake
from ``bucket_provisioner.infra.storage.testing``.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Iterator

import pytest
from httpx import ASGITransport, AsyncClient

from bucket_provisioner.core.settings import ProvisionerSettings, clear_all_settings_caches
from bucket_provisioner.features.provisioning.service import (
    ProvisioningService,
    reset_provisioning_service,
)
from bucket_provisioner.infra.logging import clear_log_context
from bucket_provisioner.infra.storage.testing import (
    InMemoryBucketMetadataStore,
    InMemoryClientFactory,
)

# Ensure tests never pick up real backend settings from the environment
for _name in list(os.environ):
    if _name.startswith("PROVISIONER_"):
        del os.environ[_name]
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("LOG_JSON_LOGS", "false")

TEST_ENDPOINT = "http://rgw.test:8080"


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _isolate_state() -> Iterator[None]:
    """Reset cached settings, the service singleton and the log context."""
    clear_all_settings_caches()
    reset_provisioning_service()
    clear_log_context()
    yield
    clear_all_settings_caches()
    reset_provisioning_service()
    clear_log_context()


@pytest.fixture
def provisioner_settings() -> ProvisionerSettings:
    """Provisioner settings with a driver prefix and default backend credentials."""
    return ProvisionerSettings(
        driver_prefix="test",
        endpoint=TEST_ENDPOINT,
        region="us-east-1",
        access_key="admin-access",
        secret_key="admin-secret",
    )


# ============================================================================
# Backend Fixtures
# ============================================================================


@pytest.fixture
def backends() -> InMemoryClientFactory:
    """In-memory client factory; ``backends.storage`` and ``backends.admin`` hold state."""
    return InMemoryClientFactory()


@pytest.fixture
def metadata_store() -> InMemoryBucketMetadataStore:
    """Empty in-memory bucket metadata store."""
    return InMemoryBucketMetadataStore()


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def service(
    provisioner_settings: ProvisionerSettings,
    backends: InMemoryClientFactory,
    metadata_store: InMemoryBucketMetadataStore,
) -> ProvisioningService:
    """ProvisioningService backed by the in-memory clients."""
    return ProvisioningService(
        provisioner_settings,
        factory=backends,
        metadata_store=metadata_store,
    )


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app(service: ProvisioningService, provisioner_settings: ProvisionerSettings):
    """FastAPI application with the service and settings dependencies overridden."""
    from bucket_provisioner.app.main import create_app
    from bucket_provisioner.core.settings import get_provisioner_settings
    from bucket_provisioner.features.provisioning.service import get_provisioning_service

    application = create_app()
    application.dependency_overrides[get_provisioning_service] = lambda: service
    application.dependency_overrides[get_provisioner_settings] = lambda: provisioner_settings
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for the app; lifespan is not run."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
