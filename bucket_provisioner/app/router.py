"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bucket_provisioner.core.settings import get_app_settings
from bucket_provisioner.features.driver.router import router as driver_router
from bucket_provisioner.features.metrics.router import router as metrics_router
from bucket_provisioner.features.provisioning.router import router as provisioning_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from bucket_provisioner.core.settings.app import AppSettings

logger = logging.getLogger(__name__)


def setup_routers(app: FastAPI, app_settings: AppSettings | None = None) -> None:
    """Register all feature routers with the application.

    Args:
        app: FastAPI application instance.
        app_settings: Optional application settings override for the API prefix.
    """
    app_settings = app_settings or get_app_settings()
    api_prefix = app_settings.api_prefix

    # Metrics and driver identity have no prefix
    app.include_router(metrics_router)
    app.include_router(driver_router)

    app.include_router(provisioning_router, prefix=api_prefix)

    logger.debug("Routers registered", extra={"api_prefix": api_prefix})
