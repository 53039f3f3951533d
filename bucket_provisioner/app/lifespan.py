"""Application lifespan management.

Startup:
1. Logging
2. Driver identity check (an empty driver name refuses to start)
3. Application info metric

Backend clients are opened per request, so there is nothing else to start
or stop.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from bucket_provisioner.core.settings import (
    get_app_settings,
    get_logging_settings,
    get_provisioner_settings,
)
from bucket_provisioner.features.driver.router import driver_name
from bucket_provisioner.infra.logging.config import setup_logging
from bucket_provisioner.infra.logging.config import shutdown as shutdown_logging
from bucket_provisioner.infra.metrics.prometheus import app_info

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging and verify the driver identity before serving.

    Raises:
        ProvisioningError: INVALID_ARGUMENT when no driver prefix is configured.
    """
    settings = get_app_settings()
    setup_logging(log_settings=get_logging_settings(), force=True)

    name = driver_name(get_provisioner_settings())
    app_info.info(
        {
            "version": settings.version,
            "service": settings.service_name,
            "environment": settings.environment,
            "driver": name,
        }
    )
    logger.info(
        "Application starting",
        extra={"service": settings.service_name, "environment": settings.environment, "driver": name},
    )

    yield

    logger.info("Application shutdown complete")
    shutdown_logging()
