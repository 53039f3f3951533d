"""Modular Pydantic Settings v2 configuration.

Settings are split by domain (app/logging/provisioner), each frozen and
read from environment variables with its own prefix:

    APP_*          FastAPI application and server
    LOG_*          Structured logging
    PROVISIONER_*  Driver identity and backend defaults

Import settings via cached loaders:
    from bucket_provisioner.core.settings import get_provisioner_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file
    4. secrets_dir
"""

from __future__ import annotations

from dataclasses import dataclass

from .app import AppSettings
from .loader import (
    clear_all_settings_caches,
    get_app_settings,
    get_logging_settings,
    get_provisioner_settings,
)
from .logs import LoggingSettings
from .provisioner import ProvisionerSettings


@dataclass(frozen=True)
class Settings:
    """All settings domains in one object."""

    app: AppSettings
    logging: LoggingSettings
    provisioner: ProvisionerSettings


def get_settings() -> Settings:
    """Compose the cached domain settings."""
    return Settings(
        app=get_app_settings(),
        logging=get_logging_settings(),
        provisioner=get_provisioner_settings(),
    )


__all__ = [
    "AppSettings",
    "LoggingSettings",
    "ProvisionerSettings",
    "Settings",
    "clear_all_settings_caches",
    "get_app_settings",
    "get_logging_settings",
    "get_provisioner_settings",
    "get_settings",
]
