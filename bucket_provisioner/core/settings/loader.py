"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the process.

Usage:
    from bucket_provisioner.core.settings.loader import get_provisioner_settings

    settings = get_provisioner_settings()  # First call: loads and validates
    settings = get_provisioner_settings()  # Subsequent calls: returns cached instance

Testing:
    In tests, clear the cache to force reload:
    clear_all_settings_caches()

    Or construct settings directly:
    settings = ProvisionerSettings(driver_prefix="test", ...)
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .logs import LoggingSettings
from .provisioner import ProvisionerSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings.

    Returns:
        Validated and frozen AppSettings instance.
    """
    return AppSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_provisioner_settings() -> ProvisionerSettings:
    """Get cached provisioner settings.

    Returns:
        Validated and frozen ProvisionerSettings instance.
    """
    return ProvisionerSettings()


def clear_all_settings_caches() -> None:
    """Clear every cached settings instance (used by tests and config reload)."""
    get_app_settings.cache_clear()
    get_logging_settings.cache_clear()
    get_provisioner_settings.cache_clear()
