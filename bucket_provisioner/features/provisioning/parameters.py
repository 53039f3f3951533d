"""Per-request backend parameters.

A request may carry raw string parameters (``endpoint``, ``region``,
``accessKey``, ``secretKey``, ``parentIdentity``, ``tlsCert``). They are
overlaid on the configured defaults and validated into an immutable
:class:`GrantParameters`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from bucket_provisioner.core.settings.provisioner import ProvisionerSettings
from bucket_provisioner.infra.storage.exceptions import invalid_argument

logger = logging.getLogger(__name__)

REQUIRED_KEYS: tuple[str, ...] = ("endpoint", "accessKey", "secretKey")


class GrantParameters(BaseModel):
    """Resolved connection parameters for one provisioning call."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    endpoint: str
    region: str = "us-east-1"
    access_key: str = Field(alias="accessKey")
    secret_key: SecretStr = Field(alias="secretKey")
    parent_identity: str | None = Field(default=None, alias="parentIdentity")
    tls_cert: str | None = Field(default=None, alias="tlsCert", repr=False)


class ParameterResolver:
    """Overlay request parameters on configured defaults."""

    def __init__(self, settings: ProvisionerSettings) -> None:
        self.settings = settings

    def resolve(self, raw: Mapping[str, str] | None = None) -> GrantParameters:
        """Resolve raw request parameters.

        Args:
            raw: Parameters carried by the request; empty values are ignored.

        Returns:
            Immutable GrantParameters.

        Raises:
            ProvisioningError: INVALID_ARGUMENT when endpoint, accessKey or
                secretKey is missing after the overlay.
        """
        merged = self.settings.default_parameters()
        merged.update({k: v for k, v in (raw or {}).items() if v})

        missing = [key for key in REQUIRED_KEYS if not merged.get(key)]
        if missing:
            raise invalid_argument(
                f"missing required parameters: {', '.join(missing)}",
                missing=missing,
            )
        return GrantParameters.model_validate(merged)


class BucketMetadataStore(Protocol):
    """Source of the parameters a bucket was provisioned with."""

    async def get(self, bucket_id: str) -> Mapping[str, str]: ...


class DefaultBucketMetadataStore:
    """Store that knows nothing; callers fall back to configured defaults."""

    async def get(self, bucket_id: str) -> Mapping[str, str]:
        logger.debug("No stored parameters for bucket", extra={"bucket": bucket_id})
        return {}
