"""Driver identity endpoint.

Reports the fully qualified driver name, ``<prefix>.ceph.objectstorage.k8s.io``,
so callers can check which provisioner they are talking to.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from bucket_provisioner.core.settings import get_provisioner_settings
from bucket_provisioner.core.settings.provisioner import ProvisionerSettings
from bucket_provisioner.infra.storage.exceptions import invalid_argument

router = APIRouter(prefix="/identity", tags=["identity"])


class DriverInfoResponse(BaseModel):
    """Driver identity."""

    name: str


def driver_name(settings: ProvisionerSettings) -> str:
    """Return the configured driver name.

    Raises:
        ProvisioningError: INVALID_ARGUMENT when no driver prefix is configured.
    """
    if not settings.driver_name:
        raise invalid_argument("driver name is empty; set PROVISIONER_DRIVER_PREFIX")
    return settings.driver_name


@router.get("/driver-info", response_model=DriverInfoResponse)
async def driver_info(
    settings: Annotated[ProvisionerSettings, Depends(get_provisioner_settings)],
) -> DriverInfoResponse:
    return DriverInfoResponse(name=driver_name(settings))
