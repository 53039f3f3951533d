"""Dependencies for provisioning endpoints."""

from typing import Annotated

from fastapi import Depends

from .service import ProvisioningService, get_provisioning_service

# Provisioning service dependency
ProvisioningServiceDep = Annotated[ProvisioningService, Depends(get_provisioning_service)]

__all__ = ["ProvisioningServiceDep"]
