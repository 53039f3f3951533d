"""Bucket and access provisioning feature."""

from .access import AccessGrantManager, Credential, GrantResult
from .buckets import BucketLifecycleManager
from .identity import IdentityProvisioner
from .parameters import (
    BucketMetadataStore,
    DefaultBucketMetadataStore,
    GrantParameters,
    ParameterResolver,
)
from .router import router
from .service import ProvisioningService, get_provisioning_service

__all__ = [
    "AccessGrantManager",
    "BucketLifecycleManager",
    "BucketMetadataStore",
    "Credential",
    "DefaultBucketMetadataStore",
    "GrantParameters",
    "GrantResult",
    "IdentityProvisioner",
    "ParameterResolver",
    "ProvisioningService",
    "get_provisioning_service",
    "router",
]
