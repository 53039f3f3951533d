"""Provisioning API endpoints.

Four RPC-style operations, each a POST with a flat JSON body. Failures are
RFC 7807 problem responses carrying ``kind`` and ``retryable``; a failed
call never returns a partial payload.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from .dependencies import ProvisioningServiceDep
from .schemas import (
    CreateBucketRequest,
    CreateBucketResponse,
    DeleteBucketRequest,
    EmptyResponse,
    GrantAccessRequest,
    GrantAccessResponse,
    RevokeAccessRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/provisioner", tags=["provisioner"])


@router.post(
    "/create-bucket",
    response_model=CreateBucketResponse,
    summary="Create a bucket",
    responses={400: {}, 409: {}, 500: {}},
)
async def create_bucket(
    request: CreateBucketRequest,
    service: ProvisioningServiceDep,
) -> CreateBucketResponse:
    bucket_id = await service.create_bucket(
        request.name,
        request.parameters,
        protocol=request.protocol,
    )
    return CreateBucketResponse(bucket_id=bucket_id)


@router.post(
    "/delete-bucket",
    response_model=EmptyResponse,
    summary="Delete a bucket",
    responses={400: {}, 404: {}, 412: {}, 500: {}},
)
async def delete_bucket(
    request: DeleteBucketRequest,
    service: ProvisioningServiceDep,
) -> EmptyResponse:
    await service.delete_bucket(request.bucket_id, request.parameters)
    return EmptyResponse()


@router.post(
    "/grant-access",
    response_model=GrantAccessResponse,
    summary="Grant bucket access and issue credentials",
    responses={400: {}, 404: {}, 500: {}},
)
async def grant_access(
    request: GrantAccessRequest,
    service: ProvisioningServiceDep,
) -> GrantAccessResponse:
    """Provision the account, add its policy statement and return its credentials."""
    result = await service.grant_access(request.bucket_id, request.name, request.parameters)
    return GrantAccessResponse.from_result(result)


@router.post(
    "/revoke-access",
    response_model=EmptyResponse,
    summary="Revoke bucket access",
    responses={400: {}, 500: {}},
)
async def revoke_access(
    request: RevokeAccessRequest,
    service: ProvisioningServiceDep,
) -> EmptyResponse:
    """Remove the account. The bucket policy statement is kept."""
    await service.revoke_access(request.bucket_id, request.account_id, request.parameters)
    return EmptyResponse()
