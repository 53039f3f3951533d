"""Pydantic schemas for the provisioning API.

Field names on the wire are camelCase (``bucketId``, ``accountId``,
``accessKeyID``); Python code uses the snake_case attribute names.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .access import GrantResult

# ============================================================================
# Requests
# ============================================================================


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    parameters: dict[str, str] = Field(
        default_factory=dict,
        description="Backend parameters overriding configured defaults "
        "(endpoint, region, accessKey, secretKey, parentIdentity, tlsCert)",
    )


class CreateBucketRequest(_Request):
    """Request schema for creating a bucket."""

    name: str = Field(..., description="Bucket name", examples=["b1"])
    protocol: str | None = Field(
        None,
        description="Storage protocol; only s3 is supported",
        examples=["s3"],
    )


class DeleteBucketRequest(_Request):
    """Request schema for deleting a bucket."""

    bucket_id: str = Field(..., alias="bucketId", description="Bucket id returned by create")


class GrantAccessRequest(_Request):
    """Request schema for granting access to a bucket."""

    bucket_id: str = Field(..., alias="bucketId")
    name: str = Field(..., description="Account name to provision", examples=["alice"])


class RevokeAccessRequest(_Request):
    """Request schema for revoking access."""

    bucket_id: str = Field(..., alias="bucketId")
    account_id: str = Field(
        ...,
        alias="accountId",
        description="Account id returned by grant (``parent:name`` for sub-accounts)",
    )


# ============================================================================
# Responses
# ============================================================================


class CreateBucketResponse(BaseModel):
    """Response schema for a created bucket."""

    model_config = ConfigDict(populate_by_name=True)

    bucket_id: str = Field(..., alias="bucketId")


class CredentialDetails(BaseModel):
    """Connection details and key pair for one provider."""

    model_config = ConfigDict(populate_by_name=True)

    endpoint: str
    region: str
    access_key_id: str = Field(..., alias="accessKeyID")
    access_secret_key: str = Field(..., alias="accessSecretKey")


class GrantAccessResponse(BaseModel):
    """Response schema for a successful grant."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "accountId": "alice",
                    "credentials": {
                        "s3": {
                            "endpoint": "https://rgw.example.internal",
                            "region": "us-east-1",
                            "accessKeyID": "AKEXAMPLE",
                            "accessSecretKey": "secret",
                        }
                    },
                }
            ]
        },
    )

    account_id: str = Field(..., alias="accountId")
    credentials: dict[str, CredentialDetails]

    @classmethod
    def from_result(cls, result: GrantResult) -> GrantAccessResponse:
        return cls(
            account_id=result.account_id,
            credentials={
                provider: CredentialDetails(
                    endpoint=cred.endpoint,
                    region=cred.region,
                    access_key_id=cred.access_key_id,
                    access_secret_key=cred.access_secret_key,
                )
                for provider, cred in result.credentials.items()
            },
        )


class EmptyResponse(BaseModel):
    """Response for operations that return nothing on success."""
