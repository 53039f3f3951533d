"""Provisioner driver and backend defaults.

Environment variables use PROVISIONER_ prefix.
Example: PROVISIONER_DRIVER_PREFIX="cluster-a"
         PROVISIONER_ENDPOINT="https://rgw.example.internal:8443"

The backend fields are defaults only. Per-request parameters resolved by
``ParameterResolver`` take precedence over them.
"""

from __future__ import annotations

from pydantic import Field, SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DRIVER_SUFFIX = "ceph.objectstorage.k8s.io"

# Object lifecycle operations granted to every provisioned account.
DEFAULT_ALLOWED_ACTIONS: tuple[str, ...] = (
    "s3:AbortMultipartUpload",
    "s3:DeleteObject",
    "s3:DeleteObjectVersion",
    "s3:GetBucketAcl",
    "s3:GetBucketLocation",
    "s3:GetBucketVersioning",
    "s3:GetObject",
    "s3:GetObjectAcl",
    "s3:GetObjectVersion",
    "s3:ListBucket",
    "s3:ListBucketMultipartUploads",
    "s3:ListBucketVersions",
    "s3:ListMultipartUploadParts",
    "s3:PutObject",
    "s3:PutObjectAcl",
)


class ProvisionerSettings(BaseSettings):
    """Driver identity and default backend connection settings."""

    # ──────────────────────────────────────────────────────────────
    # Driver identity
    # ──────────────────────────────────────────────────────────────

    driver_prefix: str = Field(
        default="",
        max_length=200,
        description="Prefix for the driver name, e.g. <prefix>.ceph.objectstorage.k8s.io",
    )

    # ──────────────────────────────────────────────────────────────
    # Default backend parameters
    # ──────────────────────────────────────────────────────────────

    endpoint: str | None = Field(
        default=None,
        description="S3/RGW endpoint URL used when a request carries no endpoint",
    )
    region: str = Field(
        default="us-east-1",
        description="Region reported in issued credentials and used for request signing",
    )
    access_key: SecretStr | None = Field(
        default=None,
        description="Admin access key for the object store",
    )
    secret_key: SecretStr | None = Field(
        default=None,
        description="Admin secret key for the object store",
    )
    parent_identity: str | None = Field(
        default=None,
        description="Parent account under which sub-identities are created",
    )
    tls_cert: str | None = Field(
        default=None,
        description="PEM-encoded CA bundle used to verify the backend endpoint",
    )

    # ──────────────────────────────────────────────────────────────
    # Backend client behaviour
    # ──────────────────────────────────────────────────────────────

    admin_path: str = Field(
        default="/admin",
        pattern=r"^/.*$",
        description="URL path of the identity-administration API",
    )
    request_timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Per-request timeout in seconds for both backends",
    )
    max_attempts: int = Field(
        default=1,
        ge=1,
        le=10,
        description="botocore transport attempts per call (retries belong to the caller)",
    )

    allowed_actions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ACTIONS),
        min_length=1,
        description="Actions granted on the bucket by every access grant",
    )

    @field_validator("driver_prefix")
    @classmethod
    def strip_prefix(cls, v: str) -> str:
        """Remove surrounding whitespace and dots from the prefix."""
        return v.strip().strip(".")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def driver_name(self) -> str:
        """Fully qualified driver name, empty when no prefix is configured."""
        if not self.driver_prefix:
            return ""
        return f"{self.driver_prefix}.{DRIVER_SUFFIX}"

    def default_parameters(self) -> dict[str, str]:
        """Configured defaults in the raw parameter format accepted by the resolver."""
        params: dict[str, str] = {"region": self.region}
        if self.endpoint:
            params["endpoint"] = self.endpoint
        if self.access_key is not None:
            params["accessKey"] = self.access_key.get_secret_value()
        if self.secret_key is not None:
            params["secretKey"] = self.secret_key.get_secret_value()
        if self.parent_identity:
            params["parentIdentity"] = self.parent_identity
        if self.tls_cert:
            params["tlsCert"] = self.tls_cert
        return params

    model_config = SettingsConfigDict(
        env_prefix="PROVISIONER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
