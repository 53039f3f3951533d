"""RFC 7807 Problem Details schema for error responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FieldError(BaseModel):
    """One invalid request field."""

    field: str
    message: str
    type: str


class ProblemDetails(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs, extended with the error kind.

    See: https://datatracker.ietf.org/doc/html/rfc7807

    ``type`` and ``kind`` carry the same ErrorKind value; ``retryable`` tells
    the caller whether the same request may be retried with backoff.
    """

    type: str = Field(
        default="about:blank",
        min_length=1,
        max_length=200,
        description="URI reference identifying the problem type",
    )
    title: str = Field(min_length=1, max_length=200, description="Short summary of the problem")
    status: int = Field(ge=100, le=599, description="HTTP status code")
    detail: str | None = Field(
        default=None,
        max_length=2000,
        description="Human-readable explanation specific to this occurrence",
    )
    instance: str | None = Field(default=None, max_length=500)
    kind: str | None = Field(default=None, description="Canonical error kind")
    retryable: bool = Field(default=False, description="Whether a retry may succeed")
    errors: list[FieldError] | None = Field(default=None, description="Invalid request fields")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "already-exists",
                "title": "Conflict",
                "status": 409,
                "detail": "create_bucket failed: BucketAlreadyExists",
                "instance": "http://localhost:8000/api/v1/provisioner/create-bucket",
                "kind": "already-exists",
                "retryable": False,
            }
        },
    )

    def to_content(self, extra: dict[str, Any] | None = None) -> dict[str, Any]:
        """JSON body: the problem fields plus any extra context."""
        content = self.model_dump(exclude_none=True)
        for key, value in (extra or {}).items():
            content.setdefault(key, value)
        return content
