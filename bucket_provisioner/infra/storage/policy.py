"""Bucket policy document model and statement merge.

A bucket policy is an ordered list of statements. Access grants are
expressed as one ``Allow`` statement per granted account, keyed by ``Sid``:

    {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Sid": "alice",
                "Effect": "Allow",
                "Principal": {"AWS": ["arn:aws:iam:::user/alice"]},
                "Action": ["s3:GetObject", "s3:PutObject", ...],
                "Resource": ["arn:aws:s3:::b1", "arn:aws:s3:::b1/*"]
            }
        ]
    }

Statements written by other tools are preserved as-is, including fields this
model does not name.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

POLICY_VERSION = "2012-10-17"


def bucket_arn(bucket: str) -> str:
    """ARN of the bucket itself."""
    return f"arn:aws:s3:::{bucket}"


def bucket_objects_arn(bucket: str) -> str:
    """ARN matching every object in the bucket."""
    return f"arn:aws:s3:::{bucket}/*"


def user_arn(account: str) -> str:
    """ARN of an object-store account, as used in policy principals."""
    return f"arn:aws:iam:::user/{account}"


class PolicyStatement(BaseModel):
    """One statement of a bucket policy."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    sid: str | None = Field(default=None, alias="Sid")
    effect: Literal["Allow", "Deny"] = Field(default="Allow", alias="Effect")
    principal: str | dict[str, str | list[str]] | None = Field(default=None, alias="Principal")
    action: str | list[str] = Field(default_factory=list, alias="Action")
    resource: str | list[str] = Field(default_factory=list, alias="Resource")
    condition: dict[str, Any] | None = Field(default=None, alias="Condition")


class PolicyDocument(BaseModel):
    """An ordered bucket policy.

    At most one statement per ``Sid`` is produced by :func:`merge_statement`;
    documents fetched from the backend are taken as they are.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    version: str = Field(default=POLICY_VERSION, alias="Version")
    statements: tuple[PolicyStatement, ...] = Field(default=(), alias="Statement")

    @field_validator("statements", mode="before")
    @classmethod
    def _wrap_single_statement(cls, v: Any) -> Any:
        # A policy with one statement may carry it as an object, not a list.
        if isinstance(v, dict):
            return [v]
        return v

    @classmethod
    def from_json(cls, raw: str | bytes) -> PolicyDocument:
        """Parse a policy document as returned by GetBucketPolicy."""
        return cls.model_validate(json.loads(raw))

    def to_json(self) -> str:
        """Serialize for PutBucketPolicy."""
        return json.dumps(self.model_dump(by_alias=True, exclude_none=True))

    def find(self, sid: str) -> PolicyStatement | None:
        """Return the first statement with the given Sid, if any."""
        for statement in self.statements:
            if statement.sid == sid:
                return statement
        return None

    @property
    def sids(self) -> list[str]:
        """Statement ids in document order (statements without a Sid are skipped)."""
        return [s.sid for s in self.statements if s.sid is not None]


def build_access_statement(
    sid: str,
    principal: str,
    bucket: str,
    actions: Iterable[str],
) -> PolicyStatement:
    """Build the Allow statement granting ``principal`` the given actions on a bucket.

    Args:
        sid: Statement id; the identifier of the granted account.
        principal: Account the backend evaluates the policy against.
        bucket: Bucket name.
        actions: Allowed actions.

    Returns:
        Statement covering the bucket and all of its objects.
    """
    return PolicyStatement(
        sid=sid,
        effect="Allow",
        principal={"AWS": [user_arn(principal)]},
        action=list(actions),
        resource=[bucket_arn(bucket), bucket_objects_arn(bucket)],
    )


def merge_statement(
    document: PolicyDocument | None,
    statement: PolicyStatement,
) -> PolicyDocument:
    """Merge a statement into a policy, keyed by Sid.

    The first statement with the same Sid is replaced in place, keeping its
    position, and any later statements with that Sid are dropped; otherwise
    the statement is appended. An absent document yields a new
    document holding only ``statement``. Applying the same statement twice
    gives the same document as applying it once.

    Args:
        document: Current policy, or None when the bucket has none.
        statement: Statement to merge.

    Returns:
        A new PolicyDocument; ``document`` is not modified.
    """
    if document is None or not document.statements:
        base = document or PolicyDocument()
        return base.model_copy(update={"statements": (statement,)})

    merged: list[PolicyStatement] = []
    replaced = False
    for existing in document.statements:
        if existing.sid is None or existing.sid != statement.sid:
            merged.append(existing)
        elif not replaced:
            merged.append(statement)
            replaced = True
    if not replaced:
        merged.append(statement)

    return document.model_copy(update={"statements": tuple(merged)})
