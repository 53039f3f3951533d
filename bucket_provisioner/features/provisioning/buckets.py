"""Bucket create and delete."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bucket_provisioner.infra.storage.backends.protocol import ObjectStorageClient

logger = logging.getLogger(__name__)


class BucketLifecycleManager:
    """Pass-through bucket operations.

    Errors arrive already classified by the storage client: both flavours of
    "already exists" are ALREADY_EXISTS, "not empty" is FAILED_PRECONDITION,
    a missing bucket is NOT_FOUND and anything else is INTERNAL. Nothing is
    retried here.
    """

    def __init__(self, storage: ObjectStorageClient) -> None:
        self.storage = storage

    async def create_bucket(self, name: str) -> str:
        """Create ``name`` and return its bucket id (the name itself)."""
        await self.storage.create_bucket(name)
        logger.info("Bucket created", extra={"bucket": name})
        return name

    async def delete_bucket(self, bucket_id: str) -> None:
        """Delete ``bucket_id``."""
        await self.storage.delete_bucket(bucket_id)
        logger.info("Bucket deleted", extra={"bucket": bucket_id})
