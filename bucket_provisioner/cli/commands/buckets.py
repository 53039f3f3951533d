"""Bucket provisioning commands."""

import sys

import click

from bucket_provisioner.cli.utils import coro, error, param_option, parse_params, success
from bucket_provisioner.features.provisioning.service import get_provisioning_service
from bucket_provisioner.infra.storage.exceptions import ProvisioningError


@click.group(name="bucket")
def bucket() -> None:
    """Create and delete buckets."""


@bucket.command()
@click.argument("name")
@click.option("--protocol", default=None, help="Storage protocol (only s3 is supported)")
@param_option
@coro
async def create(name: str, protocol: str | None, params: tuple[str, ...]) -> None:
    """Create bucket NAME."""
    try:
        bucket_id = await get_provisioning_service().create_bucket(
            name, parse_params(params), protocol=protocol
        )
    except ProvisioningError as e:
        error(f"{e.kind.value}: {e.message}")
        sys.exit(1)
    success(f"Bucket created: {bucket_id}")


@bucket.command()
@click.argument("bucket_id")
@param_option
@coro
async def delete(bucket_id: str, params: tuple[str, ...]) -> None:
    """Delete bucket BUCKET_ID."""
    try:
        await get_provisioning_service().delete_bucket(bucket_id, parse_params(params))
    except ProvisioningError as e:
        error(f"{e.kind.value}: {e.message}")
        sys.exit(1)
    success(f"Bucket deleted: {bucket_id}")
