"""Access grant commands."""

import sys

import click

from bucket_provisioner.cli.utils import coro, error, param_option, parse_params, success
from bucket_provisioner.features.provisioning.schemas import GrantAccessResponse
from bucket_provisioner.features.provisioning.service import get_provisioning_service
from bucket_provisioner.infra.storage.exceptions import ProvisioningError


@click.group(name="access")
def access() -> None:
    """Grant and revoke bucket access."""


@access.command()
@click.argument("bucket_id")
@click.argument("name")
@param_option
@coro
async def grant(bucket_id: str, name: str, params: tuple[str, ...]) -> None:
    """Grant NAME access to BUCKET_ID and print the credentials as JSON."""
    try:
        result = await get_provisioning_service().grant_access(
            bucket_id, name, parse_params(params)
        )
    except ProvisioningError as e:
        error(f"{e.kind.value}: {e.message}")
        sys.exit(1)
    click.echo(GrantAccessResponse.from_result(result).model_dump_json(by_alias=True, indent=2))


@access.command()
@click.argument("bucket_id")
@click.argument("account_id")
@param_option
@coro
async def revoke(bucket_id: str, account_id: str, params: tuple[str, ...]) -> None:
    """Remove ACCOUNT_ID. Its statement in the BUCKET_ID policy is kept."""
    try:
        await get_provisioning_service().revoke_access(
            bucket_id, account_id, parse_params(params)
        )
    except ProvisioningError as e:
        error(f"{e.kind.value}: {e.message}")
        sys.exit(1)
    success(f"Access revoked: {account_id}")
