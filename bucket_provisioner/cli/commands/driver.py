"""Driver identity command."""

import sys

import click

from bucket_provisioner.cli.utils import error
from bucket_provisioner.core.settings import get_provisioner_settings
from bucket_provisioner.features.driver.router import driver_name
from bucket_provisioner.infra.storage.exceptions import ProvisioningError


@click.command(name="driver-info")
def driver_info() -> None:
    """Print the configured driver name."""
    try:
        click.echo(driver_name(get_provisioner_settings()))
    except ProvisioningError as e:
        error(e.message)
        sys.exit(1)
