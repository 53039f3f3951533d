"""Main CLI entry point for bucket-provisioner commands."""

import click

from bucket_provisioner.cli.commands import access, buckets, config, driver, server
from bucket_provisioner.infra.logging.config import setup_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="bucket-provisioner")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Bucket Provisioner CLI.

    \b
    Commands:
      serve        Run the provisioning API server
      driver-info  Print the configured driver name
      config       Show configuration
      bucket       Create and delete buckets
      access       Grant and revoke bucket access

    \b
    Quick Start:
      bucket-provisioner config show
      bucket-provisioner bucket create b1 --param endpoint=https://rgw:8443
      bucket-provisioner access grant b1 alice
    """
    ctx.ensure_object(dict)


cli.add_command(server.serve)
cli.add_command(driver.driver_info)
cli.add_command(config.config)
cli.add_command(buckets.bucket)
cli.add_command(access.access)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
