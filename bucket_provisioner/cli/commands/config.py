"""Configuration management commands."""

import json

import click

from bucket_provisioner.cli.utils import info, warning
from bucket_provisioner.core.settings import get_settings

MASK = "***"


@click.group(name="config")
def config() -> None:
    """Configuration management commands."""


@config.command()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "table"]),
    default="table",
    help="Output format",
)
@click.option(
    "--show-secrets/--hide-secrets",
    default=False,
    help="Show sensitive values (secret key, access key)",
)
def show(output_format: str, show_secrets: bool) -> None:
    """Display current configuration settings."""
    settings = get_settings()
    provisioner = settings.provisioner

    if not show_secrets:
        warning("Secrets are hidden. Use --show-secrets to display them.")

    def secret(value: object) -> str | None:
        if value is None:
            return None
        return value.get_secret_value() if show_secrets else MASK  # type: ignore[attr-defined]

    config_dict: dict[str, dict[str, object]] = {
        "app": {
            "name": settings.app.service_name,
            "environment": settings.app.environment,
            "debug": settings.app.debug,
            "host": settings.app.host,
            "port": settings.app.port,
            "api_prefix": settings.app.api_prefix,
        },
        "provisioner": {
            "driver_name": provisioner.driver_name or None,
            "endpoint": provisioner.endpoint,
            "region": provisioner.region,
            "access_key": secret(provisioner.access_key),
            "secret_key": secret(provisioner.secret_key),
            "parent_identity": provisioner.parent_identity,
            "tls_cert": "<pem>" if provisioner.tls_cert else None,
            "admin_path": provisioner.admin_path,
            "request_timeout": provisioner.request_timeout,
            "max_attempts": provisioner.max_attempts,
            "allowed_actions": len(provisioner.allowed_actions),
        },
        "logging": {
            "level": settings.logging.level,
            "json_logs": settings.logging.json_logs,
            "log_file": settings.logging.log_file,
        },
    }

    if output_format == "json":
        click.echo(json.dumps(config_dict, indent=2, default=str))
        return

    for section_name, values in config_dict.items():
        info(section_name)
        for key, value in values.items():
            click.echo(f"  {key:<18} {value}")
