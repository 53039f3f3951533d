"""Parsing of repeated ``--param key=value`` options."""

import click


def parse_params(values: tuple[str, ...]) -> dict[str, str]:
    """Turn ``("endpoint=https://rgw", "region=eu")`` into a dict."""
    params: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {item!r}", param_hint="--param")
        params[key.strip()] = value
    return params


param_option = click.option(
    "--param",
    "params",
    multiple=True,
    metavar="KEY=VALUE",
    help="Backend parameter (endpoint, region, accessKey, secretKey, parentIdentity, tlsCert). Repeatable.",
)
