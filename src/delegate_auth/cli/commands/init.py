"""Init command for delegate-auth CLI.

Writes a configuration file with freshly generated secrets.
"""

from __future__ import annotations

__all__ = ["init"]

import sys

import click

from delegate_auth.config import DEFAULT_LOG_DIR, LoggingConfig, generate_default_config

from ..context import resolve_config_path
from ..styling import style_dim, style_error, style_label, style_success


@click.command()
@click.option("--log-dir", default=DEFAULT_LOG_DIR, show_default=True, help="Base log directory")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO"]),
    default="INFO",
    show_default=True,
    help="Logging level",
)
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing config")
@click.pass_context
def init(ctx: click.Context, log_dir: str, log_level: str, force: bool) -> None:
    """Create the configuration file.

    Generates a random session signing secret and admin API token.
    Delegate and user stores are created next to the config on first use.
    """
    config_path = resolve_config_path(ctx)

    if config_path.exists() and not force:
        click.echo(style_error(f"Config already exists at {config_path}"), err=True)
        click.echo("Use --force to overwrite (existing secrets will be replaced).", err=True)
        sys.exit(1)

    config = generate_default_config(logging=LoggingConfig(log_dir=log_dir, log_level=log_level))
    try:
        config.save_to_file(config_path)
    except OSError as e:
        click.echo(style_error(f"Could not write config: {e}"), err=True)
        sys.exit(1)

    click.echo(style_success(f"Configuration saved to {config_path}"))
    click.echo(style_label("Admin token") + f" {config.api.admin_token}")
    click.echo(style_dim("Send it as 'Authorization: Bearer <token>' to /api/* endpoints."))
