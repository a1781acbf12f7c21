"""Main CLI entry point for delegate-auth.

Defines the CLI group and registers all subcommands.

Commands:
    assertion - Delegate-side tooling (sign)
    delegates - Delegate management (add, list, show)
    init      - Create the configuration file
    serve     - Run the exchange API server
    users     - User management (add, list)

Subcommand help:
    delegate-auth COMMAND -h         Show help for a specific command
"""

from __future__ import annotations

__all__ = ["cli", "main"]

import sys
from pathlib import Path

import click

from delegate_auth import __version__

from .commands.assertion import assertion
from .commands.delegates import delegates
from .commands.init import init
from .commands.serve import serve
from .commands.users import users


class ReorderedGroup(click.Group):
    """Custom group that shows commands before custom help text."""

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """Add extra help after commands section."""
        formatter.write(
            """
Quick Start:
  delegate-auth init                                   Create config and secrets
  delegate-auth users add --id 42 --username alice     Add a user
  delegate-auth delegates add --public-key-file key.pub
  delegate-auth serve                                  Start the API

Delegate Testing:
  delegate-auth assertion sign --private-key-file key.pem \\
    --delegate-uuid <uuid> --user-id 42
  curl -X POST http://127.0.0.1:8780/auth/delegate/exchange \\
    -H 'Content-Type: application/json' -d '{"token": "<assertion>"}'

Config location (first match wins):
  --config PATH, $DELEGATE_AUTH_CONFIG, then the OS application directory
"""
        )


@click.group(
    cls=ReorderedGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.json",
)
@click.pass_context
def cli(ctx: click.Context, version: bool, config_path: Path | None) -> None:
    """delegate-auth: exchange delegate assertions for session tokens."""
    if version:
        click.echo(f"delegate-auth {__version__}")
        sys.exit(0)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Register commands
cli.add_command(assertion)
cli.add_command(delegates)
cli.add_command(init)
cli.add_command(serve)
cli.add_command(users)


def main() -> None:
    """CLI entry point."""
    cli()
