"""Users command group for delegate-auth CLI.

Maintains the user store that exchanged assertions are resolved against.
"""

from __future__ import annotations

__all__ = ["users"]

import json
import sys

import click

from delegate_auth.exceptions import DownstreamFailure, ValidationError
from delegate_auth.users.directory import FileUserDirectory, User

from ..context import load_config_or_exit
from ..styling import style_dim, style_error, style_label, style_success


def _open_directory(ctx: click.Context) -> FileUserDirectory:
    config, config_path = load_config_or_exit(ctx)
    return FileUserDirectory(config.users_path(config_path))


@click.group()
def users() -> None:
    """User management commands."""
    pass


@users.command("add")
@click.option("--id", "user_id", required=True, help="Stable user id")
@click.option("--username", required=True, help="Login name")
@click.option("--email", default=None, help="E-mail address")
@click.pass_context
def users_add(ctx: click.Context, user_id: str, username: str, email: str | None) -> None:
    """Add a user delegates may vouch for."""
    directory = _open_directory(ctx)
    try:
        directory.add(User(id=user_id, username=username, email=email))
    except (ValidationError, DownstreamFailure) as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    click.echo(style_success(f"User added: {user_id}"))


@users.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def users_list(ctx: click.Context, as_json: bool) -> None:
    """List users."""
    directory = _open_directory(ctx)
    try:
        records = directory.load()
    except DownstreamFailure as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([u.model_dump() for u in records], indent=2))
        return

    if not records:
        click.echo(style_dim("No users."))
        return

    click.echo("\n" + style_label("Users") + f" {len(records)}\n")
    for user in records:
        email = f" <{user.email}>" if user.email else ""
        click.echo(f"  {user.id}  {user.username}{email}")
