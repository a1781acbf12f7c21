"""Delegates command group for delegate-auth CLI.

Registers and inspects delegates in the configured delegate store. Works
without a running server; a running server picks up changes on its next
lookup.
"""

from __future__ import annotations

__all__ = ["delegates"]

import asyncio
import json
import sys
from pathlib import Path

import click

from delegate_auth.delegates.registry import DelegateRecord, FileDelegateRegistry
from delegate_auth.exceptions import (
    DelegateAlreadyRegisteredError,
    DownstreamFailure,
    ValidationError,
)

from ..context import load_config_or_exit
from ..styling import style_dim, style_error, style_header, style_label, style_success


def _open_registry(ctx: click.Context) -> FileDelegateRegistry:
    config, config_path = load_config_or_exit(ctx)
    return FileDelegateRegistry(config.delegates_path(config_path))


def _echo_record(record: DelegateRecord, *, show_key: bool) -> None:
    click.echo(f"  {record.uuid}")
    click.echo(f"    Canonical: {record.canonical_uuid}")
    click.echo(f"    Created: {record.created_at.strftime('%Y-%m-%d %H:%M:%S')}")
    if show_key:
        click.echo()
        click.echo(record.public_key.rstrip())


@click.group()
def delegates() -> None:
    """Delegate management commands."""
    pass


@delegates.command("add")
@click.option(
    "--public-key-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="PEM encoded RSA public key of the delegate",
)
@click.option("--uuid", "delegate_uuid", default=None, help="Delegate uuid (generated if omitted)")
@click.pass_context
def delegates_add(ctx: click.Context, public_key_file: Path, delegate_uuid: str | None) -> None:
    """Register a delegate."""
    registry = _open_registry(ctx)
    public_key = public_key_file.read_text(encoding="utf-8")

    try:
        record = asyncio.run(registry.create({"uuid": delegate_uuid, "public_key": public_key}))
    except (ValidationError, DelegateAlreadyRegisteredError, DownstreamFailure) as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    click.echo(style_success(f"Delegate registered: {record.uuid}"))


@delegates.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def delegates_list(ctx: click.Context, as_json: bool) -> None:
    """List registered delegates."""
    registry = _open_registry(ctx)
    try:
        records = asyncio.run(registry.list_all())
    except DownstreamFailure as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([r.model_dump(mode="json") for r in records], indent=2))
        return

    if not records:
        click.echo(style_dim("No delegates registered."))
        return

    click.echo("\n" + style_label("Delegates") + f" {len(records)}\n")
    for record in records:
        _echo_record(record, show_key=False)
        click.echo()


@delegates.command("show")
@click.argument("uuid")
@click.pass_context
def delegates_show(ctx: click.Context, uuid: str) -> None:
    """Show a delegate and its public key."""
    registry = _open_registry(ctx)
    try:
        record = asyncio.run(registry.get(uuid))
    except DownstreamFailure as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    if record is None:
        click.echo(style_error(f"Delegate '{uuid}' not found"), err=True)
        sys.exit(1)

    click.echo(style_header("Delegate"))
    _echo_record(record, show_key=True)
