"""Assertion command group for delegate-auth CLI.

Delegate-side tooling: sign an assertion with the delegate's private key,
for testing an integration end to end.
"""

from __future__ import annotations

__all__ = ["assertion"]

import sys
from pathlib import Path

import click

from delegate_auth.assertions.signer import load_private_key, sign_assertion
from delegate_auth.constants import DEFAULT_ASSERTION_TTL_SECONDS

from ..styling import style_error


@click.group()
def assertion() -> None:
    """Delegate assertion tooling."""
    pass


@assertion.command("sign")
@click.option(
    "--private-key-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Delegate's PEM encoded RSA private key (unencrypted)",
)
@click.option("--delegate-uuid", required=True, help="The delegate's registered uuid")
@click.option("--user-id", required=True, help="User to vouch for")
@click.option(
    "--ttl",
    type=click.IntRange(min=1),
    default=DEFAULT_ASSERTION_TTL_SECONDS,
    show_default=True,
    help="Lifetime in seconds (sets iat and exp)",
)
def assertion_sign(private_key_file: Path, delegate_uuid: str, user_id: str, ttl: int) -> None:
    """Print a signed assertion to stdout."""
    try:
        private_key = load_private_key(private_key_file)
    except (OSError, ValueError, TypeError) as e:
        click.echo(style_error(f"Cannot load private key: {e}"), err=True)
        sys.exit(1)

    click.echo(sign_assertion(private_key, delegate_uuid, user_id, ttl_seconds=ttl))
