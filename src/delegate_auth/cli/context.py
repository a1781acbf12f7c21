"""Shared helpers for resolving and loading configuration in commands."""

from __future__ import annotations

__all__ = [
    "load_config_or_exit",
    "resolve_config_path",
]

import sys
from pathlib import Path

import click

from delegate_auth.config import AppConfig, get_config_path
from delegate_auth.exceptions import ConfigurationError

from .styling import style_error


def resolve_config_path(ctx: click.Context) -> Path:
    """Config path chosen by the group's --config option (or its defaults)."""
    obj = ctx.find_root().obj or {}
    return get_config_path(obj.get("config_path"))


def load_config_or_exit(ctx: click.Context) -> tuple[AppConfig, Path]:
    """Load the configuration, exiting with status 1 if it is missing or invalid.

    Returns:
        Tuple of (config, config_path).
    """
    config_path = resolve_config_path(ctx)
    try:
        return AppConfig.load_from_file(config_path), config_path
    except ConfigurationError as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)
