"""Terminal styling for delegate-auth CLI output.

Errors go to stderr in red with a cross, successes in green with a check,
headers and labels in bold cyan. Colors are dropped automatically by click
when output is not a terminal.
"""

from __future__ import annotations

__all__ = [
    "style_dim",
    "style_error",
    "style_header",
    "style_label",
    "style_success",
]

import click

_ACCENT = {"fg": "cyan", "bold": True}


def style_header(title: str) -> str:
    """``--- Delegate ---`` style section header."""
    return click.style(f"--- {title} ---", **_ACCENT)


def style_label(label: str) -> str:
    """``Delegates:`` style label preceding a count or value."""
    return click.style(label + ":", **_ACCENT)


def style_success(message: str) -> str:
    return click.style("✓ " + message, fg="green")


def style_error(message: str) -> str:
    return click.style("✗ " + message, fg="red")


def style_dim(message: str) -> str:
    """Empty states and hints."""
    return click.style(message, dim=True)
