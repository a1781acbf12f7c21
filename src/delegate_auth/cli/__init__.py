"""Command-line interface for delegate-auth.

Provides commands for initializing configuration, running the exchange
server, managing delegates and users, and signing test assertions.
"""

from .main import cli, main

__all__ = ["cli", "main"]
