"""Serve command for delegate-auth CLI.

Runs the exchange API with uvicorn.
"""

from __future__ import annotations

__all__ = ["serve"]

import click
import uvicorn

from delegate_auth import __version__
from delegate_auth.api.server import create_app_from_config
from delegate_auth.telemetry.system.system_logger import (
    configure_system_logger_file,
    get_system_logger,
)

from ..context import load_config_or_exit


@click.command()
@click.option("--host", default=None, help="Bind address (overrides config)")
@click.option("--port", type=click.IntRange(1, 65535), default=None, help="Port (overrides config)")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Start the exchange API server."""
    config, config_path = load_config_or_exit(ctx)

    configure_system_logger_file(config.system_log_path)
    logger = get_system_logger()

    bind_host = host or config.api.host
    bind_port = port or config.api.port

    app = create_app_from_config(config, config_path)

    logger.info(
        {
            "event": "server_starting",
            "message": f"delegate-auth v{__version__} listening on {bind_host}:{bind_port}",
            "component": "cli",
            "details": {"config_path": str(config_path)},
        }
    )
    uvicorn.run(
        app,
        host=bind_host,
        port=bind_port,
        log_level=config.logging.log_level.lower(),
    )
