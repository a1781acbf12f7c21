"""HTTP API: token exchange, session introspection and delegate management."""

from delegate_auth.api.server import create_api_app, create_app_from_config

__all__ = [
    "create_api_app",
    "create_app_from_config",
]
