"""API route modules."""

from delegate_auth.api.routes import delegates, exchange, health

__all__ = [
    "delegates",
    "exchange",
    "health",
]
