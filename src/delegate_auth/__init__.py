"""delegate-auth: exchange delegate-signed assertions for session tokens."""

__version__ = "0.1.0"

__all__ = ["__version__"]
