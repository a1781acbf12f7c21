"""FastAPI server for the delegate token exchange.

Implements:
- Token exchange (/auth/delegate/exchange) - delegate assertion -> session token
- Session introspection (/auth/session) - validate a minted session token
- Delegate management (/api/delegates) - register and inspect delegates
- Health (/health)

Security:
- Admin bearer token for /api/* endpoints (constant-time comparison)
- Request size limit and security response headers on every response
- Exchange failures collapse to a single 404; details go to the audit log

Usage:
    app = create_api_app(
        config,
        registry=InMemoryDelegateRegistry(),
        users=InMemoryUserDirectory([...]),
    )

    # Or, wired to the configured files (what `delegate-auth serve` runs):
    app = create_app_from_config(config, config_path)
"""

from __future__ import annotations

__all__ = [
    "create_api_app",
    "create_app_from_config",
]

from pathlib import Path
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from delegate_auth.assertions.verifier import AssertionVerifier
from delegate_auth.delegates.registry import FileDelegateRegistry
from delegate_auth.exchange.orchestrator import ExchangeOrchestrator
from delegate_auth.security.rate_limiter import create_rate_limiter
from delegate_auth.sessions.tokens import JWTSessionTokenIssuer
from delegate_auth.telemetry.audit.exchange_logger import create_exchange_audit_logger
from delegate_auth.users.directory import FileUserDirectory

from .errors import (
    APIError,
    api_error_handler,
    http_exception_handler,
    validation_error_handler,
)
from .routes import delegates, exchange, health
from .security import SecurityMiddleware

if TYPE_CHECKING:
    from delegate_auth.config import AppConfig
    from delegate_auth.delegates.registry import DelegateRegistry
    from delegate_auth.exchange.orchestrator import LoginHook
    from delegate_auth.telemetry.audit.exchange_logger import ExchangeAuditLogger
    from delegate_auth.users.directory import UserDirectory


def create_api_app(
    config: "AppConfig",
    *,
    registry: "DelegateRegistry",
    users: "UserDirectory",
    audit: "ExchangeAuditLogger | None" = None,
    on_login: "LoginHook | None" = None,
) -> FastAPI:
    """Create the FastAPI application with all routes.

    Args:
        config: Application configuration (session, api, assertion, exchange).
        registry: Delegate registry used for both exchange and management.
        users: Directory resolving vouched-for users.
        audit: Exchange audit logger. Defaults to one that logs through
            the standard logging hierarchy.
        on_login: Awaited with the user on every successful exchange.

    Returns:
        Configured FastAPI application.
    """
    from delegate_auth import __version__

    app = FastAPI(
        title="delegate-auth",
        description="Delegate token exchange API",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    timeout = config.exchange.collaborator_timeout_seconds
    issuer = JWTSessionTokenIssuer(config.session)
    audit = audit if audit is not None else create_exchange_audit_logger()
    verifier = AssertionVerifier(registry, config.assertion, lookup_timeout=timeout)

    app.state.config = config
    app.state.registry = registry
    app.state.session_issuer = issuer
    app.state.audit_logger = audit
    app.state.rate_limiter = create_rate_limiter(config.exchange.rate_limit)
    app.state.orchestrator = ExchangeOrchestrator(
        verifier,
        users,
        issuer,
        on_login=on_login,
        reporter=audit,
        timeout=timeout,
    )

    app.add_middleware(SecurityMiddleware, admin_token=config.api.admin_token)

    # Register exception handlers for structured error responses
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.include_router(exchange.router, prefix="/auth", tags=["exchange"])
    app.include_router(delegates.router, prefix="/api/delegates", tags=["delegates"])
    app.include_router(health.router, prefix="/health", tags=["health"])

    return app


def create_app_from_config(config: "AppConfig", config_path: Path) -> FastAPI:
    """Create the application backed by the configured JSON stores and log files.

    Args:
        config: Loaded application configuration.
        config_path: Where the config was loaded from; relative storage
            paths are resolved against its directory.

    Returns:
        Configured FastAPI application.
    """
    return create_api_app(
        config,
        registry=FileDelegateRegistry(config.delegates_path(config_path)),
        users=FileUserDirectory(config.users_path(config_path)),
        audit=create_exchange_audit_logger(config.exchange_log_path),
    )
