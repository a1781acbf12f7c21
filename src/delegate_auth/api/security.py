"""Security middleware and admin token handling for the API.

Controls applied to every request:
- Request size limit (413 above MAX_REQUEST_SIZE)
- Admin bearer token for /api/* management endpoints
- Security response headers

The exchange endpoint and /auth/session are deliberately outside /api/*:
delegates and end users call them without the admin token.
"""

from __future__ import annotations

__all__ = [
    "ADMIN_PATH_PREFIX",
    "SecurityMiddleware",
    "extract_bearer_token",
    "generate_token",
    "validate_token",
]

import hmac
import secrets

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from delegate_auth.api.errors import ErrorCode, error_response
from delegate_auth.constants import MAX_REQUEST_SIZE
from delegate_auth.telemetry.system.system_logger import get_system_logger

logger = get_system_logger()

# Paths that require the admin token
ADMIN_PATH_PREFIX = "/api/"


# =============================================================================
# Token Management
# =============================================================================


def generate_token() -> str:
    """Generate a secure random admin token.

    Returns:
        64-character hex string (32 bytes of randomness).
    """
    return secrets.token_hex(32)


def validate_token(provided: str, expected: str) -> bool:
    """Validate token using constant-time comparison.

    Args:
        provided: Token from request.
        expected: Expected token.

    Returns:
        True if tokens match, False otherwise.
    """
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def extract_bearer_token(request: Request) -> str | None:
    """Return the token from an 'Authorization: Bearer ...' header, if any."""
    auth_header: str = request.headers.get("authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


# =============================================================================
# Security Middleware
# =============================================================================


class SecurityMiddleware(BaseHTTPMiddleware):
    """Security middleware implementing the HTTP security controls.

    1. Request size limit
    2. Admin token authentication for /api/* endpoints
    3. Security response headers
    """

    def __init__(self, app: ASGIApp, admin_token: str | None = None) -> None:
        """Initialize middleware.

        Args:
            app: ASGI application.
            admin_token: Bearer token for /api/*. If None, management
                endpoints are refused outright.
        """
        super().__init__(app)
        self.admin_token = admin_token

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Reject oversized or unauthenticated requests, then add security headers."""
        response = self._check_size(request) or self._check_admin(request)
        if response is None:
            response = await call_next(request)
        _add_security_headers(response)
        return response

    def _check_size(self, request: Request) -> Response | None:
        content_length = request.headers.get("content-length")
        if not content_length:
            return None
        try:
            size = int(content_length)
        except ValueError:
            return error_response(400, ErrorCode.VALIDATION_ERROR, "Invalid content-length header")
        if size > MAX_REQUEST_SIZE:
            return error_response(413, ErrorCode.REQUEST_TOO_LARGE, "Request too large")
        return None

    def _check_admin(self, request: Request) -> Response | None:
        if not request.url.path.startswith(ADMIN_PATH_PREFIX):
            return None

        token = extract_bearer_token(request)
        if token is not None and self.admin_token and validate_token(token, self.admin_token):
            return None

        logger.warning(
            {
                "event": "unauthorized_request_rejected",
                "message": f"Rejected unauthorized request: {request.method} {request.url.path}",
                "component": "api_security",
                "details": {"method": request.method, "path": str(request.url.path)},
            }
        )
        return error_response(
            401, ErrorCode.AUTH_REQUIRED, "Unauthorized", headers={"WWW-Authenticate": "Bearer"}
        )


def _add_security_headers(response: Response) -> None:
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"
    # Session tokens travel in response bodies
    response.headers["Cache-Control"] = "no-store"
    response.headers["Referrer-Policy"] = "no-referrer"
