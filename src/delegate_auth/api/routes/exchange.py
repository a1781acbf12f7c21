"""Delegate token exchange endpoints.

Routes mounted at: /auth
- POST /auth/delegate/exchange: assertion in, session token out
- GET /auth/session: describe the session token in the Authorization header

Every exchange failure returns the same 404 body. Only rate limiting is
distinguishable (429), and it says nothing about the assertion.
"""

from __future__ import annotations

__all__ = ["router"]

import jwt
from fastapi import APIRouter, Request

from delegate_auth.api.deps import ClientIdDep, OrchestratorDep, RateLimiterDep, SessionIssuerDep
from delegate_auth.api.errors import APIError, ErrorCode, exchange_not_found
from delegate_auth.api.schemas import ExchangeRequest, ExchangeResponse, SessionInfoResponse
from delegate_auth.api.security import extract_bearer_token
from delegate_auth.exceptions import ExchangeFailed
from delegate_auth.telemetry.system.system_logger import get_system_logger

router = APIRouter()

logger = get_system_logger()


@router.post("/delegate/exchange", response_model=ExchangeResponse)
async def exchange_token(
    body: ExchangeRequest,
    orchestrator: OrchestratorDep,
    limiter: RateLimiterDep,
    client_id: ClientIdDep,
) -> ExchangeResponse:
    """Exchange a delegate-signed assertion for a session token.

    Args:
        body: Request body holding the assertion.
        orchestrator: Exchange orchestrator (injected).
        limiter: Attempt limiter, None if disabled (injected).
        client_id: Caller address (injected).

    Returns:
        ExchangeResponse with a freshly minted session token.

    Raises:
        APIError: 404 NOT_FOUND on any exchange failure.
        APIError: 429 RATE_LIMITED if the caller made too many attempts.
    """
    reset_rate_limit = None
    if limiter is not None:
        allowed, count = limiter.check(client_id)
        if not allowed:
            logger.warning(
                {
                    "event": "exchange_rate_limited",
                    "message": f"Too many exchange attempts from {client_id}",
                    "component": "exchange",
                    "details": {"client": client_id, "attempts": count},
                }
            )
            raise APIError(
                status_code=429,
                code=ErrorCode.RATE_LIMITED,
                message="Too many exchange attempts",
                headers={"Retry-After": str(int(limiter.window_seconds))},
            )

        async def reset_rate_limit() -> None:
            limiter.reset(client_id)

    try:
        session_token = await orchestrator.exchange(
            body.token,
            reset_rate_limit=reset_rate_limit,
            client=client_id,
        )
    except ExchangeFailed:
        raise exchange_not_found() from None

    return ExchangeResponse(session_token=session_token)


@router.get("/session", response_model=SessionInfoResponse)
async def get_session(request: Request, issuer: SessionIssuerDep) -> SessionInfoResponse:
    """Describe the session token presented as a bearer token.

    Raises:
        APIError: 401 AUTH_REQUIRED if the token is missing, invalid or expired.
    """
    token = extract_bearer_token(request)
    if token is None:
        raise APIError(
            status_code=401,
            code=ErrorCode.AUTH_REQUIRED,
            message="Session token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        claims = issuer.validate(token)
    except jwt.PyJWTError:
        raise APIError(
            status_code=401,
            code=ErrorCode.AUTH_REQUIRED,
            message="Session token is invalid or expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    return SessionInfoResponse(user_id=claims.user_id, expires_at=claims.expires_at)
