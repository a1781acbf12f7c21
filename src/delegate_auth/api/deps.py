"""Shared dependencies for API routes.

FastAPI convention: deps.py contains reusable request dependencies.
All route files should import dependencies from here rather than
defining their own helper functions.

Usage with Annotated:
    from delegate_auth.api.deps import OrchestratorDep

    @router.post("/exchange")
    async def exchange(body: ExchangeRequest, orchestrator: OrchestratorDep) -> ...:
        ...
"""

from __future__ import annotations

__all__ = [
    # Dependency functions
    "get_client_id",
    "get_orchestrator",
    "get_rate_limiter",
    "get_registry",
    "get_session_issuer",
    # Type aliases for Annotated pattern
    "ClientIdDep",
    "OrchestratorDep",
    "RateLimiterDep",
    "RegistryDep",
    "SessionIssuerDep",
]

from typing import TYPE_CHECKING, Annotated, Any, Callable

from fastapi import Depends, HTTPException, Request

if TYPE_CHECKING:
    from delegate_auth.delegates.registry import DelegateRegistry
    from delegate_auth.exchange.orchestrator import ExchangeOrchestrator
    from delegate_auth.security.rate_limiter import ExchangeRateLimiter
    from delegate_auth.sessions.tokens import JWTSessionTokenIssuer


# =============================================================================
# Factory for State Getters
# =============================================================================


def _create_state_getter(
    attr_name: str,
    type_hint: str,
    error_detail: str,
) -> Callable[[Request], Any]:
    """Create a dependency function that retrieves a value from app.state.

    Args:
        attr_name: Attribute name on app.state (e.g., "registry").
        type_hint: Type name for the generated docstring.
        error_detail: Error message for HTTPException.

    Returns:
        A dependency function compatible with FastAPI's Depends().
    """

    def getter(request: Request) -> Any:
        value = getattr(request.app.state, attr_name, None)
        if value is None:
            raise HTTPException(status_code=503, detail=error_detail)
        return value

    getter.__name__ = f"get_{attr_name}"
    getter.__doc__ = f"Get {type_hint} from app.state.\n\nRaises HTTPException 503 if not available."
    return getter


# =============================================================================
# Dependency Functions
# =============================================================================

get_registry: Callable[[Request], "DelegateRegistry"] = _create_state_getter(
    "registry",
    "DelegateRegistry",
    "Delegate registry not available.",
)

get_orchestrator: Callable[[Request], "ExchangeOrchestrator"] = _create_state_getter(
    "orchestrator",
    "ExchangeOrchestrator",
    "Exchange not available.",
)

get_session_issuer: Callable[[Request], "JWTSessionTokenIssuer"] = _create_state_getter(
    "session_issuer",
    "JWTSessionTokenIssuer",
    "Session validation not available.",
)


def get_rate_limiter(request: Request) -> "ExchangeRateLimiter | None":
    """Get the exchange rate limiter, or None when rate limiting is disabled."""
    limiter: ExchangeRateLimiter | None = getattr(request.app.state, "rate_limiter", None)
    return limiter


def get_client_id(request: Request) -> str:
    """Identify the caller for rate limiting and audit (remote address)."""
    if request.client is None:
        return "unknown"
    return request.client.host


# =============================================================================
# Type Aliases for Annotated Pattern
# =============================================================================

RegistryDep = Annotated["DelegateRegistry", Depends(get_registry)]
OrchestratorDep = Annotated["ExchangeOrchestrator", Depends(get_orchestrator)]
SessionIssuerDep = Annotated["JWTSessionTokenIssuer", Depends(get_session_issuer)]
RateLimiterDep = Annotated["ExchangeRateLimiter | None", Depends(get_rate_limiter)]
ClientIdDep = Annotated[str, Depends(get_client_id)]
