"""First-party session tokens."""

from delegate_auth.sessions.tokens import JWTSessionTokenIssuer, SessionClaims, SessionTokenIssuer

__all__ = [
    "JWTSessionTokenIssuer",
    "SessionClaims",
    "SessionTokenIssuer",
]
