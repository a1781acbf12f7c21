"""Session token issuance.

Once a delegate's assertion has been verified, the platform mints a
first-party session token for the user. The exchange flow treats the token
as opaque; the default issuer produces an HS256 JWT:

    {"sub": <user id>, "jti": <random>, "iat": ..., "exp": ..., "iss": "delegate-auth"}

Every call to mint() yields a different token (fresh jti), so repeating an
exchange never hands out the same token twice.
"""

from __future__ import annotations

__all__ = [
    "JWTSessionTokenIssuer",
    "SessionClaims",
    "SessionTokenIssuer",
]

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import jwt

from delegate_auth.constants import SESSION_TOKEN_ALGORITHM

if TYPE_CHECKING:
    from delegate_auth.config import SessionConfig


@runtime_checkable
class SessionTokenIssuer(Protocol):
    """Mints session tokens for trusted user ids."""

    async def mint(self, user_id: str) -> str:
        """Return a new session token for *user_id*.

        Raises:
            DownstreamFailure: If the token cannot be issued.
        """
        ...


@dataclass(frozen=True)
class SessionClaims:
    """Validated contents of a session token.

    Attributes:
        user_id: The 'sub' claim.
        token_id: The 'jti' claim.
        issued_at: The 'iat' claim.
        expires_at: The 'exp' claim.
    """

    user_id: str
    token_id: str
    issued_at: datetime
    expires_at: datetime


class JWTSessionTokenIssuer:
    """Issues and validates HS256 session tokens.

    Usage:
        issuer = JWTSessionTokenIssuer(config.session)
        token = await issuer.mint(user.id)
        claims = issuer.validate(token)
    """

    # jti entropy (256 bits via secrets.token_urlsafe)
    TOKEN_ID_BYTES = 32

    def __init__(self, config: "SessionConfig") -> None:
        """Initialize issuer.

        Args:
            config: Session settings (secret, ttl, issuer).
        """
        self._secret = config.secret
        self._ttl = timedelta(seconds=config.ttl_seconds)
        self._issuer = config.issuer

    def issue(self, user_id: str) -> str:
        """Mint a token synchronously."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "jti": secrets.token_urlsafe(self.TOKEN_ID_BYTES),
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttl).timestamp()),
            "iss": self._issuer,
        }
        return jwt.encode(payload, self._secret, algorithm=SESSION_TOKEN_ALGORITHM)

    async def mint(self, user_id: str) -> str:
        return self.issue(user_id)

    def validate(self, token: str) -> SessionClaims:
        """Validate a session token minted by this issuer.

        Args:
            token: Session token string.

        Returns:
            SessionClaims extracted from the verified token.

        Raises:
            jwt.PyJWTError: If the token is invalid, expired or from another issuer.
        """
        claims = jwt.decode(
            token,
            self._secret,
            algorithms=[SESSION_TOKEN_ALGORITHM],
            issuer=self._issuer,
            options={"require": ["sub", "jti", "iat", "exp", "iss"]},
        )
        return SessionClaims(
            user_id=str(claims["sub"]),
            token_id=str(claims["jti"]),
            issued_at=datetime.fromtimestamp(claims["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )
