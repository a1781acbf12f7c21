"""Delegate assertion verification.

Turns a delegate-signed JWT into a trusted user id using a strict two-pass
decode:

1. Decode WITHOUT verifying the signature, only to learn which delegate
   claims to have signed it.
2. Require both the delegateUuid and userId claims.
3. Resolve that delegate's public key from the registry.
4. Decode again, verifying the signature (RS256 only), exp and nbf.
5. Read userId from the verified payload. Nothing from step 1 is trusted.

Each failing step raises its own AssertionRejected subclass so the audit log
can say why; callers at the trust boundary must not reveal which one.
"""

from __future__ import annotations

__all__ = [
    "AssertionVerifier",
    "VerifiedAssertion",
]

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import jwt

from delegate_auth.constants import ASSERTION_ALGORITHM, DELEGATE_UUID_CLAIM, USER_ID_CLAIM
from delegate_auth.exceptions import (
    DownstreamFailure,
    IncompleteAssertion,
    InvalidSignature,
    MalformedAssertion,
    UnknownDelegate,
    UntrustedAssertion,
)

if TYPE_CHECKING:
    from delegate_auth.config import AssertionConfig
    from delegate_auth.delegates.registry import DelegateRegistry


@dataclass(frozen=True)
class VerifiedAssertion:
    """Result of successful assertion verification.

    Attributes:
        user_id: The trusted userId claim, as a string.
        delegate_uuid: The delegate whose key verified the signature.
        claims: All verified claims.
    """

    user_id: str
    delegate_uuid: str
    claims: dict[str, Any] = field(default_factory=dict, repr=False)


class AssertionVerifier:
    """Verifies delegate assertions against registry-resolved public keys.

    Usage:
        verifier = AssertionVerifier(registry, config.assertion)
        user_id = await verifier.verify(token)
    """

    def __init__(
        self,
        registry: "DelegateRegistry",
        config: "AssertionConfig | None" = None,
        *,
        lookup_timeout: float | None = None,
    ) -> None:
        """Initialize verifier.

        Args:
            registry: Source of delegate public keys.
            config: Verification settings (leeway, expiry requirement).
                Defaults to AssertionConfig().
            lookup_timeout: Seconds to wait for the registry before giving up.
                None waits indefinitely.
        """
        if config is None:
            from delegate_auth.config import AssertionConfig

            config = AssertionConfig()

        self._registry = registry
        self._leeway = config.leeway_seconds
        self._require_expiry = config.require_expiry
        self._lookup_timeout = lookup_timeout

    async def verify(self, token: str) -> str:
        """Verify *token* and return the user id it vouches for.

        Args:
            token: Delegate-signed JWT.

        Returns:
            The trusted user id.

        Raises:
            MalformedAssertion: Not a decodable JWT.
            IncompleteAssertion: delegateUuid or userId missing.
            UnknownDelegate: No delegate registered under the claimed uuid.
            InvalidSignature: Bad signature, wrong algorithm, expired or not yet valid.
            UntrustedAssertion: Verified payload has no usable userId.
            DownstreamFailure: Registry unavailable or timed out.
        """
        result = await self.verify_assertion(token)
        return result.user_id

    async def verify_assertion(self, token: str) -> VerifiedAssertion:
        """Verify *token* and return the user id together with the verified claims.

        See verify() for the errors raised.
        """
        unverified = self._decode_unverified(token)

        delegate_uuid = unverified.get(DELEGATE_UUID_CLAIM)
        if delegate_uuid is None or unverified.get(USER_ID_CLAIM) is None:
            raise IncompleteAssertion("Token does not contain valid data")
        if not isinstance(delegate_uuid, str):
            raise IncompleteAssertion(f"Claim '{DELEGATE_UUID_CLAIM}' must be a string")

        public_key = await self._resolve_public_key(delegate_uuid)

        # Signature checks are CPU-bound; keep them off the event loop
        claims = await asyncio.to_thread(self._decode_verified, token, public_key)

        user_id = claims.get(USER_ID_CLAIM)
        if not user_id:
            raise UntrustedAssertion("Token is not trusted")

        return VerifiedAssertion(user_id=str(user_id), delegate_uuid=delegate_uuid, claims=claims)

    def _decode_unverified(self, token: str) -> dict[str, Any]:
        """First pass: read the claimed delegate without trusting anything.

        Raises:
            MalformedAssertion: If the token is not a JWT with an object payload.
        """
        if not isinstance(token, str) or not token:
            raise MalformedAssertion("Token is not a valid JWT")
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
        except jwt.PyJWTError as e:
            raise MalformedAssertion(f"Token is not a valid JWT: {e}") from e

        if not isinstance(claims, dict):
            raise MalformedAssertion("Token is not a valid JWT")
        return claims

    async def _resolve_public_key(self, delegate_uuid: str) -> str:
        """Fetch the claimed delegate's registered public key.

        Raises:
            UnknownDelegate: If no key is registered.
            DownstreamFailure: If the registry fails or times out.
        """
        try:
            public_key = await asyncio.wait_for(
                self._registry.get_public_key(delegate_uuid),
                timeout=self._lookup_timeout,
            )
        except asyncio.TimeoutError as e:
            raise DownstreamFailure(
                f"Delegate registry did not answer within {self._lookup_timeout}s"
            ) from e

        if not public_key:
            raise UnknownDelegate(delegate_uuid)
        return public_key

    def _decode_verified(self, token: str, public_key: str) -> dict[str, Any]:
        """Second pass: verify signature and validity window.

        Raises:
            InvalidSignature: On any verification failure.
        """
        required = ["exp"] if self._require_expiry else []
        try:
            return jwt.decode(
                token,
                public_key,
                algorithms=[ASSERTION_ALGORITHM],
                leeway=self._leeway,
                options={
                    "require": required,
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_nbf": True,
                    "verify_iat": True,
                    "verify_aud": False,
                    "verify_iss": False,
                },
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidSignature("Token has expired") from e
        except jwt.ImmatureSignatureError as e:
            raise InvalidSignature("Token is not yet valid") from e
        except jwt.InvalidAlgorithmError as e:
            raise InvalidSignature(f"Token algorithm is not allowed: {e}") from e
        except jwt.InvalidSignatureError as e:
            raise InvalidSignature("Token signature is invalid") from e
        except jwt.PyJWTError as e:
            raise InvalidSignature(f"Token validation error: {e}") from e
        except (ValueError, TypeError) as e:
            # Registered key could not be loaded by the RSA backend
            raise InvalidSignature(f"Delegate key cannot verify token: {e}") from e
