"""Delegate-side assertion signing.

Delegates sign assertions with their own private key; the platform never
holds it. This helper exists for delegate tooling (the `assertion sign`
command) and tests.
"""

from __future__ import annotations

__all__ = [
    "load_private_key",
    "sign_assertion",
]

import time
from pathlib import Path
from typing import Any

import jwt
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from cryptography.hazmat.primitives.serialization import load_pem_private_key

from delegate_auth.constants import ASSERTION_ALGORITHM, DELEGATE_UUID_CLAIM, USER_ID_CLAIM


def load_private_key(path: Path) -> RSAPrivateKey:
    """Load an unencrypted PEM RSA private key from *path*.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not an RSA private key.
    """
    key = load_pem_private_key(path.read_bytes(), password=None)
    if not isinstance(key, RSAPrivateKey):
        raise ValueError(f"{path} does not contain an RSA private key")
    return key


def sign_assertion(
    private_key: RSAPrivateKey | str | bytes,
    delegate_uuid: str,
    user_id: str | int,
    *,
    ttl_seconds: int | None = None,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """Sign an RS256 assertion vouching for *user_id*.

    Args:
        private_key: Delegate's RSA private key (object or PEM).
        delegate_uuid: The delegate's registered uuid.
        user_id: User the delegate vouches for.
        ttl_seconds: If set, adds iat and exp claims.
        extra_claims: Additional claims merged into the payload.

    Returns:
        Encoded JWT.
    """
    payload: dict[str, Any] = dict(extra_claims or {})
    payload[DELEGATE_UUID_CLAIM] = delegate_uuid
    payload[USER_ID_CLAIM] = user_id
    if ttl_seconds is not None:
        now = int(time.time())
        payload["iat"] = now
        payload["exp"] = now + ttl_seconds
    return jwt.encode(payload, private_key, algorithm=ASSERTION_ALGORITHM)
