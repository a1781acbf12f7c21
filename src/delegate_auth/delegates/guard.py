"""Pre-persistence checks for new delegate records.

The registration guard is the only place a delegate's uuid is assigned or
rewritten. Registries call it inside their write lock, so a record that
fails validation is never stored.
"""

from __future__ import annotations

__all__ = [
    "apply_registration_guard",
    "validate_public_key",
]

from typing import Any

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from cryptography.hazmat.primitives.serialization import load_pem_public_key

from delegate_auth.delegates.identifiers import canonicalize_uuid
from delegate_auth.exceptions import ValidationError

# Minimum RSA modulus accepted for delegate keys
MIN_RSA_KEY_SIZE = 2048


def validate_public_key(public_key: Any) -> str:
    """Check that *public_key* is a PEM encoded RSA public key usable for RS256.

    Args:
        public_key: Value of the public_key field.

    Returns:
        The key, unchanged.

    Raises:
        ValidationError: If the key is missing, unparseable, not RSA or too short.
    """
    if not isinstance(public_key, str) or not public_key.strip():
        raise ValidationError("Public key must be a non-empty PEM encoded string.")

    try:
        key = load_pem_public_key(public_key.encode("utf-8"))
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise ValidationError("Public key must be a PEM encoded public key.") from e

    if not isinstance(key, RSAPublicKey):
        raise ValidationError("Public key must be an RSA key (assertions are verified with RS256).")
    if key.key_size < MIN_RSA_KEY_SIZE:
        raise ValidationError(f"RSA public key must be at least {MIN_RSA_KEY_SIZE} bits.")

    return public_key


def apply_registration_guard(values: dict[str, Any]) -> dict[str, Any]:
    """Validate and normalize the values of a delegate about to be created.

    Rewrites ``values["uuid"]`` to the hyphen-stripped stored form (a new
    version 4 UUID is generated if none was supplied) and checks
    ``values["public_key"]``. The mapping is modified in place.

    Args:
        values: Incoming field values ("uuid" optional, "public_key" required).

    Returns:
        The same mapping, for chaining.

    Raises:
        ValidationError: If the uuid or public key is invalid.
    """
    values["uuid"] = canonicalize_uuid(values.get("uuid"))
    values["public_key"] = validate_public_key(values.get("public_key"))
    return values
