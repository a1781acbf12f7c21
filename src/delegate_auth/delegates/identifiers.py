"""Delegate identifier canonicalization.

Delegates are stored under the hyphen-stripped, 32 character form of a
lower case version 4 UUID. The hyphenated form (8-4-4-4-12) is rebuilt on
demand for validation only.

    >>> canonicalize_uuid("0f8fad5b-d9cb-469f-a165-70867728950e")
    '0f8fad5bd9cb469fa16570867728950e'
    >>> to_canonical_uuid("0f8fad5bd9cb469fa16570867728950e")
    '0f8fad5b-d9cb-469f-a165-70867728950e'
"""

from __future__ import annotations

__all__ = [
    "canonicalize_uuid",
    "is_valid_uuid_v4",
    "strip_uuid",
    "to_canonical_uuid",
]

import uuid

from delegate_auth.constants import UUID_GROUP_LENGTHS, UUID_HEX_LENGTH, UUID_VALIDATION_MESSAGE
from delegate_auth.exceptions import ValidationError


def strip_uuid(value: str) -> str:
    """Remove every hyphen from *value*."""
    return value.replace("-", "")


def to_canonical_uuid(stripped: str) -> str:
    """Re-insert hyphens at the 8-4-4-4-12 offsets.

    Args:
        stripped: Hyphen-free candidate.

    Returns:
        The hyphenated form, or "" if *stripped* is not exactly 32 characters.
    """
    if len(stripped) != UUID_HEX_LENGTH:
        return ""

    parts: list[str] = []
    offset = 0
    for length in UUID_GROUP_LENGTHS:
        parts.append(stripped[offset : offset + length])
        offset += length
    return "-".join(parts)


def is_valid_uuid_v4(canonical: str) -> bool:
    """Check that *canonical* is a lower case, hyphenated RFC 4122 version 4 UUID.

    Args:
        canonical: Candidate in 8-4-4-4-12 form.

    Returns:
        True if valid, False otherwise. Never raises.
    """
    if not canonical:
        return False

    try:
        parsed = uuid.UUID(canonical)
    except ValueError:
        return False

    # uuid.UUID() also accepts braces, urn: prefixes and upper case
    if str(parsed) != canonical:
        return False

    return parsed.variant == uuid.RFC_4122 and parsed.version == 4


def canonicalize_uuid(value: str | None) -> str:
    """Produce the stored form of a delegate uuid.

    A missing value is replaced by a freshly generated version 4 UUID.
    Hyphens are stripped from whatever value results, and the reconstituted
    hyphenated form must be a valid lower case UUID version 4.

    Args:
        value: Client-supplied uuid, hyphenated or stripped, or None.

    Returns:
        The 32 character hyphen-free form.

    Raises:
        ValidationError: If the value is not a lower case UUID version 4.
    """
    if value is None:
        value = str(uuid.uuid4())
    elif not isinstance(value, str):
        raise ValidationError(UUID_VALIDATION_MESSAGE)

    stripped = strip_uuid(value)
    if not is_valid_uuid_v4(to_canonical_uuid(stripped)):
        raise ValidationError(UUID_VALIDATION_MESSAGE)
    return stripped
