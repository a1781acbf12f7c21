"""Delegate identity: uuid canonicalization, registration guard and registry."""

from delegate_auth.delegates.guard import apply_registration_guard, validate_public_key
from delegate_auth.delegates.identifiers import (
    canonicalize_uuid,
    is_valid_uuid_v4,
    strip_uuid,
    to_canonical_uuid,
)
from delegate_auth.delegates.registry import (
    DelegateRecord,
    DelegateRegistry,
    FileDelegateRegistry,
    InMemoryDelegateRegistry,
)

__all__ = [
    "DelegateRecord",
    "DelegateRegistry",
    "FileDelegateRegistry",
    "InMemoryDelegateRegistry",
    "apply_registration_guard",
    "canonicalize_uuid",
    "is_valid_uuid_v4",
    "strip_uuid",
    "to_canonical_uuid",
    "validate_public_key",
]
