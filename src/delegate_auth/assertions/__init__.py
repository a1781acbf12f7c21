"""Delegate assertions: signing (delegate side) and verification (platform side)."""

from delegate_auth.assertions.signer import load_private_key, sign_assertion
from delegate_auth.assertions.verifier import AssertionVerifier, VerifiedAssertion

__all__ = [
    "AssertionVerifier",
    "VerifiedAssertion",
    "load_private_key",
    "sign_assertion",
]
