"""Custom exceptions for delegate-auth.

This module contains all custom exceptions used throughout the package.
Exceptions are organized into three categories:

Registration Errors (surfaced to the caller with their message):
    - ValidationError: Delegate uuid or public key is malformed
    - DelegateAlreadyRegisteredError: A delegate with that uuid exists

Exchange Errors (logged server-side, never shown to the caller):
    - AssertionRejected: Base for assertion verification failures
    - UserNotFound: The vouched-for user does not exist
    - DownstreamFailure: Registry, user store or token issuer unavailable
    - ExchangeFailed: The single failure surfaced by the exchange boundary

Startup Errors:
    - ConfigurationError: Config file missing or invalid

Usage:
    from delegate_auth.exceptions import ExchangeFailed, ValidationError
"""

from __future__ import annotations

__all__ = [
    "AssertionRejected",
    "ConfigurationError",
    "DelegateAlreadyRegisteredError",
    "DelegateAuthError",
    "DownstreamFailure",
    "ExchangeFailed",
    "IncompleteAssertion",
    "InvalidSignature",
    "MalformedAssertion",
    "UnknownDelegate",
    "UntrustedAssertion",
    "UserNotFound",
    "ValidationError",
]

from delegate_auth.constants import EXCHANGE_FAILURE_MESSAGE


class DelegateAuthError(Exception):
    """Base exception for all delegate-auth errors."""


# =============================================================================
# Registration Errors
# =============================================================================


class ValidationError(DelegateAuthError):
    """A delegate record failed validation before persistence.

    Raised when:
    - The supplied uuid is not a 32 character lower case UUID version 4
    - The public key is empty or not an RSA public key in PEM format

    The message is safe to return to the caller; registration has no
    trust implication.
    """


class DelegateAlreadyRegisteredError(DelegateAuthError):
    """A delegate with the given uuid is already registered.

    Attributes:
        uuid: The conflicting (stripped) uuid.
    """

    def __init__(self, uuid: str) -> None:
        self.uuid = uuid
        super().__init__(f"Delegate '{uuid}' is already registered")


# =============================================================================
# Exchange Errors
# =============================================================================


class AssertionRejected(DelegateAuthError):
    """Base exception for assertions that cannot be trusted.

    Subclasses identify which verification step failed. The distinction is
    for server-side logs only; the exchange boundary collapses all of them
    into ExchangeFailed.
    """


class MalformedAssertion(AssertionRejected):
    """The assertion is not a decodable JWT with a JSON object payload."""


class IncompleteAssertion(AssertionRejected):
    """The assertion lacks the delegateUuid or userId claim."""


class UnknownDelegate(AssertionRejected):
    """No delegate is registered under the claimed uuid.

    Attributes:
        delegate_uuid: The claimed uuid, as found in the assertion.
    """

    def __init__(self, delegate_uuid: str) -> None:
        self.delegate_uuid = delegate_uuid
        super().__init__(f"Delegate '{delegate_uuid}' not found")


class InvalidSignature(AssertionRejected):
    """Signature, algorithm or time-validity check failed."""


class UntrustedAssertion(AssertionRejected):
    """The verified payload carried no usable userId."""


class UserNotFound(DelegateAuthError):
    """The user vouched for by a verified assertion does not exist.

    Attributes:
        user_id: The trusted user id that could not be resolved.
    """

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User '{user_id}' not found")


class DownstreamFailure(DelegateAuthError):
    """An external collaborator failed or timed out.

    Raised when the delegate registry, the user directory or the session
    token issuer is unavailable. Nothing is retried.
    """


class ExchangeFailed(DelegateAuthError):
    """The only failure the exchange boundary lets reach the caller.

    Carries no information about which step failed. The original error is
    chained as __cause__ for server-side use.
    """

    def __init__(self) -> None:
        super().__init__(EXCHANGE_FAILURE_MESSAGE)


# =============================================================================
# Startup Errors
# =============================================================================


class ConfigurationError(DelegateAuthError):
    """Configuration is invalid or incomplete.

    Raised when:
    - Config file does not exist (not initialized)
    - Config file contains invalid JSON
    - Config file fails Pydantic validation
    """
