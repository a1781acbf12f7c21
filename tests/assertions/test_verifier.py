"""Unit tests for delegate assertion verification.

Assertions are signed with throwaway RSA keys generated by the fixtures in
conftest.py. Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

from __future__ import annotations

import asyncio
import time
from unittest.mock import AsyncMock

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from delegate_auth.assertions.signer import sign_assertion
from delegate_auth.assertions.verifier import AssertionVerifier
from delegate_auth.config import AssertionConfig
from delegate_auth.delegates.registry import InMemoryDelegateRegistry
from delegate_auth.exceptions import (
    DownstreamFailure,
    IncompleteAssertion,
    InvalidSignature,
    MalformedAssertion,
    UnknownDelegate,
    UntrustedAssertion,
)


class SlowRegistry:
    """Registry whose lookups never finish in time."""

    async def get_public_key(self, uuid: str) -> str | None:
        await asyncio.sleep(5)
        return None


class TestVerifySuccess:
    """Tests for assertions that should be trusted."""

    @pytest.mark.asyncio
    async def test_returns_user_id_from_signed_assertion(
        self,
        registry: InMemoryDelegateRegistry,
        delegate_key: rsa.RSAPrivateKey,
        delegate_uuid_stripped: str,
    ) -> None:
        # Arrange
        verifier = AssertionVerifier(registry)
        token = sign_assertion(delegate_key, delegate_uuid_stripped, "alice")

        # Act
        user_id = await verifier.verify(token)

        # Assert
        assert user_id == "alice"

    @pytest.mark.asyncio
    async def test_numeric_user_id_returned_as_string(
        self,
        registry: InMemoryDelegateRegistry,
        delegate_key: rsa.RSAPrivateKey,
        delegate_uuid_stripped: str,
    ) -> None:
        token = sign_assertion(delegate_key, delegate_uuid_stripped, 42)

        assert await AssertionVerifier(registry).verify(token) == "42"

    @pytest.mark.asyncio
    async def test_hyphenated_delegate_uuid_claim(
        self,
        registry: InMemoryDelegateRegistry,
        delegate_key: rsa.RSAPrivateKey,
        delegate_uuid: str,
    ) -> None:
        token = sign_assertion(delegate_key, delegate_uuid, "alice")

        assert await AssertionVerifier(registry).verify(token) == "alice"

    @pytest.mark.asyncio
    async def test_verify_assertion_exposes_claims(
        self,
        registry: InMemoryDelegateRegistry,
        delegate_key: rsa.RSAPrivateKey,
        delegate_uuid_stripped: str,
    ) -> None:
        # Arrange
        token = sign_assertion(delegate_key, delegate_uuid_stripped, "alice", ttl_seconds=60)

        # Act
        result = await AssertionVerifier(registry).verify_assertion(token)

        # Assert
        assert result.user_id == "alice"
        assert result.delegate_uuid == delegate_uuid_stripped
        assert "exp" in result.claims

    @pytest.mark.asyncio
    async def test_assertion_without_exp_accepted_by_default(
        self,
        registry: InMemoryDelegateRegistry,
        delegate_key: rsa.RSAPrivateKey,
        delegate_uuid_stripped: str,
    ) -> None:
        token = sign_assertion(delegate_key, delegate_uuid_stripped, "alice")

        assert await AssertionVerifier(registry).verify(token) == "alice"

    @pytest.mark.asyncio
    async def test_leeway_tolerates_recent_expiry(
        self,
        registry: InMemoryDelegateRegistry,
        delegate_key: rsa.RSAPrivateKey,
        delegate_uuid_stripped: str,
    ) -> None:
        # Arrange
        token = sign_assertion(
            delegate_key,
            delegate_uuid_stripped,
            "alice",
            extra_claims={"exp": int(time.time()) - 10},
        )
        verifier = AssertionVerifier(registry, AssertionConfig(leeway_seconds=60))

        # Act / Assert
        assert await verifier.verify(token) == "alice"


class TestVerifyRejection:
    """Tests for each way an assertion can be refused."""

    @pytest.mark.asyncio
    async def test_signature_from_other_key_rejected(
        self,
        registry: InMemoryDelegateRegistry,
        attacker_key: rsa.RSAPrivateKey,
        delegate_uuid_stripped: str,
    ) -> None:
        """Same claims, wrong key: the claimed delegate did not sign it."""
        token = sign_assertion(attacker_key, delegate_uuid_stripped, "alice")

        with pytest.raises(InvalidSignature):
            await AssertionVerifier(registry).verify(token)

    @pytest.mark.asyncio
    async def test_unknown_delegate_rejected(
        self,
        registry: InMemoryDelegateRegistry,
        delegate_key: rsa.RSAPrivateKey,
    ) -> None:
        # Arrange
        unregistered = "9b2c1e4d7a6f4b3c8d2e1f0a9b8c7d6e"
        token = sign_assertion(delegate_key, unregistered, "alice")

        # Act
        with pytest.raises(UnknownDelegate) as exc_info:
            await AssertionVerifier(registry).verify(token)

        # Assert
        assert exc_info.value.delegate_uuid == unregistered

    @pytest.mark.asyncio
    async def test_missing_user_id_rejected_before_lookup(self, delegate_key: rsa.RSAPrivateKey) -> None:
        # Arrange
        registry = AsyncMock()
        token = jwt.encode({"delegateUuid": "0f8fad5bd9cb469fa16570867728950e"}, delegate_key, algorithm="RS256")

        # Act
        with pytest.raises(IncompleteAssertion):
            await AssertionVerifier(registry).verify(token)

        # Assert
        registry.get_public_key.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_delegate_uuid_rejected_before_lookup(self, delegate_key: rsa.RSAPrivateKey) -> None:
        # Arrange
        registry = AsyncMock()
        token = jwt.encode({"userId": "alice"}, delegate_key, algorithm="RS256")

        # Act
        with pytest.raises(IncompleteAssertion):
            await AssertionVerifier(registry).verify(token)

        # Assert
        registry.get_public_key.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_string_delegate_uuid_rejected(
        self, registry: InMemoryDelegateRegistry, delegate_key: rsa.RSAPrivateKey
    ) -> None:
        token = jwt.encode({"delegateUuid": 7, "userId": "alice"}, delegate_key, algorithm="RS256")

        with pytest.raises(IncompleteAssertion):
            await AssertionVerifier(registry).verify(token)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "eyJhbGciOiJSUzI1NiJ9.e30"])
    async def test_malformed_token_rejected(self, registry: InMemoryDelegateRegistry, token: str) -> None:
        with pytest.raises(MalformedAssertion):
            await AssertionVerifier(registry).verify(token)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", ["", 0])
    async def test_falsy_user_id_untrusted(
        self,
        registry: InMemoryDelegateRegistry,
        delegate_key: rsa.RSAPrivateKey,
        delegate_uuid_stripped: str,
        user_id: object,
    ) -> None:
        token = jwt.encode(
            {"delegateUuid": delegate_uuid_stripped, "userId": user_id},
            delegate_key,
            algorithm="RS256",
        )

        with pytest.raises(UntrustedAssertion):
            await AssertionVerifier(registry).verify(token)

    @pytest.mark.asyncio
    async def test_hmac_algorithm_rejected(
        self, registry: InMemoryDelegateRegistry, delegate_uuid_stripped: str
    ) -> None:
        """Only RS256 is accepted, whatever the header claims."""
        token = jwt.encode(
            {"delegateUuid": delegate_uuid_stripped, "userId": "alice"},
            "a-shared-secret-that-is-long-enough-for-hs256",
            algorithm="HS256",
        )

        with pytest.raises(InvalidSignature):
            await AssertionVerifier(registry).verify(token)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("algorithm", ["RS512", "PS256"])
    async def test_other_rsa_algorithms_rejected(
        self,
        registry: InMemoryDelegateRegistry,
        delegate_key: rsa.RSAPrivateKey,
        delegate_uuid_stripped: str,
        algorithm: str,
    ) -> None:
        """A genuine signature by the registered key still needs alg=RS256."""
        # Arrange
        token = jwt.encode(
            {"delegateUuid": delegate_uuid_stripped, "userId": "alice"},
            delegate_key,
            algorithm=algorithm,
        )

        # Act / Assert
        with pytest.raises(InvalidSignature):
            await AssertionVerifier(registry).verify(token)

    @pytest.mark.asyncio
    async def test_expired_assertion_rejected(
        self,
        registry: InMemoryDelegateRegistry,
        delegate_key: rsa.RSAPrivateKey,
        delegate_uuid_stripped: str,
    ) -> None:
        token = sign_assertion(
            delegate_key,
            delegate_uuid_stripped,
            "alice",
            extra_claims={"exp": int(time.time()) - 10},
        )

        with pytest.raises(InvalidSignature, match="expired"):
            await AssertionVerifier(registry).verify(token)

    @pytest.mark.asyncio
    async def test_not_yet_valid_assertion_rejected(
        self,
        registry: InMemoryDelegateRegistry,
        delegate_key: rsa.RSAPrivateKey,
        delegate_uuid_stripped: str,
    ) -> None:
        token = sign_assertion(
            delegate_key,
            delegate_uuid_stripped,
            "alice",
            extra_claims={"nbf": int(time.time()) + 3600},
        )

        with pytest.raises(InvalidSignature):
            await AssertionVerifier(registry).verify(token)

    @pytest.mark.asyncio
    async def test_require_expiry_rejects_assertion_without_exp(
        self,
        registry: InMemoryDelegateRegistry,
        delegate_key: rsa.RSAPrivateKey,
        delegate_uuid_stripped: str,
    ) -> None:
        # Arrange
        token = sign_assertion(delegate_key, delegate_uuid_stripped, "alice")
        verifier = AssertionVerifier(registry, AssertionConfig(require_expiry=True))

        # Act / Assert
        with pytest.raises(InvalidSignature):
            await verifier.verify(token)

    @pytest.mark.asyncio
    async def test_registry_timeout_is_downstream_failure(
        self, delegate_key: rsa.RSAPrivateKey, delegate_uuid_stripped: str
    ) -> None:
        # Arrange
        token = sign_assertion(delegate_key, delegate_uuid_stripped, "alice")
        verifier = AssertionVerifier(SlowRegistry(), lookup_timeout=0.05)  # type: ignore[arg-type]

        # Act / Assert
        with pytest.raises(DownstreamFailure):
            await verifier.verify(token)
