"""Shared fixtures: RSA key pairs, delegate identifiers and app configuration."""

from __future__ import annotations

import pytest
import pytest_asyncio
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from delegate_auth.config import AppConfig, generate_default_config
from delegate_auth.delegates.registry import InMemoryDelegateRegistry
from delegate_auth.users.directory import InMemoryUserDirectory, User

# A valid lower case UUID version 4 (RFC 4122 variant)
DELEGATE_UUID = "0f8fad5b-d9cb-469f-a165-70867728950e"
DELEGATE_UUID_STRIPPED = "0f8fad5bd9cb469fa16570867728950e"


def public_pem(private_key: rsa.RSAPrivateKey) -> str:
    """PEM (SubjectPublicKeyInfo) encoding of the key's public half."""
    return (
        private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode("utf-8")
    )


def private_pem(private_key: rsa.RSAPrivateKey) -> bytes:
    """Unencrypted PKCS8 PEM encoding of the private key."""
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture(scope="session")
def delegate_key() -> rsa.RSAPrivateKey:
    """The registered delegate's signing key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def attacker_key() -> rsa.RSAPrivateKey:
    """A key nobody registered."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def delegate_public_pem(delegate_key: rsa.RSAPrivateKey) -> str:
    return public_pem(delegate_key)


@pytest.fixture
def app_config() -> AppConfig:
    """Config with generated secrets and default exchange settings."""
    return generate_default_config()


@pytest.fixture
def alice() -> User:
    return User(id="42", username="alice", email="admin@example.com")


@pytest.fixture
def users(alice: User) -> InMemoryUserDirectory:
    return InMemoryUserDirectory([alice])


@pytest_asyncio.fixture
async def registry(delegate_public_pem: str) -> InMemoryDelegateRegistry:
    """In-memory registry with DELEGATE_UUID registered to delegate_key."""
    registry = InMemoryDelegateRegistry()
    await registry.create({"uuid": DELEGATE_UUID, "public_key": delegate_public_pem})
    return registry


@pytest.fixture
def delegate_uuid() -> str:
    return DELEGATE_UUID


@pytest.fixture
def delegate_uuid_stripped() -> str:
    return DELEGATE_UUID_STRIPPED


@pytest.fixture
def delegate_private_pem(delegate_key: rsa.RSAPrivateKey) -> bytes:
    return private_pem(delegate_key)


@pytest.fixture
def attacker_public_pem(attacker_key: rsa.RSAPrivateKey) -> str:
    return public_pem(attacker_key)
