"""Fixtures for API tests: an app wired to in-memory collaborators."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from delegate_auth.api.server import create_api_app
from delegate_auth.config import AppConfig
from delegate_auth.delegates.registry import InMemoryDelegateRegistry
from delegate_auth.users.directory import InMemoryUserDirectory


@pytest.fixture
def app(app_config: AppConfig, users: InMemoryUserDirectory) -> FastAPI:
    """App with an empty delegate registry and the 'alice' user."""
    return create_api_app(app_config, registry=InMemoryDelegateRegistry(), users=users)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def admin_headers(app_config: AppConfig) -> dict[str, str]:
    return {"Authorization": f"Bearer {app_config.api.admin_token}"}
