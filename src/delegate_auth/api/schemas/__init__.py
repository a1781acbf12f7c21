"""API schemas (Pydantic models) for request/response validation.

Centralized schemas for all API routes.
"""

from __future__ import annotations

from delegate_auth.api.schemas.delegates import DelegateCreateRequest, DelegateResponse
from delegate_auth.api.schemas.exchange import (
    ExchangeRequest,
    ExchangeResponse,
    SessionInfoResponse,
)

__all__ = [
    "DelegateCreateRequest",
    "DelegateResponse",
    "ExchangeRequest",
    "ExchangeResponse",
    "SessionInfoResponse",
]
