"""Token exchange API schemas."""

from __future__ import annotations

__all__ = [
    "ExchangeRequest",
    "ExchangeResponse",
    "SessionInfoResponse",
]

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ExchangeRequest(BaseModel):
    """Body of POST /auth/delegate/exchange."""

    token: str


class ExchangeResponse(BaseModel):
    """Successful exchange."""

    model_config = ConfigDict(populate_by_name=True)

    session_token: str = Field(alias="sessionToken")


class SessionInfoResponse(BaseModel):
    """Owner and expiry of a valid session token."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    expires_at: datetime = Field(alias="expiresAt")
