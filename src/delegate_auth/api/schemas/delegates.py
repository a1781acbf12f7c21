"""Delegate management API schemas."""

from __future__ import annotations

__all__ = [
    "DelegateCreateRequest",
    "DelegateResponse",
]

from datetime import datetime

from pydantic import BaseModel


class DelegateCreateRequest(BaseModel):
    """Body of POST /api/delegates.

    uuid may be hyphenated or stripped; a new one is generated if omitted.
    """

    uuid: str | None = None
    public_key: str


class DelegateResponse(BaseModel):
    """A registered delegate."""

    uuid: str
    public_key: str
    created_at: datetime
