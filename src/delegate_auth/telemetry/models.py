"""Pydantic models for the exchange audit log.

The 'time' field is not part of these models: JSONLFormatter adds the
timestamp during log serialization, so every logged event has a 'time' field
in ISO 8601 format (e.g., "2026-03-11T10:30:45.123Z").
"""

from __future__ import annotations

__all__ = [
    "ExchangeEvent",
]

from typing import Literal

from pydantic import BaseModel, ConfigDict


class ExchangeEvent(BaseModel):
    """One delegate token exchange attempt (logs/audit/exchange.jsonl).

    Failure details are recorded here and nowhere else; the caller only
    ever receives the generic not-found response.
    """

    model_config = ConfigDict(extra="forbid")

    event: Literal["exchange_succeeded", "exchange_failed"]
    status: Literal["Success", "Failure"]

    # Hashed before logging (sha256:<prefix>)
    user_id: str | None = None
    delegate_uuid: str | None = None
    client: str | None = None

    # Failure only
    error_type: str | None = None
    error_message: str | None = None
    cause_type: str | None = None

    message: str | None = None
