"""Liveness probe.

Routes mounted at: /health
"""

from __future__ import annotations

__all__ = ["router"]

from fastapi import APIRouter

router = APIRouter()


@router.get("")
async def health() -> dict[str, str]:
    return {"status": "ok"}
