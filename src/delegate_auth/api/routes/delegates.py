"""Delegate management API endpoints.

Routes mounted at: /api/delegates (admin token required)
"""

from __future__ import annotations

__all__ = ["router"]

from fastapi import APIRouter

from delegate_auth.api.deps import RegistryDep
from delegate_auth.api.errors import APIError, ErrorCode
from delegate_auth.api.schemas import DelegateCreateRequest, DelegateResponse
from delegate_auth.delegates.registry import DelegateRecord
from delegate_auth.exceptions import (
    DelegateAlreadyRegisteredError,
    DownstreamFailure,
    ValidationError,
)

router = APIRouter()


def _build_delegate_response(record: DelegateRecord) -> DelegateResponse:
    return DelegateResponse(
        uuid=record.uuid,
        public_key=record.public_key,
        created_at=record.created_at,
    )


def _storage_unavailable(error: DownstreamFailure) -> APIError:
    return APIError(
        status_code=503,
        code=ErrorCode.SERVICE_UNAVAILABLE,
        message="Delegate store unavailable",
        details={"error": str(error)},
    )


@router.post("", response_model=DelegateResponse, status_code=201)
async def create_delegate(body: DelegateCreateRequest, registry: RegistryDep) -> DelegateResponse:
    """Register a delegate.

    Args:
        body: Optional uuid and the delegate's PEM public key.
        registry: Delegate registry (injected).

    Returns:
        DelegateResponse with the stored (hyphen-stripped) uuid.

    Raises:
        APIError: 400 VALIDATION_ERROR if the uuid or key is invalid.
        APIError: 409 DELEGATE_EXISTS if the uuid is taken.
        APIError: 503 SERVICE_UNAVAILABLE if the store cannot be written.
    """
    try:
        record = await registry.create({"uuid": body.uuid, "public_key": body.public_key})
    except ValidationError as e:
        raise APIError(
            status_code=400,
            code=ErrorCode.VALIDATION_ERROR,
            message=str(e),
        ) from e
    except DelegateAlreadyRegisteredError as e:
        raise APIError(
            status_code=409,
            code=ErrorCode.DELEGATE_EXISTS,
            message=str(e),
            details={"uuid": e.uuid},
        ) from e
    except DownstreamFailure as e:
        raise _storage_unavailable(e) from e

    return _build_delegate_response(record)


@router.get("", response_model=list[DelegateResponse])
async def list_delegates(registry: RegistryDep) -> list[DelegateResponse]:
    """List registered delegates, oldest first."""
    try:
        records = await registry.list_all()
    except DownstreamFailure as e:
        raise _storage_unavailable(e) from e
    return [_build_delegate_response(r) for r in records]


@router.get("/{uuid}", response_model=DelegateResponse)
async def get_delegate(uuid: str, registry: RegistryDep) -> DelegateResponse:
    """Get a single delegate.

    Args:
        uuid: Delegate uuid, hyphenated or stripped.
        registry: Delegate registry (injected).

    Raises:
        APIError: 404 DELEGATE_NOT_FOUND if no such delegate.
    """
    try:
        record = await registry.get(uuid)
    except DownstreamFailure as e:
        raise _storage_unavailable(e) from e

    if record is None:
        raise APIError(
            status_code=404,
            code=ErrorCode.DELEGATE_NOT_FOUND,
            message=f"Delegate '{uuid}' not found",
            details={"uuid": uuid},
        )
    return _build_delegate_response(record)
