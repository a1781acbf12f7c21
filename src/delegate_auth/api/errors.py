"""Error responses for the delegate-auth API.

Every error body has the same shape:

    {"detail": {"code": "DELEGATE_EXISTS", "message": "...", "details": {...}}}

Routes raise APIError; the handlers registered by create_api_app() render
APIError, FastAPI validation errors and plain HTTPExceptions in that shape.

The exchange endpoint is the exception to "say what went wrong": whatever
fails there, including a body that cannot be parsed, the caller receives
exchange_not_found().
"""

from __future__ import annotations

__all__ = [
    "APIError",
    "ErrorCode",
    "api_error_handler",
    "error_response",
    "exchange_not_found",
    "http_exception_handler",
    "validation_error_handler",
]

from enum import Enum
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from delegate_auth.constants import EXCHANGE_FAILURE_MESSAGE, EXCHANGE_PATH


class ErrorCode(str, Enum):
    """Machine-readable error codes, grouped by prefix."""

    # Caller identity (401, 403)
    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_FORBIDDEN = "AUTH_FORBIDDEN"

    # Delegate management (404, 409)
    DELEGATE_NOT_FOUND = "DELEGATE_NOT_FOUND"
    DELEGATE_EXISTS = "DELEGATE_EXISTS"

    # NOT_FOUND is also the one and only exchange failure
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    REQUEST_TOO_LARGE = "REQUEST_TOO_LARGE"
    RATE_LIMITED = "RATE_LIMITED"

    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Server side (500, 502, 503)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


_DEFAULT_CODES: dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.AUTH_REQUIRED,
    403: ErrorCode.AUTH_FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
    413: ErrorCode.REQUEST_TOO_LARGE,
    422: ErrorCode.VALIDATION_ERROR,
    429: ErrorCode.RATE_LIMITED,
    502: ErrorCode.UPSTREAM_ERROR,
    503: ErrorCode.SERVICE_UNAVAILABLE,
}


class APIError(HTTPException):
    """HTTPException carrying an ErrorCode.

    Attributes:
        code: The ErrorCode sent to the client.
        error_message: Human-readable message sent to the client.
        error_details: Optional structured context sent to the client.
    """

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.code = code
        self.error_message = message
        self.error_details = details
        super().__init__(
            status_code=status_code,
            detail=_detail(code, message, details),
            headers=headers,
        )


def _detail(code: ErrorCode, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"code": code.value, "message": message}
    if details:
        body["details"] = details
    return body


def error_response(
    status_code: int,
    code: ErrorCode,
    message: str,
    *,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render an error body directly (for middleware, which cannot raise)."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": _detail(code, message, details)},
        headers=headers,
    )


def exchange_not_found() -> APIError:
    """The response every failed exchange gets, whatever the reason."""
    return APIError(status_code=404, code=ErrorCode.NOT_FOUND, message=EXCHANGE_FAILURE_MESSAGE)


def _is_exchange(request: Request) -> bool:
    return request.url.path == EXCHANGE_PATH


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Render APIError (its detail is already structured)."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures as 422 VALIDATION_ERROR.

    The message names the offending field when there is exactly one problem;
    every problem is listed under details.validation_errors. On the exchange
    endpoint the generic exchange failure is returned instead, so a malformed
    body looks the same as a rejected assertion.
    """
    if _is_exchange(request):
        return await api_error_handler(request, exchange_not_found())

    problems = [
        {
            "loc": list(err.get("loc", ())),
            "msg": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]

    if len(problems) == 1:
        field_name = ".".join(str(part) for part in problems[0]["loc"] if part != "body")
        msg = problems[0]["msg"] or "Validation error"
        message = f"{field_name}: {msg}" if field_name else msg
    else:
        message = f"{len(problems)} validation errors"

    return error_response(
        422,
        ErrorCode.VALIDATION_ERROR,
        message,
        details={"validation_errors": problems},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render plain HTTPExceptions (404 for unknown routes, 503 from deps, ...).

    A 400 on the exchange endpoint (unparseable JSON) becomes the generic
    exchange failure.
    """
    if _is_exchange(request) and exc.status_code == 400:
        return await api_error_handler(request, exchange_not_found())

    headers = getattr(exc, "headers", None)
    if isinstance(exc.detail, dict) and "code" in exc.detail:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)

    code = _DEFAULT_CODES.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    message = str(exc.detail) if exc.detail else f"HTTP {exc.status_code}"
    return error_response(exc.status_code, code, message, headers=headers)
