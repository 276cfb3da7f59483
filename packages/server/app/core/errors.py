"""
API errors and the exception handlers that render them.

Every failure leaves the server as::

    {"error": {"error_code": "...", "message": "..."}}

with the matching HTTP status.
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from fake_snippets_shared.schemas.common import ErrorCode

log = structlog.get_logger()


class ApiError(HTTPException):
    """HTTP exception carrying a machine-readable error code."""

    status_code = 500
    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
    ):
        code = error_code or self.default_code
        self.error_code = code.value if isinstance(code, ErrorCode) else code
        self.message = message
        super().__init__(
            status_code=status_code or type(self).status_code,
            detail={"error_code": self.error_code, "message": message},
        )


class InvalidRequestError(ApiError):
    status_code = 400
    default_code = ErrorCode.INVALID_REQUEST


class UnauthorizedError(ApiError):
    status_code = 401
    default_code = ErrorCode.UNAUTHORIZED


class ForbiddenError(ApiError):
    status_code = 403
    default_code = ErrorCode.NOT_AUTHORIZED


class NotFoundError(ApiError):
    status_code = 404
    default_code = ErrorCode.ORG_NOT_FOUND


class PayloadTooLargeError(ApiError):
    status_code = 413


def format_validation_error(exc: ValidationError | RequestValidationError) -> str:
    """Flatten pydantic errors into one human readable line."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts) or "Invalid request"


def _error_response(status_code: int, error_code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"error_code": error_code, "message": message}},
    )


_STATUS_CODES = {
    400: ErrorCode.INVALID_REQUEST.value,
    401: ErrorCode.UNAUTHORIZED.value,
    403: ErrorCode.NOT_AUTHORIZED.value,
    404: "not_found",
    405: "method_not_allowed",
}


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        log.info(
            "request.failed",
            path=request.url.path,
            status=exc.status_code,
            error_code=exc.error_code,
        )
        return _error_response(exc.status_code, exc.error_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error_response(
            400, ErrorCode.INVALID_REQUEST.value, format_validation_error(exc)
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        code = _STATUS_CODES.get(exc.status_code, "http_error")
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return _error_response(exc.status_code, code, message)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        log.exception("request.unhandled_error", path=request.url.path)
        return _error_response(
            500, ErrorCode.INTERNAL_ERROR.value, "An unexpected error occurred"
        )
