"""
HTTP middleware and exception handlers.

Every non-2xx response carries a JSON body with a human readable
``message`` and a short ``error`` code.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from docsign.exceptions import ConflictError, NotFoundError, StoreError

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, error: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"message": message, "error": error},
        headers=headers,
    )


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject JSON/form bodies above ``max_bytes``; uploads are checked by the upload route."""

    def __init__(self, app, max_bytes: int = 2 * 1024 * 1024):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request, call_next):
        if request.headers.get("content-type", "").startswith("multipart/form-data"):
            return await call_next(request)
        length = request.headers.get("content-length")
        try:
            size = int(length) if length is not None else None
        except ValueError:
            size = None
        if size is not None and size > self.max_bytes:
            return error_response(413, "Request body exceeds allowed size.", "PAYLOAD_TOO_LARGE")
        return await call_next(request)


async def http_exception_handler(request: Request, exc: HTTPException):
    return error_response(
        exc.status_code,
        str(exc.detail),
        f"HTTP_{exc.status_code}",
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"
    return error_response(422, message, "VALIDATION_ERROR")


async def store_exception_handler(request: Request, exc: StoreError):
    if isinstance(exc, NotFoundError):
        return error_response(404, exc.message, "NOT_FOUND")
    if isinstance(exc, ConflictError):
        return error_response(409, exc.message, "CONFLICT")
    # Driver details stay in the log
    logger.error(
        f"StoreError on {request.url.path} (500): {exc}",
        extra={"operation": exc.operation, "document_id": exc.document_id, "cause": str(exc.__cause__ or exc)},
    )
    return error_response(500, "Internal server error", "STORE_ERROR")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StoreError, store_exception_handler)
