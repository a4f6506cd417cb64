"""Errors raised by the event service and stores, and how the API renders them.

Every failure leaves the API as an ``ErrorResponse`` body::

    {"error": "not_found", "detail": "Event not found", "context": {"event_id": "abc"}}

Raise an ``APIError`` subclass anywhere below the routes; keyword arguments
become ``context``. ``register_exception_handlers(app)`` installs the
renderers for these, for Starlette's own HTTP errors (unknown routes, wrong
methods) and for request bodies FastAPI refuses to parse.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    error: str
    detail: str | None = None
    error_code: str | None = None
    context: dict[str, Any] | None = None


class APIError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 500
    error: str = "internal_error"
    detail: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: str | None = None,
        error_code: str | None = None,
        **context: Any,
    ) -> None:
        self.detail = detail or self.__class__.detail
        self.error_code = error_code
        self.context = context or None
        super().__init__(self.detail)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error=self.error,
            detail=self.detail,
            error_code=self.error_code,
            context=self.context,
        )


class NotFoundError(APIError):
    """No such event, or nothing recorded for a user on it."""

    status_code = 404
    error = "not_found"
    detail = "Event not found"


class BadRequestError(APIError):
    """The request parsed but makes no sense for the event (e.g. an empty submission)."""

    status_code = 400
    error = "bad_request"
    detail = "Invalid request"


class ConflictError(APIError):
    """A store already holds an event with this ID."""

    status_code = 409
    error = "conflict"
    detail = "Event already exists"


class ServiceUnavailableError(APIError):
    status_code = 503
    error = "service_unavailable"
    detail = "Event service not ready"


class DatabaseError(APIError):
    """The configured store failed; ``context['backend']`` names it."""

    status_code = 500
    error = "database_error"
    detail = "Event store operation failed"


class RequestValidationFailed(APIError):
    status_code = 422
    error = "validation_error"
    detail = "Request validation failed"


_ERROR_TYPES = {
    cls.status_code: cls.error
    for cls in (
        NotFoundError,
        BadRequestError,
        ConflictError,
        ServiceUnavailableError,
        DatabaseError,
        RequestValidationFailed,
    )
}
_ERROR_TYPES[405] = "method_not_allowed"


def _status_to_error_type(status_code: int) -> str:
    return _ERROR_TYPES.get(status_code, "error")


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    logger.warning(
        "API error: %s (status=%d, path=%s)",
        exc.detail,
        exc.status_code,
        request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(exclude_none=True),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=_status_to_error_type(exc.status_code),
            detail=str(exc.detail),
        ).model_dump(exclude_none=True),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI's 422 in the ``ErrorResponse`` shape.

    Each pydantic error keeps only its location and message; ``detail``
    repeats the first message so clients can show a single line.
    """
    errors = [
        {"loc": ".".join(str(part) for part in err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    error = RequestValidationFailed(
        detail=errors[0]["msg"] if errors else None,
        errors=errors,
    )
    logger.info("Rejected request body path=%s errors=%d", request.url.path, len(errors))
    return JSONResponse(
        status_code=error.status_code,
        content=error.to_response().model_dump(exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    # Starlette raises its own HTTPException for unknown routes
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
