"""
Application errors and the FastAPI exception handlers that render them.

Every error response shares the envelope
{"success": false, "message": ..., "errors"?: [...], "error"?: ..., "stack"?: ...}.
"error" and "stack" are only included in development mode.
"""

import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from insurance_api.core.config import get_settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for all application exceptions."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server Error"

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, str]] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class ConflictError(AppError):
    """Duplicate resource (e.g. email already registered). Reported as 400."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InternalError(AppError):
    """Unexpected failure (store unreachable, etc.); the cause is kept on __cause__."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server Error"


def _field_path(loc: tuple[Any, ...]) -> str:
    # loc looks like ("body", "address", "zipCode"); drop the "body" source.
    parts = [str(p) for p in loc if p != "body"]
    return ".".join(parts) or "body"


def _error_message(err: dict[str, Any]) -> str:
    if err.get("type") == "missing":
        return f"{_field_path(err['loc'])} is required"
    msg = str(err.get("msg", "Invalid value"))
    # Custom validators raise ValueError; pydantic prefixes those messages.
    return msg.removeprefix("Value error, ")


def _envelope(
    message: str,
    errors: list[dict[str, str]] | None = None,
    cause: BaseException | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    if cause is not None and get_settings().is_dev:
        body["error"] = str(cause)
        body["stack"] = "".join(
            traceback.format_exception(type(cause), cause, cause.__traceback__)
        )
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    cause = None
    if exc.status_code >= 500:
        cause = exc.__cause__ or exc
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(exc.message, exc.errors, cause),
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {"field": _field_path(tuple(err["loc"])), "message": _error_message(err)}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=ValidationError.status_code,
        content=_envelope(ValidationError.default_message, errors),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Routing errors (404 unknown path, 405 wrong method) from the framework.
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(InternalError.default_message, cause=exc),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error envelope handlers on the app."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
