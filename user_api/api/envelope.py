"""Uniform response envelope and error-to-status mapping.

Every response body, success or error, has the same shape:

    {"status": <int>, "message": <str>, "data": <any | null>}

This module is the only place that knows which HTTP status a domain
error becomes.  Services raise; the handlers registered here translate.

Usage:
    from user_api.api.envelope import register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from user_api.core.errors import (
    InvalidUserInputError,
    RequestValidationFailedError,
    UserAlreadyExistsError,
    UserNotFoundError,
    UserPersistenceError,
    UserServiceError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[UserServiceError], int] = {
    UserNotFoundError: status.HTTP_404_NOT_FOUND,
    UserAlreadyExistsError: status.HTTP_409_CONFLICT,
    InvalidUserInputError: status.HTTP_400_BAD_REQUEST,
    RequestValidationFailedError: status.HTTP_400_BAD_REQUEST,
    UserPersistenceError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

VALIDATION_FAILED_MESSAGE = RequestValidationFailedError.default_message

# First element of a FastAPI error loc names where the value came from.
_LOCATIONS = frozenset({"body", "path", "query", "header", "cookie"})


def envelope(
    status_code: int,
    message: str,
    data: Any = None,
    *,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "status": status_code,
            "message": message,
            "data": jsonable_encoder(data),
        },
        headers=headers,
    )


def status_for(exc: UserServiceError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def field_errors(exc: RequestValidationError) -> dict[str, str]:
    """Collapse pydantic errors to one message per field.

    Messages raised by our own validators come through verbatim; pydantic's
    own (wrong type, malformed JSON) keep pydantic's wording.
    """
    errors: dict[str, str] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in _LOCATIONS:
            loc = loc[1:]
        field = ".".join(loc) or "body"
        if field in errors:
            continue
        ctx_error = (err.get("ctx") or {}).get("error")
        if err.get("type") == "value_error" and ctx_error is not None:
            errors[field] = str(ctx_error)
        else:
            errors[field] = err.get("msg", "Invalid value.")
    return errors


async def _handle_user_error(_request: Request, exc: UserServiceError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error("Request failed: %s", exc.message, exc_info=exc.__cause__)
    data = exc.errors if isinstance(exc, RequestValidationFailedError) else None
    return envelope(code, exc.message, data)


async def _handle_request_validation(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = field_errors(exc)
    logger.warning("Request body rejected fields=%s", sorted(errors))
    return envelope(status.HTTP_400_BAD_REQUEST, VALIDATION_FAILED_MESSAGE, errors)


async def _handle_http_exception(
    _request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return envelope(exc.status_code, message, None, headers=exc.headers)


async def _handle_unexpected(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error: %s", exc)
    return envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UserServiceError, _handle_user_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_request_validation)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _handle_unexpected)
