from __future__ import annotations

import logging
from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from floorsvc.api.middleware.request_id import get_request_id
from floorsvc.domain.common.errors import (
    AuthenticationError,
    ConflictError,
    EmptyResultError,
    FloorServiceError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)

# Starlette resolves handlers along the exception's MRO, so every subclass
# lands on its base kind.
_STATUS_BY_KIND: list[tuple[type[FloorServiceError], int]] = [
    (NotFoundError, 404),
    (EmptyResultError, 404),
    (ConflictError, 409),
    (InvalidStateError, 409),
    (InvalidInputError, 400),
    (AuthenticationError, 401),
    (PermissionDeniedError, 403),
    (StoreUnavailableError, 500),
    (FloorServiceError, 500),
]


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            },
            "requestId": get_request_id(),
        },
        headers=headers,
    )


def _exception_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        error = cast(FloorServiceError, exc)
        if status_code >= 500:
            logger.error(
                "request_failed",
                extra={"method": request.method, "path": request.url.path},
                exc_info=error,
            )
        headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
        return _error_response(
            status_code=status_code,
            code=error.code,
            message=str(error),
            details=error.details,
            headers=headers,
        )

    return handler


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    code = "HTTP_ERROR"
    if http_exc.status_code == 404:
        code = "NOT_FOUND"
    elif http_exc.status_code == 400:
        code = "BAD_REQUEST"
    elif http_exc.status_code == 405:
        code = "METHOD_NOT_ALLOWED"
    return _error_response(
        status_code=http_exc.status_code,
        code=code,
        message=message,
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _error_response(
        status_code=400,
        code="INVALID_REQUEST",
        message="request validation failed",
        details={"errors": jsonable_encoder(validation_exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    for exc_cls, status_code in _STATUS_BY_KIND:
        app.add_exception_handler(exc_cls, _exception_handler(status_code))

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
