"""Application error taxonomy and the FastAPI handlers that render it.

Every failure leaves the API as ``{"success": false, "error": {"type",
"message", "details"?}}`` with the status code of its category.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an API error envelope."""

    status_code = 500
    error_type = "SERVER_ERROR"

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(AppError):
    status_code = 400
    error_type = "VALIDATION_ERROR"


class AuthenticationError(AppError):
    status_code = 401
    error_type = "AUTHENTICATION_ERROR"

    def __init__(self, message: str = "Authentication failed", details: Any = None):
        super().__init__(message, details)


class AuthorizationError(AppError):
    status_code = 403
    error_type = "AUTHORIZATION_ERROR"

    def __init__(self, message: str = "Not authorized", details: Any = None):
        super().__init__(message, details)


class NotFoundError(AppError):
    status_code = 404
    error_type = "NOT_FOUND_ERROR"

    def __init__(self, resource: str, details: Any = None):
        super().__init__(f"{resource} not found", details)
        self.resource = resource


class ConflictError(AppError):
    status_code = 409
    error_type = "CONFLICT_ERROR"


class ServerError(AppError):
    status_code = 500
    error_type = "SERVER_ERROR"


_STATUS_TYPES = {
    400: "VALIDATION_ERROR",
    401: "AUTHENTICATION_ERROR",
    403: "AUTHORIZATION_ERROR",
    404: "NOT_FOUND_ERROR",
    409: "CONFLICT_ERROR",
}


def error_body(error_type: str, message: str, details: Any = None) -> dict[str, Any]:
    error: dict[str, Any] = {"type": error_type, "message": message}
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error}


def _log_failure(request: Request, error_type: str, message: str) -> None:
    logger.error(
        "%s %s failed: %s: %s", request.method, request.url.path, error_type, message
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    _log_failure(request, exc.error_type, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.error_type, exc.message, exc.details),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    _log_failure(request, "VALIDATION_ERROR", "Request validation failed")
    return JSONResponse(
        status_code=400,
        content=error_body("VALIDATION_ERROR", "Request validation failed", details),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    error_type = _STATUS_TYPES.get(exc.status_code, "SERVER_ERROR")
    _log_failure(request, error_type, str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(error_type, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Store operation failed on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=400,
        content=error_body("STORE_ERROR", "Database operation failed", str(exc.__cause__ or exc)),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=error_body("SERVER_ERROR", "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, store_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
