"""Error taxonomy and the handlers that render every failure as {"error": message}."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base for errors that map to an HTTP status and a caller-safe message."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = 400


class AuthenticationError(AppError):
    """No session, or a session that does not verify."""

    status_code = 401


class AuthorizationError(AppError):
    """Valid session, but the account may not perform the request."""

    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class UpstreamError(AppError):
    """The AI service failed; carries the upstream status when it is passed through."""

    status_code = 502


class InternalError(AppError):
    status_code = 500


def _error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= 500:
        logger.error(
            "Request failed",
            extra={"path": request.url.path, "status_code": exc.status_code, "reason": exc.message[:500]},
        )
    return _error_response(exc.status_code, exc.message, headers)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if not errors:
        return _error_response(400, "Invalid request")
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = first.get("msg", "Invalid request")
    return _error_response(400, f"{field}: {message}" if field else message)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _error_response(exc.status_code, message, getattr(exc, "headers", None))


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "%s on %s (500): %s", type(exc).__name__, request.url.path, exc, exc_info=exc
    )
    return _error_response(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
