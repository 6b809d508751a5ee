import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config.config import settings
from ..errors import AppError
from .schemas.common import ErrorResponse, FieldError

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def _field_path(location) -> str:
    parts = list(location)
    if parts and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    return ".".join(str(part) for part in parts)


def _error_response(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"Application error: {type(exc).__name__} ({exc.status_code}) {exc.message}")
    return _error_response(exc.status_code, ErrorResponse(message=exc.message))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [FieldError(path=_field_path(error.get("loc", ())), message=error.get("msg", "")) for error in exc.errors()]
    logger.warning(f"Validation error on {request.method} {request.url.path}: {[e.model_dump() for e in errors]}")
    return _error_response(status.HTTP_400_BAD_REQUEST, ErrorResponse(message="Validation error", errors=errors))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=message).model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None)
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    message = "Internal server error" if settings.is_production else (str(exc) or "Internal server error")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorResponse(message=message))


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
