# workforce/utils/error_handlers.py
"""Centralized exception handlers

register_exception_handlers(app) maps the application error taxonomy,
framework errors and store failures onto one JSON envelope:

    {"error": <message>, "code": <CODE>, "timestamp": <ISO-8601>, "details"?: [...]}

Every failure is logged once here with the request context. Handlers are
plain functions because slowapi may call the rate limit handler synchronously.
"""

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from workforce.config import SecurityConfig, get_settings
from workforce.exceptions import AppError, ConflictError, DatabaseError, ValidationError

logger = logging.getLogger(__name__)

_HTTP_CODES = {
    400: "BAD_REQUEST",
    401: "AUTH_ERROR",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    413: "PAYLOAD_TOO_LARGE",
    429: "RATE_LIMIT_EXCEEDED",
}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def classify_database_error(exc: SQLAlchemyError) -> AppError:
    """Translate a store failure into the error the client should see"""
    message = str(getattr(exc, "orig", None) or exc).lower()

    if isinstance(exc, IntegrityError):
        if "unique" in message or "duplicate" in message:
            return ConflictError("Resource already exists", code="DUPLICATE_RESOURCE")
        if "foreign key" in message:
            return AppError("Referenced resource not found", status_code=400, code="FOREIGN_KEY_CONSTRAINT")
        if "not null" in message:
            return ValidationError("Required field is missing", code="NOT_NULL_CONSTRAINT")
        return ValidationError("Constraint violation", code="CONSTRAINT_VIOLATION")

    if "no such table" in message:
        return DatabaseError("Database schema not initialized", exc)
    if "database is locked" in message:
        return DatabaseError("Database is temporarily unavailable", exc)
    return DatabaseError("Database operation failed", exc)


def _request_body(request: Request) -> Any:
    raw = getattr(request.state, "request_body", None)
    if not raw:
        return None
    try:
        return SecurityConfig.redact(json.loads(bytes(raw)))
    except (ValueError, UnicodeDecodeError):
        return f"<{len(raw)} bytes, not JSON>"


def _actor_id(request: Request) -> Optional[int]:
    user = getattr(request.state, "user", None)
    return getattr(user, "id", None)


def _log_failure(request: Request, status_code: int, error: AppError, exc: BaseException) -> None:
    context = {
        "method": request.method,
        "path": request.url.path,
        "status": status_code,
        "code": error.code,
        "userId": _actor_id(request),
        "requestId": getattr(request.state, "request_id", None),
        "body": _request_body(request),
    }
    if status_code >= 500:
        logger.error("%s: %s", error.message, context, exc_info=exc)
    else:
        logger.warning("%s: %s", error.message, context)


def error_response(request: Request, error: AppError, exc: Optional[BaseException] = None) -> JSONResponse:
    exc = exc or error
    _log_failure(request, error.status_code, error, exc)

    content: Dict[str, Any] = {
        "error": error.message,
        "code": error.code,
        "timestamp": _timestamp(),
    }
    if error.details:
        content["details"] = error.details

    if get_settings().is_development:
        content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        content["request"] = {"method": request.method, "url": str(request.url)}

    request_id = getattr(request.state, "request_id", None)
    if request_id:
        content["requestId"] = request_id

    headers = {"WWW-Authenticate": "Bearer"} if error.status_code == 401 else None
    return JSONResponse(status_code=error.status_code, content=content, headers=headers)


def _validation_details(errors) -> List[Dict[str, Any]]:
    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        detail: Dict[str, Any] = {"field": field, "message": err.get("msg", "Invalid value")}
        value = err.get("input")
        if not SecurityConfig.is_sensitive(loc[-1] if loc else field) and isinstance(value, (str, int, float, bool)):
            detail["value"] = value
        details.append(detail)
    return details


def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return error_response(request, exc)


def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError("Validation failed", details=_validation_details(exc.errors()))
    return error_response(request, error, exc)


def _database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    return error_response(request, classify_database_error(exc), exc)


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    error = AppError("Too many requests, please try again later", status_code=429, code="RATE_LIMIT_EXCEEDED")
    return error_response(request, error, exc)


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Route {request.url.path} not found"
    else:
        message = str(exc.detail)
    error = AppError(message, status_code=exc.status_code, code=_HTTP_CODES.get(exc.status_code, "HTTP_ERROR"))
    return error_response(request, error, exc)


def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    message = str(exc) if get_settings().is_development else "Something went wrong"
    return error_response(request, AppError(message), exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app"""
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, _database_error_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
