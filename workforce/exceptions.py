# workforce/exceptions.py
"""
Application error taxonomy

Routers and services raise these; workforce.utils.error_handlers turns them
into the JSON error envelope. Anything that is not an AppError is treated as
unexpected and reported as a generic 500.
"""

from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base class for errors that are safe to report to the client"""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.details = details or []

    def __repr__(self):
        return f"<{self.__class__.__name__}(status={self.status_code}, code='{self.code}', message='{self.message}')>"


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None, code: Optional[str] = None):
        super().__init__(message, code=code, details=details)


class AuthError(AppError):
    status_code = 401
    code = "AUTH_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message, code=code)


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"

    def __init__(self, message: str = "Access denied", code: Optional[str] = None):
        super().__init__(message, code=code)


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str = "Resource not found", code: Optional[str] = None):
        super().__init__(message, code=code)


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"

    def __init__(self, message: str = "Resource already exists", code: Optional[str] = None):
        super().__init__(message, code=code)


class DatabaseError(AppError):
    status_code = 500
    code = "DATABASE_ERROR"

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


def field_error(field: str, message: str, value: Any = None, code: Optional[str] = None) -> ValidationError:
    """Build a ValidationError carrying a single field-level detail"""
    return ValidationError(message, details=[{"field": field, "message": message, "value": value}], code=code)
