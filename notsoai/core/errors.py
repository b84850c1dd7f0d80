from typing import Dict, Optional

from fastapi.responses import JSONResponse


class ConfigurationError(RuntimeError):
    """Required configuration (e.g. SESSION_SECRET in production) is missing."""


class ApiError(Exception):
    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        errors: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.errors = errors


def error_response(
    code: str,
    message: str,
    status_code: int,
    errors: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body = {"code": code, "message": message}
    if errors:
        body["errors"] = errors
    return JSONResponse(body, status_code=status_code)


def validation(errors: Dict[str, str]) -> JSONResponse:
    return error_response("VALIDATION_ERROR", "Invalid request data", 400, errors)


def missing_param(message: str) -> JSONResponse:
    return error_response("MISSING_PARAM", message, 400)


def unauthorized(message: str = "Authentication required") -> JSONResponse:
    return error_response("UNAUTHORIZED", message, 401)


def forbidden(message: str = "Access denied") -> JSONResponse:
    return error_response("FORBIDDEN", message, 403)


def not_found(code: str, message: str) -> JSONResponse:
    return error_response(code, message, 404)


def internal() -> JSONResponse:
    return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500)
