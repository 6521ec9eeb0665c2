"""
tierboard/errors.py
Centralized error handling for the HTTP layer.

ERROR RESPONSE STRUCTURE:
{
    "success": false,
    "error": "ErrorType",
    "message": "Human-readable description",
    "code": "UNIQUE_ERROR_CODE",
    "details": {} (optional)
}

The frontend renders `message` as a toast; `code` is for programmatic checks.
User input never produces a 500.
"""
from typing import Any, Dict, NoReturn, Optional

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorCode:
    """Unique error codes for machine-readable error handling"""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"

    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_EXPIRED = "AUTH_EXPIRED"
    AUTH_INVALID = "AUTH_INVALID"

    FORBIDDEN = "FORBIDDEN"
    TAB_FORBIDDEN = "TAB_FORBIDDEN"

    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    RATE_LIMITED = "RATE_LIMITED"

    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


class ErrorResponse(BaseModel):
    """Standard error response model"""
    success: bool = False
    error: str
    message: str
    code: str
    details: Optional[Dict[str, Any]] = None


ERROR_MAPPING = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    422: "Validation Error",
    429: "Too Many Requests",
    500: "Internal Error",
    503: "Service Unavailable",
}


def error_body(status_code: int, message: str, code: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    body = {
        "success": False,
        "error": ERROR_MAPPING.get(status_code, "Error"),
        "message": message,
        "code": code,
    }
    if details:
        body["details"] = details
    return body


def error_response(status_code: int, message: str, code: str, details: Optional[Dict[str, Any]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_body(status_code, message, code, details))


def raise_bad_request(message: str, code: str = ErrorCode.INVALID_INPUT, details: Optional[Dict] = None) -> NoReturn:
    """Raise 400 Bad Request"""
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=error_body(status.HTTP_400_BAD_REQUEST, message, code, details),
    )


def raise_unauthorized(message: str = "Authentication required", code: str = ErrorCode.AUTH_REQUIRED) -> NoReturn:
    """Raise 401 Unauthorized"""
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=error_body(status.HTTP_401_UNAUTHORIZED, message, code),
        headers={"WWW-Authenticate": "Bearer"},
    )


def raise_forbidden(message: str, code: str = ErrorCode.FORBIDDEN, details: Optional[Dict] = None) -> NoReturn:
    """Raise 403 Forbidden"""
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=error_body(status.HTTP_403_FORBIDDEN, message, code, details),
    )

