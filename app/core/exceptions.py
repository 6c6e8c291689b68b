"""
Custom Exception Classes for the Employee Records API
"""

from typing import Any, Dict, List, Optional
from fastapi import HTTPException, status


class BaseAPIException(HTTPException):
    """Base exception class for API errors with enhanced error details."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        error_data: Optional[Dict[str, Any]] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.error_data = error_data or {}
        self.errors = errors or []


def field_error(field: str, message: str, value: Any = None) -> Dict[str, Any]:
    """Build a single field-tagged error entry."""
    entry = {"field": field, "message": message}
    if value is not None:
        entry["value"] = value
    return entry


# Authentication & Authorization Exceptions
class AuthenticationError(BaseAPIException):
    """Authentication failed."""

    default_detail = "Authentication failed"
    default_code = "AUTH_FAILED"

    def __init__(self, detail: Optional[str] = None, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail or self.default_detail,
            error_code=self.default_code,
            error_data=error_data,
            headers={"WWW-Authenticate": "Bearer"}
        )


class MissingTokenError(AuthenticationError):
    """No bearer token was presented."""

    default_detail = "Access denied. No token provided."
    default_code = "NO_TOKEN"


class InvalidTokenError(AuthenticationError):
    """Token is malformed or its signature does not verify."""

    default_detail = "Invalid token"
    default_code = "INVALID_TOKEN"


class ExpiredTokenError(AuthenticationError):
    """Token signature is valid but it has expired."""

    default_detail = "Token expired"
    default_code = "TOKEN_EXPIRED"


class InvalidCredentialsError(AuthenticationError):
    """Username or password is wrong. Never says which."""

    default_detail = "Invalid credentials"
    default_code = "INVALID_CREDENTIALS"


class AccountNotFoundError(AuthenticationError):
    """Token refers to an account that no longer exists."""

    default_detail = "Admin account not found"
    default_code = "ACCOUNT_NOT_FOUND"


class AccountDeactivatedError(AuthenticationError):
    """Account exists but has been deactivated."""

    default_detail = "Account is deactivated"
    default_code = "ACCOUNT_DEACTIVATED"


class AccountLockedError(BaseAPIException):
    """Account is inside a lock window after too many failed logins."""

    def __init__(self, lock_until: Optional[str] = None, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_423_LOCKED,
            detail="Account is temporarily locked due to too many failed login attempts. Please try again later.",
            error_code="ACCOUNT_LOCKED",
            error_data={"lock_until": lock_until, **(error_data or {})}
        )


class InsufficientPermissionsError(BaseAPIException):
    """User doesn't have required permissions."""

    def __init__(self, detail: str = "Insufficient permissions", error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="INSUFFICIENT_PERMISSIONS",
            error_data=error_data
        )


# Resource Exceptions
class ResourceNotFoundError(BaseAPIException):
    """Requested resource not found."""

    def __init__(self, resource_type: str, resource_id: str = None, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource_type} not found",
            error_code="RESOURCE_NOT_FOUND",
            error_data={"resource_type": resource_type, "resource_id": resource_id, **(error_data or {})}
        )


class ConflictError(BaseAPIException):
    """A unique value is already taken by another record."""

    def __init__(
        self,
        resource_type: str,
        field: str = None,
        value: Any = None,
        detail: str = None,
        error_data: Optional[Dict[str, Any]] = None
    ):
        if detail is None:
            detail = f"{resource_type} already exists"
            if field:
                detail += f" with this {field.split('.')[-1]}"

        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="RESOURCE_CONFLICT",
            error_data={"resource_type": resource_type, **(error_data or {})},
            errors=[field_error(field, detail, value)] if field else None
        )


# Validation Exceptions
class ValidationError(BaseAPIException):
    """One or more fields failed validation."""

    def __init__(
        self,
        detail: str = "Validation failed",
        errors: Optional[List[Dict[str, Any]]] = None,
        error_data: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="VALIDATION_ERROR",
            error_data=error_data,
            errors=errors
        )


# Database Exceptions
class DatabaseError(BaseAPIException):
    """Database operation failed."""

    def __init__(self, detail: str = "Database operation failed", operation: str = None, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="DATABASE_ERROR",
            error_data={"operation": operation, **(error_data or {})}
        )
