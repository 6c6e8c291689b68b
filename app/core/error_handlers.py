"""
Global Error Handlers for the Employee Records API

Every error leaves the API in the standard envelope:
{"success": false, "message": ..., "code": ..., "errors": [...]}
"""

import logging
import traceback
from typing import Any, Dict, List, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from app.core.exceptions import BaseAPIException
from app.core.config import settings

# Set up logger
logger = logging.getLogger(__name__)

# Request locations FastAPI prefixes onto validation error paths
REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}
SENSITIVE_FIELDS = {"password"}


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = None,
    errors: Optional[List[Dict[str, Any]]] = None,
    error_data: Dict[str, Any] = None,
    headers: Dict[str, str] = None
) -> JSONResponse:
    """Create standardized error response."""

    content = {
        "success": False,
        "message": message,
    }

    if error_code:
        content["code"] = error_code

    if errors:
        content["errors"] = errors

    # Add debug info in development
    if settings.debug and error_data:
        content["debug_info"] = error_data

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content),
        headers=headers
    )


def format_validation_errors(raw_errors) -> List[Dict[str, Any]]:
    """Turn pydantic error dicts into field-tagged entries."""
    formatted = []
    for error in raw_errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in REQUEST_LOCATIONS:
            loc = loc[1:]
        field = ".".join(loc) or "body"

        message = error.get("msg", "Invalid value")
        ctx_error = (error.get("ctx") or {}).get("error")
        if error.get("type") == "value_error" and ctx_error is not None:
            # Our own validators raise ValueError; drop pydantic's "Value error, " prefix
            message = str(ctx_error)

        entry = {"field": field, "message": message}
        value = error.get("input")
        if value is not None and not isinstance(value, dict) and loc[-1:] and loc[-1] not in SENSITIVE_FIELDS:
            entry["value"] = value
        formatted.append(entry)
    return formatted


async def base_api_exception_handler(request: Request, exc: BaseAPIException) -> JSONResponse:
    """Handle custom API exceptions."""

    request_id = getattr(request.state, 'request_id', None)

    logger.warning(
        f"API Exception: {exc.error_code or 'UNKNOWN'} - {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "error_code": exc.error_code,
            "error_data": exc.error_data,
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method
        }
    )

    return create_error_response(
        status_code=exc.status_code,
        message=exc.detail,
        error_code=exc.error_code,
        errors=exc.errors,
        error_data=exc.error_data,
        headers=exc.headers
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors as a 400 carrying every field error."""

    request_id = getattr(request.state, 'request_id', None)
    validation_errors = format_validation_errors(exc.errors())

    logger.warning(
        f"Validation Error: {len(validation_errors)} validation error(s)",
        extra={
            "validation_errors": validation_errors,
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method
        }
    )

    return create_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        message="Validation failed",
        error_code="VALIDATION_ERROR",
        errors=validation_errors
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle SQLAlchemy database exceptions that escaped the services."""

    request_id = getattr(request.state, 'request_id', None)

    if isinstance(exc, IntegrityError):
        message = "Resource already exists with the provided data"
        error_code = "RESOURCE_CONFLICT"
        status_code = status.HTTP_400_BAD_REQUEST
    else:
        message = "Internal server error"
        error_code = "DATABASE_ERROR"
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    # Log the error
    logger.error(
        f"Database Error: {error_code} - {type(exc).__name__}",
        extra={
            "exception_type": type(exc).__name__,
            "error_details": str(exc),
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method
        }
    )

    error_data = {}
    if settings.debug:
        error_data = {
            "exception_type": type(exc).__name__,
            "original_error": str(exc)
        }

    return create_error_response(
        status_code=status_code,
        message=message,
        error_code=error_code,
        error_data=error_data
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other unhandled exceptions."""

    request_id = getattr(request.state, 'request_id', None)

    # Log the full exception with traceback
    logger.error(
        f"Unhandled Exception: {type(exc).__name__} - {str(exc)}",
        extra={
            "exception_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method
        }
    )

    error_data = None
    if settings.debug:
        error_data = {
            "exception_type": type(exc).__name__,
            "traceback": traceback.format_exc().split('\n')
        }

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="Internal server error",
        error_code="INTERNAL_SERVER_ERROR",
        error_data=error_data
    )


async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle Starlette HTTP exceptions (unknown routes, wrong methods)."""

    request_id = getattr(request.state, 'request_id', None)

    logger.warning(
        f"HTTP Exception: {exc.status_code} - {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method
        }
    )

    message = exc.detail
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = "Route not found"

    return create_error_response(
        status_code=exc.status_code,
        message=str(message),
        error_code="HTTP_EXCEPTION",
        headers=getattr(exc, "headers", None)
    )


# Error handler mapping
ERROR_HANDLERS = {
    BaseAPIException: base_api_exception_handler,
    StarletteHTTPException: starlette_http_exception_handler,
    RequestValidationError: validation_exception_handler,
    SQLAlchemyError: sqlalchemy_exception_handler,
    Exception: generic_exception_handler,
}


def register_error_handlers(app):
    """Register all error handlers with the FastAPI app."""

    for exception_class, handler in ERROR_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)

    logger.info("Error handlers registered successfully")
