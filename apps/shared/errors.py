"""
Secure Error Handling

Provides utilities for handling errors securely without leaking sensitive information,
plus the exception handlers that give every service the same error payload:

    {"error": "<message>", "category": "<category>"}
"""

import logging
import uuid
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


def log_and_sanitize_error(
    error: Exception,
    context: str,
    user_message: Optional[str] = None
) -> tuple[str, str]:
    """
    Log full error details server-side and return sanitized message for client.

    Args:
        error: The exception that occurred
        context: Description of what operation failed (e.g., "Listing posts")
        user_message: Optional custom message to show user. If None, uses generic message.

    Returns:
        Tuple of (sanitized_message, error_id) for client response
    """
    # Generate unique error ID for correlation
    error_id = str(uuid.uuid4())[:8]

    # Log full error server-side
    logger.error(
        f"{context} failed [{error_id}]: {type(error).__name__}: {str(error)}",
        exc_info=error
    )

    # Return sanitized message for client
    if user_message:
        sanitized = f"{user_message} (Error ID: {error_id})"
    else:
        sanitized = f"{context} failed. Please try again later. (Error ID: {error_id})"

    return sanitized, error_id


def error_response(
    message: str,
    category: str,
    status_code: int,
    details: Optional[list] = None,
) -> JSONResponse:
    """Consistent error payloads across the API."""
    content = {
        "error": message,
        "category": category,
    }
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        return error_response(
            message="Invalid JSON",
            category="validation",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    return error_response(
        message="Missing or invalid fields",
        category="validation",
        status_code=status.HTTP_400_BAD_REQUEST,
        details=jsonable_encoder(errors),
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    sanitized_msg, _ = log_and_sanitize_error(
        exc,
        f"Database operation on {request.method} {request.url.path}",
        "A database error occurred while processing the request.",
    )
    return error_response(
        message=sanitized_msg,
        category="database",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    detail = exc.detail
    message = (
        detail.get("message") if isinstance(detail, dict) else str(detail)
    ) or "Request failed."
    category = (
        detail.get("category") if isinstance(detail, dict) else None
    )

    if not category:
        if exc.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
            category = "security"
        elif exc.status_code == status.HTTP_404_NOT_FOUND:
            category = "not_found"
        elif exc.status_code >= 500:
            category = "server_error"
        else:
            category = "client_error"

    return error_response(
        message=message,
        category=category,
        status_code=exc.status_code,
    )


async def unexpected_exception_handler(request: Request, exc: Exception):
    sanitized_msg, _ = log_and_sanitize_error(
        exc,
        f"{request.method} {request.url.path}",
        "An unexpected server error occurred. Please try again later.",
    )
    return error_response(
        message=sanitized_msg,
        category="server_error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def setup_error_handlers(app: FastAPI) -> None:
    """Register the shared exception handlers on a FastAPI app."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler)
