"""
Centralized error handling and user-friendly error messages.
"""
import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""
    def __init__(self, message: str, status_code: int = 500, details: list | dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    """Validation error."""
    def __init__(self, message: str = "Invalid Request", details: list | dict | None = None):
        super().__init__(message, status_code=400, details=details)


class ConflictError(AppError):
    """Duplicate record. Reported as 400 to match the signup contract."""
    def __init__(self, message: str, details: list | dict | None = None):
        super().__init__(message, status_code=400, details=details)


class InvalidCredentialsError(AppError):
    """Signin failed. Same message for unknown email and wrong password."""
    def __init__(self, message: str | None = None):
        super().__init__(message or get_error_message("invalid_credentials"), status_code=401)


class NotFoundError(AppError):
    """Resource not found error."""
    def __init__(self, message: str = "Resource not found", details: list | dict | None = None):
        super().__init__(message, status_code=404, details=details)


class UnauthorizedError(AppError):
    """Unauthorized access error."""
    def __init__(self, message: str = "Unauthorized access", details: list | dict | None = None):
        super().__init__(message, status_code=401, details=details)


class ForbiddenError(AppError):
    """Forbidden access error."""
    def __init__(self, message: str = "Access forbidden", details: list | dict | None = None):
        super().__init__(message, status_code=403, details=details)


class DatabaseError(AppError):
    """Database error."""
    def __init__(self, message: str = "Database operation failed", details: list | dict | None = None):
        super().__init__(message, status_code=500, details=details)


# User-friendly error messages
ERROR_MESSAGES = {
    # Authentication
    "invalid_credentials": "Invalid email or password",
    "email_exists": "User with this email already exists",
    "weak_password": "Password must be at least 6 characters long.",
    "token_required": "Access token required",
    "invalid_token": "Invalid or expired token",
    "user_not_found": "User not found",

    # Jobs
    "job_not_found": "Job not found",
    "job_update_forbidden": "Not authorized to update this job",
    "job_delete_forbidden": "Not authorized to delete this job",

    # Freelancers / proposals
    "freelancer_not_found": "Freelancer not found",
    "already_proposed": "You have already submitted a proposal for this job",
    "job_not_open": "This job is no longer accepting proposals",

    # General
    "invalid_request": "Invalid Request",
    "forbidden": "You don't have permission to access this resource.",
    "not_found": "The requested resource was not found.",
    "server_error": "Internal Server Error",
    "database_error": "Database connection issue. Please try again later.",
}


def get_error_message(error_key: str, default: str | None = None) -> str:
    """Get a user-friendly error message."""
    return ERROR_MESSAGES.get(error_key, default or ERROR_MESSAGES["server_error"])


def handle_database_error(error: Exception, operation: str = "") -> AppError:
    """Map a persistence failure to an AppError without leaking driver detail."""
    logger.error("Database error during %s: %s", operation, error)

    if isinstance(error, OperationalError):
        return AppError(get_error_message("database_error"), status_code=503)

    return DatabaseError(get_error_message("server_error"))


def create_error_response(
    status_code: int,
    message: str,
    details: Any = None,
) -> JSONResponse:
    """Create a standardized error response."""
    content: dict[str, Any] = {"message": message}

    if details:
        content["errors"] = details

    return JSONResponse(
        status_code=status_code,
        content=content,
    )


def _field_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        # Drop the "body"/"query"/"path" prefix.
        field = ".".join(loc[1:]) if len(loc) > 1 else ".".join(loc)
        message = str(err.get("msg", "Invalid value"))
        # Pydantic prefixes messages raised from validators.
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": field, "message": message})
    return errors


async def app_error_handler(request: Request, exc: AppError):
    """Handle AppError subclasses raised from routes and dependencies."""
    if exc.status_code >= 500:
        logger.error("AppError %s on %s: %s", exc.status_code, request.url.path, exc.message)
    return create_error_response(exc.status_code, exc.message, exc.details)


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Report body/query validation failures as 400 with field-level detail."""
    errors = _field_errors(exc)
    logger.info("Validation failed on %s: %s", request.url.path, errors)
    return create_error_response(400, get_error_message("invalid_request"), errors)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTPException with the same body shape as AppError."""
    return create_error_response(exc.status_code, str(exc.detail))


async def sqlalchemy_operational_error_handler(request: Request, exc: OperationalError):
    """Handle database operational errors."""
    logger.exception("Database OperationalError: %s", exc)
    return create_error_response(503, get_error_message("database_error"))


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    """Handle general database errors."""
    logger.exception("Database SQLAlchemyError: %s", exc)
    return create_error_response(500, get_error_message("server_error"))


async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors globally."""
    logger.exception("Unhandled exception: %s", exc)
    return create_error_response(500, get_error_message("server_error"))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(OperationalError, sqlalchemy_operational_error_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
