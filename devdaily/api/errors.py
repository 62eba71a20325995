"""Domain error to HTTP mapping.

One table decides the status code for every ``DomainError``; the JSON
API, HTMX fragments and admin pages all consult it.
"""

from typing import Any

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from devdaily.application.response_formatter import ResponseFormatter
from devdaily.domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BusinessRuleError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from devdaily.infrastructure.config import settings

logger = structlog.get_logger()

GENERIC_ERROR_MESSAGE = "An error occurred. Please try again later."

_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (BusinessRuleError, status.HTTP_409_CONFLICT),
)


def status_for(error: Exception) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_fields(error: Exception) -> dict[str, Any]:
    """Field errors for validation failures, details for everything else."""
    if isinstance(error, ValidationError):
        return dict(error.errors)
    if isinstance(error, DomainError):
        return dict(error.details)
    return {}


def public_message(error: Exception) -> str:
    if isinstance(error, DomainError):
        return error.message
    if settings.is_production:
        return GENERIC_ERROR_MESSAGE
    return str(error) or GENERIC_ERROR_MESSAGE


def error_response(error: Exception, request_id: str | None = None) -> JSONResponse:
    status_code = status_for(error)
    error_code = error.error_code if isinstance(error, DomainError) else "INTERNAL_ERROR"
    return JSONResponse(
        status_code=status_code,
        content=ResponseFormatter.error(
            message=public_message(error),
            error_code=error_code,
            errors=error_fields(error),
            request_id=request_id,
        ),
    )


# ============================================================================
# Exception Handlers
# ============================================================================


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    log = logger.warning if status_for(exc) < 500 else logger.error
    log(
        "Domain error",
        path=request.url.path,
        error_code=exc.error_code,
        message=exc.message,
    )
    return error_response(exc, request_id)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = {".".join(str(part) for part in err["loc"][1:]) or "body": err["msg"] for err in exc.errors()}
    return error_response(ValidationError("Request validation failed", errors), getattr(request.state, "request_id", None))
