"""
FastAPI error handlers.

Every failure leaves the API as an ErrorResponse body with the status code
the exception carries.
"""

import logging
from typing import Optional, Union

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from lightsurvey.core.config import settings
from lightsurvey.core.errors import LightSurveyException
from lightsurvey.models.errors import ErrorResponse

logger = logging.getLogger(__name__)


def get_request_id(request: Request) -> Union[str, None]:
    """Extract the correlation ID set by RequestCorrelationMiddleware."""
    return getattr(request.state, "request_id", None)


def describe(exc: LightSurveyException) -> Optional[str]:
    """Short technical detail for the ``details`` field of an error response."""
    if "upstream_status" in exc.details:
        return f"HTTP {exc.details['upstream_status']}"
    if "reason" in exc.details:
        return str(exc.details["reason"])
    if exc.__cause__ is not None:
        return str(exc.__cause__)
    return None


async def lightsurvey_exception_handler(
    request: Request, exc: LightSurveyException
) -> JSONResponse:
    """
    Handle LightSurveyException and its subclasses.

    Args:
        request: FastAPI request object
        exc: LightSurveyException instance

    Returns:
        JSONResponse with error details
    """
    request_id = get_request_id(request)

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{type(exc).__name__}: {exc.error_code} - {exc.message}",
        extra={
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
        },
    )

    error_response = ErrorResponse(
        error=exc.message,
        details=describe(exc),
        error_code=exc.error_code,
        context=exc.details or None,
        request_id=request_id,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(mode="json", exclude_none=True),
    )


async def validation_error_handler(
    request: Request, exc: Union[RequestValidationError, PydanticValidationError]
) -> JSONResponse:
    """
    Handle request validation errors.

    Missing or invalid parameters are reported as 400 Bad Request.
    """
    request_id = get_request_id(request)

    messages = []
    for error in exc.errors():
        field_path = ".".join(str(loc) for loc in error.get("loc", []))
        messages.append(f"{field_path}: {error.get('msg', 'invalid value')}")

    logger.warning(f"Validation error: {len(messages)} field(s) failed validation")

    error_response = ErrorResponse(
        error="Request validation failed",
        details="; ".join(messages) or None,
        error_code="VALIDATION_ERROR",
        request_id=request_id,
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_response.model_dump(mode="json", exclude_none=True),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Exception details are only exposed in development.
    """
    logger.error(
        f"Unhandled exception: {type(exc).__name__} - {exc}",
        exc_info=True,
        extra={"exception_type": type(exc).__name__},
    )

    details = None
    if settings.environment == "development":
        details = f"{type(exc).__name__}: {exc}"

    error_response = ErrorResponse(
        error="An unexpected error occurred",
        details=details,
        error_code="INTERNAL_ERROR",
        request_id=get_request_id(request),
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(mode="json", exclude_none=True),
    )


def register_error_handlers(app: FastAPI) -> None:
    """
    Register all error handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(LightSurveyException, lightsurvey_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(PydanticValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Error handlers registered successfully")
