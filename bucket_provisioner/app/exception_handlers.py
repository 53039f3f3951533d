"""Global exception handlers for FastAPI application.

Every failure leaves the API as an RFC 7807 problem document whose ``kind``
is one of the ErrorKind values. Request validation failures are reported as
``invalid-argument`` with status 400, and unexpected exceptions as
``internal`` with status 500.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from bucket_provisioner.core.exceptions import AppException
from bucket_provisioner.core.schemas.problem_details import FieldError, ProblemDetails
from bucket_provisioner.infra.storage.exceptions import ErrorKind, ProvisioningError

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render AppException (and ProvisioningError) as problem JSON."""
    if isinstance(exc, ProvisioningError):
        kind, retryable = exc.kind.value, exc.retryable
    else:
        kind, retryable = exc.type, exc.status_code >= 500

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Request failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "kind": kind,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )

    problem = ProblemDetails(
        type=exc.type,
        title=exc.title,
        status=exc.status_code,
        detail=exc.detail,
        instance=exc.instance or str(request.url),
        kind=kind,
        retryable=retryable,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=problem.to_content(exc.extra),
        media_type=PROBLEM_JSON,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation errors as invalid-argument problems."""
    errors = [
        FieldError(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            type=error["type"],
        )
        for error in exc.errors()
    ]
    logger.warning(
        "Request validation failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(errors),
        },
    )

    problem = ProblemDetails(
        type=ErrorKind.INVALID_ARGUMENT.value,
        title="Bad Request",
        status=status.HTTP_400_BAD_REQUEST,
        detail=f"Request validation failed for {len(errors)} field(s)",
        instance=str(request.url),
        kind=ErrorKind.INVALID_ARGUMENT.value,
        retryable=False,
        errors=errors,
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=problem.to_content(),
        media_type=PROBLEM_JSON,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected exceptions; details are logged, not returned."""
    logger.error(
        "Unexpected exception occurred",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
        exc_info=True,
    )

    problem = ProblemDetails(
        type=ErrorKind.INTERNAL.value,
        title="Internal Server Error",
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred while processing your request",
        instance=str(request.url),
        kind=ErrorKind.INTERNAL.value,
        retryable=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=problem.to_content(),
        media_type=PROBLEM_JSON,
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """Register the problem-JSON exception handlers on ``app``."""
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
    logger.debug("Exception handlers configured")
