"""Turn domain errors into JSON error responses.

Every error body has the shape ``{"detail": "...", "code": "..."}``; the
status follows from the kind of domain error.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from roster.domain.shared.exceptions import (
    ConflictError,
    DomainException,
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Checked in order, so subclasses must precede their bases.
STATUS_BY_ERROR_KIND: tuple[tuple[type[DomainException], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (EntityNotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
)


def status_for(exc: DomainException) -> int:
    for kind, status_code in STATUS_BY_ERROR_KIND:
        if isinstance(exc, kind):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def error_response(status_code: int, detail: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "code": code},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainException)
    async def handle_domain_error(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        status_code = status_for(exc)
        logger.warning(
            "%s %s -> %d %s: %s %s",
            request.method,
            request.url.path,
            status_code,
            exc.code.value,
            exc.message,
            exc.details,
        )
        return error_response(status_code, exc.message, exc.code.value)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        logger.exception(
            "Unhandled error on %s %s: %s",
            request.method,
            request.url.path,
            exc,
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An internal error occurred",
            ErrorCode.INTERNAL_ERROR.value,
        )
