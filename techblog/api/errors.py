"""
Translation of component failures into HTTP responses.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from techblog.domain.errors import ErrorKind, OperationError

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    "validation_error": status.HTTP_400_BAD_REQUEST,
    "unauthorized": status.HTTP_401_UNAUTHORIZED,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
    "rate_limited": status.HTTP_429_TOO_MANY_REQUESTS,
    "storage_failure": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def to_http_exception(error: OperationError) -> HTTPException:
    headers: dict[str, str] | None = None
    if error.kind == "unauthorized":
        headers = {"WWW-Authenticate": "Bearer"}
    elif error.kind == "rate_limited" and error.retry_after_seconds is not None:
        headers = {"Retry-After": str(error.retry_after_seconds)}

    return HTTPException(
        status_code=STATUS_BY_KIND.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=error.message,
        headers=headers,
    )


def raise_for_errors(errors: list[OperationError]) -> None:
    """Raise the HTTPException for the first error, if any."""
    if errors:
        raise to_http_exception(errors[0])


async def storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Storage failure"},
    )


__all__ = [
    "STATUS_BY_KIND",
    "raise_for_errors",
    "storage_error_handler",
    "to_http_exception",
]
