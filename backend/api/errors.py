"""
Exception handlers for the FastAPI application.

Translates GoRidesError subclasses into JSON error responses, choosing the
HTTP status from the error's kind.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shared.exceptions import ErrorKind, GoRidesError

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.INVALID_DOMAIN: 403,
    ErrorKind.WEAK_PASSWORD: 422,
    ErrorKind.INVALID_FIELD: 422,
    ErrorKind.INVALID_DEPARTURE: 422,
    ErrorKind.MISSING_CREDENTIALS: 422,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.UNVERIFIED_EMAIL: 403,
    ErrorKind.NOT_AUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.QUOTA_EXCEEDED: 409,
    ErrorKind.BACKEND_UNAVAILABLE: 503,
}


async def go_rides_error_handler(request: Request, exc: GoRidesError) -> JSONResponse:
    """Render any GoRidesError as {"error", "kind", "message", "details"}."""
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    if status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)

    headers = None
    if exc.kind == ErrorKind.NOT_AUTHENTICATED:
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error handlers to an application."""
    app.add_exception_handler(GoRidesError, go_rides_error_handler)
