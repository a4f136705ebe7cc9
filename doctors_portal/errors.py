"""
errors.py
=========
Error taxonomy for the portal API and the FastAPI handlers that turn
those errors into `{"message": ...}` JSON responses.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PortalError(Exception):
    """Base error carrying the HTTP status and the client-facing message."""
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, reason: Optional[str] = None):
        self.message = message or self.message
        # Internal detail for logs only, never sent to the client
        self.reason = reason or self.message
        super().__init__(self.reason)


class Unauthenticated(PortalError):
    """No credential was presented."""
    status_code = 401
    message = "UnAuthorized access"


class Forbidden(PortalError):
    """Credential is untrusted, or the caller lacks the required role."""
    status_code = 403
    message = "Forbidden access"


def register_exception_handlers(app: FastAPI):
    """Attach the portal error handlers to an application."""

    @app.exception_handler(PortalError)
    async def portal_error_handler(request: Request, exc: PortalError):
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.reason}")
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        # The server logs the traceback once the error is re-raised
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
        return JSONResponse(status_code=500, content={"message": "Internal server error"})
