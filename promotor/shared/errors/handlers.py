"""Exception handlers for FastAPI.

Every error leaves the API as an ``ErrorResponse`` body with an
``X-Error-Code`` header.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .base import AppError
from .context import trace_id_var
from .schemas import ErrorResponse

logger = logging.getLogger(__name__)


def _error_json(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump()),
        headers={"X-Error-Code": body.error},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application.

    Handles:
    - business errors (AppError)
    - request validation errors (RequestValidationError)
    - HTTP errors (StarletteHTTPException)
    - anything else (Exception)

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(AppError)
    async def app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
        return _error_json(exc.status_code, exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        body = ErrorResponse(
            error="VALIDATION_ERROR",
            message="Input validation error",
            details={"errors": exc.errors()},
            trace_id=trace_id_var.get(),
        )
        return _error_json(422, body)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        body = ErrorResponse(
            error=f"HTTP_{exc.status_code}",
            message=str(exc.detail),
            details={},
            trace_id=trace_id_var.get(),
        )
        return _error_json(exc.status_code, body)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Last line of defense: log the traceback, answer a generic 500."""
        logger.exception("CRITICAL: Unhandled exception")

        body = ErrorResponse(
            error="INTERNAL_SERVER_ERROR",
            message="Internal server error",
            details={},
            trace_id=trace_id_var.get(),
        )
        return _error_json(500, body)
