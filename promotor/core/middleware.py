"""
Request processing middleware.
"""

import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send

from .config import settings
from .logging import clear_request_context, get_structured_logger, set_request_context
from .metrics import (
    HTTP_REQUEST_COUNT,
    HTTP_REQUEST_IN_PROGRESS,
    HTTP_REQUEST_LATENCY,
    HTTP_REQUEST_SIZE_BYTES,
)

logger = get_structured_logger(__name__)


# ==================== Request Tracing Middleware ====================


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to every request, record metrics and log it."""

    # Endpoints without per-request log lines
    SKIP_LOG_ENDPOINTS: set[str] = {
        "/observability/health",
        "/observability/ready",
        "/observability/live",
        "/observability/metrics",
    }

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process the request with tracing and metrics."""
        request_id = (
            request.headers.get("X-Request-ID")
            or request.headers.get("X-Correlation-ID")
            or str(uuid.uuid4())
        )
        request.state.request_id = request_id

        set_request_context(request_id=request_id, trace_id=request_id)

        endpoint = self._get_endpoint(request)
        method = request.method

        HTTP_REQUEST_IN_PROGRESS.labels(method=method, endpoint=endpoint).inc()

        request_size = int(request.headers.get("content-length", 0) or 0)
        if request_size > 0:
            HTTP_REQUEST_SIZE_BYTES.labels(method=method, endpoint=endpoint).observe(request_size)

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            duration = time.perf_counter() - start_time

            HTTP_REQUEST_COUNT.labels(
                method=method,
                endpoint=endpoint,
                status_code=response.status_code,
            ).inc()
            HTTP_REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(duration)

            response.headers["X-Request-ID"] = request_id
            self._log_request(request, response, duration, request_id)
            return response

        except Exception as e:
            duration = time.perf_counter() - start_time

            HTTP_REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=500).inc()
            HTTP_REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(duration)

            logger.error(
                "Request failed",
                request_id=request_id,
                method=method,
                path=str(request.url.path),
                duration_ms=round(duration * 1000, 2),
                error=str(e),
                exc_info=True,
            )
            raise

        finally:
            HTTP_REQUEST_IN_PROGRESS.labels(method=method, endpoint=endpoint).dec()
            clear_request_context()

    def _get_endpoint(self, request: Request) -> str:
        """Route template for metrics labels, falling back to the raw path."""
        route = request.scope.get("route")
        if route is not None and hasattr(route, "path"):
            return route.path
        return request.url.path

    def _log_request(
        self,
        request: Request,
        response: Response,
        duration: float,
        request_id: str,
    ) -> None:
        if request.url.path in self.SKIP_LOG_ENDPOINTS:
            return

        log_level = "info" if response.status_code < 400 else "warning"
        if response.status_code >= 500:
            log_level = "error"

        getattr(logger, log_level)(
            f"{request.method} {request.url.path}",
            request_id=request_id,
            method=request.method,
            path=str(request.url.path),
            query_string=str(request.query_params) if request.query_params else None,
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2),
            client_ip=request.client.host if request.client else "unknown",
        )


# ==================== Request Size Limit Middleware ====================


class RequestSizeLimitMiddleware:
    """Reject requests whose declared body size exceeds the upload limit."""

    def __init__(self, app: ASGIApp, max_size_bytes: int) -> None:
        self.app = app
        self.max_size_bytes = max_size_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        content_length = headers.get(b"content-length")

        if content_length and content_length.isdigit():
            if int(content_length) > self.max_size_bytes:
                await self._send_payload_too_large(send)
                return

        await self.app(scope, receive, send)

    async def _send_payload_too_large(self, send: Send) -> None:
        await send(
            {
                "type": "http.response.start",
                "status": 413,
                "headers": [
                    (b"content-type", b"application/json"),
                    (b"x-error-code", b"PAYLOAD_TOO_LARGE"),
                ],
            }
        )
        await send(
            {
                "type": "http.response.body",
                "body": (
                    b'{"error": "PAYLOAD_TOO_LARGE", '
                    b'"message": "Request payload too large", "details": {}, "trace_id": ""}'
                ),
            }
        )


# ==================== Setup Function ====================


def setup_middleware(app: FastAPI) -> None:
    """Install the application middleware.

    Args:
        app: FastAPI application.
    """
    # Last added runs first
    app.add_middleware(
        RequestSizeLimitMiddleware,
        # Multipart framing adds a little on top of the file itself
        max_size_bytes=settings.storage.max_upload_bytes + 1024 * 1024,
    )
    app.add_middleware(RequestTracingMiddleware)
