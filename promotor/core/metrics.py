"""
Prometheus metrics for application monitoring.
"""

from collections.abc import Callable
from functools import wraps
from time import perf_counter
from typing import ParamSpec, TypeVar

from fastapi.responses import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)

from .config import settings

# ==================== Type Variables ====================

P = ParamSpec("P")
R = TypeVar("R")


# ==================== Registry ====================

REGISTRY = CollectorRegistry(auto_describe=True)


# ==================== Application Info ====================

APP_INFO = Info(
    "promotor_app",
    "Application information",
    registry=REGISTRY,
)


# ==================== HTTP Metrics ====================

HTTP_REQUEST_COUNT = Counter(
    "promotor_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
    registry=REGISTRY,
)

HTTP_REQUEST_LATENCY = Histogram(
    "promotor_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
    registry=REGISTRY,
)

HTTP_REQUEST_IN_PROGRESS = Gauge(
    "promotor_http_requests_in_progress",
    "Number of HTTP requests currently in progress",
    ["method", "endpoint"],
    registry=REGISTRY,
)

HTTP_REQUEST_SIZE_BYTES = Histogram(
    "promotor_http_request_size_bytes",
    "HTTP request size in bytes",
    ["method", "endpoint"],
    buckets=(100, 1000, 10000, 100000, 1000000, 10000000, 50000000),
    registry=REGISTRY,
)


# ==================== LLM Metrics ====================

LLM_REQUEST_COUNT = Counter(
    "promotor_llm_requests_total",
    "Total LLM requests",
    ["operation", "model", "status"],
    registry=REGISTRY,
)

LLM_TOKEN_COUNT = Counter(
    "promotor_llm_tokens_total",
    "Total LLM tokens used",
    ["model", "direction"],
    registry=REGISTRY,
)

LLM_LATENCY = Histogram(
    "promotor_llm_request_duration_seconds",
    "LLM request latency in seconds",
    ["operation", "model"],
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 15.0, 30.0, 60.0, 120.0, 300.0),
    registry=REGISTRY,
)


# ==================== Document Metrics ====================

DOCUMENT_SCAN_COUNT = Counter(
    "promotor_document_scans_total",
    "Total document scans",
    ["outcome"],
    registry=REGISTRY,
)

DOCUMENT_SCAN_LATENCY = Histogram(
    "promotor_document_scan_duration_seconds",
    "Document scan latency in seconds",
    buckets=(0.01, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
    registry=REGISTRY,
)

DOCUMENT_UPLOAD_COUNT = Counter(
    "promotor_document_uploads_total",
    "Total stored document files",
    ["source"],
    registry=REGISTRY,
)

DOCUMENT_SIZE_BYTES = Histogram(
    "promotor_document_size_bytes",
    "Stored document size in bytes",
    buckets=(1000, 10000, 100000, 1000000, 10000000, 100000000),
    registry=REGISTRY,
)


# ==================== Helper Functions ====================


def record_llm_request(
    operation: str,
    model: str,
    status: str,
    duration: float | None = None,
    input_tokens: int = 0,
    output_tokens: int = 0,
) -> None:
    """Record the outcome of one LLM call."""
    LLM_REQUEST_COUNT.labels(operation=operation, model=model, status=status).inc()

    if duration is not None:
        LLM_LATENCY.labels(operation=operation, model=model).observe(duration)
    if input_tokens > 0:
        LLM_TOKEN_COUNT.labels(model=model, direction="input").inc(input_tokens)
    if output_tokens > 0:
        LLM_TOKEN_COUNT.labels(model=model, direction="output").inc(output_tokens)


def record_document_scan(outcome: str) -> None:
    """Record a document scan (analyzed, fallback, failed)."""
    DOCUMENT_SCAN_COUNT.labels(outcome=outcome).inc()


def record_document_upload(source: str, size: int) -> None:
    """Record a stored document file."""
    DOCUMENT_UPLOAD_COUNT.labels(source=source).inc()
    DOCUMENT_SIZE_BYTES.observe(size)


# ==================== Decorators ====================


def timed(histogram: Histogram, **labels: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Observe the duration of an async function in ``histogram``."""

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start = perf_counter()
            try:
                return await func(*args, **kwargs)  # type: ignore[misc, no-any-return]
            finally:
                metric = histogram.labels(**labels) if labels else histogram
                metric.observe(perf_counter() - start)

        return wrapper  # type: ignore[return-value]

    return decorator


# ==================== Endpoint ====================


def init_metrics() -> None:
    """Publish static application info."""
    APP_INFO.info(
        {
            "name": settings.app.name,
            "version": settings.app.version,
            "llm_configured": str(settings.llm.is_configured).lower(),
        }
    )


async def metrics_endpoint() -> Response:
    """Render the registry in Prometheus text format."""
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
