"""Shared errors package.

Centralized error handling and exception management.
"""

from .base import AppError
from .context import trace_id_var
from .decorators import safe
from .domain import (
    BadGatewayError,
    BadRequestError,
    ConflictError,
    NotFoundError,
    PayloadTooLargeError,
    RateLimitError,
    ServiceUnavailableError,
    ValidationError,
)
from .handlers import setup_exception_handlers
from .mapping import ExceptionMapper
from .schemas import ErrorDetail, ErrorResponse

__all__ = [
    # Base
    "AppError",
    # Domain errors
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    "BadRequestError",
    "PayloadTooLargeError",
    "RateLimitError",
    "BadGatewayError",
    "ServiceUnavailableError",
    # Mapping
    "ExceptionMapper",
    # Decorators
    "safe",
    # Handlers
    "setup_exception_handlers",
    # Context
    "trace_id_var",
    # Schemas
    "ErrorDetail",
    "ErrorResponse",
]
