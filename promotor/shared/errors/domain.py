"""Standard domain error types.

Catalog of error kinds shared by every module.
"""

from .base import AppError


class NotFoundError(AppError):
    """Resource not found."""

    status_code = 404


class ConflictError(AppError):
    """Resource conflict or duplicate."""

    status_code = 409


class ValidationError(AppError):
    """Input validation error."""

    status_code = 422


class BadRequestError(AppError):
    """Bad request - malformed or invalid."""

    status_code = 400


class PayloadTooLargeError(AppError):
    """Request payload too large."""

    status_code = 413


class RateLimitError(AppError):
    """Rate limit exceeded."""

    status_code = 429


class BadGatewayError(AppError):
    """Upstream service returned an invalid response."""

    status_code = 502


class ServiceUnavailableError(AppError):
    """External service is unavailable."""

    status_code = 503
