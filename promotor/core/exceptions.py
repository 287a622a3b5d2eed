"""
Application exceptions.

Concrete errors raised by services and clients. All derive from the
``promotor.shared.errors`` hierarchy and are rendered by its handlers.
"""

from http import HTTPStatus
from uuid import UUID

from promotor.shared.errors import (
    AppError,
    BadGatewayError,
    ExceptionMapper,
    NotFoundError,
    PayloadTooLargeError,
    RateLimitError,
    ServiceUnavailableError,
    ValidationError,
    safe,
    setup_exception_handlers,
    trace_id_var,
)

__all__ = [
    "AppError",
    # Resources
    "NotFoundError",
    "ProjectNotFoundError",
    "StakeholderNotFoundError",
    "DocumentNotFoundError",
    "ActionNotFoundError",
    "BudgetItemNotFoundError",
    "AlertNotFoundError",
    "SessionNotFoundError",
    # Validation
    "ValidationError",
    "InvalidInputError",
    "UploadTooLargeError",
    # External services
    "ExternalServiceError",
    "LLMServiceError",
    "LLMConfigurationError",
    "LLMRateLimitError",
    "AIResponseParseError",
    # Re-exports
    "ExceptionMapper",
    "safe",
    "setup_exception_handlers",
    "trace_id_var",
]


# ==================== Resource exceptions ====================


class _EntityNotFoundError(NotFoundError):
    """Resource not found."""

    resource_type = "resource"

    def __init__(self, entity_id: UUID | str, message: str | None = None) -> None:
        self.entity_id = entity_id
        super().__init__(
            message or f"{self.default_message.rstrip('.')}: {entity_id}",
            details={"resource_id": str(entity_id), "resource_type": self.resource_type},
        )


class ProjectNotFoundError(_EntityNotFoundError):
    """Project not found."""

    resource_type = "project"


class StakeholderNotFoundError(_EntityNotFoundError):
    """Stakeholder not found."""

    resource_type = "stakeholder"


class DocumentNotFoundError(_EntityNotFoundError):
    """Document not found."""

    resource_type = "document"


class ActionNotFoundError(_EntityNotFoundError):
    """Project action not found."""

    resource_type = "action"


class BudgetItemNotFoundError(_EntityNotFoundError):
    """Budget item not found."""

    resource_type = "budget_item"


class AlertNotFoundError(_EntityNotFoundError):
    """Alert not found."""

    resource_type = "alert"


class SessionNotFoundError(NotFoundError):
    """No active session."""


# ==================== Validation exceptions ====================


class InvalidInputError(ValidationError):
    """Invalid input data."""

    code = "INVALID_INPUT"

    def __init__(self, message: str | None = None, field: str | None = None) -> None:
        super().__init__(message, details={"field": field} if field else None)


class UploadTooLargeError(PayloadTooLargeError):
    """Uploaded file exceeds the size limit."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"Uploaded file is {size} bytes; limit is {limit} bytes",
            details={"value": size, "limit": limit},
        )


# ==================== External service exceptions ====================


class ExternalServiceError(BadGatewayError):
    """External service error."""

    status_code = HTTPStatus.BAD_GATEWAY
    code = "EXTERNAL_SERVICE_ERROR"


class LLMServiceError(ExternalServiceError):
    """LLM service is unavailable."""

    code = "LLM_SERVICE_ERROR"


class AIResponseParseError(ExternalServiceError):
    """AI response could not be parsed."""


class LLMConfigurationError(ServiceUnavailableError):
    """API Key is missing. Please set LLM_API_KEY."""

    code = "LLM_CONFIGURATION_ERROR"


class LLMRateLimitError(RateLimitError):
    """LLM rate limit exceeded."""

    def __init__(self, message: str | None = None, retry_after: str | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(message, details={"service": "llm", "value": retry_after})
