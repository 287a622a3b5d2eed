"""Base Pydantic schemas for API requests and responses."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BaseSchema(BaseModel):
    """Base schema with the shared configuration.

    All schemas inherit from this class for consistent behaviour
    across the application.
    """

    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        str_strip_whitespace=True,
        populate_by_name=True,
    )


class UUIDSchema(BaseSchema):
    """Schema with a UUID identifier."""

    id: uuid.UUID = Field(
        ...,
        description="Unique identifier",
    )


class TimestampSchema(BaseSchema):
    """Schema with timestamp fields."""

    created_at: datetime = Field(
        ...,
        description="Creation time",
    )
    updated_at: datetime = Field(
        ...,
        description="Last update time",
    )


class UUIDTimestampSchema(UUIDSchema, TimestampSchema):
    """Identifier plus audit timestamps.

    The most common base for response schemas.
    """

    pass


class HealthResponse(BaseSchema):
    """Health check response."""

    status: str = Field(
        ...,
        description="Overall health status",
        examples=["healthy", "unhealthy", "degraded"],
    )
    version: str | None = Field(
        default=None,
        description="Application version",
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(),
        description="Time of the check",
    )
    dependencies: dict[str, str] | None = Field(
        default=None,
        description="Health of individual dependencies",
    )

    @property
    def is_healthy(self) -> bool:
        """Whether the status is 'healthy'."""
        return self.status == "healthy"


class SuccessResponse(BaseSchema):
    """Generic success response for operations without a payload."""

    success: bool = Field(
        default=True,
        description="Whether the operation succeeded",
    )
    message: str = Field(
        ...,
        description="Success message",
    )
