"""SQLAlchemy model mixins for common columns."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column

from .uuid7 import UUID7, uuid7


def utcnow() -> datetime:
    """Current time in UTC."""
    return datetime.now(UTC)


class UUIDMixin:
    """Mixin providing a UUID7 primary key.

    UUID7 keeps identifiers time-ordered, so rows inserted later sort
    after earlier ones.

    Example:
        class Stakeholder(UUIDMixin, Base):
            __tablename__ = "stakeholders"
            name: Mapped[str] = mapped_column(String(255))
    """

    id: Mapped[uuid.UUID] = mapped_column(
        UUID7,
        primary_key=True,
        default=uuid7,
        nullable=False,
    )


class TimestampMixin:
    """Mixin providing created_at and updated_at timestamps.

    Values are produced on the Python side so they are present on the
    instance right after flush, without a reload.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )
