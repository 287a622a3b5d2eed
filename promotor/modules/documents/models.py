"""SQLAlchemy model for stored documents (invoices, blueprints, budgets...)."""

from __future__ import annotations

from datetime import date
from enum import Enum
from uuid import UUID

from sqlalchemy import Date, Float, Integer, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from promotor.core.database import Base
from promotor.shared.mixins import TimestampMixin, UUIDMixin
from promotor.shared.uuid7 import UUID7


class DocumentType(str, Enum):
    """Document category."""

    INVOICE = "Invoice"
    BLUEPRINT = "Blueprint"
    CONTRACT = "Contract"
    OTHER = "Other"
    BUDGET = "Budget"
    LICENSE = "License"


class DocumentStatus(str, Enum):
    """Processing state."""

    PROCESSED = "Processed"
    PENDING = "Pending"


class LinkedEntityType(str, Enum):
    """Kind of entity a document is attached to."""

    PROJECT = "Project"
    STAKEHOLDER = "Stakeholder"
    NONE = "None"


def _enum_column(enum_cls: type[Enum]) -> SQLEnum:
    return SQLEnum(
        enum_cls,
        native_enum=False,
        values_callable=lambda x: [e.value for e in x],
        validate_strings=True,
    )


class Document(UUIDMixin, TimestampMixin, Base):
    """
    Document record with optional stored file.

    The link is polymorphic (project or stakeholder) and carries no foreign
    key: removing the target leaves the document in place with a dangling
    link that resolves to no name.

    Attributes:
        name: Display name (usually the original file name)
        type: Document category
        date: Document date
        amount: Money amount (invoices, budgets)
        status: Processing state
        linked_entity_id: Target project or stakeholder ID
        linked_entity_type: Target kind
        stored_filename: Original file name of the stored file
        content_type: MIME type of the stored file
        size: Stored file size in bytes
    """

    __tablename__ = "documents"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[DocumentType] = mapped_column(
        _enum_column(DocumentType),
        nullable=False,
        default=DocumentType.OTHER,
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[DocumentStatus] = mapped_column(
        _enum_column(DocumentStatus),
        nullable=False,
        default=DocumentStatus.PROCESSED,
    )
    linked_entity_id: Mapped[UUID | None] = mapped_column(UUID7, nullable=True, index=True)
    linked_entity_type: Mapped[LinkedEntityType] = mapped_column(
        _enum_column(LinkedEntityType),
        nullable=False,
        default=LinkedEntityType.NONE,
    )
    stored_filename: Mapped[str | None] = mapped_column(String(255), nullable=True)
    content_type: Mapped[str | None] = mapped_column(String(127), nullable=True)
    size: Mapped[int | None] = mapped_column(Integer, nullable=True)

    @property
    def has_file(self) -> bool:
        """Whether a file was stored for this document."""
        return self.stored_filename is not None
