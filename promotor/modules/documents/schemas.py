"""Pydantic schemas for documents and the AI scanner."""

from __future__ import annotations

import datetime as dt
from typing import Any
from uuid import UUID

from pydantic import Field, ValidationInfo, field_validator

from promotor.shared.schemas import BaseSchema, UUIDSchema

from .models import DocumentStatus, DocumentType, LinkedEntityType


class DocumentResponse(UUIDSchema):
    """Document record."""

    name: str
    type: DocumentType
    date: dt.date
    amount: float | None = None
    status: DocumentStatus
    linked_entity_id: UUID | None = None
    linked_entity_type: LinkedEntityType = LinkedEntityType.NONE
    linked_entity_name: str | None = Field(
        default=None,
        description="Name of the linked project or contact, if it still exists",
    )
    stored_filename: str | None = None
    content_type: str | None = None
    size: int | None = None
    has_file: bool = False
    created_at: dt.datetime


class DocumentAnalysis(BaseSchema):
    """Fields extracted from a document.

    Accepts the camelCase keys the extraction prompt asks the model for.
    """

    type: str = Field(default=DocumentType.OTHER.value, description="Detected document type")
    summary: str = Field(default="", description="One-sentence description")
    date: str | None = Field(default=None, description="Document date (YYYY-MM-DD)")
    amount: float | None = Field(default=None, description="Total amount")
    concept: str | None = Field(default=None, description="Main concept or title")
    provider_name: str | None = Field(
        default=None,
        alias="providerName",
        description="Issuing company or person",
    )
    project_name: str | None = Field(
        default=None,
        alias="projectName",
        description="Project mentioned in the document",
    )
    confidence: float = Field(default=0, description="Extraction confidence (1-100)")

    @field_validator("type", "summary", "confidence", mode="before")
    @classmethod
    def null_to_default(cls, v: Any, info: ValidationInfo) -> Any:
        """Treat an explicit null from the model as a missing field."""
        if v is None:
            return cls.model_fields[info.field_name].default
        return v

    @property
    def document_type(self) -> DocumentType:
        """Detected type, ``Other`` when not a known type."""
        try:
            return DocumentType(self.type)
        except ValueError:
            return DocumentType.OTHER

    @property
    def parsed_date(self) -> dt.date | None:
        """Detected date, None when missing or malformed."""
        if not self.date:
            return None
        try:
            return dt.date.fromisoformat(self.date[:10])
        except ValueError:
            return None


class EntityRef(BaseSchema):
    """ID and name of a matched project or contact."""

    id: UUID
    name: str


class ScanResult(BaseSchema):
    """Outcome of scanning a file."""

    file_name: str
    content_type: str
    size: int
    analyzable: bool = Field(..., description="Whether the AI extraction ran")
    analysis: DocumentAnalysis
    detected_project: EntityRef | None = None
    detected_stakeholder: EntityRef | None = None


class ProcessResult(BaseSchema):
    """Outcome of saving a scanned document."""

    document: DocumentResponse
    budget_item_id: UUID | None = Field(
        default=None,
        description="Budget item created from a Budget document",
    )
    stakeholder_linked: bool = Field(
        default=False,
        description="Whether the provider was added to the project team",
    )
