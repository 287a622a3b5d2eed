"""Pydantic schemas for contact operations."""

from typing import Literal
from uuid import UUID

from pydantic import Field

from promotor.shared.schemas import BaseSchema, UUIDTimestampSchema

from .models import StakeholderType

StakeholderTypeFilter = Literal["All", "Client", "Provider"]


class StakeholderCreate(BaseSchema):
    """Schema for creating a contact."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Company or person name",
        examples=["Construcciones Norte SL"],
    )
    type: StakeholderType = Field(
        default=StakeholderType.PROVIDER,
        description="Client or Provider",
    )
    activity: str = Field(
        default="",
        max_length=255,
        description="Trade or role",
        examples=["Obra Civil"],
    )
    email: str = Field(
        default="",
        max_length=255,
        description="Contact e-mail",
        examples=["contacto@cnorte.com"],
    )
    phone: str = Field(
        default="",
        max_length=64,
        description="Contact phone",
    )
    address: str | None = Field(
        default=None,
        max_length=500,
        description="Postal address",
    )
    tax_id: str | None = Field(
        default=None,
        max_length=32,
        description="NIF/CIF",
        examples=["B12345678"],
    )
    notes: str | None = Field(
        default=None,
        description="Free-text notes",
    )


class StakeholderUpdate(BaseSchema):
    """Schema for updating a contact.

    Only the fields that are sent are changed.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    type: StakeholderType | None = None
    activity: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=64)
    address: str | None = Field(default=None, max_length=500)
    tax_id: str | None = Field(default=None, max_length=32)
    notes: str | None = None


class StakeholderResponse(UUIDTimestampSchema):
    """Contact data."""

    name: str
    type: StakeholderType
    activity: str
    email: str
    phone: str
    address: str | None = None
    tax_id: str | None = None
    notes: str | None = None


class ProviderStats(BaseSchema):
    """Business volume of a contact across all projects."""

    stakeholder_id: UUID = Field(..., description="Contact ID")
    total_budgeted: float = Field(
        ...,
        description="Sum of budget items quoted by this contact",
    )
    project_count: int = Field(
        ...,
        description="Projects that link the contact or hold one of its budget items",
    )
