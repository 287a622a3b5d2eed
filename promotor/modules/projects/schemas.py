"""Pydantic schemas for projects and their nested collections."""

from __future__ import annotations

import datetime as dt
from typing import Literal
from uuid import UUID

from pydantic import Field

from promotor.shared.schemas import BaseSchema, UUIDSchema, UUIDTimestampSchema

from .models import ActionType, AlertType, BudgetStatus, ProjectStatus

# ==================== Projects ====================


class ProjectCreate(BaseSchema):
    """Schema for creating a project."""

    name: str = Field(
        ...,
        max_length=255,
        description="Project name",
        examples=["Residencial Los Olivos"],
    )
    location: str = Field(
        default="",
        max_length=255,
        description="Location",
        examples=["Madrid, Zona Norte"],
    )
    budget: float = Field(
        ...,
        description="Approved total budget",
        examples=[4500000],
    )
    status: ProjectStatus = Field(
        default=ProjectStatus.PLANNING,
        description="Lifecycle stage",
    )
    start_date: dt.date | None = Field(
        default=None,
        description="Start date (today when omitted)",
    )
    end_date: dt.date | None = Field(
        default=None,
        description="Planned delivery date",
    )


class ProjectUpdate(BaseSchema):
    """Schema for updating a project.

    Only the fields that are sent are changed.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    location: str | None = Field(default=None, max_length=255)
    budget: float | None = Field(default=None, ge=0)
    actual_cost: float | None = Field(default=None, ge=0)
    progress: int | None = Field(default=None, ge=0, le=100)
    status: ProjectStatus | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None


class ProjectActionResponse(UUIDSchema):
    """Timeline entry."""

    date: dt.date
    title: str
    description: str
    type: ActionType
    amount: float | None = None


class BudgetItemResponse(UUIDSchema):
    """Budget item (partida)."""

    concept: str
    amount: float
    actual_amount: float
    date: dt.date
    status: BudgetStatus
    provider_id: UUID | None = None
    document_id: UUID | None = None


class ProjectAlertResponse(UUIDSchema):
    """Reminder."""

    title: str
    date: dt.date
    type: AlertType
    is_completed: bool


class ProjectResponse(UUIDTimestampSchema):
    """Project with its nested collections."""

    name: str
    location: str
    budget: float
    actual_cost: float
    progress: int
    status: ProjectStatus
    start_date: dt.date
    end_date: dt.date | None = None
    stakeholder_ids: list[UUID] = Field(default_factory=list)
    actions: list[ProjectActionResponse] = Field(
        default_factory=list,
        description="Timeline, newest first",
    )
    budgets: list[BudgetItemResponse] = Field(default_factory=list)
    alerts: list[ProjectAlertResponse] = Field(default_factory=list)


class StakeholderLink(BaseSchema):
    """Request body for adding a contact to a project team."""

    stakeholder_id: UUID


# ==================== Actions ====================


class ProjectActionCreate(BaseSchema):
    """Schema for adding a timeline entry."""

    title: str = Field(
        default="",
        max_length=255,
        description="Title (``Actuación`` when blank)",
    )
    description: str = Field(default="", description="Free text")
    type: ActionType = Field(default=ActionType.MILESTONE)
    date: dt.date | None = Field(default=None, description="Date (today when omitted)")
    amount: float | None = Field(
        default=None,
        ge=0,
        description="Amount; Payment actions add it to the project's actual cost",
    )


class ProjectActionUpdate(BaseSchema):
    """Schema for editing a timeline entry."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    type: ActionType | None = None
    date: dt.date | None = None
    amount: float | None = Field(default=None, ge=0)


# ==================== Budget items ====================


class BudgetItemCreate(BaseSchema):
    """Schema for adding a budget item."""

    concept: str = Field(
        ...,
        max_length=255,
        description="Concept",
        examples=["Instalación Eléctrica General"],
    )
    amount: float = Field(default=0.0, ge=0, description="Estimated or quoted amount")
    actual_amount: float = Field(default=0.0, ge=0, description="Amount actually spent")
    date: dt.date | None = Field(default=None, description="Date (today when omitted)")
    status: BudgetStatus = Field(default=BudgetStatus.PENDING)
    provider_id: UUID | None = Field(default=None, description="Quoting provider")


class BudgetItemUpdate(BaseSchema):
    """Schema for editing a budget item."""

    concept: str | None = Field(default=None, min_length=1, max_length=255)
    amount: float | None = Field(default=None, ge=0)
    actual_amount: float | None = Field(default=None, ge=0)
    date: dt.date | None = None
    status: BudgetStatus | None = None
    provider_id: UUID | None = None


class BudgetBulkDelete(BaseSchema):
    """IDs of budget items to remove."""

    ids: list[UUID] = Field(default_factory=list)


class BudgetBulkDeleteResult(BaseSchema):
    """Outcome of a bulk removal."""

    deleted: int


class BudgetCompareRequest(BaseSchema):
    """Budget items to compare, in selection order."""

    ids: list[UUID] = Field(default_factory=list)


class BudgetSummaryItem(BudgetItemResponse):
    """Budget item with its deviation."""

    deviation: float = Field(..., description="Estimated minus actual")


class BudgetSummary(BaseSchema):
    """Estimated-vs-actual totals for a project's budget items."""

    project_id: UUID
    provider_id: UUID | Literal["all"] = "all"
    items: list[BudgetSummaryItem]
    total_estimated: float
    total_actual: float
    deviation: float
    within_budget: bool


class BudgetComparisonOption(BaseSchema):
    """One quote in a side-by-side comparison."""

    label: str = Field(..., examples=["Opción 1"])
    budget_item_id: UUID
    concept: str
    provider_name: str
    amount: float
    is_cheapest: bool
    difference: float = Field(..., description="Amount minus the cheapest amount")


class BudgetComparison(BaseSchema):
    """Side-by-side comparison of quotes."""

    options: list[BudgetComparisonOption]
    min_amount: float


# ==================== Alerts ====================


class ProjectAlertCreate(BaseSchema):
    """Schema for adding a reminder."""

    title: str = Field(..., min_length=1, max_length=255)
    date: dt.date
    type: AlertType = Field(default=AlertType.OTHER)


# ==================== Financials ====================


class FinancialSummary(BaseSchema):
    """Economic status of a project."""

    project_id: UUID
    budget: float
    actual_cost: float
    remaining: float
    executed_percent: float
    over_budget: bool
    payments: list[ProjectActionResponse]



# ==================== Attachments ====================


class ActionAttachmentResponse(BaseSchema):
    """Timeline entry after a file was attached to it."""

    action: ProjectActionResponse
    document_id: UUID
    document_name: str


class BudgetAttachmentResponse(BaseSchema):
    """Budget item after a quote file was attached to it."""

    budget_item: BudgetItemResponse
    document_id: UUID
    document_name: str
