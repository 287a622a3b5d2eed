"""Pydantic schemas for whole-store snapshots."""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from pydantic import Field

from promotor.modules.documents.models import DocumentStatus, DocumentType, LinkedEntityType
from promotor.modules.projects.models import ActionType, AlertType, BudgetStatus, ProjectStatus
from promotor.modules.stakeholders.models import StakeholderType
from promotor.shared.schemas import BaseSchema
from promotor.shared.uuid7 import uuid7

SNAPSHOT_VERSION = 1


class StakeholderSnapshot(BaseSchema):
    """Contact as stored in a snapshot."""

    id: UUID = Field(default_factory=uuid7)
    name: str = Field(..., min_length=1)
    type: StakeholderType
    activity: str = ""
    email: str = ""
    phone: str = ""
    address: str | None = None
    tax_id: str | None = None
    notes: str | None = None


class ActionSnapshot(BaseSchema):
    """Timeline entry as stored in a snapshot."""

    id: UUID = Field(default_factory=uuid7)
    date: dt.date
    title: str
    description: str = ""
    type: ActionType
    amount: float | None = None


class BudgetItemSnapshot(BaseSchema):
    """Budget item as stored in a snapshot."""

    id: UUID = Field(default_factory=uuid7)
    concept: str
    amount: float = 0.0
    actual_amount: float = 0.0
    date: dt.date
    status: BudgetStatus = BudgetStatus.PENDING
    provider_id: UUID | None = None
    document_id: UUID | None = None


class AlertSnapshot(BaseSchema):
    """Reminder as stored in a snapshot."""

    id: UUID = Field(default_factory=uuid7)
    title: str
    date: dt.date
    type: AlertType
    is_completed: bool = False


class ProjectSnapshot(BaseSchema):
    """Project with its nested collections as stored in a snapshot."""

    id: UUID = Field(default_factory=uuid7)
    name: str = Field(..., min_length=1)
    location: str = ""
    budget: float
    actual_cost: float = 0.0
    progress: int = Field(default=0, ge=0, le=100)
    status: ProjectStatus = ProjectStatus.PLANNING
    start_date: dt.date
    end_date: dt.date | None = None
    stakeholder_ids: list[UUID] = Field(default_factory=list)
    actions: list[ActionSnapshot] = Field(default_factory=list)
    budgets: list[BudgetItemSnapshot] = Field(default_factory=list)
    alerts: list[AlertSnapshot] = Field(default_factory=list)


class DocumentSnapshot(BaseSchema):
    """Document metadata as stored in a snapshot (files are not included)."""

    id: UUID = Field(default_factory=uuid7)
    name: str
    type: DocumentType = DocumentType.OTHER
    date: dt.date
    amount: float | None = None
    status: DocumentStatus = DocumentStatus.PROCESSED
    linked_entity_id: UUID | None = None
    linked_entity_type: LinkedEntityType = LinkedEntityType.NONE
    stored_filename: str | None = None
    content_type: str | None = None
    size: int | None = None


class Snapshot(BaseSchema):
    """The whole store."""

    version: int = SNAPSHOT_VERSION
    exported_at: dt.datetime | None = None
    projects: list[ProjectSnapshot] = Field(default_factory=list)
    stakeholders: list[StakeholderSnapshot] = Field(default_factory=list)
    documents: list[DocumentSnapshot] = Field(default_factory=list)


class ImportResult(BaseSchema):
    """Counts of records loaded from a snapshot."""

    projects: int
    stakeholders: int
    documents: int
