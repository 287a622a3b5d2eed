"""
SQLAlchemy models for real-estate development projects.

Main components:
    - Project: a development (promoción) with budget, cost and progress
    - ProjectAction: timeline entry (milestone, payment, construction, legal)
    - BudgetItem: estimated-vs-actual cost line (partida)
    - ProjectAlert: dated reminder with completion flag
    - ProjectStakeholder: team link between a project and a contact
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from promotor.core.database import Base
from promotor.shared.mixins import TimestampMixin, UUIDMixin, utcnow
from promotor.shared.uuid7 import UUID7


class ProjectStatus(str, Enum):
    """Project lifecycle stage (stored with its display label)."""

    PLANNING = "En Planificación"
    ACTIVE = "En Construcción"
    SALES = "Comercialización"
    COMPLETED = "Entregado"


class ActionType(str, Enum):
    """Kind of timeline entry."""

    MILESTONE = "Milestone"
    PAYMENT = "Payment"
    CONSTRUCTION = "Construction"
    LEGAL = "Legal"


class AlertType(str, Enum):
    """Kind of reminder."""

    LICENSE = "License"
    MEETING = "Meeting"
    DEADLINE = "Deadline"
    OTHER = "Other"


class BudgetStatus(str, Enum):
    """Approval state of a budget item."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


def _enum_column(enum_cls: type[Enum]) -> SQLEnum:
    return SQLEnum(
        enum_cls,
        native_enum=False,
        values_callable=lambda x: [e.value for e in x],
        validate_strings=True,
    )


class Project(UUIDMixin, TimestampMixin, Base):
    """
    Real-estate development project.

    Attributes:
        name: Project name
        location: Free-text location
        budget: Approved total budget
        actual_cost: Money spent so far
        progress: Completion percentage (0-100)
        status: Lifecycle stage
        start_date: Start date
        end_date: Planned delivery date (optional)
        stakeholder_links: Team links, oldest first
        actions: Timeline entries, newest first
        budgets: Budget items in insertion order
        alerts: Reminders in insertion order
    """

    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    budget: Mapped[float] = mapped_column(Float, nullable=False)
    actual_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[ProjectStatus] = mapped_column(
        _enum_column(ProjectStatus),
        nullable=False,
        default=ProjectStatus.PLANNING,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    stakeholder_links: Mapped[list[ProjectStakeholder]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectStakeholder.linked_at",
        lazy="selectin",
        passive_deletes=True,
    )
    actions: Mapped[list[ProjectAction]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="(ProjectAction.date.desc(), ProjectAction.created_at.desc())",
        lazy="selectin",
        passive_deletes=True,
    )
    budgets: Mapped[list[BudgetItem]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="BudgetItem.created_at",
        lazy="selectin",
        passive_deletes=True,
    )
    alerts: Mapped[list[ProjectAlert]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectAlert.created_at",
        lazy="selectin",
        passive_deletes=True,
    )

    @property
    def stakeholder_ids(self) -> list[UUID]:
        """Linked stakeholder IDs in link order."""
        return [link.stakeholder_id for link in self.stakeholder_links]


class ProjectStakeholder(Base):
    """Team link between a project and a stakeholder."""

    __tablename__ = "project_stakeholders"

    project_id: Mapped[UUID] = mapped_column(
        UUID7,
        ForeignKey("projects.id", ondelete="CASCADE"),
        primary_key=True,
    )
    stakeholder_id: Mapped[UUID] = mapped_column(
        UUID7,
        ForeignKey("stakeholders.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    linked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    project: Mapped[Project] = relationship(back_populates="stakeholder_links")


class ProjectAction(UUIDMixin, TimestampMixin, Base):
    """Timeline entry of a project.

    Payment actions with an amount count towards the project's actual cost.
    """

    __tablename__ = "project_actions"

    project_id: Mapped[UUID] = mapped_column(
        UUID7,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[ActionType] = mapped_column(_enum_column(ActionType), nullable=False)
    amount: Mapped[float | None] = mapped_column(Float, nullable=True)

    project: Mapped[Project] = relationship(back_populates="actions")

    @property
    def cost_contribution(self) -> float:
        """Amount this action adds to the project's actual cost."""
        if self.type == ActionType.PAYMENT and self.amount:
            return self.amount
        return 0.0


class BudgetItem(UUIDMixin, TimestampMixin, Base):
    """Estimated-vs-actual cost line of a project."""

    __tablename__ = "budget_items"

    project_id: Mapped[UUID] = mapped_column(
        UUID7,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    concept: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    actual_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[BudgetStatus] = mapped_column(
        _enum_column(BudgetStatus),
        nullable=False,
        default=BudgetStatus.PENDING,
    )
    provider_id: Mapped[UUID | None] = mapped_column(
        UUID7,
        ForeignKey("stakeholders.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    document_id: Mapped[UUID | None] = mapped_column(
        UUID7,
        ForeignKey("documents.id", ondelete="SET NULL"),
        nullable=True,
    )

    project: Mapped[Project] = relationship(back_populates="budgets")

    @property
    def deviation(self) -> float:
        """Estimated minus actual amount."""
        return self.amount - (self.actual_amount or 0.0)


class ProjectAlert(UUIDMixin, TimestampMixin, Base):
    """Dated reminder attached to a project."""

    __tablename__ = "project_alerts"

    project_id: Mapped[UUID] = mapped_column(
        UUID7,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    type: Mapped[AlertType] = mapped_column(_enum_column(AlertType), nullable=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    project: Mapped[Project] = relationship(back_populates="alerts")
