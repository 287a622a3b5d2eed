"""Pydantic schemas for the dashboard."""

from typing import Literal
from uuid import UUID

from pydantic import Field

from promotor.modules.projects.models import ProjectStatus
from promotor.shared.schemas import BaseSchema


class DashboardKPIs(BaseSchema):
    """Headline figures for the selected scope."""

    total_budget: float
    total_spent: float
    executed_percent: float = Field(..., description="Spent over budget (%), one decimal")
    active_projects: int = Field(..., description="Projects under construction")
    status: ProjectStatus | None = Field(
        default=None,
        description="Status of the selected project (single-project scope only)",
    )


class CashFlowPoint(BaseSchema):
    """One stage of the cash-flow curve."""

    stage: str = Field(..., examples=["Inicio", "25%", "Actual", "Fin"])
    income: float
    expenses: float
    balance: float


class ProjectCostBar(BaseSchema):
    """Budget against actual cost of one project."""

    project_id: UUID
    name: str
    budget: float
    actual_cost: float


class DashboardResponse(BaseSchema):
    """Dashboard data for all projects or a single one."""

    project_id: UUID | Literal["all"] = "all"
    kpis: DashboardKPIs
    cash_flow: list[CashFlowPoint]
    cost_by_project: list[ProjectCostBar]
