"""
Dashboard figures.

KPIs and the cash-flow curve are derived from the stored projects; the
portfolio curve is the stage-wise sum of the per-project curves.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from promotor.modules.projects.models import Project, ProjectStatus
from promotor.modules.projects.service import executed_percent

from .schemas import CashFlowPoint, DashboardKPIs, DashboardResponse, ProjectCostBar

logger = logging.getLogger(__name__)

CASH_FLOW_STAGES = ("Inicio", "25%", "50%", "75%", "Actual", "Fin")
DASHBOARD_CSV_HEADERS = [
    "ID",
    "Nombre",
    "Estado",
    "Ubicacion",
    "Presupuesto",
    "Coste Real",
    "Progreso",
]

# Final income over budget at delivery
SALES_MULTIPLIER = 1.3


def project_cash_flow(budget: float, actual_cost: float) -> list[CashFlowPoint]:
    """
    Cash-flow curve of one project.

    Expenses ramp from 10% of the budget at the start through fractions of
    the actual cost to the full budget at the end; the only income is the
    sale at the end.
    """
    expenses = [
        budget * 0.1,
        actual_cost * 0.4,
        actual_cost * 0.6,
        actual_cost * 0.8,
        actual_cost,
        budget,
    ]
    income = [0.0, 0.0, 0.0, 0.0, 0.0, budget * SALES_MULTIPLIER]

    return [
        CashFlowPoint(stage=stage, income=inc, expenses=exp, balance=inc - exp)
        for stage, inc, exp in zip(CASH_FLOW_STAGES, income, expenses, strict=True)
    ]


def portfolio_cash_flow(projects: Sequence[Project]) -> list[CashFlowPoint]:
    """Stage-wise sum of the per-project curves."""
    totals = [
        CashFlowPoint(stage=stage, income=0.0, expenses=0.0, balance=0.0)
        for stage in CASH_FLOW_STAGES
    ]
    for project in projects:
        for total, point in zip(
            totals, project_cash_flow(project.budget, project.actual_cost), strict=True
        ):
            total.income += point.income
            total.expenses += point.expenses
            total.balance += point.balance
    return totals


class DashboardService:
    """Dashboard KPIs, charts and export rows."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _scope(self, project_id: UUID | None) -> tuple[list[Project], Project | None]:
        """Projects in scope and the selected project (unknown IDs mean all)."""
        result = await self._session.execute(select(Project).order_by(Project.name, Project.id))
        projects = list(result.scalars().all())

        if project_id is not None:
            for project in projects:
                if project.id == project_id:
                    return [project], project
            logger.debug("Dashboard filter %s matches no project, showing all", project_id)

        return projects, None

    async def overview(self, project_id: UUID | None = None) -> DashboardResponse:
        """
        Dashboard data.

        Args:
            project_id: Project to focus on; None (or an unknown ID) for all
        """
        projects, selected = await self._scope(project_id)

        total_budget = sum(p.budget for p in projects)
        total_spent = sum(p.actual_cost for p in projects)

        kpis = DashboardKPIs(
            total_budget=total_budget,
            total_spent=total_spent,
            executed_percent=executed_percent(total_spent, total_budget),
            active_projects=sum(1 for p in projects if p.status == ProjectStatus.ACTIVE),
            status=selected.status if selected else None,
        )

        cash_flow = (
            project_cash_flow(selected.budget, selected.actual_cost)
            if selected
            else portfolio_cash_flow(projects)
        )

        return DashboardResponse(
            project_id=selected.id if selected else "all",
            kpis=kpis,
            cash_flow=cash_flow,
            cost_by_project=[
                ProjectCostBar(
                    project_id=p.id,
                    name=p.name,
                    budget=p.budget,
                    actual_cost=p.actual_cost,
                )
                for p in projects
            ],
        )

    async def csv_rows(self, project_id: UUID | None = None) -> list[list[object]]:
        """Rows for the dashboard report of the projects in scope."""
        projects, _ = await self._scope(project_id)
        return [
            [
                str(p.id),
                p.name,
                p.status.value,
                p.location,
                p.budget,
                p.actual_cost,
                p.progress,
            ]
            for p in projects
        ]
