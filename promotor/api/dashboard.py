"""FastAPI router for the portfolio dashboard."""

from __future__ import annotations

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from promotor.core.dependencies import DatabaseSession
from promotor.modules.dashboard.schemas import DashboardResponse
from promotor.modules.dashboard.service import DASHBOARD_CSV_HEADERS, DashboardService
from promotor.shared.csv_export import csv_response, render_csv

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


async def get_dashboard_service(session: DatabaseSession) -> DashboardService:
    """Build the dashboard service for a request."""
    return DashboardService(session)


Dashboard = Annotated[DashboardService, Depends(get_dashboard_service)]
ProjectFilter = Annotated[str, Query(description="Project ID, or ``all`` for the portfolio")]


def _parse_project_filter(value: str) -> UUID | None:
    # Anything that is not a project ID means the whole portfolio
    try:
        return UUID(value)
    except ValueError:
        return None


@router.get("", response_model=DashboardResponse, summary="KPIs and cash flow")
async def overview(service: Dashboard, project_id: ProjectFilter = "all") -> DashboardResponse:
    """
    Portfolio or single-project dashboard.

    An unknown project ID falls back to the whole portfolio.
    """
    return await service.overview(_parse_project_filter(project_id))


@router.get("/export", summary="Download the dashboard report as CSV")
async def export(service: Dashboard, project_id: ProjectFilter = "all") -> Response:
    rows = await service.csv_rows(_parse_project_filter(project_id))
    return csv_response(
        render_csv(DASHBOARD_CSV_HEADERS, rows),
        f"dashboard_report_{date.today().isoformat()}.csv",
    )
