"""Dashboard module: portfolio KPIs and cash-flow series."""

from .schemas import CashFlowPoint, DashboardKPIs, DashboardResponse, ProjectCostBar
from .service import (
    CASH_FLOW_STAGES,
    DASHBOARD_CSV_HEADERS,
    DashboardService,
    portfolio_cash_flow,
    project_cash_flow,
)

__all__ = [
    "CASH_FLOW_STAGES",
    "DASHBOARD_CSV_HEADERS",
    "CashFlowPoint",
    "DashboardKPIs",
    "DashboardResponse",
    "DashboardService",
    "ProjectCostBar",
    "portfolio_cash_flow",
    "project_cash_flow",
]
