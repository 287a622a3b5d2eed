"""Projects module: developments with their team, timeline, budget and alerts."""

from .models import (
    ActionType,
    AlertType,
    BudgetItem,
    BudgetStatus,
    Project,
    ProjectAction,
    ProjectAlert,
    ProjectStakeholder,
    ProjectStatus,
)
from .schemas import (
    BudgetComparison,
    BudgetItemCreate,
    BudgetItemResponse,
    BudgetItemUpdate,
    BudgetSummary,
    FinancialSummary,
    ProjectActionCreate,
    ProjectActionResponse,
    ProjectActionUpdate,
    ProjectAlertCreate,
    ProjectAlertResponse,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
)
from .service import ProjectService, executed_percent

__all__ = [
    "ActionType",
    "AlertType",
    "BudgetComparison",
    "BudgetItem",
    "BudgetItemCreate",
    "BudgetItemResponse",
    "BudgetItemUpdate",
    "BudgetStatus",
    "BudgetSummary",
    "FinancialSummary",
    "Project",
    "ProjectAction",
    "ProjectActionCreate",
    "ProjectActionResponse",
    "ProjectActionUpdate",
    "ProjectAlert",
    "ProjectAlertCreate",
    "ProjectAlertResponse",
    "ProjectCreate",
    "ProjectResponse",
    "ProjectService",
    "ProjectStakeholder",
    "ProjectStatus",
    "ProjectUpdate",
    "executed_percent",
]
