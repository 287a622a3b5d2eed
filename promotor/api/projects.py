"""FastAPI router for projects and their nested collections."""

from __future__ import annotations

import logging
from datetime import date
from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from fastapi.responses import Response

from promotor.core.dependencies import DatabaseSession, FileStore
from promotor.modules.documents.storage import read_upload
from promotor.modules.projects.schemas import (
    ActionAttachmentResponse,
    BudgetAttachmentResponse,
    BudgetBulkDelete,
    BudgetBulkDeleteResult,
    BudgetCompareRequest,
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
    StakeholderLink,
)
from promotor.modules.projects.service import (
    BUDGET_CSV_HEADERS,
    PAYMENT_CSV_HEADERS,
    PROJECT_CSV_HEADERS,
    ProjectService,
)
from promotor.modules.stakeholders.schemas import StakeholderResponse
from promotor.shared.csv_export import csv_response, render_csv, safe_filename_part

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["Projects"])


async def get_project_service(session: DatabaseSession, file_store: FileStore) -> ProjectService:
    """
    Build the project service for a request.

    Args:
        session: Async database session
        file_store: Local document storage

    Returns:
        ProjectService: Service bound to the request session
    """
    return ProjectService(session, file_store=file_store)


Projects = Annotated[ProjectService, Depends(get_project_service)]


# ==================== Projects ====================


@router.get("", response_model=list[ProjectResponse], summary="List projects")
async def list_projects(service: Projects) -> list[ProjectResponse]:
    """List every project ordered by name."""
    projects = await service.list()
    return [ProjectResponse.model_validate(p) for p in projects]


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
    responses={
        201: {"description": "Project created"},
        422: {"description": "Blank name or non-positive budget"},
    },
)
async def create_project(data: ProjectCreate, service: Projects) -> ProjectResponse:
    """
    Create a project.

    Location, progress, status and dates are optional. Actual cost starts
    at zero and the team and collections start empty.

    Args:
        data: Project fields
        service: Project service

    Returns:
        ProjectResponse: The new project
    """
    project = await service.create(data)
    return ProjectResponse.model_validate(project)


@router.get("/export", summary="Download all projects as CSV")
async def export_projects(service: Projects) -> Response:
    """Spreadsheet of every project, named after today's date."""
    rows = await service.projects_csv_rows()
    return csv_response(
        render_csv(PROJECT_CSV_HEADERS, rows),
        f"proyectos_export_{date.today().isoformat()}.csv",
    )


@router.get(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Get a project",
    responses={404: {"description": "Project not found"}},
)
async def get_project(project_id: UUID, service: Projects) -> ProjectResponse:
    """Get one project with its team, timeline, budget and alerts."""
    project = await service.get(project_id)
    return ProjectResponse.model_validate(project)


@router.patch(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Update a project",
    responses={404: {"description": "Project not found"}},
)
async def update_project(
    project_id: UUID,
    data: ProjectUpdate,
    service: Projects,
) -> ProjectResponse:
    """Update the given fields; omitted fields keep their value."""
    project = await service.update(project_id, data)
    return ProjectResponse.model_validate(project)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a project",
    responses={404: {"description": "Project not found"}},
)
async def delete_project(project_id: UUID, service: Projects) -> None:
    """
    Delete a project with its timeline, budget items, alerts and team links.

    Documents linked to the project are kept.
    """
    await service.delete(project_id)


# ==================== Team ====================


@router.post(
    "/{project_id}/stakeholders",
    response_model=ProjectResponse,
    summary="Add a contact to the project team",
    responses={404: {"description": "Project or contact not found"}},
)
async def add_stakeholder(
    project_id: UUID,
    data: StakeholderLink,
    service: Projects,
) -> ProjectResponse:
    """Link a contact to the project. Linking twice is harmless."""
    project = await service.add_stakeholder(project_id, data.stakeholder_id)
    return ProjectResponse.model_validate(project)


@router.delete(
    "/{project_id}/stakeholders/{stakeholder_id}",
    response_model=ProjectResponse,
    summary="Remove a contact from the project team",
    responses={404: {"description": "Project not found"}},
)
async def remove_stakeholder(
    project_id: UUID,
    stakeholder_id: UUID,
    service: Projects,
) -> ProjectResponse:
    project = await service.remove_stakeholder(project_id, stakeholder_id)
    return ProjectResponse.model_validate(project)


@router.get(
    "/{project_id}/available-providers",
    response_model=list[StakeholderResponse],
    summary="Providers not yet in the team",
)
async def available_providers(project_id: UUID, service: Projects) -> list[StakeholderResponse]:
    """Providers that can still be added to the project team."""
    providers = await service.available_providers(project_id)
    return [StakeholderResponse.model_validate(p) for p in providers]


# ==================== Timeline ====================


@router.post(
    "/{project_id}/actions",
    response_model=ProjectActionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a timeline entry",
    responses={404: {"description": "Project not found"}},
)
async def add_action(
    project_id: UUID,
    data: ProjectActionCreate,
    service: Projects,
) -> ProjectActionResponse:
    """
    Add an entry to the project timeline.

    A payment with an amount adds that amount to the project's actual cost.
    A blank title becomes ``Actuación`` and a missing date becomes today.
    """
    action = await service.add_action(project_id, data)
    return ProjectActionResponse.model_validate(action)


@router.patch(
    "/{project_id}/actions/{action_id}",
    response_model=ProjectActionResponse,
    summary="Update a timeline entry",
    responses={404: {"description": "Project or action not found"}},
)
async def update_action(
    project_id: UUID,
    action_id: UUID,
    data: ProjectActionUpdate,
    service: Projects,
) -> ProjectActionResponse:
    """Edit an entry; the actual cost follows payment changes."""
    action = await service.update_action(project_id, action_id, data)
    return ProjectActionResponse.model_validate(action)


@router.delete(
    "/{project_id}/actions/{action_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a timeline entry",
    responses={404: {"description": "Project or action not found"}},
)
async def delete_action(project_id: UUID, action_id: UUID, service: Projects) -> None:
    await service.delete_action(project_id, action_id)


@router.post(
    "/{project_id}/actions/{action_id}/attachment",
    response_model=ActionAttachmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Attach a file to a timeline entry",
    responses={
        404: {"description": "Project or action not found"},
        413: {"description": "File too large"},
    },
)
async def attach_action_document(
    project_id: UUID,
    action_id: UUID,
    service: Projects,
    file: Annotated[UploadFile, File(description="File to attach")],
) -> ActionAttachmentResponse:
    """
    Store a file for a timeline entry.

    The file becomes a project document (an Invoice for payments) and the
    entry description records its name.

    Args:
        project_id: Project ID
        action_id: Timeline entry ID
        service: Project service
        file: Uploaded file

    Returns:
        ActionAttachmentResponse: Updated entry and the new document
    """
    upload = await read_upload(file)
    action, document = await service.attach_action_document(project_id, action_id, upload)
    return ActionAttachmentResponse(
        action=ProjectActionResponse.model_validate(action),
        document_id=document.id,
        document_name=document.name,
    )


# ==================== Budget ====================


@router.post(
    "/{project_id}/budgets",
    response_model=BudgetItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a budget item",
    responses={
        422: {"description": "Missing concept"},
        404: {"description": "Project or provider not found"},
    },
)
async def add_budget_item(
    project_id: UUID,
    data: BudgetItemCreate,
    service: Projects,
) -> BudgetItemResponse:
    """Add a quote line to the project budget."""
    item = await service.add_budget_item(project_id, data)
    return BudgetItemResponse.model_validate(item)


@router.post(
    "/{project_id}/budgets/bulk-delete",
    response_model=BudgetBulkDeleteResult,
    summary="Delete several budget items",
)
async def delete_budget_items(
    project_id: UUID,
    data: BudgetBulkDelete,
    service: Projects,
) -> BudgetBulkDeleteResult:
    """Delete the listed items. IDs not in the project are ignored."""
    deleted = await service.delete_budget_items(project_id, data.ids)
    return BudgetBulkDeleteResult(deleted=deleted)


@router.post(
    "/{project_id}/budgets/compare",
    response_model=BudgetComparison,
    summary="Compare quotes side by side",
    responses={422: {"description": "Fewer than two items selected"}},
)
async def compare_budget_items(
    project_id: UUID,
    data: BudgetCompareRequest,
    service: Projects,
) -> BudgetComparison:
    """Compare the selected items in selection order, flagging the cheapest."""
    return await service.compare_budget_items(project_id, data.ids)


@router.get(
    "/{project_id}/budgets/summary",
    response_model=BudgetSummary,
    summary="Estimated vs actual totals",
)
async def budget_summary(
    project_id: UUID,
    service: Projects,
    provider_id: Annotated[
        UUID | Literal["all"],
        Query(description="Restrict to one provider, or ``all``"),
    ] = "all",
) -> BudgetSummary:
    """Totals and deviation for the project budget, optionally per provider."""
    return await service.budget_summary(project_id, provider_id)


@router.get("/{project_id}/budgets/export", summary="Download the budget as CSV")
async def export_budget(project_id: UUID, service: Projects) -> Response:
    project, rows = await service.budget_csv_rows(project_id)
    return csv_response(
        render_csv(BUDGET_CSV_HEADERS, rows),
        f"presupuestos_{safe_filename_part(project.name)}.csv",
    )


@router.patch(
    "/{project_id}/budgets/{budget_id}",
    response_model=BudgetItemResponse,
    summary="Update a budget item",
    responses={404: {"description": "Project, item or provider not found"}},
)
async def update_budget_item(
    project_id: UUID,
    budget_id: UUID,
    data: BudgetItemUpdate,
    service: Projects,
) -> BudgetItemResponse:
    item = await service.update_budget_item(project_id, budget_id, data)
    return BudgetItemResponse.model_validate(item)


@router.delete(
    "/{project_id}/budgets/{budget_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a budget item",
    responses={404: {"description": "Project or item not found"}},
)
async def delete_budget_item(project_id: UUID, budget_id: UUID, service: Projects) -> None:
    await service.delete_budget_item(project_id, budget_id)


@router.post(
    "/{project_id}/budgets/{budget_id}/attachment",
    response_model=BudgetAttachmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Attach a quote file to a budget item",
    responses={
        404: {"description": "Project or item not found"},
        413: {"description": "File too large"},
    },
)
async def attach_budget_document(
    project_id: UUID,
    budget_id: UUID,
    service: Projects,
    file: Annotated[UploadFile, File(description="Quote file")],
) -> BudgetAttachmentResponse:
    """Store the file as a Budget document and reference it from the item."""
    upload = await read_upload(file)
    item, document = await service.attach_budget_document(project_id, budget_id, upload)
    return BudgetAttachmentResponse(
        budget_item=BudgetItemResponse.model_validate(item),
        document_id=document.id,
        document_name=document.name,
    )


# ==================== Alerts ====================


@router.post(
    "/{project_id}/alerts",
    response_model=ProjectAlertResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a reminder",
    responses={404: {"description": "Project not found"}},
)
async def add_alert(
    project_id: UUID,
    data: ProjectAlertCreate,
    service: Projects,
) -> ProjectAlertResponse:
    alert = await service.add_alert(project_id, data)
    return ProjectAlertResponse.model_validate(alert)


@router.post(
    "/{project_id}/alerts/{alert_id}/toggle",
    response_model=ProjectAlertResponse,
    summary="Flip a reminder between pending and done",
    responses={404: {"description": "Project or alert not found"}},
)
async def toggle_alert(project_id: UUID, alert_id: UUID, service: Projects) -> ProjectAlertResponse:
    alert = await service.toggle_alert(project_id, alert_id)
    return ProjectAlertResponse.model_validate(alert)


@router.delete(
    "/{project_id}/alerts/{alert_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a reminder",
    responses={404: {"description": "Project or alert not found"}},
)
async def delete_alert(project_id: UUID, alert_id: UUID, service: Projects) -> None:
    await service.delete_alert(project_id, alert_id)


# ==================== Financials ====================


@router.get(
    "/{project_id}/financials",
    response_model=FinancialSummary,
    summary="Economic status of the project",
)
async def financial_summary(project_id: UUID, service: Projects) -> FinancialSummary:
    """Budget, spend, remaining amount and the list of payments."""
    return await service.financial_summary(project_id)


@router.get("/{project_id}/financials/export", summary="Download payments as CSV")
async def export_financials(project_id: UUID, service: Projects) -> Response:
    project, rows = await service.payment_csv_rows(project_id)
    return csv_response(
        render_csv(PAYMENT_CSV_HEADERS, rows),
        f"economico_{safe_filename_part(project.name)}.csv",
    )
