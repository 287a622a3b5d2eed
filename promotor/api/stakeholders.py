"""FastAPI router for contacts (clients and providers)."""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response

from promotor.core.dependencies import DatabaseSession
from promotor.modules.stakeholders.schemas import (
    ProviderStats,
    StakeholderCreate,
    StakeholderResponse,
    StakeholderTypeFilter,
    StakeholderUpdate,
)
from promotor.modules.stakeholders.service import STAKEHOLDER_CSV_HEADERS, StakeholderService
from promotor.shared.csv_export import csv_response, render_csv

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stakeholders", tags=["Stakeholders"])


async def get_stakeholder_service(session: DatabaseSession) -> StakeholderService:
    """Build the contact service for a request."""
    return StakeholderService(session)


Stakeholders = Annotated[StakeholderService, Depends(get_stakeholder_service)]

TypeFilter = Annotated[
    StakeholderTypeFilter,
    Query(alias="type", description="All, Client or Provider"),
]
SearchQuery = Annotated[
    str | None,
    Query(description="Case-insensitive match on name or e-mail"),
]


@router.get("", response_model=list[StakeholderResponse], summary="List contacts")
async def list_stakeholders(
    service: Stakeholders,
    type_filter: TypeFilter = "All",
    search: SearchQuery = None,
) -> list[StakeholderResponse]:
    """
    List contacts ordered by name.

    Args:
        service: Contact service
        type_filter: Restrict to clients or providers
        search: Text matched against name or e-mail

    Returns:
        list[StakeholderResponse]: Matching contacts
    """
    stakeholders = await service.list(type_filter=type_filter, search=search)
    return [StakeholderResponse.model_validate(s) for s in stakeholders]


@router.post(
    "",
    response_model=StakeholderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a contact",
)
async def create_stakeholder(data: StakeholderCreate, service: Stakeholders) -> StakeholderResponse:
    stakeholder = await service.create(data)
    return StakeholderResponse.model_validate(stakeholder)


@router.get("/export", summary="Download contacts as CSV")
async def export_stakeholders(
    service: Stakeholders,
    type_filter: TypeFilter = "All",
    search: SearchQuery = None,
) -> Response:
    """Spreadsheet of the filtered contacts with their business volume."""
    rows = await service.csv_rows(type_filter=type_filter, search=search)
    return csv_response(
        render_csv(STAKEHOLDER_CSV_HEADERS, rows),
        f"contactos_{type_filter.lower()}.csv",
    )


@router.get(
    "/{stakeholder_id}",
    response_model=StakeholderResponse,
    summary="Get a contact",
    responses={404: {"description": "Contact not found"}},
)
async def get_stakeholder(stakeholder_id: UUID, service: Stakeholders) -> StakeholderResponse:
    stakeholder = await service.get(stakeholder_id)
    return StakeholderResponse.model_validate(stakeholder)


@router.patch(
    "/{stakeholder_id}",
    response_model=StakeholderResponse,
    summary="Update a contact",
    responses={404: {"description": "Contact not found"}},
)
async def update_stakeholder(
    stakeholder_id: UUID,
    data: StakeholderUpdate,
    service: Stakeholders,
) -> StakeholderResponse:
    stakeholder = await service.update(stakeholder_id, data)
    return StakeholderResponse.model_validate(stakeholder)


@router.delete(
    "/{stakeholder_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a contact",
    responses={404: {"description": "Contact not found"}},
)
async def delete_stakeholder(stakeholder_id: UUID, service: Stakeholders) -> None:
    """
    Delete a contact.

    The contact leaves every project team and budget items it provided
    lose their provider.
    """
    await service.delete(stakeholder_id)


@router.get(
    "/{stakeholder_id}/stats",
    response_model=ProviderStats,
    summary="Business volume of a contact",
    responses={404: {"description": "Contact not found"}},
)
async def provider_stats(stakeholder_id: UUID, service: Stakeholders) -> ProviderStats:
    """Total quoted by the contact and the number of projects it quoted for."""
    return await service.provider_stats(stakeholder_id)
