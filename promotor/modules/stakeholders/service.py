"""
Contact management service.

Main components:
    - StakeholderService: CRUD, filtered listing, provider business volume
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from promotor.core.exceptions import StakeholderNotFoundError
from promotor.modules.projects.models import BudgetItem, ProjectStakeholder

from .models import Stakeholder, StakeholderType
from .schemas import ProviderStats, StakeholderCreate, StakeholderTypeFilter, StakeholderUpdate

logger = logging.getLogger(__name__)

STAKEHOLDER_CSV_HEADERS = [
    "Nombre",
    "Tipo",
    "Actividad",
    "Email",
    "Telefono",
    "Direccion",
    "NIF",
    "Volumen Negocio",
]


class StakeholderService:
    """
    Contact management service.

    Example:
        async with db_manager.session() as session:
            service = StakeholderService(session)
            providers = await service.list(type_filter="Provider")
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize the service.

        Args:
            session: Async SQLAlchemy session
        """
        self._session = session

    async def create(self, data: StakeholderCreate) -> Stakeholder:
        """
        Create a contact.

        Args:
            data: Contact fields

        Returns:
            Created Stakeholder
        """
        stakeholder = Stakeholder(**data.model_dump())

        self._session.add(stakeholder)
        await self._session.flush()
        await self._session.refresh(stakeholder)

        logger.info(
            "Created stakeholder %s (%s)",
            stakeholder.id,
            stakeholder.type.value,
            extra={"stakeholder_id": str(stakeholder.id)},
        )

        return stakeholder

    async def get_by_id(self, stakeholder_id: UUID) -> Stakeholder | None:
        """Get a contact by ID, or None."""
        return await self._session.get(Stakeholder, stakeholder_id)

    async def get(self, stakeholder_id: UUID) -> Stakeholder:
        """
        Get a contact by ID.

        Raises:
            StakeholderNotFoundError: No such contact
        """
        stakeholder = await self.get_by_id(stakeholder_id)
        if stakeholder is None:
            raise StakeholderNotFoundError(stakeholder_id)
        return stakeholder

    async def list(
        self,
        type_filter: StakeholderTypeFilter = "All",
        search: str | None = None,
    ) -> list[Stakeholder]:
        """
        List contacts ordered by name.

        Args:
            type_filter: ``All``, ``Client`` or ``Provider``
            search: Case-insensitive substring matched against name or e-mail

        Returns:
            Matching contacts
        """
        stmt = select(Stakeholder).order_by(Stakeholder.name, Stakeholder.id)
        if type_filter != "All":
            stmt = stmt.where(Stakeholder.type == StakeholderType(type_filter))

        result = await self._session.execute(stmt)
        stakeholders = list(result.scalars().all())

        # SQLite lower() only folds ASCII, so accented names are filtered here
        needle = (search or "").strip().lower()
        if needle:
            stakeholders = [
                s
                for s in stakeholders
                if needle in s.name.lower() or needle in (s.email or "").lower()
            ]

        return stakeholders

    async def update(self, stakeholder_id: UUID, data: StakeholderUpdate) -> Stakeholder:
        """
        Update a contact. Only fields that were sent are changed.

        Raises:
            StakeholderNotFoundError: No such contact
        """
        stakeholder = await self.get(stakeholder_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            if field in ("name", "type", "activity", "email", "phone") and value is None:
                continue
            setattr(stakeholder, field, value)

        await self._session.flush()
        await self._session.refresh(stakeholder)

        logger.info("Updated stakeholder %s", stakeholder_id)
        return stakeholder

    async def delete(self, stakeholder_id: UUID) -> None:
        """
        Delete a contact.

        Team links go with it; budget items keep their row with the provider
        cleared (both enforced by the foreign keys).

        Raises:
            StakeholderNotFoundError: No such contact
        """
        stakeholder = await self.get(stakeholder_id)
        await self._session.delete(stakeholder)
        await self._session.flush()

        logger.info("Deleted stakeholder %s", stakeholder_id)

    async def provider_stats(self, stakeholder_id: UUID) -> ProviderStats:
        """
        Business volume of a contact.

        ``total_budgeted`` sums the budget items quoted by the contact;
        ``project_count`` counts distinct projects that link the contact
        or hold one of those items.

        Raises:
            StakeholderNotFoundError: No such contact
        """
        await self.get(stakeholder_id)
        stats = await self._stats_for([stakeholder_id])
        return stats[stakeholder_id]

    async def _stats_for(self, stakeholder_ids: Sequence[UUID]) -> dict[UUID, ProviderStats]:
        totals: dict[UUID, float] = {sid: 0.0 for sid in stakeholder_ids}
        projects: dict[UUID, set[UUID]] = {sid: set() for sid in stakeholder_ids}

        if stakeholder_ids:
            budget_rows = await self._session.execute(
                select(BudgetItem.provider_id, BudgetItem.project_id, BudgetItem.amount).where(
                    BudgetItem.provider_id.in_(stakeholder_ids)
                )
            )
            for provider_id, project_id, amount in budget_rows:
                totals[provider_id] += amount or 0.0
                projects[provider_id].add(project_id)

            link_rows = await self._session.execute(
                select(ProjectStakeholder.stakeholder_id, ProjectStakeholder.project_id).where(
                    ProjectStakeholder.stakeholder_id.in_(stakeholder_ids)
                )
            )
            for sid, project_id in link_rows:
                projects[sid].add(project_id)

        return {
            sid: ProviderStats(
                stakeholder_id=sid,
                total_budgeted=totals[sid],
                project_count=len(projects[sid]),
            )
            for sid in stakeholder_ids
        }

    async def csv_rows(
        self,
        type_filter: StakeholderTypeFilter = "All",
        search: str | None = None,
    ) -> list[list[object]]:
        """Rows for the contacts spreadsheet, including business volume."""
        stakeholders = await self.list(type_filter=type_filter, search=search)
        stats = await self._stats_for([s.id for s in stakeholders])

        return [
            [
                s.name,
                s.type.value,
                s.activity or "",
                s.email,
                s.phone,
                s.address or "",
                s.tax_id or "",
                stats[s.id].total_budgeted,
            ]
            for s in stakeholders
        ]
