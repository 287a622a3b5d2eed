"""
Project management service.

Everything nested under a project goes through here: the team, the
timeline (with the payment rollup into ``actual_cost``), budget items and
alerts.

Main components:
    - ProjectService: CRUD, team links, actions, budget items, alerts,
      financial summary and spreadsheet rows
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Literal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from promotor.core.exceptions import (
    ActionNotFoundError,
    AlertNotFoundError,
    BudgetItemNotFoundError,
    InvalidInputError,
    ProjectNotFoundError,
    StakeholderNotFoundError,
)
from promotor.modules.documents.models import (
    Document,
    DocumentStatus,
    DocumentType,
    LinkedEntityType,
)
from promotor.modules.documents.storage import LocalFileStore, UploadedFile, get_file_store
from promotor.modules.stakeholders.models import Stakeholder, StakeholderType

from .models import (
    ActionType,
    BudgetItem,
    Project,
    ProjectAction,
    ProjectAlert,
    ProjectStakeholder,
)
from .schemas import (
    BudgetComparison,
    BudgetComparisonOption,
    BudgetItemCreate,
    BudgetItemUpdate,
    BudgetSummary,
    BudgetSummaryItem,
    FinancialSummary,
    ProjectActionCreate,
    ProjectActionResponse,
    ProjectActionUpdate,
    ProjectAlertCreate,
    ProjectCreate,
    ProjectUpdate,
)

logger = logging.getLogger(__name__)

DEFAULT_ACTION_TITLE = "Actuación"
NO_PROVIDER = "N/A"

PROJECT_CSV_HEADERS = [
    "ID",
    "Nombre",
    "Estado",
    "Ubicación",
    "Presupuesto",
    "Coste Actual",
    "Progreso",
    "Inicio",
    "Fin",
]
BUDGET_CSV_HEADERS = [
    "ID",
    "Concepto",
    "Proveedor",
    "Fecha",
    "Estado",
    "Estimado",
    "Real",
    "Desviacion",
]
PAYMENT_CSV_HEADERS = ["Tipo", "Fecha", "Titulo", "Descripcion", "Importe"]

# Fields that cannot be cleared through a partial update
_REQUIRED_PROJECT_FIELDS = {
    "name",
    "location",
    "budget",
    "actual_cost",
    "progress",
    "status",
    "start_date",
}


def executed_percent(spent: float, budget: float) -> float:
    """Share of the budget already spent, one decimal (0 without budget)."""
    if not budget:
        return 0.0
    return round(spent / budget * 100, 1)


class ProjectService:
    """
    Project management service.

    Example:
        async with db_manager.session() as session:
            service = ProjectService(session)
            project = await service.create(ProjectCreate(name="Torre Marina", budget=8_200_000))
    """

    def __init__(self, session: AsyncSession, file_store: LocalFileStore | None = None) -> None:
        """
        Initialize the service.

        Args:
            session: Async SQLAlchemy session
            file_store: Storage for attached files (process-wide store by default)
        """
        self._session = session
        self._file_store = file_store or get_file_store()

    # ==================== Projects ====================

    async def create(self, data: ProjectCreate) -> Project:
        """
        Create a project.

        New projects start with no cost and no progress.

        Raises:
            InvalidInputError: Blank name or non-positive budget
        """
        if not data.name.strip():
            raise InvalidInputError("Project name is required", field="name")
        if data.budget <= 0:
            raise InvalidInputError("Budget must be greater than zero", field="budget")

        project = Project(
            name=data.name,
            location=data.location,
            budget=data.budget,
            actual_cost=0.0,
            progress=0,
            status=data.status,
            start_date=data.start_date or date.today(),
            end_date=data.end_date,
            stakeholder_links=[],
            actions=[],
            budgets=[],
            alerts=[],
        )

        self._session.add(project)
        await self._session.flush()

        logger.info(
            "Created project %s (%s)",
            project.id,
            project.name,
            extra={"project_id": str(project.id)},
        )
        return project

    async def get(self, project_id: UUID) -> Project:
        """
        Get a project with its nested collections.

        Raises:
            ProjectNotFoundError: No such project
        """
        stmt = (
            select(Project)
            .where(Project.id == project_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        project = result.scalar_one_or_none()
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    async def list(self) -> list[Project]:
        """List all projects ordered by name."""
        stmt = (
            select(Project)
            .order_by(Project.name, Project.id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, project_id: UUID, data: ProjectUpdate) -> Project:
        """
        Update the scalar fields of a project.

        Raises:
            ProjectNotFoundError: No such project
        """
        project = await self.get(project_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field in _REQUIRED_PROJECT_FIELDS:
                continue
            setattr(project, field, value)

        await self._session.flush()

        logger.info("Updated project %s", project_id)
        return project

    async def delete(self, project_id: UUID) -> None:
        """
        Delete a project with its actions, budget items, alerts and team.

        Documents linked to the project are kept.

        Raises:
            ProjectNotFoundError: No such project
        """
        project = await self.get(project_id)
        await self._session.delete(project)
        await self._session.flush()

        logger.info("Deleted project %s", project_id)

    # ==================== Team ====================

    async def _require_stakeholder(self, stakeholder_id: UUID) -> Stakeholder:
        stakeholder = await self._session.get(Stakeholder, stakeholder_id)
        if stakeholder is None:
            raise StakeholderNotFoundError(stakeholder_id)
        return stakeholder

    async def add_stakeholder(self, project_id: UUID, stakeholder_id: UUID) -> Project:
        """
        Link a contact to the project team. Linking twice is a no-op.

        Raises:
            ProjectNotFoundError: No such project
            StakeholderNotFoundError: No such contact
        """
        project = await self.get(project_id)
        await self._require_stakeholder(stakeholder_id)

        if stakeholder_id not in project.stakeholder_ids:
            project.stakeholder_links.append(ProjectStakeholder(stakeholder_id=stakeholder_id))
            await self._session.flush()
            logger.info("Linked stakeholder %s to project %s", stakeholder_id, project_id)

        return project

    async def remove_stakeholder(self, project_id: UUID, stakeholder_id: UUID) -> Project:
        """Unlink a contact from the project team."""
        project = await self.get(project_id)

        for link in list(project.stakeholder_links):
            if link.stakeholder_id == stakeholder_id:
                project.stakeholder_links.remove(link)
                await self._session.flush()
                logger.info("Unlinked stakeholder %s from project %s", stakeholder_id, project_id)
                break

        return project

    async def available_providers(self, project_id: UUID) -> list[Stakeholder]:
        """Providers not yet on the project team, ordered by name."""
        project = await self.get(project_id)
        linked = set(project.stakeholder_ids)

        result = await self._session.execute(
            select(Stakeholder)
            .where(Stakeholder.type == StakeholderType.PROVIDER)
            .order_by(Stakeholder.name, Stakeholder.id)
        )
        return [s for s in result.scalars().all() if s.id not in linked]

    # ==================== Actions ====================

    @staticmethod
    def _find_action(project: Project, action_id: UUID) -> ProjectAction:
        for action in project.actions:
            if action.id == action_id:
                return action
        raise ActionNotFoundError(action_id)

    async def add_action(self, project_id: UUID, data: ProjectActionCreate) -> ProjectAction:
        """
        Add a timeline entry.

        A Payment with an amount increases the project's actual cost.

        Raises:
            ProjectNotFoundError: No such project
        """
        project = await self.get(project_id)

        action = ProjectAction(
            title=data.title.strip() or DEFAULT_ACTION_TITLE,
            description=data.description,
            type=data.type,
            date=data.date or date.today(),
            amount=data.amount,
        )
        project.actions.append(action)
        project.actual_cost += action.cost_contribution

        await self._session.flush()

        logger.info(
            "Added %s action %s to project %s",
            action.type.value,
            action.id,
            project_id,
        )
        return action

    async def update_action(
        self,
        project_id: UUID,
        action_id: UUID,
        data: ProjectActionUpdate,
    ) -> ProjectAction:
        """
        Edit a timeline entry, moving its payment contribution accordingly.

        Raises:
            ProjectNotFoundError: No such project
            ActionNotFoundError: No such action in the project
        """
        project = await self.get(project_id)
        action = self._find_action(project, action_id)

        previous = action.cost_contribution
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field != "amount":
                continue
            setattr(action, field, value)

        project.actual_cost += action.cost_contribution - previous
        await self._session.flush()

        logger.info("Updated action %s of project %s", action_id, project_id)
        return action

    async def delete_action(self, project_id: UUID, action_id: UUID) -> None:
        """
        Remove a timeline entry, taking back its payment contribution.

        Raises:
            ProjectNotFoundError: No such project
            ActionNotFoundError: No such action in the project
        """
        project = await self.get(project_id)
        action = self._find_action(project, action_id)

        project.actual_cost -= action.cost_contribution
        project.actions.remove(action)
        await self._session.flush()

        logger.info("Deleted action %s of project %s", action_id, project_id)

    async def attach_action_document(
        self,
        project_id: UUID,
        action_id: UUID,
        upload: UploadedFile,
    ) -> tuple[ProjectAction, Document]:
        """
        Store a file for a timeline entry as a project document.

        Payments produce an Invoice, anything else an Other document. The
        action description records the attachment name.

        Raises:
            ProjectNotFoundError: No such project
            ActionNotFoundError: No such action in the project
        """
        project = await self.get(project_id)
        action = self._find_action(project, action_id)

        document = self._new_project_document(
            project,
            upload,
            doc_type=(
                DocumentType.INVOICE if action.type == ActionType.PAYMENT else DocumentType.OTHER
            ),
            doc_date=action.date,
            amount=action.amount,
        )
        await self._session.flush()
        self._file_store.save(document.id, upload, source="action", session=self._session)

        action.description = f"{action.description} (Documento adjunto: {upload.filename})"
        await self._session.flush()

        logger.info("Attached document %s to action %s", document.id, action_id)
        return action, document

    def _new_project_document(
        self,
        project: Project,
        upload: UploadedFile,
        *,
        doc_type: DocumentType,
        doc_date: date,
        amount: float | None,
    ) -> Document:
        document = Document(
            name=upload.filename,
            type=doc_type,
            date=doc_date,
            amount=amount,
            status=DocumentStatus.PROCESSED,
            linked_entity_id=project.id,
            linked_entity_type=LinkedEntityType.PROJECT,
            stored_filename=upload.filename,
            content_type=upload.content_type,
            size=upload.size,
        )
        self._session.add(document)
        return document

    # ==================== Budget items ====================

    @staticmethod
    def _find_budget(project: Project, budget_id: UUID) -> BudgetItem:
        for item in project.budgets:
            if item.id == budget_id:
                return item
        raise BudgetItemNotFoundError(budget_id)

    async def add_budget_item(self, project_id: UUID, data: BudgetItemCreate) -> BudgetItem:
        """
        Add a budget item.

        Raises:
            ProjectNotFoundError: No such project
            InvalidInputError: Blank concept
            StakeholderNotFoundError: Unknown provider
        """
        project = await self.get(project_id)

        if not data.concept.strip():
            raise InvalidInputError("Concept is required", field="concept")
        if data.provider_id is not None:
            await self._require_stakeholder(data.provider_id)

        item = BudgetItem(
            concept=data.concept,
            amount=data.amount,
            actual_amount=data.actual_amount,
            date=data.date or date.today(),
            status=data.status,
            provider_id=data.provider_id,
        )
        project.budgets.append(item)
        await self._session.flush()

        logger.info("Added budget item %s to project %s", item.id, project_id)
        return item

    async def update_budget_item(
        self,
        project_id: UUID,
        budget_id: UUID,
        data: BudgetItemUpdate,
    ) -> BudgetItem:
        """
        Edit a budget item. Sending ``provider_id: null`` clears the provider.

        Raises:
            ProjectNotFoundError: No such project
            BudgetItemNotFoundError: No such item in the project
            StakeholderNotFoundError: Unknown provider
        """
        project = await self.get(project_id)
        item = self._find_budget(project, budget_id)

        changes = data.model_dump(exclude_unset=True)
        if changes.get("provider_id") is not None:
            await self._require_stakeholder(changes["provider_id"])

        for field, value in changes.items():
            if value is None and field != "provider_id":
                continue
            setattr(item, field, value)

        await self._session.flush()

        logger.info("Updated budget item %s of project %s", budget_id, project_id)
        return item

    async def delete_budget_item(self, project_id: UUID, budget_id: UUID) -> None:
        """
        Remove a budget item.

        Raises:
            ProjectNotFoundError: No such project
            BudgetItemNotFoundError: No such item in the project
        """
        project = await self.get(project_id)
        item = self._find_budget(project, budget_id)

        project.budgets.remove(item)
        await self._session.flush()

        logger.info("Deleted budget item %s of project %s", budget_id, project_id)

    async def delete_budget_items(self, project_id: UUID, budget_ids: Iterable[UUID]) -> int:
        """
        Remove several budget items at once. Unknown IDs are ignored.

        Returns:
            Number of items removed
        """
        project = await self.get(project_id)
        wanted = set(budget_ids)

        doomed = [item for item in project.budgets if item.id in wanted]
        for item in doomed:
            project.budgets.remove(item)
        await self._session.flush()

        logger.info("Deleted %d budget items of project %s", len(doomed), project_id)
        return len(doomed)

    async def attach_budget_document(
        self,
        project_id: UUID,
        budget_id: UUID,
        upload: UploadedFile,
    ) -> tuple[BudgetItem, Document]:
        """
        Store a quote file for a budget item as a Budget document.

        Raises:
            ProjectNotFoundError: No such project
            BudgetItemNotFoundError: No such item in the project
        """
        project = await self.get(project_id)
        item = self._find_budget(project, budget_id)

        document = self._new_project_document(
            project,
            upload,
            doc_type=DocumentType.BUDGET,
            doc_date=item.date,
            amount=item.amount,
        )
        await self._session.flush()
        self._file_store.save(document.id, upload, source="budget", session=self._session)

        item.document_id = document.id
        await self._session.flush()

        logger.info("Attached document %s to budget item %s", document.id, budget_id)
        return item, document

    async def budget_summary(
        self,
        project_id: UUID,
        provider_id: UUID | Literal["all"] = "all",
    ) -> BudgetSummary:
        """
        Estimated-vs-actual totals, optionally for one provider only.

        Raises:
            ProjectNotFoundError: No such project
        """
        project = await self.get(project_id)

        items = [
            item
            for item in project.budgets
            if provider_id == "all" or item.provider_id == provider_id
        ]
        total_estimated = sum(item.amount for item in items)
        total_actual = sum(item.actual_amount or 0.0 for item in items)
        deviation = total_estimated - total_actual

        return BudgetSummary(
            project_id=project.id,
            provider_id=provider_id,
            items=[BudgetSummaryItem.model_validate(item) for item in items],
            total_estimated=total_estimated,
            total_actual=total_actual,
            deviation=deviation,
            within_budget=deviation >= 0,
        )

    async def compare_budget_items(
        self,
        project_id: UUID,
        budget_ids: Sequence[UUID],
    ) -> BudgetComparison:
        """
        Compare quotes side by side, in selection order.

        Raises:
            ProjectNotFoundError: No such project
            InvalidInputError: Fewer than two items selected
            BudgetItemNotFoundError: An ID is not an item of the project
        """
        if len(budget_ids) < 2:
            raise InvalidInputError("Select at least two budget items to compare", field="ids")

        project = await self.get(project_id)
        items = [self._find_budget(project, budget_id) for budget_id in budget_ids]
        names = await self._provider_names(item.provider_id for item in items)
        min_amount = min(item.amount for item in items)

        return BudgetComparison(
            min_amount=min_amount,
            options=[
                BudgetComparisonOption(
                    label=f"Opción {index}",
                    budget_item_id=item.id,
                    concept=item.concept,
                    provider_name=names.get(item.provider_id, NO_PROVIDER),
                    amount=item.amount,
                    is_cheapest=item.amount == min_amount,
                    difference=item.amount - min_amount,
                )
                for index, item in enumerate(items, start=1)
            ],
        )

    async def _provider_names(self, provider_ids: Iterable[UUID | None]) -> dict[UUID | None, str]:
        ids = {pid for pid in provider_ids if pid is not None}
        if not ids:
            return {}
        result = await self._session.execute(
            select(Stakeholder.id, Stakeholder.name).where(Stakeholder.id.in_(ids))
        )
        return {sid: name for sid, name in result.all()}

    # ==================== Alerts ====================

    @staticmethod
    def _find_alert(project: Project, alert_id: UUID) -> ProjectAlert:
        for alert in project.alerts:
            if alert.id == alert_id:
                return alert
        raise AlertNotFoundError(alert_id)

    async def add_alert(self, project_id: UUID, data: ProjectAlertCreate) -> ProjectAlert:
        """Add a pending reminder to a project."""
        project = await self.get(project_id)

        alert = ProjectAlert(
            title=data.title,
            date=data.date,
            type=data.type,
            is_completed=False,
        )
        project.alerts.append(alert)
        await self._session.flush()

        logger.info("Added alert %s to project %s", alert.id, project_id)
        return alert

    async def toggle_alert(self, project_id: UUID, alert_id: UUID) -> ProjectAlert:
        """
        Flip the completion flag of a reminder.

        Raises:
            ProjectNotFoundError: No such project
            AlertNotFoundError: No such alert in the project
        """
        project = await self.get(project_id)
        alert = self._find_alert(project, alert_id)

        alert.is_completed = not alert.is_completed
        await self._session.flush()
        return alert

    async def delete_alert(self, project_id: UUID, alert_id: UUID) -> None:
        """Remove a reminder."""
        project = await self.get(project_id)
        alert = self._find_alert(project, alert_id)

        project.alerts.remove(alert)
        await self._session.flush()

        logger.info("Deleted alert %s of project %s", alert_id, project_id)

    # ==================== Financials ====================

    async def financial_summary(self, project_id: UUID) -> FinancialSummary:
        """
        Budget execution and payment list of a project.

        Raises:
            ProjectNotFoundError: No such project
        """
        project = await self.get(project_id)
        payments = [a for a in project.actions if a.type == ActionType.PAYMENT]

        return FinancialSummary(
            project_id=project.id,
            budget=project.budget,
            actual_cost=project.actual_cost,
            remaining=project.budget - project.actual_cost,
            executed_percent=executed_percent(project.actual_cost, project.budget),
            over_budget=project.actual_cost > project.budget,
            payments=[ProjectActionResponse.model_validate(a) for a in payments],
        )

    # ==================== Spreadsheets ====================

    @staticmethod
    def project_csv_row(project: Project) -> list[object]:
        """One row of the projects spreadsheet."""
        return [
            str(project.id),
            project.name,
            project.status.value,
            project.location,
            project.budget,
            project.actual_cost,
            f"{project.progress}%",
            project.start_date.isoformat(),
            project.end_date.isoformat() if project.end_date else "",
        ]

    async def projects_csv_rows(self) -> list[list[object]]:
        """Rows for the projects spreadsheet."""
        return [self.project_csv_row(p) for p in await self.list()]

    async def budget_csv_rows(self, project_id: UUID) -> tuple[Project, list[list[object]]]:
        """Rows for a project's budget spreadsheet."""
        project = await self.get(project_id)
        names = await self._provider_names(item.provider_id for item in project.budgets)

        rows = [
            [
                str(item.id),
                item.concept,
                names.get(item.provider_id, NO_PROVIDER),
                item.date.isoformat(),
                item.status.value,
                item.amount,
                item.actual_amount or 0.0,
                item.deviation,
            ]
            for item in project.budgets
        ]
        return project, rows

    async def payment_csv_rows(self, project_id: UUID) -> tuple[Project, list[list[object]]]:
        """Rows for a project's payments spreadsheet (amounts as outflows)."""
        project = await self.get(project_id)

        rows = [
            [
                "Pago",
                action.date.isoformat(),
                action.title,
                action.description,
                -(action.amount or 0.0),
            ]
            for action in project.actions
            if action.type == ActionType.PAYMENT
        ]
        return project, rows
