"""
Whole-store export and import.

The snapshot is the manual "save" of the store: every project with its
nested collections, every contact and the metadata of every document.
Importing replaces everything in one transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime, timedelta
from itertools import count

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from promotor.core.exceptions import safe
from promotor.modules.documents.models import Document
from promotor.modules.documents.storage import LocalFileStore, get_file_store
from promotor.modules.projects.models import (
    BudgetItem,
    Project,
    ProjectAction,
    ProjectAlert,
    ProjectStakeholder,
)
from promotor.modules.stakeholders.models import Stakeholder
from promotor.shared.logging import log_snapshot_imported
from promotor.shared.mixins import utcnow

from .schemas import (
    DocumentSnapshot,
    ImportResult,
    ProjectSnapshot,
    Snapshot,
    StakeholderSnapshot,
)
from .seed import demo_snapshot

logger = logging.getLogger(__name__)

# Children first so foreign keys never point at a missing row
_TABLES_IN_DELETE_ORDER = (
    BudgetItem,
    ProjectAction,
    ProjectAlert,
    ProjectStakeholder,
    Project,
    Document,
    Stakeholder,
)


def _timestamps() -> Iterator[datetime]:
    """Strictly increasing creation times, keeping snapshot order on reload."""
    base = utcnow()
    for step in count():
        yield base + timedelta(microseconds=step)


class SnapshotService:
    """
    Export and import of the whole store.

    Example:
        async with db_manager.session() as session:
            snapshot = await SnapshotService(session).export()
    """

    def __init__(self, session: AsyncSession, file_store: LocalFileStore | None = None) -> None:
        self._session = session
        self._file_store = file_store or get_file_store()

    async def export(self) -> Snapshot:
        """Dump every collection."""
        projects = await self._session.execute(
            select(Project)
            .order_by(Project.name, Project.id)
            .execution_options(populate_existing=True)
        )
        stakeholders = await self._session.execute(
            select(Stakeholder).order_by(Stakeholder.name, Stakeholder.id)
        )
        documents = await self._session.execute(
            select(Document).order_by(Document.created_at.desc(), Document.id.desc())
        )

        return Snapshot(
            exported_at=utcnow(),
            projects=[ProjectSnapshot.model_validate(p) for p in projects.scalars()],
            stakeholders=[StakeholderSnapshot.model_validate(s) for s in stakeholders.scalars()],
            documents=[DocumentSnapshot.model_validate(d) for d in documents.scalars()],
        )

    async def is_empty(self) -> bool:
        """Whether the store holds no projects, contacts or documents."""
        for model in (Project, Stakeholder, Document):
            total = await self._session.scalar(select(func.count()).select_from(model))
            if total:
                return False
        return True

    @safe
    async def import_snapshot(self, snapshot: Snapshot) -> ImportResult:
        """
        Replace the whole store with a snapshot.

        References to contacts or documents missing from the snapshot are
        dropped (team links skipped, budget provider/document cleared).
        Stored files of documents missing from the snapshot are removed
        once the import commits.

        Raises:
            ConflictError: The snapshot repeats an ID
        """
        for model in _TABLES_IN_DELETE_ORDER:
            await self._session.execute(
                delete(model).execution_options(synchronize_session=False)
            )
        self._session.expunge_all()

        stamps = _timestamps()
        stakeholder_ids = {s.id for s in snapshot.stakeholders}
        document_ids = {d.id for d in snapshot.documents}

        for s in snapshot.stakeholders:
            self._session.add(Stakeholder(**s.model_dump(), created_at=next(stamps)))

        # Documents are listed newest first; insert oldest first
        for d in reversed(snapshot.documents):
            self._session.add(Document(**d.model_dump(), created_at=next(stamps)))

        for p in snapshot.projects:
            self._session.add(self._build_project(p, stakeholder_ids, document_ids, stamps))

        await self._session.flush()
        self._file_store.delete_on_commit(
            self._session, self._file_store.stored_ids() - document_ids
        )

        result = ImportResult(
            projects=len(snapshot.projects),
            stakeholders=len(snapshot.stakeholders),
            documents=len(snapshot.documents),
        )
        log_snapshot_imported(result.projects, result.stakeholders, result.documents)
        logger.info(
            "Imported snapshot: %d projects, %d stakeholders, %d documents",
            result.projects,
            result.stakeholders,
            result.documents,
        )
        return result

    @staticmethod
    def _build_project(
        data: ProjectSnapshot,
        stakeholder_ids: set,
        document_ids: set,
        stamps: Iterator[datetime],
    ) -> Project:
        linked: list = []
        for sid in data.stakeholder_ids:
            if sid in stakeholder_ids and sid not in linked:
                linked.append(sid)

        return Project(
            id=data.id,
            name=data.name,
            location=data.location,
            budget=data.budget,
            actual_cost=data.actual_cost,
            progress=data.progress,
            status=data.status,
            start_date=data.start_date,
            end_date=data.end_date,
            created_at=next(stamps),
            stakeholder_links=[
                ProjectStakeholder(stakeholder_id=sid, linked_at=next(stamps)) for sid in linked
            ],
            actions=[
                ProjectAction(**a.model_dump(), created_at=next(stamps))
                # Listed newest first; insert oldest first
                for a in reversed(data.actions)
            ],
            budgets=[
                BudgetItem(
                    **b.model_dump(exclude={"provider_id", "document_id"}),
                    provider_id=b.provider_id if b.provider_id in stakeholder_ids else None,
                    document_id=b.document_id if b.document_id in document_ids else None,
                    created_at=next(stamps),
                )
                for b in data.budgets
            ],
            alerts=[ProjectAlert(**a.model_dump(), created_at=next(stamps)) for a in data.alerts],
        )

    async def seed_demo_data(self) -> ImportResult | None:
        """Load the demo portfolio when the store is empty.

        Returns:
            Counts of seeded records, or ``None`` when data already exists
        """
        if not await self.is_empty():
            return None
        logger.info("Empty store, loading demo portfolio")
        return await self.import_snapshot(demo_snapshot())
