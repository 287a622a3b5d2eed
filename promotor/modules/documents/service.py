"""
Document management service.

Main components:
    - DocumentService: direct uploads, listing, deletion, file access and
      resolution of the linked project/contact name
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date
from pathlib import Path
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from promotor.core.exceptions import (
    DocumentNotFoundError,
    ProjectNotFoundError,
    StakeholderNotFoundError,
)
from promotor.modules.projects.models import BudgetItem, Project
from promotor.modules.stakeholders.models import Stakeholder

from .models import Document, DocumentStatus, DocumentType, LinkedEntityType
from .schemas import DocumentResponse
from .storage import LocalFileStore, UploadedFile, get_file_store

logger = logging.getLogger(__name__)

NO_LINK = "N/A"
DOCUMENT_CSV_HEADERS = ["Nombre", "Tipo", "Fecha", "Estado", "Asociado A"]


class DocumentService:
    """
    Document management service.

    Example:
        service = DocumentService(session)
        document = await service.upload(upload, linked_entity_id=project.id,
                                        linked_entity_type=LinkedEntityType.PROJECT)
    """

    def __init__(self, session: AsyncSession, file_store: LocalFileStore | None = None) -> None:
        """
        Initialize the service.

        Args:
            session: Async SQLAlchemy session
            file_store: Storage for document files (process-wide store by default)
        """
        self._session = session
        self._file_store = file_store or get_file_store()

    async def upload(
        self,
        upload: UploadedFile,
        *,
        linked_entity_id: UUID | None = None,
        linked_entity_type: LinkedEntityType | None = None,
    ) -> Document:
        """
        Store a file as a processed ``Other`` document dated today.

        Args:
            upload: File content
            linked_entity_id: Optional project or contact to attach to
            linked_entity_type: Kind of ``linked_entity_id``

        Raises:
            ProjectNotFoundError: Link to an unknown project
            StakeholderNotFoundError: Link to an unknown contact
        """
        link_type = linked_entity_type or LinkedEntityType.NONE
        if linked_entity_id is None or link_type == LinkedEntityType.NONE:
            linked_entity_id, link_type = None, LinkedEntityType.NONE
        elif link_type == LinkedEntityType.PROJECT:
            if await self._session.get(Project, linked_entity_id) is None:
                raise ProjectNotFoundError(linked_entity_id)
        elif await self._session.get(Stakeholder, linked_entity_id) is None:
            raise StakeholderNotFoundError(linked_entity_id)

        document = Document(
            name=upload.filename,
            type=DocumentType.OTHER,
            date=date.today(),
            status=DocumentStatus.PROCESSED,
            linked_entity_id=linked_entity_id,
            linked_entity_type=link_type,
            stored_filename=upload.filename,
            content_type=upload.content_type,
            size=upload.size,
        )
        self._session.add(document)
        await self._session.flush()
        self._file_store.save(document.id, upload, source="upload", session=self._session)

        logger.info(
            "Uploaded document %s (%d bytes)",
            document.id,
            upload.size,
            extra={"document_id": str(document.id)},
        )
        return document

    async def get(self, document_id: UUID) -> Document:
        """
        Get a document by ID.

        Raises:
            DocumentNotFoundError: No such document
        """
        document = await self._session.get(Document, document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    async def list(self) -> list[Document]:
        """List documents, newest first."""
        result = await self._session.execute(
            select(Document).order_by(Document.created_at.desc(), Document.id.desc())
        )
        return list(result.scalars().all())

    async def delete(self, document_id: UUID) -> None:
        """
        Delete a document and, once committed, its stored file.

        Budget items that referenced it keep their row without the document.

        Raises:
            DocumentNotFoundError: No such document
        """
        document = await self.get(document_id)

        await self._session.execute(
            update(BudgetItem)
            .where(BudgetItem.document_id == document_id)
            .values(document_id=None)
        )
        await self._session.delete(document)
        await self._session.flush()
        self._file_store.delete_on_commit(self._session, [document_id])

        logger.info("Deleted document %s", document_id)

    async def open_file(self, document_id: UUID) -> tuple[Document, Path]:
        """
        Locate a document's stored file.

        Raises:
            DocumentNotFoundError: No such document, or it has no file
        """
        document = await self.get(document_id)
        if not document.has_file or not self._file_store.exists(document_id):
            raise DocumentNotFoundError(
                document_id,
                message=f"Document has no stored file: {document_id}",
            )
        return document, self._file_store.path_for(document_id)

    async def linked_entity_names(self, documents: Sequence[Document]) -> dict[UUID, str | None]:
        """
        Resolve the linked project or contact name of each document.

        Returns:
            Map of document ID to name; None for unlinked or dangling links
        """
        project_ids = {
            d.linked_entity_id
            for d in documents
            if d.linked_entity_type == LinkedEntityType.PROJECT and d.linked_entity_id
        }
        stakeholder_ids = {
            d.linked_entity_id
            for d in documents
            if d.linked_entity_type == LinkedEntityType.STAKEHOLDER and d.linked_entity_id
        }

        names: dict[tuple[LinkedEntityType, UUID], str] = {}
        if project_ids:
            rows = await self._session.execute(
                select(Project.id, Project.name).where(Project.id.in_(project_ids))
            )
            names.update({(LinkedEntityType.PROJECT, pid): name for pid, name in rows.all()})
        if stakeholder_ids:
            rows = await self._session.execute(
                select(Stakeholder.id, Stakeholder.name).where(Stakeholder.id.in_(stakeholder_ids))
            )
            names.update({(LinkedEntityType.STAKEHOLDER, sid): name for sid, name in rows.all()})

        return {
            d.id: names.get((d.linked_entity_type, d.linked_entity_id))
            if d.linked_entity_id
            else None
            for d in documents
        }

    async def to_responses(self, documents: Sequence[Document]) -> list[DocumentResponse]:
        """Response models with the linked names filled in."""
        names = await self.linked_entity_names(documents)
        return [
            DocumentResponse.model_validate(d).model_copy(update={"linked_entity_name": names[d.id]})
            for d in documents
        ]

    async def to_response(self, document: Document) -> DocumentResponse:
        return (await self.to_responses([document]))[0]

    async def csv_rows(self) -> list[list[object]]:
        """Rows for the documents spreadsheet."""
        documents = await self.list()
        names = await self.linked_entity_names(documents)
        return [
            [
                d.name,
                d.type.value,
                d.date.isoformat(),
                d.status.value,
                names[d.id] or NO_LINK,
            ]
            for d in documents
        ]
