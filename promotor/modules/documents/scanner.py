"""
AI document scanner.

Images and PDFs are sent to the extraction model, which returns the
document fields as JSON; other files get a local placeholder analysis.
The extracted project and provider names are then matched against the
stored records, and a confirmed scan is saved as a Document (plus a
budget item for quotes).
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from promotor.core.exceptions import (
    AIResponseParseError,
    InvalidInputError,
    ProjectNotFoundError,
    StakeholderNotFoundError,
)
from promotor.core.metrics import DOCUMENT_SCAN_LATENCY, record_document_scan, timed
from promotor.modules.projects.models import (
    BudgetItem,
    BudgetStatus,
    Project,
    ProjectStakeholder,
)
from promotor.modules.stakeholders.models import Stakeholder
from promotor.services.llm import GeminiClient
from promotor.services.llm.prompts import DOCUMENT_EXTRACTION_PROMPT
from promotor.shared.logging import log_document_processed, log_document_scanned

from .matching import auto_associate
from .models import Document, DocumentStatus, DocumentType, LinkedEntityType
from .schemas import DocumentAnalysis, EntityRef, ProcessResult, ScanResult
from .service import DocumentService
from .storage import LocalFileStore, UploadedFile, get_file_store

logger = logging.getLogger(__name__)

MANUAL_IMPORT_SUMMARY = "Archivo importado manualmente"
IMPORTED_BUDGET_CONCEPT = "Partida Importada"

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


def is_analyzable(content_type: str | None) -> bool:
    """Whether the extraction model can read this file (images and PDFs)."""
    content_type = (content_type or "").lower()
    return content_type.startswith("image/") or content_type == "application/pdf"


def fallback_analysis(file_name: str) -> DocumentAnalysis:
    """Placeholder analysis for files the model cannot read."""
    return DocumentAnalysis(
        type=DocumentType.OTHER.value,
        summary=MANUAL_IMPORT_SUMMARY,
        date=date.today().isoformat(),
        amount=None,
        concept=file_name,
        confidence=100,
    )


def parse_analysis(text: str) -> DocumentAnalysis:
    """
    Parse the model's JSON answer.

    Markdown code fences around the JSON are tolerated.

    Raises:
        AIResponseParseError: The answer is not a JSON object with the expected fields
    """
    cleaned = _CODE_FENCE.sub("", text.strip()).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise AIResponseParseError(
            "Document analysis is not valid JSON",
            details={"value": text[:200]},
        ) from e

    if not isinstance(data, dict):
        raise AIResponseParseError(
            "Document analysis is not a JSON object",
            details={"value": text[:200]},
        )

    try:
        return DocumentAnalysis.model_validate(data)
    except ValidationError as e:
        raise AIResponseParseError(
            "Document analysis has unexpected fields",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


class DocumentScanner:
    """
    Scan files and save them as documents.

    Example:
        scanner = DocumentScanner(session, get_llm_client())
        result = await scanner.scan(upload)
        saved = await scanner.process_and_save(upload, result.analysis, project_id=...)
    """

    def __init__(
        self,
        session: AsyncSession,
        llm: GeminiClient,
        file_store: LocalFileStore | None = None,
    ) -> None:
        self._session = session
        self._llm = llm
        self._file_store = file_store or get_file_store()

    async def analyze(self, upload: UploadedFile) -> tuple[DocumentAnalysis, bool]:
        """
        Extract document fields.

        Returns:
            The analysis and whether the model produced it

        Raises:
            LLMConfigurationError: No API key configured
            LLMServiceError: The model call failed
            AIResponseParseError: The model answer could not be parsed
        """
        if not is_analyzable(upload.content_type):
            record_document_scan("fallback")
            return fallback_analysis(upload.filename), False

        response = await self._llm.generate_with_attachment(
            DOCUMENT_EXTRACTION_PROMPT,
            upload.data,
            upload.content_type,
        )
        try:
            analysis = parse_analysis(response.content)
        except AIResponseParseError:
            record_document_scan("failed")
            raise

        record_document_scan("analyzed")
        return analysis, True

    @timed(DOCUMENT_SCAN_LATENCY)
    async def scan(self, upload: UploadedFile) -> ScanResult:
        """Analyze a file and detect its project and provider."""
        analysis, analyzed = await self.analyze(upload)

        projects = await self._session.execute(select(Project).order_by(Project.name, Project.id))
        stakeholders = await self._session.execute(
            select(Stakeholder).order_by(Stakeholder.name, Stakeholder.id)
        )
        match = auto_associate(analysis, projects.scalars().all(), stakeholders.scalars().all())

        log_document_scanned(
            upload.filename,
            upload.content_type,
            analyzed=analyzed,
            detected_type=analysis.type,
            confidence=int(analysis.confidence),
            project_matched=match.project is not None,
            stakeholder_matched=match.stakeholder is not None,
        )

        return ScanResult(
            file_name=upload.filename,
            content_type=upload.content_type,
            size=upload.size,
            analyzable=analyzed,
            analysis=analysis,
            detected_project=EntityRef.model_validate(match.project) if match.project else None,
            detected_stakeholder=(
                EntityRef.model_validate(match.stakeholder) if match.stakeholder else None
            ),
        )

    async def process_and_save(
        self,
        upload: UploadedFile,
        analysis: DocumentAnalysis,
        *,
        project_id: UUID | None = None,
        stakeholder_id: UUID | None = None,
        manual_link_id: UUID | None = None,
        manual_link_type: LinkedEntityType | None = None,
    ) -> ProcessResult:
        """
        Save a scanned file as a document.

        The link goes to the project if one is chosen, else to the contact,
        else to the manual link. A Budget document with an amount and a
        project also becomes a pending budget item, and its provider joins
        the project team.

        Raises:
            ProjectNotFoundError: Unknown project
            StakeholderNotFoundError: Unknown contact
            InvalidInputError: Manual link without a usable type
        """
        project = await self._session.get(Project, project_id) if project_id else None
        if project_id and project is None:
            raise ProjectNotFoundError(project_id)

        stakeholder = (
            await self._session.get(Stakeholder, stakeholder_id) if stakeholder_id else None
        )
        if stakeholder_id and stakeholder is None:
            raise StakeholderNotFoundError(stakeholder_id)

        doc_date = analysis.parsed_date or date.today()
        amount = analysis.amount or None

        link_id: UUID | None
        if project is not None:
            link_id, link_type = project.id, LinkedEntityType.PROJECT
        elif stakeholder is not None:
            link_id, link_type = stakeholder.id, LinkedEntityType.STAKEHOLDER
        elif manual_link_id is not None:
            if manual_link_type in (None, LinkedEntityType.NONE):
                raise InvalidInputError(
                    "Manual link needs a type (Project or Stakeholder)",
                    field="manual_link_type",
                )
            link_id, link_type = manual_link_id, manual_link_type
        else:
            link_id, link_type = None, LinkedEntityType.NONE

        document = Document(
            name=upload.filename,
            type=analysis.document_type,
            date=doc_date,
            amount=amount,
            status=DocumentStatus.PROCESSED,
            linked_entity_id=link_id,
            linked_entity_type=link_type,
            stored_filename=upload.filename,
            content_type=upload.content_type,
            size=upload.size,
        )
        self._session.add(document)
        await self._session.flush()
        self._file_store.save(document.id, upload, source="scan", session=self._session)

        budget_item: BudgetItem | None = None
        stakeholder_linked = False
        if analysis.document_type == DocumentType.BUDGET and project is not None and amount:
            budget_item = BudgetItem(
                concept=analysis.concept or IMPORTED_BUDGET_CONCEPT,
                amount=amount,
                actual_amount=0.0,
                date=doc_date,
                status=BudgetStatus.PENDING,
                provider_id=stakeholder.id if stakeholder else None,
                document_id=document.id,
            )
            project.budgets.append(budget_item)

            if stakeholder is not None and stakeholder.id not in project.stakeholder_ids:
                project.stakeholder_links.append(ProjectStakeholder(stakeholder_id=stakeholder.id))
                stakeholder_linked = True

            await self._session.flush()

        log_document_processed(
            str(document.id),
            document.type.value,
            linked_entity_type=link_type.value,
            budget_item_id=str(budget_item.id) if budget_item else None,
        )
        logger.info("Saved scanned document %s (%s)", document.id, document.type.value)

        return ProcessResult(
            document=await DocumentService(self._session, self._file_store).to_response(document),
            budget_item_id=budget_item.id if budget_item else None,
            stakeholder_linked=stakeholder_linked,
        )
