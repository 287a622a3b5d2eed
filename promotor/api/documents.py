"""FastAPI router for documents and AI scanning."""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse, Response
from pydantic import ValidationError

from promotor.core.dependencies import DatabaseSession, FileStore, LLMClient
from promotor.core.exceptions import InvalidInputError
from promotor.modules.documents.models import LinkedEntityType
from promotor.modules.documents.scanner import DocumentScanner
from promotor.modules.documents.schemas import (
    DocumentAnalysis,
    DocumentResponse,
    ProcessResult,
    ScanResult,
)
from promotor.modules.documents.service import DOCUMENT_CSV_HEADERS, DocumentService
from promotor.modules.documents.storage import read_upload
from promotor.shared.csv_export import csv_response, render_csv

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["Documents"])


async def get_document_service(session: DatabaseSession, file_store: FileStore) -> DocumentService:
    """Build the document service for a request."""
    return DocumentService(session, file_store=file_store)


async def get_document_scanner(
    session: DatabaseSession,
    llm: LLMClient,
    file_store: FileStore,
) -> DocumentScanner:
    """Build the document scanner for a request."""
    return DocumentScanner(session, llm, file_store=file_store)


Documents = Annotated[DocumentService, Depends(get_document_service)]
Scanner = Annotated[DocumentScanner, Depends(get_document_scanner)]
UploadField = Annotated[UploadFile, File(description="Document file")]


def _parse_analysis_field(raw: str) -> DocumentAnalysis:
    try:
        return DocumentAnalysis.model_validate_json(raw)
    except ValidationError as e:
        raise InvalidInputError("Invalid document analysis", field="analysis") from e


@router.get("", response_model=list[DocumentResponse], summary="List documents")
async def list_documents(service: Documents) -> list[DocumentResponse]:
    """List documents newest first, with the name of what each is linked to."""
    documents = await service.list()
    return await service.to_responses(documents)


@router.post(
    "",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a document",
    responses={
        404: {"description": "Linked project or contact not found"},
        413: {"description": "File too large"},
    },
)
async def upload_document(
    service: Documents,
    file: UploadField,
    linked_entity_id: Annotated[UUID | None, Form()] = None,
    linked_entity_type: Annotated[LinkedEntityType | None, Form()] = None,
) -> DocumentResponse:
    """
    Store a file directly, without analysis.

    The document gets type ``Other``, status ``Processed`` and today's date.

    Args:
        service: Document service
        file: Uploaded file
        linked_entity_id: Optional project or contact to link
        linked_entity_type: ``Project`` or ``Stakeholder``

    Returns:
        DocumentResponse: The stored document
    """
    upload = await read_upload(file)
    document = await service.upload(
        upload,
        linked_entity_id=linked_entity_id,
        linked_entity_type=linked_entity_type,
    )
    return await service.to_response(document)


@router.get("/export", summary="Download the document list as CSV")
async def export_documents(service: Documents) -> Response:
    rows = await service.csv_rows()
    return csv_response(render_csv(DOCUMENT_CSV_HEADERS, rows), "documentos_export.csv")


@router.post(
    "/scan",
    response_model=ScanResult,
    summary="Analyze a file with AI",
    responses={
        413: {"description": "File too large"},
        502: {"description": "AI service error or unreadable answer"},
        503: {"description": "AI service not configured"},
    },
)
async def scan_document(scanner: Scanner, file: UploadField) -> ScanResult:
    """
    Extract type, date, amount, concept and names from a file.

    Images and PDFs go to the extraction model. Other files get a local
    placeholder analysis. Detected names are matched against existing
    projects and contacts. Nothing is saved.

    Args:
        scanner: Document scanner
        file: File to analyze

    Returns:
        ScanResult: Analysis with the detected project and contact
    """
    upload = await read_upload(file)
    return await scanner.scan(upload)


@router.post(
    "/process",
    response_model=ProcessResult,
    status_code=status.HTTP_201_CREATED,
    summary="Save a scanned file",
    responses={
        422: {"description": "Malformed analysis"},
        404: {"description": "Project or contact not found"},
    },
)
async def process_document(
    scanner: Scanner,
    file: UploadField,
    analysis: Annotated[str, Form(description="Analysis JSON as returned by /scan")],
    project_id: Annotated[UUID | None, Form()] = None,
    stakeholder_id: Annotated[UUID | None, Form()] = None,
    linked_entity_id: Annotated[UUID | None, Form()] = None,
    linked_entity_type: Annotated[LinkedEntityType | None, Form()] = None,
) -> ProcessResult:
    """
    Save a file with its (possibly edited) analysis.

    A Budget document with an amount and a project also becomes a pending
    budget item, and the chosen provider joins the project team.
    """
    upload = await read_upload(file)
    return await scanner.process_and_save(
        upload,
        _parse_analysis_field(analysis),
        project_id=project_id,
        stakeholder_id=stakeholder_id,
        manual_link_id=linked_entity_id,
        manual_link_type=linked_entity_type,
    )


@router.get(
    "/{document_id}",
    response_model=DocumentResponse,
    summary="Get a document",
    responses={404: {"description": "Document not found"}},
)
async def get_document(document_id: UUID, service: Documents) -> DocumentResponse:
    document = await service.get(document_id)
    return await service.to_response(document)


@router.get(
    "/{document_id}/file",
    summary="Download or preview the stored file",
    responses={404: {"description": "Document or file not found"}},
)
async def get_document_file(
    document_id: UUID,
    service: Documents,
    inline: Annotated[
        bool,
        Query(description="Display in the browser instead of downloading"),
    ] = False,
) -> FileResponse:
    document, path = await service.open_file(document_id)
    return FileResponse(
        path,
        media_type=document.content_type or "application/octet-stream",
        filename=document.stored_filename or document.name,
        content_disposition_type="inline" if inline else "attachment",
    )


@router.delete(
    "/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a document",
    responses={404: {"description": "Document not found"}},
)
async def delete_document(document_id: UUID, service: Documents) -> None:
    """Delete a document and its stored file."""
    await service.delete(document_id)
