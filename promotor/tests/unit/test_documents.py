"""Unit tests for documents: storage, service and AI scanner.

Tests cover:
- Upload reading and size limits
- Local file storage
- Document upload, listing, linked names, deletion and CSV rows
- Analysis parsing and the non-analyzable fallback
- Scanning with auto-association and saving scanned files
"""

import io
import json
from datetime import date
from uuid import uuid4

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from promotor.core.exceptions import (
    AIResponseParseError,
    DocumentNotFoundError,
    InvalidInputError,
    LLMConfigurationError,
    ProjectNotFoundError,
    UploadTooLargeError,
)
from promotor.modules.documents.models import DocumentStatus, DocumentType, LinkedEntityType
from promotor.modules.documents.scanner import (
    DocumentScanner,
    fallback_analysis,
    is_analyzable,
    parse_analysis,
)
from promotor.modules.documents.schemas import DocumentAnalysis
from promotor.modules.documents.service import DocumentService
from promotor.modules.documents.storage import read_upload
from promotor.modules.projects.models import BudgetStatus
from promotor.modules.projects.schemas import BudgetItemCreate
from promotor.services.llm.client import LLMResponse


def llm_response(content: str) -> LLMResponse:
    return LLMResponse(content=content, model="gemini-test")


def _starlette_upload(data: bytes, filename: str | None, content_type: str = "") -> UploadFile:
    headers = Headers({"content-type": content_type}) if content_type else Headers({})
    return UploadFile(file=io.BytesIO(data), filename=filename, headers=headers)


@pytest.fixture
def document_service(db_session, file_store) -> DocumentService:
    return DocumentService(db_session, file_store=file_store)


@pytest.fixture
def scanner(db_session, mock_llm, file_store) -> DocumentScanner:
    return DocumentScanner(db_session, mock_llm, file_store=file_store)


# ==================== Storage ====================


@pytest.mark.asyncio
class TestReadUpload:
    """Tests for reading multipart uploads."""

    async def test_reads_bytes_and_type(self):
        upload = await read_upload(_starlette_upload(b"hola", "nota.txt", "text/plain"))

        assert upload.filename == "nota.txt"
        assert upload.content_type == "text/plain"
        assert upload.data == b"hola"
        assert upload.size == 4

    async def test_guesses_missing_type(self):
        upload = await read_upload(_starlette_upload(b"%PDF", "factura.pdf"))

        assert upload.content_type == "application/pdf"

    async def test_rejects_nameless_file(self):
        with pytest.raises(InvalidInputError):
            await read_upload(_starlette_upload(b"x", None))

    async def test_rejects_large_file(self):
        with pytest.raises(UploadTooLargeError):
            await read_upload(_starlette_upload(b"x" * 11, "big.bin"), max_bytes=10)


class TestLocalFileStore:
    """Tests for the file store."""

    def test_save_exists_delete(self, file_store, pdf_upload):
        doc_id = uuid4()

        path = file_store.save(doc_id, pdf_upload)

        assert path.read_bytes() == pdf_upload.data
        assert file_store.exists(doc_id)
        assert file_store.delete(doc_id) is True
        assert file_store.exists(doc_id) is False
        assert file_store.delete(doc_id) is False


# ==================== Service ====================


@pytest.mark.asyncio
class TestDocumentService:
    """Tests for DocumentService."""

    async def test_upload_defaults(self, document_service, file_store, pdf_upload):
        document = await document_service.upload(pdf_upload)

        assert document.type == DocumentType.OTHER
        assert document.status == DocumentStatus.PROCESSED
        assert document.date == date.today()
        assert document.linked_entity_type == LinkedEntityType.NONE
        assert document.has_file
        assert file_store.exists(document.id)

    async def test_upload_linked_to_project(self, document_service, project, pdf_upload):
        document = await document_service.upload(
            pdf_upload,
            linked_entity_id=project.id,
            linked_entity_type=LinkedEntityType.PROJECT,
        )

        response = await document_service.to_response(document)

        assert response.linked_entity_name == "Residencial Los Olivos"

    async def test_upload_to_unknown_project(self, document_service, pdf_upload):
        with pytest.raises(ProjectNotFoundError):
            await document_service.upload(
                pdf_upload,
                linked_entity_id=uuid4(),
                linked_entity_type=LinkedEntityType.PROJECT,
            )

    async def test_list_newest_first(self, document_service, make_upload):
        first = await document_service.upload(make_upload("a.pdf"))
        second = await document_service.upload(make_upload("b.pdf"))

        documents = await document_service.list()

        assert [d.id for d in documents] == [second.id, first.id]

    async def test_linked_name_of_deleted_project(
        self, document_service, project_service, project, pdf_upload
    ):
        document = await document_service.upload(
            pdf_upload,
            linked_entity_id=project.id,
            linked_entity_type=LinkedEntityType.PROJECT,
        )
        await project_service.delete(project.id)

        names = await document_service.linked_entity_names([document])
        rows = await document_service.csv_rows()

        assert names[document.id] is None
        assert rows[0][-1] == "N/A"

    async def test_linked_name_of_stakeholder(self, document_service, provider, pdf_upload):
        document = await document_service.upload(
            pdf_upload,
            linked_entity_id=provider.id,
            linked_entity_type=LinkedEntityType.STAKEHOLDER,
        )

        rows = await document_service.csv_rows()

        assert rows == [
            [
                "factura.pdf",
                "Other",
                date.today().isoformat(),
                "Processed",
                "Construcciones Norte SL",
            ]
        ]
        assert (await document_service.to_response(document)).linked_entity_name == (
            "Construcciones Norte SL"
        )

    async def test_delete_removes_file_and_clears_budget_reference(
        self, db_session, document_service, project_service, project, file_store, pdf_upload
    ):
        item = await project_service.add_budget_item(project.id, BudgetItemCreate(concept="Grúa"))
        _, document = await project_service.attach_budget_document(project.id, item.id, pdf_upload)

        await document_service.delete(document.id)

        assert file_store.exists(document.id)
        await db_session.commit()
        assert file_store.exists(document.id) is False
        with pytest.raises(DocumentNotFoundError):
            await document_service.get(document.id)
        refreshed = await project_service.get(project.id)
        assert refreshed.budgets[0].id == item.id
        assert refreshed.budgets[0].document_id is None

    async def test_rollback_discards_uploaded_file(
        self, db_session, document_service, file_store, pdf_upload
    ):
        document = await document_service.upload(pdf_upload)
        assert file_store.exists(document.id)

        await db_session.rollback()

        assert file_store.exists(document.id) is False

    async def test_rollback_keeps_file_of_deleted_document(
        self, db_session, document_service, file_store, pdf_upload
    ):
        document = await document_service.upload(pdf_upload)
        await db_session.commit()

        await document_service.delete(document.id)
        await db_session.rollback()

        assert file_store.exists(document.id)

    async def test_open_file(self, document_service, pdf_upload):
        document = await document_service.upload(pdf_upload)

        found, path = await document_service.open_file(document.id)

        assert found.id == document.id
        assert path.read_bytes() == pdf_upload.data

    async def test_open_file_missing(self, document_service, file_store, pdf_upload):
        document = await document_service.upload(pdf_upload)
        file_store.delete(document.id)

        with pytest.raises(DocumentNotFoundError):
            await document_service.open_file(document.id)


# ==================== Analysis parsing ====================


class TestAnalysisHelpers:
    """Tests for the scanner helpers."""

    @pytest.mark.parametrize(
        ("content_type", "expected"),
        [
            ("image/png", True),
            ("image/jpeg", True),
            ("application/pdf", True),
            ("text/plain", False),
            ("application/vnd.ms-excel", False),
            (None, False),
        ],
    )
    def test_is_analyzable(self, content_type, expected):
        assert is_analyzable(content_type) is expected

    def test_fallback_analysis(self):
        analysis = fallback_analysis("mediciones.xlsx")

        assert analysis.document_type == DocumentType.OTHER
        assert analysis.summary == "Archivo importado manualmente"
        assert analysis.concept == "mediciones.xlsx"
        assert analysis.amount is None
        assert analysis.confidence == 100
        assert analysis.parsed_date == date.today()

    def test_parse_plain_json(self):
        analysis = parse_analysis(
            json.dumps(
                {
                    "type": "Invoice",
                    "summary": "Factura de hormigón",
                    "date": "2024-05-12",
                    "amount": 12500,
                    "concept": "Hormigón HA-25",
                    "providerName": "Cimentos SA",
                    "projectName": "Los Olivos",
                    "confidence": 92,
                }
            )
        )

        assert analysis.document_type == DocumentType.INVOICE
        assert analysis.parsed_date == date(2024, 5, 12)
        assert analysis.provider_name == "Cimentos SA"
        assert analysis.project_name == "Los Olivos"

    def test_parse_fenced_json(self):
        analysis = parse_analysis('```json\n{"type": "Budget", "amount": 100}\n```')

        assert analysis.document_type == DocumentType.BUDGET
        assert analysis.amount == 100

    @pytest.mark.parametrize("text", ["not json", "[1, 2]", '{"amount": "mucho"}'])
    def test_parse_rejects_garbage(self, text):
        with pytest.raises(AIResponseParseError):
            parse_analysis(text)

    @pytest.mark.parametrize("field", ["type", "summary", "confidence"])
    def test_parse_null_fields_use_defaults(self, field):
        data = {"type": "Invoice", "summary": "Factura", "amount": 1200, "confidence": 90}
        data[field] = None

        analysis = parse_analysis(json.dumps(data))

        assert analysis.amount == 1200
        assert analysis.document_type == (
            DocumentType.OTHER if field == "type" else DocumentType.INVOICE
        )
        assert analysis.summary == ("" if field == "summary" else "Factura")
        assert analysis.confidence == (0 if field == "confidence" else 90)

    def test_unknown_type_and_bad_date(self):
        analysis = DocumentAnalysis(type="Receipt", date="12/05/2024")

        assert analysis.document_type == DocumentType.OTHER
        assert analysis.parsed_date is None


# ==================== Scanner ====================


@pytest.mark.asyncio
class TestScan:
    """Tests for DocumentScanner.scan."""

    async def test_non_analyzable_skips_model(self, scanner, mock_llm, make_upload):
        result = await scanner.scan(make_upload("planos.dwg", "application/octet-stream"))

        mock_llm.generate_with_attachment.assert_not_called()
        assert result.analyzable is False
        assert result.analysis.summary == "Archivo importado manualmente"

    async def test_analyzable_with_auto_association(
        self, scanner, mock_llm, project, provider, pdf_upload
    ):
        mock_llm.generate_with_attachment.return_value = llm_response(
            '```json\n{"type": "Budget", "amount": 5000, "projectName": "los olivos",'
            ' "providerName": "CONSTRUCCIONES NORTE", "confidence": 80}\n```'
        )

        result = await scanner.scan(pdf_upload)

        assert result.analyzable is True
        assert result.analysis.amount == 5000
        assert result.detected_project.id == project.id
        assert result.detected_project.name == "Residencial Los Olivos"
        assert result.detected_stakeholder.id == provider.id
        args = mock_llm.generate_with_attachment.call_args.args
        assert args[1] == pdf_upload.data
        assert args[2] == "application/pdf"

    async def test_unparsable_answer(self, scanner, mock_llm, pdf_upload):
        mock_llm.generate_with_attachment.return_value = llm_response("Lo siento, no puedo.")

        with pytest.raises(AIResponseParseError):
            await scanner.scan(pdf_upload)

    async def test_missing_api_key(self, scanner, mock_llm, pdf_upload):
        mock_llm.generate_with_attachment.side_effect = LLMConfigurationError()

        with pytest.raises(LLMConfigurationError):
            await scanner.scan(pdf_upload)


@pytest.mark.asyncio
class TestProcessAndSave:
    """Tests for DocumentScanner.process_and_save."""

    async def test_budget_document_creates_item_and_links_provider(
        self, scanner, project_service, project, provider, file_store, pdf_upload
    ):
        analysis = DocumentAnalysis(
            type="Budget",
            date="2024-04-01",
            amount=18_000,
            concept="Andamios",
        )

        result = await scanner.process_and_save(
            pdf_upload,
            analysis,
            project_id=project.id,
            stakeholder_id=provider.id,
        )

        assert result.document.type == DocumentType.BUDGET
        assert result.document.linked_entity_id == project.id
        assert result.document.linked_entity_name == "Residencial Los Olivos"
        assert result.stakeholder_linked is True
        assert file_store.exists(result.document.id)

        refreshed = await project_service.get(project.id)
        assert refreshed.stakeholder_ids == [provider.id]
        [item] = refreshed.budgets
        assert item.id == result.budget_item_id
        assert item.concept == "Andamios"
        assert item.amount == 18_000
        assert item.actual_amount == 0
        assert item.status == BudgetStatus.PENDING
        assert item.date == date(2024, 4, 1)
        assert item.provider_id == provider.id
        assert item.document_id == result.document.id

    async def test_budget_without_concept_or_provider(
        self, scanner, project_service, project, pdf_upload
    ):
        result = await scanner.process_and_save(
            pdf_upload,
            DocumentAnalysis(type="Budget", amount=500),
            project_id=project.id,
        )

        refreshed = await project_service.get(project.id)
        assert refreshed.budgets[0].concept == "Partida Importada"
        assert refreshed.budgets[0].provider_id is None
        assert result.stakeholder_linked is False

    async def test_already_linked_provider(
        self, scanner, project_service, project, provider, pdf_upload
    ):
        await project_service.add_stakeholder(project.id, provider.id)

        result = await scanner.process_and_save(
            pdf_upload,
            DocumentAnalysis(type="Budget", amount=500),
            project_id=project.id,
            stakeholder_id=provider.id,
        )

        assert result.stakeholder_linked is False
        assert (await project_service.get(project.id)).stakeholder_ids == [provider.id]

    async def test_zero_amount_budget_creates_no_item(
        self, scanner, project_service, project, pdf_upload
    ):
        result = await scanner.process_and_save(
            pdf_upload,
            DocumentAnalysis(type="Budget", amount=0),
            project_id=project.id,
        )

        assert result.budget_item_id is None
        assert result.document.amount is None
        assert (await project_service.get(project.id)).budgets == []

    async def test_stakeholder_link_without_project(self, scanner, provider, pdf_upload):
        result = await scanner.process_and_save(
            pdf_upload,
            DocumentAnalysis(type="Invoice", amount=1_000),
            stakeholder_id=provider.id,
        )

        assert result.document.linked_entity_type == LinkedEntityType.STAKEHOLDER
        assert result.document.linked_entity_id == provider.id
        assert result.budget_item_id is None

    async def test_manual_link(self, scanner, pdf_upload):
        target = uuid4()

        result = await scanner.process_and_save(
            pdf_upload,
            DocumentAnalysis(type="Contract"),
            manual_link_id=target,
            manual_link_type=LinkedEntityType.PROJECT,
        )

        assert result.document.type == DocumentType.CONTRACT
        assert result.document.linked_entity_id == target
        assert result.document.linked_entity_name is None
        assert result.document.date == date.today()

    async def test_manual_link_needs_type(self, scanner, pdf_upload):
        with pytest.raises(InvalidInputError):
            await scanner.process_and_save(
                pdf_upload,
                DocumentAnalysis(),
                manual_link_id=uuid4(),
            )

    async def test_unlinked(self, scanner, pdf_upload):
        result = await scanner.process_and_save(pdf_upload, DocumentAnalysis(type="Blueprint"))

        assert result.document.linked_entity_type == LinkedEntityType.NONE
        assert result.document.linked_entity_id is None

    async def test_unknown_project(self, scanner, pdf_upload):
        with pytest.raises(ProjectNotFoundError):
            await scanner.process_and_save(
                pdf_upload,
                DocumentAnalysis(),
                project_id=uuid4(),
            )
