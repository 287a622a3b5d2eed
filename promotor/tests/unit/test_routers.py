"""Unit tests for the API routers.

Services are replaced with mocks through ``dependency_overrides``; these
tests check routing, parameter parsing, status codes, error bodies and
download headers.
"""

from datetime import date, datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from promotor.api.assistant import get_assistant_service
from promotor.api.dashboard import get_dashboard_service
from promotor.api.documents import get_document_scanner, get_document_service
from promotor.api.projects import get_project_service
from promotor.api.session import get_user_service
from promotor.api.stakeholders import get_stakeholder_service
from promotor.core.database import get_db
from promotor.core.dependencies import get_llm
from promotor.core.exceptions import (
    InvalidInputError,
    LLMConfigurationError,
    ProjectNotFoundError,
    SessionNotFoundError,
)
from promotor.main import create_app
from promotor.modules.assistant import AssistantService, ChatReply
from promotor.modules.dashboard.service import DashboardService
from promotor.modules.documents.models import LinkedEntityType
from promotor.modules.documents.scanner import DocumentScanner
from promotor.modules.documents.schemas import DocumentAnalysis, DocumentResponse, ProcessResult
from promotor.modules.documents.service import DocumentService
from promotor.modules.projects.models import ProjectStatus
from promotor.modules.projects.schemas import BudgetSummary, ProjectResponse
from promotor.modules.projects.service import ProjectService
from promotor.modules.stakeholders.schemas import StakeholderResponse
from promotor.modules.stakeholders.service import StakeholderService
from promotor.modules.users.service import UserService
from promotor.services.llm.client import LLMResponse

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def app(mock_llm):
    """App with a mocked database session and LLM client."""
    app = create_app()

    async def override_get_db():
        yield AsyncMock()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm] = lambda: mock_llm

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


def _project_response(**overrides) -> ProjectResponse:
    data = {
        "id": uuid4(),
        "created_at": NOW,
        "updated_at": NOW,
        "name": "Residencial Los Olivos",
        "location": "Madrid, Zona Norte",
        "budget": 4_500_000,
        "actual_cost": 1_200_000,
        "progress": 35,
        "status": ProjectStatus.ACTIVE,
        "start_date": date(2023, 9, 1),
    }
    data.update(overrides)
    return ProjectResponse(**data)


def _document_response(**overrides) -> DocumentResponse:
    data = {
        "id": uuid4(),
        "created_at": NOW,
        "name": "factura.pdf",
        "type": "Other",
        "date": date(2024, 5, 1),
        "status": "Processed",
    }
    data.update(overrides)
    return DocumentResponse(**data)


# ==================== Projects ====================


class TestProjectsRouter:
    """Tests for /api/projects."""

    @pytest.fixture
    def service(self, app):
        service = AsyncMock(spec=ProjectService)
        app.dependency_overrides[get_project_service] = lambda: service
        return service

    def test_list(self, client, service):
        service.list.return_value = [_project_response()]

        response = client.get("/api/projects")

        assert response.status_code == status.HTTP_200_OK
        [project] = response.json()
        assert project["name"] == "Residencial Los Olivos"
        assert project["status"] == "En Construcción"
        assert project["stakeholder_ids"] == []

    def test_create(self, client, service):
        service.create.return_value = _project_response(name="Torre Marina")

        response = client.post("/api/projects", json={"name": "Torre Marina", "budget": 8_200_000})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["name"] == "Torre Marina"
        data = service.create.call_args.args[0]
        assert data.budget == 8_200_000

    def test_create_missing_budget(self, client, service):
        response = client.post("/api/projects", json={"name": "Torre Marina"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"] == "VALIDATION_ERROR"
        service.create.assert_not_called()

    def test_not_found(self, client, service):
        project_id = uuid4()
        service.get.side_effect = ProjectNotFoundError(project_id)

        response = client.get(f"/api/projects/{project_id}")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        body = response.json()
        assert body["error"] == "PROJECT_NOT_FOUND"
        assert body["details"]["resource_id"] == str(project_id)
        assert response.headers["X-Error-Code"] == "PROJECT_NOT_FOUND"

    def test_invalid_id(self, client, service):
        response = client.get("/api/projects/not-a-uuid")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_delete(self, client, service):
        project_id = uuid4()

        response = client.delete(f"/api/projects/{project_id}")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        service.delete.assert_awaited_once_with(project_id)

    def test_export(self, client, service):
        service.projects_csv_rows.return_value = [["id-1", "Olivos", "Madrid"]]

        response = client.get("/api/projects/export")

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"].startswith("text/csv")
        disposition = response.headers["content-disposition"]
        assert f"proyectos_export_{date.today().isoformat()}.csv" in disposition
        assert "Olivos" in response.text

    def test_budget_export_filename(self, client, service):
        service.budget_csv_rows.return_value = (
            SimpleNamespace(name="Residencial Los Olivos"),
            [],
        )

        response = client.get(f"/api/projects/{uuid4()}/budgets/export")

        assert response.status_code == status.HTTP_200_OK
        assert "presupuestos_Residencial_Los_Olivos.csv" in response.headers["content-disposition"]

    @pytest.mark.parametrize("provider", ["all", None])
    def test_budget_summary_all_providers(self, client, service, provider):
        project_id = uuid4()
        service.budget_summary.return_value = BudgetSummary(
            project_id=project_id,
            items=[],
            total_estimated=0,
            total_actual=0,
            deviation=0,
            within_budget=True,
        )
        params = {"provider_id": provider} if provider else {}

        response = client.get(f"/api/projects/{project_id}/budgets/summary", params=params)

        assert response.status_code == status.HTTP_200_OK
        service.budget_summary.assert_awaited_once_with(project_id, "all")

    def test_budget_summary_one_provider(self, client, service):
        project_id, provider_id = uuid4(), uuid4()
        service.budget_summary.return_value = BudgetSummary(
            project_id=project_id,
            provider_id=provider_id,
            items=[],
            total_estimated=0,
            total_actual=0,
            deviation=0,
            within_budget=True,
        )

        response = client.get(
            f"/api/projects/{project_id}/budgets/summary",
            params={"provider_id": str(provider_id)},
        )

        assert response.status_code == status.HTTP_200_OK
        service.budget_summary.assert_awaited_once_with(project_id, provider_id)


# ==================== Stakeholders ====================


class TestStakeholdersRouter:
    """Tests for /api/stakeholders."""

    @pytest.fixture
    def service(self, app):
        service = AsyncMock(spec=StakeholderService)
        app.dependency_overrides[get_stakeholder_service] = lambda: service
        return service

    def test_list_with_filters(self, client, service):
        service.list.return_value = [
            StakeholderResponse(
                id=uuid4(),
                created_at=NOW,
                updated_at=NOW,
                name="Construcciones Norte SL",
                type="Provider",
                activity="Obra Civil",
                email="contacto@cnorte.com",
                phone="",
            )
        ]

        response = client.get("/api/stakeholders", params={"type": "Provider", "search": "norte"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()[0]["type"] == "Provider"
        service.list.assert_awaited_once_with(type_filter="Provider", search="norte")

    def test_unknown_type_filter(self, client, service):
        response = client.get("/api/stakeholders", params={"type": "Partner"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_export_filename(self, client, service):
        service.csv_rows.return_value = []

        response = client.get("/api/stakeholders/export", params={"type": "Client"})

        assert response.status_code == status.HTTP_200_OK
        assert "contactos_client.csv" in response.headers["content-disposition"]


# ==================== Documents ====================


class TestDocumentsRouter:
    """Tests for /api/documents."""

    @pytest.fixture
    def service(self, app):
        service = AsyncMock(spec=DocumentService)
        app.dependency_overrides[get_document_service] = lambda: service
        return service

    @pytest.fixture
    def scanner(self, app):
        scanner = AsyncMock(spec=DocumentScanner)
        app.dependency_overrides[get_document_scanner] = lambda: scanner
        return scanner

    def test_upload(self, client, service):
        project_id = uuid4()
        service.to_response.return_value = _document_response()

        response = client.post(
            "/api/documents",
            files={"file": ("factura.pdf", b"%PDF-1.4", "application/pdf")},
            data={"linked_entity_id": str(project_id), "linked_entity_type": "Project"},
        )

        assert response.status_code == status.HTTP_201_CREATED
        call = service.upload.call_args
        upload = call.args[0]
        assert upload.filename == "factura.pdf"
        assert upload.data == b"%PDF-1.4"
        assert call.kwargs["linked_entity_id"] == project_id
        assert call.kwargs["linked_entity_type"] == LinkedEntityType.PROJECT

    def test_upload_without_file(self, client, service):
        response = client.post("/api/documents", data={})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        service.upload.assert_not_called()

    def test_process_passes_links(self, client, scanner):
        project_id, other_id = uuid4(), uuid4()
        scanner.process_and_save.return_value = ProcessResult(document=_document_response())

        response = client.post(
            "/api/documents/process",
            files={"file": ("presupuesto.png", b"png", "image/png")},
            data={
                "analysis": '{"type": "Budget", "amount": 1200, "providerName": "Norte"}',
                "project_id": str(project_id),
                "linked_entity_id": str(other_id),
                "linked_entity_type": "Stakeholder",
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        call = scanner.process_and_save.call_args
        analysis = call.args[1]
        assert isinstance(analysis, DocumentAnalysis)
        assert analysis.amount == 1200
        assert analysis.provider_name == "Norte"
        assert call.kwargs["project_id"] == project_id
        assert call.kwargs["stakeholder_id"] is None
        assert call.kwargs["manual_link_id"] == other_id
        assert call.kwargs["manual_link_type"] == LinkedEntityType.STAKEHOLDER

    def test_process_malformed_analysis(self, client, scanner):
        response = client.post(
            "/api/documents/process",
            files={"file": ("a.png", b"png", "image/png")},
            data={"analysis": "not json"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"] == "INVALID_INPUT"
        assert response.json()["details"]["field"] == "analysis"
        scanner.process_and_save.assert_not_called()

    def test_scan_without_api_key(self, client, scanner):
        scanner.scan.side_effect = LLMConfigurationError()

        response = client.post(
            "/api/documents/scan",
            files={"file": ("a.png", b"png", "image/png")},
        )

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["error"] == "LLM_CONFIGURATION_ERROR"

    @pytest.mark.parametrize(("inline", "disposition"), [(True, "inline"), (False, "attachment")])
    def test_file_download(self, client, service, tmp_path, inline, disposition):
        path = tmp_path / "stored"
        path.write_bytes(b"%PDF-1.4")
        document = SimpleNamespace(
            content_type="application/pdf",
            stored_filename="factura.pdf",
            name="factura.pdf",
        )
        service.open_file.return_value = (document, path)

        response = client.get(f"/api/documents/{uuid4()}/file", params={"inline": inline})

        assert response.status_code == status.HTTP_200_OK
        assert response.content == b"%PDF-1.4"
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"].startswith(disposition)


# ==================== Dashboard, feasibility, assistant ====================


class TestDashboardRouter:
    @pytest.fixture
    def service(self, app):
        service = AsyncMock(spec=DashboardService)
        service.csv_rows.return_value = []
        app.dependency_overrides[get_dashboard_service] = lambda: service
        return service

    @pytest.mark.parametrize("value", ["all", "garbage", ""])
    def test_non_id_filter_means_portfolio(self, client, service, value):
        response = client.get("/api/dashboard/export", params={"project_id": value})

        assert response.status_code == status.HTTP_200_OK
        service.csv_rows.assert_awaited_once_with(None)

    def test_project_filter(self, client, service):
        project_id = uuid4()

        response = client.get("/api/dashboard/export", params={"project_id": str(project_id)})

        assert response.status_code == status.HTTP_200_OK
        service.csv_rows.assert_awaited_once_with(project_id)
        assert "dashboard_report_" in response.headers["content-disposition"]


class TestFeasibilityRouter:
    def test_calculate_with_defaults(self, client):
        response = client.post("/api/feasibility/calculate", json={})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["total_investment"] == pytest.approx(3_957_500)

    def test_negative_input(self, client):
        response = client.post("/api/feasibility/calculate", json={"land_cost": -5})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_analyze(self, client, mock_llm):
        mock_llm.generate.return_value = LLMResponse(content="## Informe", model="gemini")

        response = client.post("/api/feasibility/analyze", json={})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["report"] == "## Informe"

    def test_export(self, client):
        response = client.post("/api/feasibility/export", json={})

        assert response.status_code == status.HTTP_200_OK
        assert "estudio_viabilidad.csv" in response.headers["content-disposition"]
        assert response.text.startswith("Parametro,Valor")


class TestAssistantRouter:
    @pytest.fixture
    def service(self, app):
        service = MagicMock(spec=AssistantService)
        service.send_message = AsyncMock(return_value=ChatReply(text="Hola", model="gemini"))
        app.dependency_overrides[get_assistant_service] = lambda: service
        return service

    def test_message(self, client, service):
        response = client.post(
            "/api/assistant/messages",
            json={"history": [{"role": "user", "text": "Hola"}], "message": "¿Qué es el ROI?"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"role": "model", "text": "Hola", "model": "gemini"}
        history, message = service.send_message.call_args.args
        assert history[0].text == "Hola"
        assert message == "¿Qué es el ROI?"

    def test_unknown_role(self, client, service):
        response = client.post(
            "/api/assistant/messages",
            json={"history": [{"role": "system", "text": "x"}], "message": "Hola"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


# ==================== Session ====================


class TestSessionRouter:
    @pytest.fixture
    def service(self, app):
        service = AsyncMock(spec=UserService)
        app.dependency_overrides[get_user_service] = lambda: service
        return service

    def test_login(self, client, service):
        service.login.return_value = SimpleNamespace(
            email="admin@promotora.es",
            name="Admin",
            role="admin",
            last_login=NOW,
        )

        response = client.post(
            "/api/session/login",
            json={"email": "admin@promotora.es", "password": "1234"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["role"] == "admin"

    def test_short_password(self, client, service):
        service.login.side_effect = InvalidInputError("Contraseña corta", field="password")

        response = client.post(
            "/api/session/login",
            json={"email": "admin@promotora.es", "password": "1"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["details"]["field"] == "password"

    def test_no_session(self, client, service):
        service.current.side_effect = SessionNotFoundError()

        response = client.get("/api/session")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "SESSION_NOT_FOUND"

    def test_logout(self, client, service):
        response = client.delete("/api/session")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        service.logout.assert_awaited_once()


# ==================== System ====================


class TestSystemRouter:
    def test_health_without_api_key(self, client, mock_llm):
        mock_llm.is_configured = False

        response = client.get("/observability/health")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["status"] == "healthy"
        assert body["dependencies"] == {"database": "healthy", "llm": "not configured"}

    def test_health_database_down(self, app, client):
        async def broken_db():
            session = AsyncMock()
            session.execute.side_effect = RuntimeError("disk I/O error")
            yield session

        app.dependency_overrides[get_db] = broken_db

        response = client.get("/observability/health")

        assert response.json()["status"] == "unhealthy"

    def test_request_id_header(self, client):
        response = client.get("/observability/live", headers={"X-Request-ID": "abc-123"})

        assert response.json() == {"alive": True}
        assert response.headers["X-Request-ID"] == "abc-123"

    def test_metrics(self, client):
        response = client.get("/observability/metrics")

        assert response.status_code == status.HTTP_200_OK
