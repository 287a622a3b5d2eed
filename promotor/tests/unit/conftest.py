"""Pytest configuration for unit tests.

Service tests run against a fresh in-memory SQLite database per test, with
foreign keys enforced as in production. The LLM client is always mocked.
"""

from collections.abc import AsyncGenerator
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from promotor.core.database import Base, enable_sqlite_foreign_keys

# Import all models so every table exists for create_all
from promotor.modules.documents.models import Document  # noqa: F401
from promotor.modules.documents.storage import LocalFileStore, UploadedFile
from promotor.modules.projects.models import (  # noqa: F401
    BudgetItem,
    Project,
    ProjectAction,
    ProjectAlert,
    ProjectStakeholder,
)
from promotor.modules.projects.schemas import ProjectCreate
from promotor.modules.projects.service import ProjectService
from promotor.modules.stakeholders.models import Stakeholder, StakeholderType
from promotor.modules.stakeholders.schemas import StakeholderCreate
from promotor.modules.stakeholders.service import StakeholderService
from promotor.modules.users.models import UserProfile  # noqa: F401
from promotor.services.llm.client import GeminiClient, LLMResponse

# ==================== Database Fixtures ====================


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory database shared by every connection of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Session configured like the application's."""
    factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with factory() as session:
        yield session
        await session.rollback()


# ==================== Storage Fixtures ====================


@pytest.fixture
def file_store(tmp_path) -> LocalFileStore:
    """File store in a temporary directory."""
    return LocalFileStore(tmp_path / "uploads")


def _make_upload(
    filename: str = "factura.pdf",
    content_type: str = "application/pdf",
    data: bytes = b"%PDF-1.4 test",
) -> UploadedFile:
    """Build an in-memory upload."""
    return UploadedFile(filename=filename, content_type=content_type, data=data)


@pytest.fixture
def make_upload():
    """Factory for in-memory uploads."""
    return _make_upload


@pytest.fixture
def pdf_upload() -> UploadedFile:
    return _make_upload()


# ==================== Service Fixtures ====================


@pytest.fixture
def project_service(db_session: AsyncSession, file_store: LocalFileStore) -> ProjectService:
    return ProjectService(db_session, file_store=file_store)


@pytest.fixture
def stakeholder_service(db_session: AsyncSession) -> StakeholderService:
    return StakeholderService(db_session)


@pytest.fixture
async def project(project_service: ProjectService) -> Project:
    """A project with a 1 000 000 budget."""
    return await project_service.create(
        ProjectCreate(
            name="Residencial Los Olivos",
            location="Madrid, Zona Norte",
            budget=1_000_000,
            start_date=date(2024, 1, 1),
        )
    )


@pytest.fixture
async def provider(stakeholder_service: StakeholderService) -> Stakeholder:
    return await stakeholder_service.create(
        StakeholderCreate(
            name="Construcciones Norte SL",
            type=StakeholderType.PROVIDER,
            activity="Obra Civil",
            email="contacto@cnorte.com",
        )
    )


@pytest.fixture
async def client_contact(stakeholder_service: StakeholderService) -> Stakeholder:
    return await stakeholder_service.create(
        StakeholderCreate(
            name="Juan Pérez García",
            type=StakeholderType.CLIENT,
            activity="Inversor",
            email="juan.perez@email.com",
        )
    )


# ==================== LLM Fixtures ====================


def llm_response(content: str, model: str = "gemini-test") -> LLMResponse:
    """Build a model answer."""
    return LLMResponse(content=content, model=model)


@pytest.fixture
def mock_llm() -> MagicMock:
    """Mock Gemini client with async call methods."""
    llm = MagicMock(spec=GeminiClient)
    llm.is_configured = True
    llm.generate = AsyncMock(return_value=llm_response("Informe"))
    llm.chat = AsyncMock(return_value=llm_response("Respuesta"))
    llm.generate_with_attachment = AsyncMock(return_value=llm_response("{}"))
    llm.close = AsyncMock()
    return llm
