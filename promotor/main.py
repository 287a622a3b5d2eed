"""FastAPI application entry point"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Import all routers from api/
from promotor.api import assistant as assistant_router
from promotor.api import dashboard as dashboard_router
from promotor.api import data as data_router
from promotor.api import documents as documents_router
from promotor.api import feasibility as feasibility_router
from promotor.api import projects as projects_router
from promotor.api import session as session_router
from promotor.api import stakeholders as stakeholders_router
from promotor.api import system as system_router
from promotor.core.config import settings
from promotor.core.database import close_db, db_manager, init_db
from promotor.core.exceptions import setup_exception_handlers
from promotor.core.logging import get_structured_logger
from promotor.core.metrics import init_metrics
from promotor.core.middleware import setup_middleware

# Import all models first so every table is known to create_all
from promotor.modules.documents.models import Document  # noqa: F401
from promotor.modules.projects.models import (  # noqa: F401
    BudgetItem,
    Project,
    ProjectAction,
    ProjectAlert,
    ProjectStakeholder,
)
from promotor.modules.snapshot.service import SnapshotService
from promotor.modules.stakeholders.models import Stakeholder  # noqa: F401
from promotor.modules.users.models import UserProfile  # noqa: F401
from promotor.services.llm.client import close_llm_client
from promotor.shared.logging import setup_logger

logger = get_structured_logger(__name__)

API_DESCRIPTION = """
Project management for a real-estate developer: projects with their team,
timeline, budget and reminders; clients and providers; documents with AI
field extraction; feasibility studies; a portfolio dashboard and an AI
assistant.
"""

TAGS_METADATA = [
    {"name": "Projects", "description": "Developments with team, timeline, budget and alerts"},
    {"name": "Stakeholders", "description": "Clients and providers"},
    {"name": "Documents", "description": "Stored files and AI scanning"},
    {"name": "Feasibility", "description": "Financial projections and AI reports"},
    {"name": "Dashboard", "description": "Portfolio KPIs and cash flow"},
    {"name": "Assistant", "description": "AI chat"},
    {"name": "Session", "description": "Local session profile"},
    {"name": "Data", "description": "Whole-store export and import"},
    {"name": "System", "description": "Health and metrics"},
]


async def seed_demo_data() -> None:
    """Load the demo portfolio into an empty store."""
    async with db_manager.session() as session:
        result = await SnapshotService(session).seed_demo_data()
    if result is not None:
        logger.info(
            "Demo data loaded",
            projects=result.projects,
            stakeholders=result.stakeholders,
            documents=result.documents,
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    setup_logger()
    logger.info(f"Starting {settings.app.name}...")

    await init_db()
    logger.info("Database initialized", path=settings.db.path)

    init_metrics()

    if settings.app.seed_demo_data:
        await seed_demo_data()

    yield

    # Shutdown
    logger.info("Shutting down...")
    await close_llm_client()
    await close_db()
    logger.info("Database connections closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title=settings.app.name,
        description=API_DESCRIPTION,
        version=settings.app.version,
        openapi_tags=TAGS_METADATA,
        debug=settings.app.debug,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        redirect_slashes=False,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID", "X-Error-Code"],
    )

    # Request tracing and upload size limit
    setup_middleware(app)

    # Register exception handlers
    setup_exception_handlers(app)

    # Include API routers with /api prefix
    app.include_router(projects_router.router, prefix="/api")
    app.include_router(stakeholders_router.router, prefix="/api")
    app.include_router(documents_router.router, prefix="/api")
    app.include_router(feasibility_router.router, prefix="/api")
    app.include_router(dashboard_router.router, prefix="/api")
    app.include_router(assistant_router.router, prefix="/api")
    app.include_router(session_router.router, prefix="/api")
    app.include_router(data_router.router, prefix="/api")

    # System router (no /api prefix - accessible at root)
    app.include_router(system_router.router)

    return app


# Create the application instance
app = create_app()
