"""Health, metrics, and readiness endpoints"""

from fastapi import APIRouter
from fastapi.responses import Response
from sqlalchemy import text

from promotor.core.config import settings
from promotor.core.dependencies import DatabaseSession, LLMClient
from promotor.core.metrics import metrics_endpoint
from promotor.shared.schemas import HealthResponse

router = APIRouter(prefix="/observability", tags=["System"])


@router.get("/health", response_model=HealthResponse)
async def health_check(db: DatabaseSession, llm: LLMClient) -> HealthResponse:
    """Health check endpoint. A missing AI key does not make the service unhealthy."""
    dependencies: dict[str, str] = {}

    try:
        await db.execute(text("SELECT 1"))
        dependencies["database"] = "healthy"
    except Exception as e:
        dependencies["database"] = f"unhealthy: {e}"

    dependencies["llm"] = "configured" if llm.is_configured else "not configured"

    status = "healthy" if "unhealthy" not in dependencies["database"] else "unhealthy"

    return HealthResponse(status=status, version=settings.app.version, dependencies=dependencies)


@router.get("/ready")
async def readiness_check() -> dict[str, bool]:
    """Readiness check endpoint."""
    return {"ready": True}


@router.get("/live")
async def liveness_check() -> dict[str, bool]:
    """Liveness check endpoint."""
    return {"alive": True}


@router.get("/metrics")
async def get_metrics() -> Response:
    """Prometheus metrics endpoint."""
    return await metrics_endpoint()
