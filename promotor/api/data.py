"""FastAPI router for whole-store snapshots."""

from typing import Annotated

from fastapi import APIRouter, Depends

from promotor.core.dependencies import DatabaseSession
from promotor.modules.snapshot.schemas import ImportResult, Snapshot
from promotor.modules.snapshot.service import SnapshotService

router = APIRouter(prefix="/data", tags=["Data"])


async def get_snapshot_service(session: DatabaseSession) -> SnapshotService:
    """Build the snapshot service for a request."""
    return SnapshotService(session)


Snapshots = Annotated[SnapshotService, Depends(get_snapshot_service)]


@router.get("/snapshot", response_model=Snapshot, summary="Export everything")
async def export_snapshot(service: Snapshots) -> Snapshot:
    """Every project with its collections, every contact and all document metadata."""
    return await service.export()


@router.put(
    "/snapshot",
    response_model=ImportResult,
    summary="Replace everything",
    responses={409: {"description": "The snapshot repeats an ID"}},
)
async def import_snapshot(snapshot: Snapshot, service: Snapshots) -> ImportResult:
    """
    Replace the whole store with a snapshot.

    Stored document files are not part of snapshots and are left in place.
    """
    return await service.import_snapshot(snapshot)
