"""Snapshot module: whole-store export, import and demo data."""

from .schemas import ImportResult, Snapshot
from .seed import demo_snapshot
from .service import SnapshotService

__all__ = [
    "ImportResult",
    "Snapshot",
    "SnapshotService",
    "demo_snapshot",
]
