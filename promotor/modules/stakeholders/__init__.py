"""Stakeholders module: clients and providers."""

from .models import Stakeholder, StakeholderType
from .schemas import (
    ProviderStats,
    StakeholderCreate,
    StakeholderResponse,
    StakeholderTypeFilter,
    StakeholderUpdate,
)
from .service import STAKEHOLDER_CSV_HEADERS, StakeholderService

__all__ = [
    "STAKEHOLDER_CSV_HEADERS",
    "ProviderStats",
    "Stakeholder",
    "StakeholderCreate",
    "StakeholderResponse",
    "StakeholderService",
    "StakeholderType",
    "StakeholderTypeFilter",
    "StakeholderUpdate",
]
