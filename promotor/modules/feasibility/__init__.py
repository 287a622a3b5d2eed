"""Feasibility module: financial projection and AI analyst report."""

from .schemas import ChartPoint, FeasibilityAnalysis, FeasibilityParams, FeasibilityResult
from .service import FEASIBILITY_CSV_HEADERS, FeasibilityService, compute, csv_rows

__all__ = [
    "FEASIBILITY_CSV_HEADERS",
    "ChartPoint",
    "FeasibilityAnalysis",
    "FeasibilityParams",
    "FeasibilityResult",
    "FeasibilityService",
    "compute",
    "csv_rows",
]
