"""FastAPI router for feasibility studies."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from promotor.core.dependencies import LLMClient
from promotor.modules.feasibility.schemas import (
    FeasibilityAnalysis,
    FeasibilityParams,
    FeasibilityResult,
)
from promotor.modules.feasibility.service import (
    FEASIBILITY_CSV_HEADERS,
    FeasibilityService,
    csv_rows,
)
from promotor.shared.csv_export import csv_response, render_csv

router = APIRouter(prefix="/feasibility", tags=["Feasibility"])


def get_feasibility_service(llm: LLMClient) -> FeasibilityService:
    """Build the feasibility service."""
    return FeasibilityService(llm)


Feasibility = Annotated[FeasibilityService, Depends(get_feasibility_service)]


@router.post("/calculate", response_model=FeasibilityResult, summary="Run the financial projection")
async def calculate(params: FeasibilityParams, service: Feasibility) -> FeasibilityResult:
    """Investment, revenue, profit, ROI and margin with chart series. No AI involved."""
    return service.calculate(params)


@router.post(
    "/analyze",
    response_model=FeasibilityAnalysis,
    summary="Generate an AI feasibility report",
    responses={
        502: {"description": "AI service error"},
        503: {"description": "AI service not configured"},
    },
)
async def analyze(params: FeasibilityParams, service: Feasibility) -> FeasibilityAnalysis:
    """
    Ask the analysis model for a detailed study of the operation.

    Args:
        params: Operation parameters
        service: Feasibility service

    Returns:
        FeasibilityAnalysis: Markdown report plus the local projection
    """
    return await service.analyze(params)


@router.post("/export", summary="Download the projection as CSV")
async def export(params: FeasibilityParams, service: Feasibility) -> Response:
    result = service.calculate(params)
    return csv_response(
        render_csv(FEASIBILITY_CSV_HEADERS, csv_rows(result)),
        "estudio_viabilidad.csv",
    )
