"""
Feasibility study service.

The numbers are computed locally; the narrative comes from the analysis
model running in thinking mode.
"""

import logging

from promotor.core.config import settings
from promotor.services.llm import GeminiClient
from promotor.services.llm.prompts import build_feasibility_prompt
from promotor.shared.logging import log_feasibility_computed

from .schemas import ChartPoint, FeasibilityAnalysis, FeasibilityParams, FeasibilityResult

logger = logging.getLogger(__name__)

EMPTY_REPORT = "No response generated."
FEASIBILITY_CSV_HEADERS = ["Parametro", "Valor"]


def compute(params: FeasibilityParams) -> FeasibilityResult:
    """
    Project costs, revenue and returns.

    Financing is charged on half the hard costs (land plus construction)
    over the whole duration, approximating the average drawn balance.
    """
    soft_costs = params.construction_cost * params.soft_costs_percent / 100
    hard_costs = params.land_cost + params.construction_cost
    financial_costs = hard_costs * (params.financing_rate / 100) * (params.duration_months / 12) / 2

    total_investment = hard_costs + soft_costs + financial_costs
    estimated_revenue = params.saleable_area * params.estimated_price_per_sqm
    net_profit = estimated_revenue - total_investment
    roi = net_profit / total_investment * 100 if total_investment > 0 else 0.0
    margin = net_profit / estimated_revenue * 100 if estimated_revenue > 0 else 0.0

    return FeasibilityResult(
        params=params,
        soft_costs=soft_costs,
        financial_costs=financial_costs,
        total_investment=total_investment,
        estimated_revenue=estimated_revenue,
        net_profit=net_profit,
        roi=roi,
        margin=margin,
        cost_breakdown=[
            ChartPoint(name="Suelo", value=params.land_cost),
            ChartPoint(name="Construcción", value=params.construction_cost),
            ChartPoint(name="Costes Ind.", value=soft_costs),
            ChartPoint(name="Financiero", value=financial_costs),
        ],
        profit_bars=[
            ChartPoint(name="Inversión Total", value=total_investment),
            ChartPoint(name="Ingresos", value=estimated_revenue),
            ChartPoint(name="Beneficio", value=net_profit),
        ],
    )


def csv_rows(result: FeasibilityResult) -> list[list[object]]:
    """Parameter and result rows for the spreadsheet export."""
    p = result.params
    return [
        ["Coste Suelo", p.land_cost],
        ["Coste Construccion", p.construction_cost],
        ["Superficie Vendible", p.saleable_area],
        ["Precio/m2", p.estimated_price_per_sqm],
        ["Soft Costs %", p.soft_costs_percent],
        ["Duracion (meses)", p.duration_months],
        ["Interes %", p.financing_rate],
        ["", ""],
        ["RESULTADOS", ""],
        ["Costes Indirectos", f"{result.soft_costs:.2f}"],
        ["Costes Financieros", f"{result.financial_costs:.2f}"],
        ["Inversion Total", f"{result.total_investment:.2f}"],
        ["Ingresos Estimados", f"{result.estimated_revenue:.2f}"],
        ["Beneficio Neto", f"{result.net_profit:.2f}"],
        ["ROI %", f"{result.roi:.2f}"],
        ["Margen %", f"{result.margin:.2f}"],
    ]


class FeasibilityService:
    """Feasibility computations and AI reports."""

    def __init__(self, llm: GeminiClient) -> None:
        self._llm = llm

    def calculate(self, params: FeasibilityParams) -> FeasibilityResult:
        result = compute(params)
        log_feasibility_computed(result.roi, result.margin)
        return result

    async def analyze(self, params: FeasibilityParams) -> FeasibilityAnalysis:
        """
        Ask the analysis model for a detailed study.

        Raises:
            LLMConfigurationError: No API key configured
            LLMServiceError: The model call failed
        """
        result = compute(params)
        response = await self._llm.generate(
            settings.llm.analysis_model,
            build_feasibility_prompt(params),
            thinking_budget=settings.llm.thinking_budget,
            operation="feasibility",
        )

        report = response.content.strip() or EMPTY_REPORT
        log_feasibility_computed(result.roi, result.margin, narrated=True)
        logger.info("Generated feasibility report (%d chars)", len(report))

        return FeasibilityAnalysis(report=report, model=response.model, result=result)
