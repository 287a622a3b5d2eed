"""Pydantic schemas for feasibility studies."""

from pydantic import Field

from promotor.shared.schemas import BaseSchema


class FeasibilityParams(BaseSchema):
    """Inputs of a feasibility study."""

    land_cost: float = Field(default=1_000_000, ge=0, description="Land cost")
    construction_cost: float = Field(default=2_500_000, ge=0, description="Hard construction cost")
    saleable_area: float = Field(default=2000, ge=0, description="Saleable area in m²")
    estimated_price_per_sqm: float = Field(default=2800, ge=0, description="Sale price per m²")
    soft_costs_percent: float = Field(
        default=12,
        ge=0,
        description="Indirect costs as a percentage of construction",
    )
    duration_months: float = Field(default=24, ge=0, description="Project duration in months")
    financing_rate: float = Field(default=4.5, ge=0, description="Annual financing rate (%)")


class ChartPoint(BaseSchema):
    """Named value for the charts."""

    name: str
    value: float


class FeasibilityResult(BaseSchema):
    """Local financial projection."""

    params: FeasibilityParams
    soft_costs: float
    financial_costs: float
    total_investment: float
    estimated_revenue: float
    net_profit: float
    roi: float = Field(..., description="Net profit over total investment (%)")
    margin: float = Field(..., description="Net profit over revenue (%)")
    cost_breakdown: list[ChartPoint]
    profit_bars: list[ChartPoint]


class FeasibilityAnalysis(BaseSchema):
    """AI narrative plus the local projection it was based on."""

    report: str = Field(..., description="Markdown report")
    model: str
    result: FeasibilityResult
