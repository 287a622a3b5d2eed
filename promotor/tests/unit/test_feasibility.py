"""Unit tests for feasibility studies."""

import pytest

from promotor.core.config import settings
from promotor.core.exceptions import LLMConfigurationError
from promotor.modules.feasibility import FeasibilityParams, FeasibilityService, compute, csv_rows
from promotor.services.llm.client import LLMResponse
from promotor.services.llm.prompts import build_feasibility_prompt, format_number


class TestCompute:
    """Tests for the local projection."""

    def test_default_study(self):
        result = compute(FeasibilityParams())

        assert result.soft_costs == pytest.approx(300_000)
        assert result.financial_costs == pytest.approx(157_500)
        assert result.total_investment == pytest.approx(3_957_500)
        assert result.estimated_revenue == pytest.approx(5_600_000)
        assert result.net_profit == pytest.approx(1_642_500)
        assert result.roi == pytest.approx(41.5034, abs=1e-3)
        assert result.margin == pytest.approx(29.3304, abs=1e-3)

    def test_chart_series(self):
        result = compute(FeasibilityParams())

        assert [p.name for p in result.cost_breakdown] == [
            "Suelo",
            "Construcción",
            "Costes Ind.",
            "Financiero",
        ]
        assert [p.value for p in result.profit_bars] == [
            result.total_investment,
            result.estimated_revenue,
            result.net_profit,
        ]

    def test_zero_investment_and_revenue(self):
        result = compute(
            FeasibilityParams(
                land_cost=0,
                construction_cost=0,
                saleable_area=0,
                estimated_price_per_sqm=0,
            )
        )

        assert result.total_investment == 0
        assert result.roi == 0
        assert result.margin == 0

    def test_loss_making_study(self):
        result = compute(FeasibilityParams(estimated_price_per_sqm=1000))

        assert result.net_profit < 0
        assert result.roi < 0

    def test_negative_inputs_rejected(self):
        with pytest.raises(ValueError):
            FeasibilityParams(land_cost=-1)


class TestCsvRows:
    def test_rows(self):
        rows = csv_rows(compute(FeasibilityParams()))

        assert rows[0] == ["Coste Suelo", 1_000_000]
        assert rows[7] == ["", ""]
        assert rows[8] == ["RESULTADOS", ""]
        assert rows[-3] == ["Beneficio Neto", "1642500.00"]
        assert rows[-2] == ["ROI %", "41.50"]
        assert rows[-1] == ["Margen %", "29.33"]


class TestPrompt:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(1_000_000, "1.000.000"), (4.5, "4,5"), (12, "12"), (2800.25, "2.800,25")],
    )
    def test_format_number(self, value, expected):
        assert format_number(value) == expected

    def test_prompt_mentions_inputs(self):
        prompt = build_feasibility_prompt(FeasibilityParams())

        assert "€1.000.000" in prompt
        assert "2.000 m²" in prompt
        assert "4,5%" in prompt


@pytest.mark.asyncio
class TestAnalyze:
    """Tests for the AI report."""

    async def test_report_with_projection(self, mock_llm):
        mock_llm.generate.return_value = LLMResponse(
            content="  ## Resumen Ejecutivo\nViable.  ",
            model="gemini-3-pro-preview",
        )

        analysis = await FeasibilityService(mock_llm).analyze(FeasibilityParams())

        assert analysis.report == "## Resumen Ejecutivo\nViable."
        assert analysis.model == "gemini-3-pro-preview"
        assert analysis.result.net_profit == pytest.approx(1_642_500)

        call = mock_llm.generate.call_args
        assert call.args[0] == settings.llm.analysis_model
        assert "Estudio de Viabilidad" in call.args[1]
        assert call.kwargs["thinking_budget"] == settings.llm.thinking_budget

    async def test_empty_report(self, mock_llm):
        mock_llm.generate.return_value = LLMResponse(content="", model="m")

        analysis = await FeasibilityService(mock_llm).analyze(FeasibilityParams())

        assert analysis.report == "No response generated."

    async def test_missing_key_propagates(self, mock_llm):
        mock_llm.generate.side_effect = LLMConfigurationError()

        with pytest.raises(LLMConfigurationError):
            await FeasibilityService(mock_llm).analyze(FeasibilityParams())
