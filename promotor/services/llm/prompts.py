"""Prompt texts for the AI features.

The assistant, the feasibility analyst and the document extractor all
answer in Spanish, matching the rest of the product copy.
"""

from typing import Any

CHAT_SYSTEM_INSTRUCTION = (
    "You are an expert AI assistant for a Real Estate Developer (Promotor Inmobiliario). "
    "You help with accounting, project management, and construction technicalities. "
    "You are concise, professional, and helpful. Use Spanish."
)

ASSISTANT_GREETING = (
    "Hola, soy tu asistente de IA para la promoción inmobiliaria. "
    "¿En qué puedo ayudarte hoy con tus proyectos, presupuestos o documentación?"
)

DOCUMENT_EXTRACTION_PROMPT = """
Analiza este documento adjunto (puede ser imagen o PDF de una constructora, ayuntamiento o proveedor).

Tu objetivo es extraer datos estructurados para automatizar la gestión en un software inmobiliario.

Devuelve SOLAMENTE un objeto JSON válido con la siguiente estructura (sin bloques de código markdown):
{
  "type": "Budget" | "Invoice" | "License" | "Contract" | "Blueprint" | "Other",
  "summary": "Breve descripción de una frase del documento",
  "date": "YYYY-MM-DD" (Fecha del documento o null),
  "amount": number (Importe total sin moneda o null si no aplica),
  "concept": "Titulo o concepto principal (ej: Instalación Eléctrica)",
  "providerName": "Nombre de la empresa o persona emisora detectada",
  "projectName": "Nombre del proyecto o promoción detectada (si aparece)",
  "confidence": number (1-100, seguridad de la extracción)
}
""".strip()


def format_number(value: float) -> str:
    """Spanish-style thousands grouping (``1.000.000``, ``4,5``)."""
    if float(value).is_integer():
        return f"{int(value):,}".replace(",", ".")
    whole, _, fraction = f"{value:,.2f}".partition(".")
    whole = whole.replace(",", ".")
    fraction = fraction.rstrip("0")
    return f"{whole},{fraction}" if fraction else whole


def build_feasibility_prompt(params: Any) -> str:
    """Build the senior-analyst prompt for a feasibility study.

    Args:
        params: Object exposing the feasibility input attributes.
    """
    return f"""
Actúa como un Analista Financiero Senior especializado en Promociones Inmobiliarias.
Realiza un **Estudio de Viabilidad detallado** para una promoción con los siguientes datos:

- Coste del Suelo: €{format_number(params.land_cost)}
- Coste de Construcción: €{format_number(params.construction_cost)}
- Superficie Vendible: {format_number(params.saleable_area)} m²
- Precio Estimado Venta/m²: €{format_number(params.estimated_price_per_sqm)}
- Costes Indirectos (Soft Costs): {format_number(params.soft_costs_percent)}% sobre la construcción.
- Duración: {format_number(params.duration_months)} meses
- Tasa de Interés Financiación: {format_number(params.financing_rate)}%

**Instrucciones de Salida:**
1. **Idioma:** Español.
2. **Estructura:**
   - **Resumen Ejecutivo:** Visión general rápida.
   - **Análisis Financiero:** Desglose detallado de costes (Hard Costs, Soft Costs, Financieros) e Ingresos. Calcula el Beneficio Neto, Margen sobre Ventas y ROI.
   - **Análisis de Riesgos:** Evalúa riesgos de mercado, construcción y financieros.
   - **Recomendaciones:** Estrategias para mejorar la rentabilidad.
3. **Formato:** Usa Markdown profesional. **Incluye Tablas** para mostrar los números claramente.
4. **Profundidad:** Utiliza tu capacidad de razonamiento para inferir posibles problemas ocultos (ej. costes de licencias, tiempos de venta).
""".strip()
