"""Promotor - Event Logger.

Structured event logging for AI calls, document intake and data imports.
"""

from loguru import logger


def log_llm_request(
    operation: str,
    model: str,
    *,
    prompt_chars: int | None = None,
    has_attachment: bool = False,
) -> None:
    """Log an outbound LLM request.

    Args:
        operation: Logical operation (chat, feasibility, document_extraction)
        model: Model name
        prompt_chars: Optional prompt length in characters
        has_attachment: Whether inline file data is attached
    """
    logger.debug(
        "LLM request sent",
        event="llm.request",
        operation=operation,
        model=model,
        prompt_chars=prompt_chars,
        has_attachment=has_attachment,
    )


def log_llm_response(
    operation: str,
    model: str,
    duration_ms: int,
    *,
    input_tokens: int | None = None,
    output_tokens: int | None = None,
    finish_reason: str | None = None,
) -> None:
    """Log an LLM response.

    Args:
        operation: Logical operation
        model: Model name
        duration_ms: Request duration in milliseconds
        input_tokens: Optional prompt token count
        output_tokens: Optional completion token count
        finish_reason: Optional finish reason reported by the model
    """
    logger.debug(
        "LLM response received",
        event="llm.response",
        operation=operation,
        model=model,
        duration_ms=duration_ms,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        finish_reason=finish_reason,
    )


def log_document_scanned(
    file_name: str,
    content_type: str,
    *,
    analyzed: bool,
    detected_type: str | None = None,
    confidence: int | None = None,
    project_matched: bool = False,
    stakeholder_matched: bool = False,
) -> None:
    """Log the outcome of a document scan.

    Args:
        file_name: Uploaded file name
        content_type: MIME type of the upload
        analyzed: Whether the AI extraction ran (False for the local fallback)
        detected_type: Document type reported by the analysis
        confidence: Extraction confidence (1-100)
        project_matched: Whether a project was auto-detected
        stakeholder_matched: Whether a stakeholder was auto-detected
    """
    logger.info(
        "Document scanned",
        event="document.scanned",
        file_name=file_name,
        content_type=content_type,
        analyzed=analyzed,
        detected_type=detected_type,
        confidence=confidence,
        project_matched=project_matched,
        stakeholder_matched=stakeholder_matched,
    )


def log_document_processed(
    document_id: str,
    document_type: str,
    *,
    linked_entity_type: str,
    budget_item_id: str | None = None,
) -> None:
    """Log a saved document and any budget item created from it."""
    logger.info(
        "Document processed",
        event="document.processed",
        document_id=document_id,
        document_type=document_type,
        linked_entity_type=linked_entity_type,
        budget_item_id=budget_item_id,
    )


def log_feasibility_computed(roi: float, margin: float, *, narrated: bool = False) -> None:
    """Log a feasibility computation."""
    logger.info(
        "Feasibility computed",
        event="feasibility.computed",
        roi=round(roi, 2),
        margin=round(margin, 2),
        narrated=narrated,
    )


def log_snapshot_imported(projects: int, stakeholders: int, documents: int) -> None:
    """Log a whole-store import."""
    logger.info(
        "Snapshot imported",
        event="snapshot.imported",
        projects=projects,
        stakeholders=stakeholders,
        documents=documents,
    )
