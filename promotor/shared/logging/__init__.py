"""Promotor - Shared Logging.

Loguru-based logging module with:
- Structured JSON logging for production
- Colored console output for development
- Request/trace correlation
- Automatic sensitive data redaction
"""

from loguru import logger

from .config import (
    InterceptHandler,
    configure_third_party_loggers,
    get_logger,
    json_formatter,
    setup_logger,
)
from .event_logger import (
    log_document_processed,
    log_document_scanned,
    log_feasibility_computed,
    log_llm_request,
    log_llm_response,
    log_snapshot_imported,
)

__all__ = [
    # Core logging
    "logger",
    "setup_logger",
    "get_logger",
    "json_formatter",
    "InterceptHandler",
    "configure_third_party_loggers",
    # Event logging
    "log_llm_request",
    "log_llm_response",
    "log_document_scanned",
    "log_document_processed",
    "log_feasibility_computed",
    "log_snapshot_imported",
]
