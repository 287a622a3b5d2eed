"""
Structured logging facade over Loguru.

Request context set here is what the log patcher and error bodies read.
"""

from typing import Any

from loguru import logger

from promotor.shared.context import request_id_var, trace_id_var
from promotor.shared.logging import InterceptHandler, get_logger, setup_logger

__all__ = [
    "InterceptHandler",
    "StructuredLogger",
    "clear_request_context",
    "get_logger",
    "get_request_context",
    "get_structured_logger",
    "set_request_context",
    "setup_logger",
]


def set_request_context(
    request_id: str | None = None,
    trace_id: str | None = None,
) -> None:
    """Set request context for logging."""
    if request_id is not None:
        request_id_var.set(request_id)
    if trace_id is not None:
        trace_id_var.set(trace_id)


def clear_request_context() -> None:
    """Clear request context."""
    request_id_var.set("")
    trace_id_var.set("")


def get_request_context() -> dict[str, str | None]:
    """Get current request context."""
    return {
        "request_id": request_id_var.get() or None,
        "trace_id": trace_id_var.get() or None,
    }


class StructuredLogger:
    """Logger with keyword fields.

        logger = get_structured_logger(__name__)
        logger.info("Document scanned", document_id=doc_id)
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._logger = logger.bind(name=name)

    def bind(self, **kwargs: Any) -> "StructuredLogger":
        """Create a new logger with additional fields."""
        new_logger = StructuredLogger(self._name)
        new_logger._logger = self._logger.bind(**kwargs)
        return new_logger

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log DEBUG message."""
        self._logger.bind(**kwargs).debug(message)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log INFO message."""
        self._logger.bind(**kwargs).info(message)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log WARNING message."""
        self._logger.bind(**kwargs).warning(message)

    def error(self, message: str, *, exc_info: bool = False, **kwargs: Any) -> None:
        """Log ERROR message."""
        self._logger.bind(**kwargs).opt(exception=exc_info).error(message)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self._logger.bind(**kwargs).opt(exception=True).error(message)


def get_structured_logger(name: str) -> StructuredLogger:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__).
    """
    return StructuredLogger(name)
