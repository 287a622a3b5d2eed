"""Mapping of infrastructure errors to domain errors.

SQLAlchemy and httpx exceptions raised below the service layer are turned
into ``AppError`` subclasses here.
"""

import logging
from collections.abc import Callable
from typing import Any

from httpx import HTTPError, TimeoutException
from sqlalchemy.exc import DatabaseError, IntegrityError, OperationalError

from .base import AppError
from .domain import ConflictError, ServiceUnavailableError, ValidationError

logger = logging.getLogger(__name__)


class ExceptionMapper:
    """Registry of handlers turning technical exceptions into domain ones."""

    _handlers: dict[type[Exception], Callable[[Exception, str], AppError]] = {}

    @classmethod
    def register(
        cls, *exception_types: type[Exception]
    ) -> Callable[[Callable[[Any, str], AppError]], Callable[[Any, str], AppError]]:
        """Register a handler for exception types.

        Usage:
            @ExceptionMapper.register(IntegrityError)
            def _handle_integrity_error(exc: IntegrityError, func_name: str) -> AppError:
                return ConflictError(message="Record already exists")
        """

        def decorator(
            handler: Callable[[Any, str], AppError]
        ) -> Callable[[Any, str], AppError]:
            for exc_type in exception_types:
                cls._handlers[exc_type] = handler
            return handler

        return decorator

    @classmethod
    def map(cls, exc: Exception, func_name: str = "") -> AppError:
        """Map a technical exception to a domain exception.

        Args:
            exc: The technical exception to map
            func_name: Name of the function where the exception occurred

        Returns:
            Mapped domain exception (AppError subclass)
        """
        handler = cls._handlers.get(type(exc))

        if handler is None:
            for exc_type, exc_handler in cls._handlers.items():
                if isinstance(exc, exc_type):
                    handler = exc_handler
                    break

        if handler:
            return handler(exc, func_name)

        logger.exception("Unhandled exception in %s: %s", func_name, type(exc).__name__)
        return AppError(
            message="Internal server error",
            details={"function": func_name} if func_name else {},
        )


@ExceptionMapper.register(IntegrityError)
def _handle_integrity_error(exc: IntegrityError, func_name: str) -> AppError:
    """Database: integrity constraint violation."""
    err_msg = str(exc).lower()
    if "unique" in err_msg:
        return ConflictError(
            message="Record already exists",
            details={"constraint": "unique"},
        )
    if "foreign key" in err_msg:
        return ValidationError(
            message="Related record not found",
            details={"constraint": "foreign_key"},
        )
    return ValidationError(message="Database constraint violation")


@ExceptionMapper.register(OperationalError, DatabaseError)
def _handle_database_error(exc: Exception, func_name: str) -> AppError:
    """Database: file locked, missing or unreadable."""
    logger.error("Database error in %s: %s", func_name, exc)
    return ServiceUnavailableError(
        message="Local database temporarily unavailable",
        details={"service": "database"},
    )


@ExceptionMapper.register(TimeoutException, HTTPError)
def _handle_httpx_error(exc: Exception, func_name: str) -> AppError:
    """HTTPX: external service error."""
    logger.warning("External HTTP error in %s: %s", func_name, exc)
    return ServiceUnavailableError(
        message="External service temporarily unavailable",
        details={"service": "http_client"},
    )
