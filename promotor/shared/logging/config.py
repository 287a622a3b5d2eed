"""Promotor - Logger Configuration.

Loguru-based structured logging:
- Loguru for application logs (colored console or JSON lines)
- Intercept handler for third-party library logs (uvicorn, fastapi, sqlalchemy, httpx)
- Request/trace id correlation from the request context
"""

from __future__ import annotations

import json
import logging
import re
import sys
from typing import TYPE_CHECKING, Any

from loguru import logger

from promotor.shared.context import get_request_id, get_trace_id

if TYPE_CHECKING:
    from promotor.core.config import Settings

# Sensitive field patterns for redaction
SENSITIVE_PATTERNS = re.compile(
    r"(password|token|secret|api_key|apikey|authorization|credential)",
    re.IGNORECASE,
)

_settings_cache: Settings | None = None


def _get_settings() -> Settings:
    """Get settings lazily to avoid circular imports."""
    global _settings_cache
    if _settings_cache is None:
        from promotor.core.config import settings

        _settings_cache = settings
    return _settings_cache


class InterceptHandler(logging.Handler):
    """Redirect standard logging records to Loguru.

    uvicorn, fastapi, sqlalchemy and our own service modules log through
    the standard ``logging`` module; this handler forwards those records so
    everything ends up in one format.
    """

    def emit(self, record: logging.LogRecord) -> None:
        """Forward a single standard logging record.

        Args:
            record: Log record from standard logging
        """
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)

        frame = logging.currentframe()
        depth = 2

        if frame:
            while frame.f_code.co_filename == logging.__file__:
                if frame.f_back:
                    frame = frame.f_back
                    depth += 1
                else:
                    break

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _context_patcher(record: dict[str, Any]) -> None:
    """Attach request/trace ids from the request context to every record."""
    record["extra"].setdefault("trace_id", get_trace_id() or "-")
    request_id = get_request_id()
    if request_id:
        record["extra"].setdefault("request_id", request_id)


def _redact_sensitive_value(key: str, value: Any) -> Any:
    """Redact values whose key looks sensitive.

    Args:
        key: The field name
        value: The field value

    Returns:
        Redacted value if sensitive, original value otherwise
    """
    if SENSITIVE_PATTERNS.search(key):
        return "***REDACTED***"
    return value


def build_log_entry(record: dict[str, Any], service_name: str) -> dict[str, Any]:
    """Build the JSON-serializable dict for a Loguru record.

    Args:
        record: Loguru log record
        service_name: Name of the service for log entries

    Returns:
        Structured log entry
    """
    log_entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "module": record["extra"].get("name", record["name"]),
        "function": record["function"],
        "line": record["line"],
        "trace_id": record["extra"].get("trace_id", "-"),
        "service": service_name,
    }

    if "request_id" in record["extra"]:
        log_entry["request_id"] = record["extra"]["request_id"]

    excluded_keys = {"trace_id", "request_id", "name"}
    for key, value in record["extra"].items():
        if key not in excluded_keys:
            log_entry[key] = _redact_sensitive_value(key, value)

    if record.get("exception"):
        exc = record["exception"]
        log_entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }

    return log_entry


def json_formatter(record: dict[str, Any]) -> str:
    """Render a record as one JSON line.

    Args:
        record: Loguru log record

    Returns:
        JSON-formatted log string with newline
    """
    entry = build_log_entry(record, _get_settings().app.name)
    return json.dumps(entry, ensure_ascii=False, default=str) + "\n"


def _json_sink(message: Any) -> None:
    """Write JSON formatted log to stdout."""
    sys.stdout.write(json_formatter(message.record))
    sys.stdout.flush()


def setup_logger() -> None:
    """Configure the Loguru logger.

    Sets up:
    - console handler with colored output (dev) or JSON lines (``LOG_FORMAT=json``)
    - request/trace correlation
    - third-party library log interception
    """
    settings = _get_settings()

    logger.remove()
    logger.configure(patcher=_context_patcher)

    is_json = settings.logging.format.lower() == "json"

    if is_json:
        logger.add(
            _json_sink,
            level=settings.logging.level.upper(),
            backtrace=True,
            diagnose=False,
            enqueue=True,
        )
    else:
        dev_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level> | "
            "<dim>trace_id={extra[trace_id]}</dim>"
        )
        logger.add(
            sys.stdout,
            format=dev_format,
            level=settings.logging.level.upper(),
            colorize=True,
            backtrace=True,
            diagnose=settings.app.debug,
            enqueue=True,
        )

    configure_third_party_loggers()

    logger.info(
        "Logger configured",
        level=settings.logging.level,
        format="json" if is_json else "console",
    )


def configure_third_party_loggers() -> None:
    """Route standard logging through Loguru and tame chatty libraries."""
    settings = _get_settings()

    logging.root.handlers = []
    logging.root.setLevel(logging.INFO)

    loggers_to_configure = [
        "",  # root logger
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "fastapi",
        "sqlalchemy",
        "sqlalchemy.engine",
        "aiosqlite",
        "httpx",
        "httpcore",
    ]

    is_json = settings.logging.format.lower() == "json"

    for logger_name in loggers_to_configure:
        logging_logger = logging.getLogger(logger_name)
        logging_logger.handlers.clear()
        logging_logger.addHandler(InterceptHandler())
        logging_logger.propagate = False

        if logger_name == "uvicorn.access":
            logging_logger.setLevel(logging.WARNING if is_json else logging.INFO)
        elif logger_name in ["sqlalchemy", "sqlalchemy.engine", "aiosqlite", "httpx", "httpcore"]:
            logging_logger.setLevel(logging.WARNING)
        else:
            logging_logger.setLevel(logging.INFO)

    logger.debug("Third-party loggers configured")


def get_logger(name: str):
    """Get a Loguru logger bound to ``name``.

    Args:
        name: Logger name (usually __name__ of the module)
    """
    return logger.bind(name=name)
