"""Unit tests for shared modules.

Tests cover:
- UUID7 generation and TypeDecorator
- CSV rendering and download names
- Error codes, exception mapping and the ``safe`` decorator
- Structured log entries
"""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from promotor.core.exceptions import (
    DocumentNotFoundError,
    InvalidInputError,
    LLMConfigurationError,
    UploadTooLargeError,
)
from promotor.shared.csv_export import csv_response, render_csv, safe_filename_part
from promotor.shared.errors import (
    AppError,
    ConflictError,
    ExceptionMapper,
    ServiceUnavailableError,
    ValidationError,
    safe,
)
from promotor.shared.logging.config import build_log_entry
from promotor.shared.uuid7 import UUID7, uuid7

# ==================== UUID7 ====================


class TestUUID7:
    def test_version_and_variant(self):
        value = uuid7()

        assert value.version == 7
        assert value.variant == uuid.RFC_4122

    def test_uniqueness(self):
        assert len({uuid7() for _ in range(1000)}) == 1000

    def test_type_decorator_round_trip(self):
        decorator = UUID7()
        dialect = MagicMock()
        value = uuid7()

        stored = decorator.process_bind_param(value, dialect)

        assert stored == str(value)
        assert decorator.process_result_value(stored, dialect) == value
        assert decorator.process_bind_param(None, dialect) is None
        assert decorator.process_result_value(None, dialect) is None


# ==================== CSV ====================


class TestCsv:
    def test_render(self):
        text = render_csv(["Nombre", "Importe"], [["Grúa, torre", 1200], ["Andamios", None]])

        assert text == 'Nombre,Importe\n"Grúa, torre",1200\nAndamios,\n'

    def test_headers_only(self):
        assert render_csv(["ID"], []) == "ID\n"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("Residencial Los Olivos", "Residencial_Los_Olivos"),
            ("Villas  del Bosque", "Villas_del_Bosque"),
            ("Promoción Ñandú", "Promocion_Nandu"),
            (" Torre ", "Torre"),
        ],
    )
    def test_safe_filename_part(self, value, expected):
        assert safe_filename_part(value) == expected

    def test_response(self):
        response = csv_response("ID\n", "contactos_all.csv")

        assert response.media_type == "text/csv; charset=utf-8"
        assert response.headers["content-disposition"] == 'attachment; filename="contactos_all.csv"'
        assert response.body == b"ID\n"


# ==================== Errors ====================


class TestErrors:
    def test_codes_from_class_names(self):
        assert DocumentNotFoundError(uuid.uuid4()).code == "DOCUMENT_NOT_FOUND"
        assert InvalidInputError().code == "INVALID_INPUT"
        assert LLMConfigurationError().code == "LLM_CONFIGURATION_ERROR"

    def test_default_message_and_status(self):
        error = LLMConfigurationError()

        assert error.status_code == 503
        assert error.message == "API Key is missing. Please set LLM_API_KEY."

    def test_not_found_details(self):
        document_id = uuid.uuid4()

        body = DocumentNotFoundError(document_id).to_response()

        assert body.error == "DOCUMENT_NOT_FOUND"
        assert body.details == {"resource_id": str(document_id), "resource_type": "document"}

    def test_upload_too_large(self):
        error = UploadTooLargeError(2048, 1024)

        assert error.status_code == 413
        assert error.details == {"value": 2048, "limit": 1024}


class TestExceptionMapper:
    def test_unique_violation(self):
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: stakeholders.id"))

        assert isinstance(ExceptionMapper.map(exc, "import_snapshot"), ConflictError)

    def test_foreign_key_violation(self):
        exc = IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed"))

        assert isinstance(ExceptionMapper.map(exc), ValidationError)

    def test_locked_database(self):
        exc = OperationalError("SELECT", {}, Exception("database is locked"))

        assert isinstance(ExceptionMapper.map(exc), ServiceUnavailableError)

    def test_http_error(self):
        assert isinstance(ExceptionMapper.map(httpx.ConnectError("down")), ServiceUnavailableError)

    def test_unknown_exception(self):
        mapped = ExceptionMapper.map(KeyError("x"), "export")

        assert type(mapped) is AppError
        assert mapped.status_code == 500


@pytest.mark.asyncio
class TestSafeDecorator:
    async def test_maps_async_errors(self):
        @safe
        async def failing():
            raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        with pytest.raises(ConflictError):
            await failing()

    async def test_app_errors_pass_through(self):
        @safe
        async def failing():
            raise InvalidInputError("bad", field="name")

        with pytest.raises(InvalidInputError):
            await failing()


def test_safe_sync_function():
    @safe
    def failing():
        raise OperationalError("SELECT", {}, Exception("unable to open database file"))

    with pytest.raises(ServiceUnavailableError):
        failing()


# ==================== Logging ====================


class TestLogEntry:
    def _record(self, level: str = "INFO", **extra) -> dict:
        return {
            "time": datetime(2024, 5, 1, tzinfo=timezone.utc),
            "level": SimpleNamespace(name=level),
            "message": "Calling model",
            "name": "promotor.services.llm.client",
            "function": "generate",
            "line": 42,
            "extra": extra,
            "exception": None,
        }

    def test_fields_and_redaction(self):
        record = self._record(trace_id="abc", request_id="req-1", model="gemini", api_key="k")

        entry = build_log_entry(record, "Promotor")

        assert entry["level"] == "INFO"
        assert entry["trace_id"] == "abc"
        assert entry["request_id"] == "req-1"
        assert entry["model"] == "gemini"
        assert entry["api_key"] == "***REDACTED***"
        assert entry["service"] == "Promotor"
        assert entry["module"] == "promotor.services.llm.client"

    def test_missing_trace_id(self):
        record = self._record("DEBUG")

        entry = build_log_entry(record, "Promotor")

        assert entry["trace_id"] == "-"
        assert "request_id" not in entry
