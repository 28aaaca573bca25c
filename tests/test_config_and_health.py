"""
Products API — Configuration, Error Helper and Health Tests
=============================================================
"""

import logging
from unittest.mock import patch

import pytest
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from products_api.config import Settings
from products_api.exceptions import StorageError, describe_error
from products_api.main import setup_logging
from products_api.middleware.request_id import RequestIDLogFilter, request_id_var


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.delenv("HOST", raising=False)

        config = Settings(_env_file=None)

        assert config.port == 5000
        assert config.host == "0.0.0.0"

    def test_port_from_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")

        assert Settings(_env_file=None).port == 8080

    def test_log_level_normalized(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, log_level="LOUD")

    def test_sqlite_detection(self):
        assert Settings(_env_file=None, database_url="sqlite+aiosqlite:///x.db").is_sqlite
        assert not Settings(
            _env_file=None, database_url="postgresql+asyncpg://u:p@h/db"
        ).is_sqlite


class TestDescribeError:

    def test_plain_exception(self):
        assert describe_error(ValueError("bad id")) == "ValueError: bad id"

    def test_exception_without_message(self):
        assert describe_error(KeyError()) == "KeyError"

    def test_multiline_message_truncated(self):
        assert describe_error(RuntimeError("first\nsecond")) == "RuntimeError: first"

    def test_pydantic_errors_flattened(self):
        class Body(BaseModel):
            price: float

        with pytest.raises(PydanticValidationError) as exc_info:
            Body.model_validate({"price": "abc"})

        assert describe_error(exc_info.value).startswith("price: ")

    def test_request_body_errors_drop_body_prefix(self):
        exc = RequestValidationError([
            {
                "type": "finite_number",
                "loc": ("body", "price"),
                "msg": "Input should be a finite number",
                "input": "nan",
            }
        ])

        assert describe_error(exc) == "price: Input should be a finite number"

    def test_invalid_json_reports_decoder_reason(self):
        exc = RequestValidationError([
            {
                "type": "json_invalid",
                "loc": ("body", 1),
                "msg": "JSON decode error",
                "input": {},
                "ctx": {"error": "Expecting property name enclosed in double quotes"},
            }
        ])

        assert describe_error(exc) == (
            "JSON decode error: Expecting property name enclosed in double quotes"
        )

    def test_storage_error_defaults(self):
        err = StorageError()

        assert err.status_code == 400
        assert err.error == "storage_error"
        assert str(err) == "Storage operation failed"


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy_when_database_answers(self, test_client, db_engine):
        with patch("products_api.database.engine", db_engine):
            response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_unhealthy_when_database_fails(self, test_client):
        class BrokenEngine:
            def connect(self):
                raise ConnectionError("database down")

        with patch("products_api.database.engine", BrokenEngine()):
            response = await test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"


class TestRequestIDLogging:

    def _record(self):
        return logging.LogRecord("products_api", logging.INFO, __file__, 1, "msg", None, None)

    def test_filter_stamps_current_request_id(self):
        token = request_id_var.set("abc12345")
        try:
            record = self._record()
            assert RequestIDLogFilter().filter(record) is True
        finally:
            request_id_var.reset(token)

        assert record.request_id == "abc12345"

    def test_filter_outside_request_uses_placeholder(self):
        record = self._record()

        RequestIDLogFilter().filter(record)

        assert record.request_id == "-"

    def test_setup_logging_installs_filter_and_format(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging()
            handler = root.handlers[0]
            assert any(isinstance(f, RequestIDLogFilter) for f in handler.filters)
            assert "[%(request_id)s]" in handler.formatter._fmt
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
