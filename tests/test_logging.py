"""
Tests for the logging module.

Tests verify:
- configure_logging installs the requested renderer and level filter
- Context bound with bind_context reaches every log line
- Service metadata is attached to events
"""

import logging

import pytest
import structlog
from structlog.testing import capture_logs

from modelspine.core.logging import (
    _add_service_metadata,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


@pytest.fixture(autouse=True)
def _reset_structlog():
    clear_context()
    yield
    clear_context()
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_json_renderer(self):
        configure_logging(level="INFO", json_format=True)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer(self):
        configure_logging(level="INFO", json_format=False)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_timestamp_optional(self):
        configure_logging(json_format=True, add_timestamp=False)
        processors = structlog.get_config()["processors"]
        assert not any(isinstance(p, structlog.processors.TimeStamper) for p in processors)

    def test_level_filter(self):
        configure_logging(level="WARNING", json_format=True)
        wrapper = structlog.get_config()["wrapper_class"]
        assert wrapper is structlog.make_filtering_bound_logger(logging.WARNING)

    def test_service_metadata(self):
        configure_logging(service="billing", json_format=True)
        event = _add_service_metadata(None, "info", {"event": "x"})
        assert event["service.name"] == "billing"


class TestContext:
    def test_bind_and_unbind(self):
        bind_context(request_id="abc123", tenant="acme")
        assert structlog.contextvars.get_contextvars() == {
            "request_id": "abc123",
            "tenant": "acme",
        }
        unbind_context("tenant")
        assert structlog.contextvars.get_contextvars() == {"request_id": "abc123"}

    def test_get_logger_emits_events(self):
        with capture_logs() as logs:
            get_logger("modelspine.test").info("sql.execute", dialect="sqlite")
        assert logs == [{"event": "sql.execute", "dialect": "sqlite", "log_level": "info"}]
