"""Tests for structured logging setup."""

from __future__ import annotations

import logging

import structlog
from structlog.testing import capture_logs

from pgspine.core import logging as pg_logging
from pgspine.core.logging import LogContext, configure_logging, get_logger, safe_log


class TestConfigureLogging:
    def test_json_format(self, reset_structlog):
        configure_logging(level="DEBUG", json_format=True, service="pgspine-test")
        config = structlog.get_config()
        assert isinstance(config["processors"][-1], structlog.processors.JSONRenderer)
        assert pg_logging._SERVICE_NAME == "pgspine-test"

    def test_console_format(self, reset_structlog):
        configure_logging(level="WARNING", json_format=False)
        config = structlog.get_config()
        assert isinstance(config["processors"][-1], structlog.dev.ConsoleRenderer)
        assert isinstance(config["logger_factory"], structlog.stdlib.LoggerFactory)

    def test_elasticsearch_field_names(self):
        event = pg_logging._elasticsearch_compatible(
            None, "info", {"timestamp": "t", "level": "info", "event": "x"}
        )
        assert event == {"@timestamp": "t", "log.level": "info", "event": "x"}

    def test_service_metadata_does_not_override(self):
        event = pg_logging._add_service_metadata(None, "info", {"service.name": "mine"})
        assert event["service.name"] == "mine"


class TestSafeLog:
    def test_emits(self):
        logger = get_logger("test")
        with capture_logs() as logs:
            safe_log(logger, "warning", "pool_close_failed", resource="reporting")
        assert logs == [{"event": "pool_close_failed", "resource": "reporting", "log_level": "warning"}]

    def test_faulty_logger_is_ignored(self):
        class Broken:
            def warning(self, *args, **kwargs):
                raise OSError("stream closed")

        safe_log(Broken(), "warning", "anything")

    def test_unknown_level_is_ignored(self):
        safe_log(logging.getLogger("x"), "not_a_level", "anything")


class TestLogContext:
    def test_binds_and_unbinds(self):
        with LogContext(resource="reporting"):
            assert structlog.contextvars.get_contextvars()["resource"] == "reporting"
        assert "resource" not in structlog.contextvars.get_contextvars()
