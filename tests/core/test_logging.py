"""Tests for rowbind.core.logging."""

import json

from structlog.testing import capture_logs

from rowbind.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


def _last_record(capsys) -> dict:
    lines = [line for line in capsys.readouterr().err.splitlines() if line.strip()]
    return json.loads(lines[-1])


class TestConfigureLogging:
    def test_json_records(self, capsys):
        configure_logging(level="DEBUG", json_format=True)
        get_logger("rowbind.test").info("entity_created", table="book", id=1)
        record = _last_record(capsys)
        assert record["event"] == "entity_created"
        assert record["level"] == "info"
        assert record["logger"] == "rowbind.test"
        assert record["service.name"] == "rowbind"
        assert record["table"] == "book"
        assert "timestamp" in record

    def test_level_filters(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        get_logger("rowbind.test").info("entity_created")
        assert capsys.readouterr().err == ""

    def test_custom_service_without_timestamp(self, capsys):
        configure_logging(json_format=True, service="library-app", add_timestamp=False)
        get_logger().warning("relationship_cache_miss")
        record = _last_record(capsys)
        assert record["service.name"] == "library-app"
        assert "timestamp" not in record

    def test_console_renderer(self, capsys):
        configure_logging(json_format=False)
        get_logger("rowbind.test").info("entity_updated", table="author")
        err = capsys.readouterr().err
        assert "entity_updated" in err
        assert "table" in err


class TestContext:
    def test_log_context_scoped(self, capsys):
        configure_logging(json_format=True)
        logger = get_logger("rowbind.test")
        with LogContext(request_id="abc123"):
            logger.info("inside")
            assert _last_record(capsys)["request_id"] == "abc123"
        logger.info("outside")
        assert "request_id" not in _last_record(capsys)

    def test_bind_and_unbind(self, capsys):
        configure_logging(json_format=True)
        logger = get_logger("rowbind.test")
        bind_context(session="s1", user="u1")
        unbind_context("user")
        logger.info("bound")
        record = _last_record(capsys)
        assert record["session"] == "s1"
        assert "user" not in record
        clear_context()
        logger.info("cleared")
        assert "session" not in _last_record(capsys)


class TestGetLogger:
    def test_name_rendered_as_logger(self, capsys):
        configure_logging(json_format=True)
        get_logger("rowbind.mapper.result").info("relationship_cache_miss")
        record = _last_record(capsys)
        assert record["logger"] == "rowbind.mapper.result"
        assert "logger_name" not in record

    def test_module_logger_is_lazy(self):
        from rowbind.mapper import result

        with capture_logs() as logs:
            result.logger.info("relationship_cache_miss", table="author")
        assert logs[0]["logger_name"] == "rowbind.mapper.result"
        assert logs[0]["table"] == "author"

    def test_unnamed_logger_has_no_name(self, capsys):
        configure_logging(json_format=True)
        get_logger().info("query_executed")
        assert "logger" not in _last_record(capsys)
