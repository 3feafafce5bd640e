"""Unit tests for logging infrastructure."""

import json
import logging
import sys

from pantry_ai.utils.logger import JSONFormatter, RichTextFormatter, get_logger, logger


def make_record(msg="Test message", level=logging.INFO, exc_info=None, **extra):
    record = logging.LogRecord(
        name="test_logger",
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Test JSONFormatter produces valid JSON output."""

    def test_json_formatter_outputs_valid_json(self):
        """Test that JSONFormatter produces valid JSON."""
        parsed = json.loads(JSONFormatter().format(make_record()))

        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test_logger"
        assert parsed["message"] == "Test message"
        assert "timestamp" in parsed

    def test_json_formatter_includes_exception_traceback(self):
        """Test that JSONFormatter includes exception traceback when present."""
        try:
            raise ValueError("Test error")
        except ValueError:
            record = make_record("Error occurred", level=logging.ERROR, exc_info=sys.exc_info())

        parsed = json.loads(JSONFormatter().format(record))

        assert "exception" in parsed
        assert "ValueError" in parsed["exception"]

    def test_json_formatter_includes_pipeline_context(self):
        """intent / family_id / variant_index extras become JSON fields."""
        record = make_record(intent="recipe", family_id="abc123", variant_index=2)

        parsed = json.loads(JSONFormatter().format(record))

        assert parsed["intent"] == "recipe"
        assert parsed["family_id"] == "abc123"
        assert parsed["variant_index"] == 2

    def test_json_formatter_omits_absent_context(self):
        """Context fields are only present when set on the record."""
        parsed = json.loads(JSONFormatter().format(make_record()))

        assert "intent" not in parsed
        assert "family_id" not in parsed


class TestRichTextFormatter:
    """Test RichTextFormatter produces colored text output."""

    def test_rich_text_formatter_includes_level_and_message(self):
        output = RichTextFormatter().format(make_record(level=logging.WARNING))

        assert "WARNING" in output
        assert "Test message" in output
        assert output.startswith(RichTextFormatter.COLORS["WARNING"])
        assert output.endswith(RichTextFormatter.COLORS["RESET"])

    def test_rich_text_formatter_appends_context(self):
        """Pipeline context is rendered as key=value pairs."""
        output = RichTextFormatter().format(make_record(intent="shopping_list", variant_index=3))

        assert "intent=shopping_list" in output
        assert "variant_index=3" in output


class TestGetLogger:
    """Test logger factory behavior."""

    def test_get_logger_uses_json_formatter_when_configured(self, monkeypatch):
        monkeypatch.setenv("LOG_TYPE", "json")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        test_logger = get_logger("pantry_ai.test_json_logger")

        assert test_logger.level == logging.DEBUG
        assert isinstance(test_logger.handlers[0].formatter, JSONFormatter)

    def test_get_logger_defaults_to_text_formatter(self, monkeypatch):
        monkeypatch.delenv("LOG_TYPE", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        test_logger = get_logger("pantry_ai.test_text_logger")

        assert test_logger.level == logging.INFO
        assert isinstance(test_logger.handlers[0].formatter, RichTextFormatter)

    def test_get_logger_does_not_duplicate_handlers(self):
        """Calling get_logger twice returns the same configured instance."""
        first = get_logger("pantry_ai.test_repeat_logger")
        second = get_logger("pantry_ai.test_repeat_logger")

        assert first is second
        assert len(second.handlers) == 1

    def test_module_logger_name(self):
        assert logger.name == "pantry_ai"

    def test_sdk_loggers_suppressed(self):
        assert logging.getLogger("google_genai").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING
