"""Tests for logging configuration and context."""

import json
import logging

import pytest

from dietimport.logging_config import (
    ContextualFormatter,
    LoggingContext,
    StructuredJsonFormatter,
    clear_context,
    configure_logging,
    get_logger,
    import_id_ctx,
    set_context,
    sheet_row_ctx,
)


@pytest.fixture
def record():
    return logging.LogRecord(
        name="dietimport.ingest.sheet",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg="Categorization failed for %r",
        args=("mleka",),
        exc_info=None,
    )


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way it was."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLoggingContext:
    """Tests for context variables."""

    def test_context_set_and_reset(self):
        """Test that the context manager restores previous values."""
        with LoggingContext(import_id="abc", sheet_row=3):
            assert import_id_ctx.get() == "abc"
            assert sheet_row_ctx.get() == 3

            with LoggingContext(sheet_row=4):
                assert sheet_row_ctx.get() == 4
                assert import_id_ctx.get() == "abc"

            assert sheet_row_ctx.get() == 3

        assert import_id_ctx.get() is None
        assert sheet_row_ctx.get() is None

    def test_set_and_clear_context(self):
        """Test the plain setters."""
        set_context(import_id="xyz", sheet_row=7)
        try:
            assert import_id_ctx.get() == "xyz"
            assert sheet_row_ctx.get() == 7
        finally:
            clear_context()

        assert import_id_ctx.get() is None


class TestFormatters:
    """Tests for log formatters."""

    def test_json_formatter(self, record):
        """Test JSON output with context fields."""
        with LoggingContext(import_id="import-1", sheet_row=5):
            data = json.loads(StructuredJsonFormatter().format(record))

        assert data["level"] == "WARNING"
        assert data["message"] == "Categorization failed for 'mleka'"
        assert data["import_id"] == "import-1"
        assert data["sheet_row"] == 5
        assert data["location"]["line"] == 10

    def test_json_formatter_keeps_polish_text(self, record):
        """Test that non-ASCII text is not escaped."""
        record.args = ("łyżka",)

        assert "łyżka" in StructuredJsonFormatter().format(record)

    def test_contextual_formatter(self, record):
        """Test the human-readable format."""
        with LoggingContext(import_id="0123456789abcdef", sheet_row=2):
            line = ContextualFormatter().format(record)

        assert "WARNING" in line
        assert "[import=01234567, row=2]" in line
        assert line.endswith("Categorization failed for 'mleka'")


class TestConfigureLogging:
    """Tests for logging setup."""

    def test_configure_text(self, restore_root_logger, monkeypatch):
        """Test text logging at the requested level."""
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        configure_logging(log_level="DEBUG", json_format=False)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, ContextualFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_configure_json(self, restore_root_logger, monkeypatch):
        """Test JSON logging."""
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        configure_logging(log_level="WARNING", json_format=True)

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, StructuredJsonFormatter)

    def test_get_logger_adds_context(self):
        """Test that the adapter passes context as extra fields."""
        logger = get_logger("dietimport.test")

        with LoggingContext(import_id="abc", sheet_row=1):
            _, kwargs = logger.process("message", {})

        assert kwargs["extra"] == {"import_id": "abc", "sheet_row": 1}
