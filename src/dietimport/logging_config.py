"""Structured logging configuration for the diet import pipeline."""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

# Context variables for import tracking
import_id_ctx: ContextVar[str | None] = ContextVar("import_id", default=None)
sheet_row_ctx: ContextVar[int | None] = ContextVar("sheet_row", default=None)


class StructuredJsonFormatter(logging.Formatter):
    """JSON formatter for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if import_id := import_id_ctx.get():
            log_data["import_id"] = import_id
        if (sheet_row := sheet_row_ctx.get()) is not None:
            log_data["sheet_row"] = sheet_row

        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["location"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        return json.dumps(log_data, ensure_ascii=False)


class ContextualFormatter(logging.Formatter):
    """Human-readable formatter with context for development."""

    def format(self, record: logging.LogRecord) -> str:
        context_parts = []
        if import_id := import_id_ctx.get():
            context_parts.append(f"import={import_id[:8]}")
        if (sheet_row := sheet_row_ctx.get()) is not None:
            context_parts.append(f"row={sheet_row}")

        context_str = f" [{', '.join(context_parts)}]" if context_parts else ""

        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)
        message = record.getMessage()

        formatted = f"{timestamp} | {level} | {record.name}{context_str} | {message}"

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that automatically includes context variables."""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        extra = kwargs.get("extra", {})

        if import_id := import_id_ctx.get():
            extra["import_id"] = import_id
        if (sheet_row := sheet_row_ctx.get()) is not None:
            extra["sheet_row"] = sheet_row

        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger for the given module name."""
    logger = logging.getLogger(name)
    return ContextLogger(logger, {})


def configure_logging(
    log_level: str = "INFO",
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format for logs. If None, auto-detect based on environment.
        log_file: Optional file path to write logs to.
    """
    if json_format is None:
        json_format = os.getenv("LOG_FORMAT", "").lower() == "json" or (
            not sys.stdout.isatty() and os.getenv("ENVIRONMENT", "development") == "production"
        )

    level_str = os.getenv("LOG_LEVEL", log_level).upper()
    level = getattr(logging, level_str, logging.INFO)

    if json_format:
        formatter: logging.Formatter = StructuredJsonFormatter()
    else:
        formatter = ContextualFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Logs go to stderr so that CLI output on stdout stays machine-readable
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)

    module_levels = {
        "dietimport": level,
        "dietimport.ingest": level,
        "httpx": logging.WARNING,
        "httpcore": logging.WARNING,
    }

    for module_name, module_level in module_levels.items():
        logging.getLogger(module_name).setLevel(module_level)

    logger = get_logger(__name__)
    logger.info(
        f"Logging configured: level={level_str}, format={'json' if json_format else 'text'}"
    )


def set_context(import_id: str | None = None, sheet_row: int | None = None) -> None:
    """Set logging context variables."""
    if import_id is not None:
        import_id_ctx.set(import_id)
    if sheet_row is not None:
        sheet_row_ctx.set(sheet_row)


def clear_context() -> None:
    """Clear all logging context variables."""
    import_id_ctx.set(None)
    sheet_row_ctx.set(None)


class LoggingContext:
    """Context manager for setting logging context."""

    def __init__(self, import_id: str | None = None, sheet_row: int | None = None):
        self.import_id = import_id
        self.sheet_row = sheet_row
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> "LoggingContext":
        if self.import_id is not None:
            self._tokens["import_id"] = import_id_ctx.set(self.import_id)
        if self.sheet_row is not None:
            self._tokens["sheet_row"] = sheet_row_ctx.set(self.sheet_row)
        return self

    def __exit__(self, *args: Any) -> None:
        for name, token in self._tokens.items():
            ctx_var = {
                "import_id": import_id_ctx,
                "sheet_row": sheet_row_ctx,
            }[name]
            ctx_var.reset(token)
