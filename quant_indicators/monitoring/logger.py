"""
Structured logging for the indicator library.

Provides:
- JSON and human-readable log formats
- Contextual metadata and correlation IDs
- Log categories for the library's components
- TRACE level logging for per-index indicator and rule evaluations
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from enum import Enum
from functools import lru_cache
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

if TYPE_CHECKING:
    from quant_indicators.config.settings import LoggingSettings


# =============================================================================
# TRACE Level Logging (below DEBUG)
# =============================================================================

# Define TRACE level - lower than DEBUG (10), we use 5
TRACE = 5
logging.addLevelName(TRACE, "TRACE")


def trace(self: logging.Logger, message: str, *args: Any, **kwargs: Any) -> None:
    """Log a message at TRACE level.

    TRACE level is for per-index detail, such as:
    - Every computed indicator value
    - Every rule evaluation

    Args:
        message: Log message.
        *args: Positional arguments for message formatting.
        **kwargs: Keyword arguments for logging.
    """
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)


# Add trace method to Logger class
logging.Logger.trace = trace  # type: ignore[attr-defined]


class LogCategory(str, Enum):
    """Log categories for different components."""

    SYSTEM = "SYSTEM"
    DATA = "DATA"
    INDICATOR = "INDICATOR"
    RULE = "RULE"
    BACKTEST = "BACKTEST"
    ANALYSIS = "ANALYSIS"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    TEXT = "text"


_CONTEXT_FIELDS = ("series", "indicator", "rule")


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def __init__(self, category: LogCategory = LogCategory.SYSTEM) -> None:
        """Initialize the formatter.

        Args:
            category: Default log category.
        """
        super().__init__()
        self.category = category

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON.

        Args:
            record: Log record to format.

        Returns:
            JSON formatted string.
        """
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "category": getattr(record, "category", self.category.value),
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            log_data["correlation_id"] = correlation_id
        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value:
                log_data[field] = value
        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            log_data["extra_data"] = extra_data

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter for development."""

    def __init__(self, category: LogCategory = LogCategory.SYSTEM) -> None:
        super().__init__()
        self.category = category

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as human-readable text."""
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).strftime(
            "%Y-%m-%d %H:%M:%S.%f"
        )[:-3]
        category = getattr(record, "category", self.category.value)

        parts = [
            timestamp,
            f"[{record.levelname:8s}]",
            f"[{category:9s}]",
        ]

        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            parts.append(f"[{correlation_id[:8]}]")
        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value:
                parts.append(f"[{value}]")

        parts.append(record.getMessage())

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            parts.append(f"| {extra_data}")

        message = " ".join(parts)

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter with category, correlation ID and component context."""

    def __init__(
        self,
        logger: logging.Logger,
        category: LogCategory = LogCategory.SYSTEM,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the context logger.

        Args:
            logger: Base logger instance.
            category: Log category.
            correlation_id: Optional correlation ID, e.g. one per backtest run.
            context: Fixed context attached to every record.
        """
        super().__init__(logger, {})
        self.category = category
        self.correlation_id = correlation_id or str(uuid4())
        self.context = dict(context or {})

    def process(
        self,
        msg: str,
        kwargs: dict[str, Any],
    ) -> tuple[str, dict[str, Any]]:
        """Process the logging call to add context."""
        extra = kwargs.get("extra", {})
        extra["category"] = self.category.value
        extra["correlation_id"] = self.correlation_id
        for key, value in self.context.items():
            if key in _CONTEXT_FIELDS:
                extra.setdefault(key, value)
            else:
                extra.setdefault("extra_data", {})
                extra["extra_data"].setdefault(key, value)
        kwargs["extra"] = extra
        return msg, kwargs

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log at TRACE level."""
        self.log(TRACE, msg, *args, **kwargs)

    def with_context(
        self,
        series: str | None = None,
        indicator: str | None = None,
        rule: str | None = None,
        **extra_data: Any,
    ) -> ContextLogger:
        """Create a new logger with additional context.

        Args:
            series: Bar series name.
            indicator: Indicator name.
            rule: Rule name.
            **extra_data: Additional context data.

        Returns:
            New ContextLogger sharing this logger's correlation ID.
        """
        context = dict(self.context)
        for key, value in (("series", series), ("indicator", indicator), ("rule", rule)):
            if value:
                context[key] = value
        context.update(extra_data)
        return ContextLogger(self.logger, self.category, self.correlation_id, context)


def setup_logging(
    level: str = "INFO",
    log_format: LogFormat = LogFormat.TEXT,
    log_file: Path | None = None,
) -> None:
    """Set up logging for the application.

    Args:
        level: Log level (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json or text).
        log_file: Optional log file path.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.getLevelName(level.upper()))

    # Clear existing handlers
    root_logger.handlers.clear()

    if LogFormat(log_format) == LogFormat.JSON:
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = TextFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=30,
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def setup_logging_from_settings(settings: LoggingSettings) -> None:
    """Set up logging from the ``logging`` settings section."""
    setup_logging(
        level=settings.level,
        log_format=LogFormat(settings.format.lower()),
        log_file=settings.file_path,
    )


@lru_cache(maxsize=32)
def get_logger(
    name: str,
    category: LogCategory = LogCategory.SYSTEM,
    correlation_id: str | None = None,
) -> ContextLogger:
    """Get a context logger for a component.

    Args:
        name: Logger name.
        category: Log category.
        correlation_id: Optional correlation ID.

    Returns:
        ContextLogger instance.
    """
    base_logger = logging.getLogger(name)
    return ContextLogger(base_logger, category, correlation_id)


# Convenience functions for quick logging
def log_system(message: str, level: str = "INFO", **kwargs: Any) -> None:
    """Log a system message."""
    logger = get_logger("quant_indicators.system", LogCategory.SYSTEM)
    getattr(logger, level.lower())(message, extra={"extra_data": kwargs})


def log_data(message: str, series: str | None = None, level: str = "INFO", **kwargs: Any) -> None:
    """Log a bar series message."""
    logger = get_logger("quant_indicators.data", LogCategory.DATA)
    extra: dict[str, Any] = {"extra_data": kwargs}
    if series:
        extra["series"] = series
    getattr(logger, level.lower())(message, extra=extra)


def log_backtest(message: str, series: str | None = None, level: str = "INFO", **kwargs: Any) -> None:
    """Log a backtest message."""
    logger = get_logger("quant_indicators.backtest", LogCategory.BACKTEST)
    extra: dict[str, Any] = {"extra_data": kwargs}
    if series:
        extra["series"] = series
    getattr(logger, level.lower())(message, extra=extra)


def log_analysis(message: str, level: str = "INFO", **kwargs: Any) -> None:
    """Log an analysis criterion message."""
    logger = get_logger("quant_indicators.analysis", LogCategory.ANALYSIS)
    getattr(logger, level.lower())(message, extra={"extra_data": kwargs})


# =============================================================================
# TRACE Level Convenience Functions
# =============================================================================


def log_trace(
    category: LogCategory,
    message: str,
    **kwargs: Any,
) -> None:
    """Log a trace-level message for per-index debugging.

    Args:
        category: Log category.
        message: Log message.
        **kwargs: Additional context data.
    """
    logger = get_logger(f"quant_indicators.{category.value.lower()}", category)
    if logger.isEnabledFor(TRACE):
        logger.log(TRACE, message, extra={"extra_data": kwargs})


def trace_indicator_value(indicator_name: str, index: int, value: Any) -> None:
    """Trace-log one computed indicator value.

    Args:
        indicator_name: Name of the indicator.
        index: Series index.
        value: Computed value.
    """
    log_trace(
        LogCategory.INDICATOR,
        f"{indicator_name}[{index}] = {value}",
        indicator=indicator_name,
        index=index,
    )


def trace_rule(rule_name: str, index: int, satisfied: bool) -> None:
    """Trace-log one rule evaluation.

    Args:
        rule_name: Name of the rule.
        index: Series index.
        satisfied: Evaluation result.
    """
    log_trace(
        LogCategory.RULE,
        f"{rule_name}#is_satisfied({index}): {satisfied}",
        rule=rule_name,
        index=index,
    )
