"""
Monitoring module for the indicator library.

Provides structured logging with categories, correlation IDs and a TRACE
level for per-index evaluation detail.
"""

from .logger import (
    TRACE,
    ContextLogger,
    JsonFormatter,
    LogCategory,
    LogFormat,
    TextFormatter,
    get_logger,
    log_analysis,
    log_backtest,
    log_data,
    log_system,
    log_trace,
    setup_logging,
    setup_logging_from_settings,
    trace_indicator_value,
    trace_rule,
)

__all__ = [
    "TRACE",
    "ContextLogger",
    "JsonFormatter",
    "LogCategory",
    "LogFormat",
    "TextFormatter",
    "get_logger",
    "log_analysis",
    "log_backtest",
    "log_data",
    "log_system",
    "log_trace",
    "setup_logging",
    "setup_logging_from_settings",
    "trace_indicator_value",
    "trace_rule",
]
