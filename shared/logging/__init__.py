"""Structured logging module using structlog."""

from .structured_logger import get_logger, configure_logging
from .levels import LogLevel, LogRecord
from .console import ConsoleOutput, StructlogConsole
from .context_logger import Logger, create_logger, summarize_error

__all__ = [
    "get_logger",
    "configure_logging",
    "LogLevel",
    "LogRecord",
    "ConsoleOutput",
    "StructlogConsole",
    "Logger",
    "create_logger",
    "summarize_error",
]
