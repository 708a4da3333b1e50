"""Console output for context loggers.

Renders ``[context] message`` lines through structlog so local output shares
the processors configured by :func:`configure_logging`.
"""

from typing import Any, Mapping, Optional, Protocol

import structlog

from .levels import LogLevel


class ConsoleOutput(Protocol):
    """Destination for formatted log lines."""

    def write(
        self,
        level: LogLevel,
        context: str,
        message: str,
        attributes: Optional[Mapping[str, Any]],
    ) -> None:
        ...


class StructlogConsole:
    """Console output backed by a structlog logger."""

    def __init__(self, logger: Optional[Any] = None) -> None:
        self._logger = logger if logger is not None else structlog.get_logger("console")

    def write(
        self,
        level: LogLevel,
        context: str,
        message: str,
        attributes: Optional[Mapping[str, Any]],
    ) -> None:
        method = getattr(self._logger, level.stdlib_name)
        if attributes:
            method(f"[{context}] {message}", data=dict(attributes))
        else:
            method(f"[{context}] {message}")
