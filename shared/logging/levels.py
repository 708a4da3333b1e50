"""Severity levels and log records for context loggers."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict


class LogLevel(str, Enum):
    """Ordered severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def severity(self) -> str:
        """Level name in the observability backend's vocabulary."""
        if self is LogLevel.WARN:
            return "warning"
        return self.value

    @property
    def stdlib_name(self) -> str:
        """Matching method name on a stdlib-style logger."""
        if self is LogLevel.WARN:
            return "warning"
        return self.value

    @property
    def captured(self) -> bool:
        """Whether records at this level are reported as discrete events."""
        return self in (LogLevel.WARN, LogLevel.ERROR)

    @property
    def rank(self) -> int:
        """Position in the debug < info < warn < error ordering."""
        return _ORDER.index(self)


_ORDER = [LogLevel.DEBUG, LogLevel.INFO, LogLevel.WARN, LogLevel.ERROR]


@dataclass(frozen=True)
class LogRecord:
    """A single log call after context and timestamp have been attached."""

    context: str
    message: str
    level: LogLevel
    attributes: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_data(self) -> Dict[str, Any]:
        """Merge generated fields with the caller's attributes."""
        return {
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            **self.attributes,
        }
