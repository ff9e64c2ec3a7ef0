"""
Core Logging Interfaces

Records stay structured (message + keyword context) from the call site to
the backend; only backends turn them into text.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional


class LogLevel(IntEnum):
    """Same numeric values as the stdlib levels, so they can be passed straight through."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class LogType(IntEnum):
    TEXT = 1
    METRIC = 2
    AUDIT = 3


# Context keys lifted out of the free-form context onto the record
CORRELATION_FIELDS = ('correlation_id', 'exchange', 'symbol')


@dataclass
class LogRecord:
    """One log event on its way from a logger to the backends."""
    timestamp: float
    level: LogLevel
    log_type: LogType
    logger_name: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    metric_name: Optional[str] = None
    metric_value: Optional[float] = None
    metric_tags: Optional[Dict[str, Any]] = None

    correlation_id: Optional[str] = None
    exchange: Optional[str] = None
    symbol: Optional[str] = None

    @classmethod
    def create_text(cls, level: LogLevel, logger_name: str, message: str, **context) -> 'LogRecord':
        return cls(time.time(), level, LogType.TEXT, logger_name, message, context)

    @classmethod
    def create_metric(cls, logger_name: str, metric_name: str, value: float, **tags) -> 'LogRecord':
        record = cls(time.time(), LogLevel.INFO, LogType.METRIC, logger_name, "")
        record.metric_name, record.metric_value, record.metric_tags = metric_name, value, tags
        return record

    @property
    def is_metric(self) -> bool:
        return self.log_type == LogType.METRIC

    def body(self) -> str:
        """Message text, or ``name=value`` for metrics."""
        if self.is_metric:
            return f"{self.metric_name}={self.metric_value}"
        return self.message

    def fields(self) -> Dict[str, Any]:
        """Context for text records, tags for metrics."""
        if self.is_metric:
            return dict(self.metric_tags or {})
        return dict(self.context)

    def correlation(self) -> Dict[str, str]:
        return {name: value for name in CORRELATION_FIELDS if (value := getattr(self, name))}


def render_pairs(pairs: Dict[str, Any], max_value_length: Optional[int] = None) -> str:
    """``k=v, k=v`` with optional truncation of long values."""
    rendered = []
    for key, value in pairs.items():
        text = str(value)
        if max_value_length is not None and len(text) > max_value_length:
            text = text[:max_value_length] + "..."
        rendered.append(f"{key}={text}")
    return ", ".join(rendered)


class LogBackend(ABC):
    """
    Destination for log records.

    A backend that keeps failing is switched off after ``MAX_ERRORS``
    failures so logging can never take the connector down.
    """

    MAX_ERRORS = 10

    def __init__(self, name: str):
        self.name = name
        self.enabled = True
        self.min_level = LogLevel.DEBUG
        self.error_count = 0

    @abstractmethod
    def should_handle(self, record: LogRecord) -> bool:
        pass

    @abstractmethod
    async def write(self, record: LogRecord) -> None:
        pass

    @abstractmethod
    def write_sync(self, record: LogRecord) -> None:
        """Immediate write: no running event loop, warnings and above, loop teardown."""
        pass

    @abstractmethod
    async def flush(self) -> None:
        pass

    def record_failure(self, error: Exception) -> None:
        self.error_count += 1
        if self.error_count >= self.MAX_ERRORS:
            self.enabled = False


class LogRouter(ABC):

    @abstractmethod
    def get_backends(self, record: LogRecord) -> List[LogBackend]:
        """Backends that should receive ``record``."""
        pass


class HFTLoggerInterface(ABC):
    """
    Logger used by every component as ``self.logger``.

    Context travels as keyword arguments:
        logger.info("Markets fetched", spot=812, swap=390)
        logger.metric("bingx_endpoint_weight", 1, tags={"segment": "spot"})
    """

    @abstractmethod
    def debug(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def info(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def warning(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def error(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def critical(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def metric(self, name: str, value: float, **tags) -> None:
        pass

    @abstractmethod
    def latency(self, operation: str, duration_ms: float, **tags) -> None:
        pass

    @abstractmethod
    def counter(self, name: str, value: int = 1, **tags) -> None:
        pass

    @abstractmethod
    def audit(self, event: str, **context) -> None:
        pass

    @abstractmethod
    def set_context(self, **context) -> None:
        """Context merged into every later record."""
        pass

    @abstractmethod
    async def flush(self) -> None:
        pass
