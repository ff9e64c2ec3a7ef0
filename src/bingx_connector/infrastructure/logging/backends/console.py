"""
Console Backend

Hands records to the stdlib ``logging`` tree, so handlers configured by the
application (or pytest's caplog) see connector output.
"""

import logging
import os
import sys

from ..interfaces import LogBackend, LogRecord, LogLevel, LogType, render_pairs
from ..structs import ConsoleBackendConfig


class ConsoleBackend(LogBackend):

    def __init__(self, config: ConsoleBackendConfig, name: str = "console"):
        if not isinstance(config, ConsoleBackendConfig):
            raise TypeError(f"Expected ConsoleBackendConfig, got {type(config)}")

        super().__init__(name)
        self.config = config
        self.enabled = config.enabled
        self.min_level = LogLevel[config.min_level.upper()]

        if self.enabled:
            self._install_root_handler()

    def should_handle(self, record: LogRecord) -> bool:
        return self.enabled and record.level >= self.min_level

    async def write(self, record: LogRecord) -> None:
        self.write_sync(record)

    def write_sync(self, record: LogRecord) -> None:
        logging.getLogger(record.logger_name).log(int(record.level), self._format_message(record))

    async def flush(self) -> None:
        pass

    def _install_root_handler(self) -> None:
        """Give the root logger a stream handler unless the application already did."""
        root = logging.getLogger()
        if root.handlers:
            return

        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('%(levelname)-8s %(name)-24s %(message)s'))
        handler.setLevel(int(self.min_level))
        root.setLevel(int(self.min_level))
        root.addHandler(handler)

    def _format_message(self, record: LogRecord) -> str:
        message = record.body()
        limit = self.config.max_message_length
        if len(message) > limit:
            message = message[:limit] + "..."

        parts = [message]
        if record.is_metric and record.metric_tags:
            parts.append(render_pairs(record.metric_tags))
        if self.config.include_context and record.context:
            parts.append(render_pairs(record.context, max_value_length=100))
        correlation = record.correlation()
        if correlation:
            parts.append(render_pairs(correlation))

        text = " | ".join(parts)
        if record.log_type != LogType.TEXT:
            text = f"[{record.log_type.name}] {text}"
        return text


class ColorConsoleBackend(ConsoleBackend):
    """ANSI-colored by level when stdout is an interactive terminal."""

    COLORS = {
        LogLevel.DEBUG: '\033[36m',
        LogLevel.INFO: '\033[37m',
        LogLevel.WARNING: '\033[33m',
        LogLevel.ERROR: '\033[31m',
        LogLevel.CRITICAL: '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, config: ConsoleBackendConfig, name: str = "console"):
        super().__init__(config, name)
        is_tty = getattr(sys.stdout, 'isatty', None)
        self.use_colors = config.color and os.getenv('TERM') != 'dumb' and bool(is_tty and is_tty())

    def _format_message(self, record: LogRecord) -> str:
        text = super()._format_message(record)
        if self.use_colors:
            return f"{self.COLORS[record.level]}{text}{self.RESET}"
        return text
