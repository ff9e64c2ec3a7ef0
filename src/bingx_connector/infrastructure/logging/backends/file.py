"""
File Backend

Appends one line per record (text or JSON). Async writes are buffered and
flushed through aiofiles; the file rotates by size to ``<stem>.1`` ...
``<stem>.N``.
"""

import asyncio
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

import aiofiles
import aiofiles.os
import msgspec

from ..interfaces import LogBackend, LogRecord, LogLevel, LogType, render_pairs
from ..structs import FileBackendConfig

_json_encoder = msgspec.json.Encoder(enc_hook=str)


class FileBackend(LogBackend):
    """
    Persistent log file for warnings, errors, metrics and audit records.

    Metrics and audit records are always written; text records only from
    ``min_level`` up.
    """

    ALWAYS_WRITTEN = (LogType.METRIC, LogType.AUDIT)

    def __init__(self, config: FileBackendConfig, name: str = "file"):
        if not isinstance(config, FileBackendConfig):
            raise TypeError(f"Expected FileBackendConfig, got {type(config)}")

        super().__init__(name)
        self.config = config
        self.enabled = config.enabled
        self.min_level = LogLevel[config.min_level.upper()]
        self.file_path = Path(config.path)
        self.max_file_size = config.max_size_mb * 1024 * 1024

        if self.enabled:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)

        self._pending: List[str] = []
        self._last_flush = time.time()
        self._lock = asyncio.Lock()

    def should_handle(self, record: LogRecord) -> bool:
        if not self.enabled:
            return False
        return record.log_type in self.ALWAYS_WRITTEN or record.level >= self.min_level

    async def write(self, record: LogRecord) -> None:
        async with self._lock:
            self._pending.append(self._format(record))
            if (len(self._pending) >= self.config.buffer_size or
                    time.time() - self._last_flush >= self.config.flush_interval):
                await self._write_pending()

    def write_sync(self, record: LogRecord) -> None:
        """Appends ``record`` right away, after any lines still buffered."""
        lines, self._pending = self._pending, []
        lines.append(self._format(record))

        if self.file_path.exists() and self.file_path.stat().st_size >= self.max_file_size:
            self._rotate()
        with open(self.file_path, 'a', encoding='utf-8') as f:
            f.write('\n'.join(lines) + '\n')

    async def flush(self) -> None:
        async with self._lock:
            await self._write_pending()

    async def _write_pending(self) -> None:
        if not self._pending:
            return

        if (await aiofiles.os.path.exists(self.file_path) and
                await aiofiles.os.path.getsize(self.file_path) >= self.max_file_size):
            self._rotate()

        lines, self._pending = self._pending, []
        async with aiofiles.open(self.file_path, 'a', encoding='utf-8') as f:
            await f.write('\n'.join(lines) + '\n')
        self._last_flush = time.time()

    def _rotate(self) -> None:
        backups = self.config.backup_count
        if backups <= 0:
            self.file_path.unlink()
            return

        for index in range(backups - 1, 0, -1):
            older = self.file_path.with_suffix(f'.{index}')
            if older.exists():
                older.replace(self.file_path.with_suffix(f'.{index + 1}'))
        self.file_path.replace(self.file_path.with_suffix('.1'))

    def _format(self, record: LogRecord) -> str:
        if self.config.format == 'json':
            return self._format_json(record)

        timestamp = datetime.fromtimestamp(record.timestamp).isoformat()
        line = f"[{timestamp}] {record.level.name} {record.logger_name}: {record.body()}"
        for pairs in (record.fields(), record.correlation()):
            if pairs:
                line += f" | {render_pairs(pairs)}"
        return line

    @staticmethod
    def _format_json(record: LogRecord) -> str:
        data: Dict[str, Any] = {
            'timestamp': record.timestamp,
            'level': record.level.name,
            'type': record.log_type.name,
            'logger': record.logger_name,
            'message': record.message,
        }
        if record.context:
            data['context'] = record.context
        data.update(record.correlation())
        if record.is_metric:
            data['metric'] = {
                'name': record.metric_name,
                'value': record.metric_value,
                'tags': record.metric_tags,
            }
        # enc_hook=str keeps arbitrary context values encodable
        return _json_encoder.encode(data).decode('utf-8')
