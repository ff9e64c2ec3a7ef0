"""
Structured Logger Implementation

Log calls only build a record and queue it; a background task drains the
queue in batches into the backends. Without a running event loop (scripts,
synchronous tests) records are written immediately instead.

Warnings and above are written through to their backends at once, so
failures are recorded even if the dispatch task never gets to run. Records
still queued when the event loop tears the dispatch task down are written
synchronously.
"""

import asyncio
import time
import weakref
from collections import deque
from typing import Any, Deque, Dict, Iterable, List, Optional

from .interfaces import (
    CORRELATION_FIELDS, HFTLoggerInterface, LogBackend, LogRecord, LogRouter, LogLevel, LogType
)
from .structs import PerformanceConfig


class HFTLogger(HFTLoggerInterface):
    """
    Non-blocking logger with a bounded queue.

    When the queue is full the oldest record is dropped and counted.
    """

    _instances = weakref.WeakSet()

    def __init__(self, name: str, backends: List[LogBackend], router: LogRouter, config: PerformanceConfig):
        if not isinstance(config, PerformanceConfig):
            raise TypeError(f"Expected PerformanceConfig, got {type(config)}")

        self.name = name
        self.backends = backends
        self.router = router
        self.batch_size = config.batch_size
        self.dispatch_interval = config.dispatch_interval
        self.context: Dict[str, Any] = {}

        self._queue: Deque[LogRecord] = deque(maxlen=config.buffer_size)
        self._dropped = 0
        self._calls = 0
        self._dispatch_task: Optional[asyncio.Task] = None
        self._stopping: Optional[asyncio.Event] = None

        HFTLogger._instances.add(self)

    # Dispatch

    def _dispatch_running(self) -> bool:
        return self._dispatch_task is not None and not self._dispatch_task.done()

    def _ensure_dispatch(self) -> bool:
        """Start (or move) the dispatch task onto the running loop; False if there is none."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return False

        if not (self._dispatch_running() and self._dispatch_task.get_loop() is loop):
            self._stopping = asyncio.Event()
            self._dispatch_task = loop.create_task(self._dispatch_loop())
            # Runs even when the task is cancelled before its first step
            self._dispatch_task.add_done_callback(self._drain_remaining)
        return True

    def _drain_remaining(self, task: asyncio.Task) -> None:
        for record in self._drain(len(self._queue)):
            self._deliver_now(record)

    async def _dispatch_loop(self) -> None:
        try:
            while not self._stopping.is_set():
                batch = self._drain(self.batch_size)
                if batch:
                    await self._deliver(batch)
                else:
                    await asyncio.sleep(self.dispatch_interval)
        except asyncio.CancelledError:
            pass

    def _drain(self, limit: int) -> List[LogRecord]:
        count = min(limit, len(self._queue))
        return [self._queue.popleft() for _ in range(count)]

    def _targets(self, record: LogRecord) -> Iterable[LogBackend]:
        return (b for b in self.router.get_backends(record) if b.enabled and b.should_handle(record))

    async def _deliver(self, batch: List[LogRecord]) -> None:
        for index, record in enumerate(batch):
            try:
                for backend in self._targets(record):
                    await self._write(backend, record)
            except asyncio.CancelledError:
                # Back to the front of the queue, in order, for _drain_remaining
                self._queue.extendleft(reversed(batch[index:]))
                raise

    @staticmethod
    async def _write(backend: LogBackend, record: LogRecord) -> None:
        try:
            await backend.write(record)
        except Exception as e:
            backend.record_failure(e)

    def _deliver_now(self, record: LogRecord) -> None:
        for backend in self._targets(record):
            try:
                backend.write_sync(record)
            except Exception as e:
                backend.record_failure(e)

    def _submit(self, record: LogRecord) -> None:
        self._calls += 1
        if not self._ensure_dispatch():
            self._deliver_now(record)
            return

        if len(self._queue) == self._queue.maxlen:
            self._dropped += 1
        self._queue.append(record)

    # Record construction

    def _record(self, level: LogLevel, msg: str, log_type: LogType, values: Dict[str, Any]) -> LogRecord:
        merged = {**self.context, **values}
        correlation = {name: merged.pop(name, None) for name in CORRELATION_FIELDS}
        return LogRecord(
            timestamp=time.time(),
            level=level,
            log_type=log_type,
            logger_name=self.name,
            message=msg,
            context=merged,
            **correlation
        )

    def _log(self, level: LogLevel, msg: str, log_type: LogType = LogType.TEXT, **context) -> None:
        record = self._record(level, msg, log_type, context)

        if level >= LogLevel.WARNING:
            self._calls += 1
            self._deliver_now(record)
            return

        self._submit(record)

    # Public API

    def debug(self, msg: str, **context) -> None:
        self._log(LogLevel.DEBUG, msg, **context)

    def info(self, msg: str, **context) -> None:
        self._log(LogLevel.INFO, msg, **context)

    def warning(self, msg: str, **context) -> None:
        self._log(LogLevel.WARNING, msg, **context)

    def error(self, msg: str, **context) -> None:
        self._log(LogLevel.ERROR, msg, **context)

    def critical(self, msg: str, **context) -> None:
        self._log(LogLevel.CRITICAL, msg, **context)

    def metric(self, name: str, value: float, **tags) -> None:
        """Tags may be given as keywords, as ``tags={...}``, or both."""
        nested = tags.pop('tags', None)
        if isinstance(nested, dict):
            tags = {**nested, **tags}

        record = self._record(LogLevel.INFO, "", LogType.METRIC, tags)
        record.metric_name = name
        record.metric_value = float(value)
        record.metric_tags, record.context = record.context, {}
        self._submit(record)

    def latency(self, operation: str, duration_ms: float, **tags) -> None:
        self.metric(f"{operation}_latency_ms", duration_ms, **tags)

    def counter(self, name: str, value: int = 1, **tags) -> None:
        self.metric(f"{name}_count", value, **tags)

    def audit(self, event: str, **context) -> None:
        self._log(LogLevel.INFO, event, LogType.AUDIT, **context)

    def set_context(self, **context) -> None:
        self.context.update(context)

    async def flush(self) -> None:
        """Deliver everything still queued, then flush each backend."""
        remaining = self._drain(len(self._queue))
        if remaining:
            await self._deliver(remaining)

        for backend in self.backends:
            try:
                await backend.flush()
            except Exception as e:
                backend.record_failure(e)

    def get_performance_stats(self) -> Dict[str, Any]:
        return {
            "calls": self._calls,
            "buffer_size": len(self._queue),
            "buffer_dropped": self._dropped,
            "buffer_capacity": self._queue.maxlen,
            "dispatch_task_running": self._dispatch_running(),
            "backends_enabled": sum(1 for b in self.backends if b.enabled),
            "backends_total": len(self.backends),
        }

    async def shutdown(self) -> None:
        if self._stopping is not None:
            self._stopping.set()

        if self._dispatch_running():
            try:
                await asyncio.wait_for(self._dispatch_task, timeout=5.0)
            except asyncio.TimeoutError:
                self._dispatch_task.cancel()

        await self.flush()

    @classmethod
    async def shutdown_all(cls) -> None:
        """Shut down every live logger, e.g. at application exit."""
        await asyncio.gather(*(logger.shutdown() for logger in list(cls._instances)),
                             return_exceptions=True)


class LoggingTimer:
    """
    Times a block and reports it through ``logger.latency``.

        with LoggingTimer(logger, "fetch_markets", segment="spot"):
            ...
    """

    def __init__(self, logger: HFTLoggerInterface, operation: str, **tags):
        self.logger = logger
        self.operation = operation
        self.tags = tags
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.perf_counter()
        self.logger.latency(self.operation, self.elapsed_ms, **self.tags)
        if exc_type is not None:
            self.logger.error(f"{self.operation} failed", error_type=exc_type.__name__, **self.tags)

    @property
    def elapsed_ms(self) -> float:
        if self.start_time is None:
            return 0.0
        return ((self.end_time or time.perf_counter()) - self.start_time) * 1000
