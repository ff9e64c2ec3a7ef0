"""Tests for the structured logging stack."""

import asyncio
import logging
from unittest.mock import Mock

import msgspec
import pytest

from bingx_connector.infrastructure.logging import (
    ConsoleBackend, ConsoleBackendConfig, FileBackend, FileBackendConfig, HFTLogger,
    LogBackend, LoggerFactory, LoggingConfig, LoggingTimer, LogLevel, LogRecord, LogType,
    PerformanceConfig, RouterConfig, SimpleRouter, default_config_for_environment,
    get_exchange_logger, get_logger
)


class RecordingBackend(LogBackend):
    """Keeps every record it receives."""

    def __init__(self, name: str = "console"):
        super().__init__(name)
        self.records = []
        self.sync_records = []
        self.flushed = 0

    def should_handle(self, record: LogRecord) -> bool:
        return self.enabled and record.level >= self.min_level

    async def write(self, record: LogRecord) -> None:
        self.records.append(record)

    def write_sync(self, record: LogRecord) -> None:
        self.sync_records.append(record)

    async def flush(self) -> None:
        self.flushed += 1


def make_logger(name: str, backend: LogBackend, environment: str = "test") -> HFTLogger:
    router = SimpleRouter({backend.name: backend}, RouterConfig(environment=environment))
    return HFTLogger(name, [backend], router, PerformanceConfig(buffer_size=100, batch_size=10))


class TestHFTLogger:

    def test_sync_dispatch_without_event_loop(self):
        backend = RecordingBackend()
        logger = make_logger("tests.sync", backend)

        logger.info("Markets fetched", spot=3, swap=2)

        assert len(backend.sync_records) == 1
        record = backend.sync_records[0]
        assert record.message == "Markets fetched"
        assert record.context == {"spot": 3, "swap": 2}
        assert record.level is LogLevel.INFO

    def test_metric_tags_as_dict_and_keywords(self):
        backend = RecordingBackend()
        logger = make_logger("tests.metric", backend)

        logger.metric("bingx_endpoint_weight", 1, tags={"segment": "spot"}, operation="commonSymbols")

        record = backend.sync_records[0]
        assert record.log_type is LogType.METRIC
        assert record.metric_name == "bingx_endpoint_weight"
        assert record.metric_value == 1.0
        assert record.metric_tags == {"segment": "spot", "operation": "commonSymbols"}

    def test_persistent_context(self):
        backend = RecordingBackend()
        logger = make_logger("tests.context", backend)
        logger.set_context(exchange="bingx", segment="swap")

        logger.debug("Request issued")

        record = backend.sync_records[0]
        assert record.exchange == "bingx"
        assert record.context == {"segment": "swap"}

    @pytest.mark.asyncio
    async def test_warnings_written_through_while_loop_runs(self):
        backend = RecordingBackend()
        logger = make_logger("tests.warn", backend)

        logger.warning("BingX request failed", venue_code="100410")

        assert [r.message for r in backend.sync_records] == ["BingX request failed"]
        assert backend.sync_records[0].context == {"venue_code": "100410"}
        assert backend.records == []

    def test_warnings_reach_stdlib_through_console(self, caplog):
        console = ConsoleBackend(ConsoleBackendConfig(color=False, min_level="WARNING"))
        logger = make_logger("tests.warn_console", console)

        with caplog.at_level(logging.WARNING, logger="tests.warn_console"):
            logger.warning("BingX request failed", venue_code="100410")

        assert "BingX request failed | venue_code=100410" in caplog.text

    def test_records_queued_when_loop_ends_are_delivered(self):
        backend = RecordingBackend()
        logger = make_logger("tests.loop_end", backend)

        async def main():
            logger.info("Markets fetched", total=5)

        asyncio.run(main())

        delivered = backend.records + backend.sync_records
        assert [(r.message, r.context) for r in delivered] == [("Markets fetched", {"total": 5})]

    def test_latency_and_counter_names(self):
        backend = RecordingBackend()
        logger = make_logger("tests.names", backend)

        logger.latency("fetch_markets", 12.5)
        logger.counter("requests", 2)

        assert [r.metric_name for r in backend.sync_records] == ["fetch_markets_latency_ms", "requests_count"]

    @pytest.mark.asyncio
    async def test_async_dispatch_and_flush(self):
        backend = RecordingBackend()
        logger = make_logger("tests.async", backend)

        logger.info("first")
        logger.info("second")
        await logger.flush()

        assert [r.message for r in backend.records] == ["first", "second"]
        assert backend.sync_records == []
        assert backend.flushed == 1

        await logger.shutdown()
        assert not logger.get_performance_stats()["dispatch_task_running"]

    @pytest.mark.asyncio
    async def test_buffer_overflow_counts_drops(self):
        backend = RecordingBackend()
        router = SimpleRouter({"console": backend}, RouterConfig(environment="test"))
        logger = HFTLogger("tests.overflow", [backend], router, PerformanceConfig(buffer_size=2))

        for i in range(5):
            logger.info(f"record {i}")

        stats = logger.get_performance_stats()
        assert stats["buffer_dropped"] >= 1
        assert stats["buffer_capacity"] == 2
        await logger.shutdown()

    @pytest.mark.asyncio
    async def test_shutdown_all_drains_live_loggers(self):
        backend = RecordingBackend()
        logger = make_logger("tests.shutdown_all", backend)

        logger.info("pending")
        await HFTLogger.shutdown_all()

        assert [r.message for r in backend.records + backend.sync_records] == ["pending"]
        assert not logger.get_performance_stats()["dispatch_task_running"]

    def test_rejects_wrong_config_type(self):
        with pytest.raises(TypeError):
            HFTLogger("tests.bad", [], Mock(), {"buffer_size": 10})


class TestRouter:

    def test_dev_routes_text_to_default_backends(self):
        console = RecordingBackend("console")
        router = SimpleRouter({"console": console}, RouterConfig(environment="dev"))

        record = LogRecord.create_text(LogLevel.INFO, "tests", "hello")
        assert router.get_backends(record) == [console]

    def test_prod_drops_text_below_warning(self):
        console, file = RecordingBackend("console"), RecordingBackend("file")
        router = SimpleRouter({"console": console, "file": file}, RouterConfig(environment="prod"))

        assert router.get_backends(LogRecord.create_text(LogLevel.INFO, "tests", "hello")) == []
        assert router.get_backends(LogRecord.create_metric("tests", "weight", 1.0)) == [file]
        assert router.get_backends(LogRecord.create_text(LogLevel.ERROR, "tests", "boom")) == [file]


class TestLoggingTimer:

    def test_records_latency(self):
        logger = Mock()

        with LoggingTimer(logger, "fetch_markets", segment="spot") as timer:
            pass

        logger.latency.assert_called_once()
        operation, elapsed = logger.latency.call_args.args
        assert operation == "fetch_markets"
        assert elapsed == timer.elapsed_ms >= 0
        assert logger.latency.call_args.kwargs == {"segment": "spot"}

    def test_logs_failure_and_reraises(self):
        logger = Mock()

        with pytest.raises(ValueError):
            with LoggingTimer(logger, "fetch_markets"):
                raise ValueError("boom")

        logger.error.assert_called_once_with("fetch_markets failed", error_type="ValueError")


class TestFactory:

    def test_exchange_logger_cached_with_context(self):
        first = get_exchange_logger("bingx", "tests.factory")
        second = get_exchange_logger("bingx", "tests.factory")

        assert first is second
        assert first.name == "bingx.tests.factory"
        assert first.context["exchange"] == "bingx"

    def test_test_defaults_in_use(self):
        config = LoggerFactory.get_default_config()

        assert config.environment == "test"
        assert config.file is None

    def test_override_logger(self):
        logger = get_logger("tests.override")

        assert LoggerFactory.override_logger("tests.override", min_level="ERROR")
        assert all(backend.min_level is LogLevel.ERROR for backend in logger.backends)
        assert not LoggerFactory.override_logger("tests.does_not_exist", enabled=False)

    @pytest.mark.parametrize("environment, expected", [
        ("production", "prod"),
        ("prod", "prod"),
        ("test", "test"),
        ("dev", "dev"),
        ("anything", "dev"),
    ])
    def test_default_config_for_environment(self, environment, expected):
        assert default_config_for_environment(environment).environment == expected


class TestLoggingConfig:

    def test_from_dict(self):
        config = LoggingConfig.from_dict({
            "environment": "prod",
            "console": {"enabled": False},
            "file": {"path": "logs/x.log", "format": "json", "min_level": "ERROR"},
        })

        assert config.console.enabled is False
        assert config.file.format == "json"
        assert config.get_enabled_backends() == ["file"]

    def test_from_dict_rejects_wrong_types(self):
        with pytest.raises(msgspec.ValidationError):
            LoggingConfig.from_dict({"performance": {"buffer_size": "lots"}})

    @pytest.mark.parametrize("config", [
        LoggingConfig(environment="qa"),
        LoggingConfig(console=ConsoleBackendConfig(min_level="LOUD")),
        LoggingConfig(file=FileBackendConfig(format="xml")),
        LoggingConfig(performance=PerformanceConfig(batch_size=0)),
    ])
    def test_validate(self, config):
        with pytest.raises(ValueError):
            config.validate()

    def test_set_default_config_validates(self):
        with pytest.raises(ValueError):
            LoggerFactory.set_default_config(LoggingConfig(environment="qa"))


class TestConsoleBackend:

    def test_format_metric_with_tags(self):
        backend = ConsoleBackend(ConsoleBackendConfig(color=False))
        record = LogRecord.create_metric("tests", "bingx_endpoint_weight", 1.0, segment="swap")

        assert backend._format_message(record) == "[METRIC] bingx_endpoint_weight=1.0 | segment=swap"

    def test_format_text_with_context_and_exchange(self):
        backend = ConsoleBackend(ConsoleBackendConfig(color=False, max_message_length=5))
        record = LogRecord.create_text(LogLevel.INFO, "tests", "Markets fetched", total=5)
        record.exchange = "bingx"

        assert backend._format_message(record) == "Marke... | total=5 | exchange=bingx"

    def test_write_sync_uses_stdlib(self, caplog):
        backend = ConsoleBackend(ConsoleBackendConfig(color=False))
        record = LogRecord.create_text(LogLevel.ERROR, "tests.console", "boom")

        with caplog.at_level(logging.ERROR, logger="tests.console"):
            backend.write_sync(record)

        assert "boom" in caplog.text


class TestFileBackend:

    def test_write_sync_json(self, tmp_path):
        path = tmp_path / "logs" / "connector.log"
        backend = FileBackend(FileBackendConfig(path=str(path), format="json"))
        record = LogRecord.create_metric("tests", "bingx_endpoint_weight", 1.0, segment="spot")

        backend.write_sync(record)

        data = msgspec.json.decode(path.read_text().strip())
        assert data["type"] == "METRIC"
        assert data["metric"] == {"name": "bingx_endpoint_weight", "value": 1.0, "tags": {"segment": "spot"}}

    @pytest.mark.asyncio
    async def test_async_write_buffers_until_flush(self, tmp_path):
        path = tmp_path / "connector.log"
        backend = FileBackend(FileBackendConfig(path=str(path), buffer_size=10, flush_interval=60))
        backend._last_flush = float("inf")

        await backend.write(LogRecord.create_text(LogLevel.ERROR, "tests", "first"))
        assert not path.exists()

        await backend.flush()
        assert "ERROR tests: first" in path.read_text()

    def test_should_handle(self, tmp_path):
        backend = FileBackend(FileBackendConfig(path=str(tmp_path / "x.log"), min_level="WARNING"))

        assert backend.should_handle(LogRecord.create_metric("tests", "m", 1.0))
        assert backend.should_handle(LogRecord.create_text(LogLevel.ERROR, "tests", "e"))
        assert not backend.should_handle(LogRecord.create_text(LogLevel.INFO, "tests", "i"))

    def test_rotation(self, tmp_path):
        path = tmp_path / "connector.log"
        backend = FileBackend(FileBackendConfig(path=str(path), backup_count=2))
        backend.max_file_size = 1

        backend.write_sync(LogRecord.create_text(LogLevel.ERROR, "tests", "first"))
        backend.write_sync(LogRecord.create_text(LogLevel.ERROR, "tests", "second"))

        assert "first" in path.with_suffix(".1").read_text()
        assert "second" in path.read_text()


class TestProductionLogging:

    @pytest.mark.asyncio
    async def test_file_gets_errors_and_metrics(self, tmp_path):
        prod = LoggingConfig.default_production()
        path = tmp_path / "prod.log"
        config = msgspec.structs.replace(prod, file=msgspec.structs.replace(prod.file, path=str(path)))
        logger = LoggerFactory.create_logger("tests.prod_file", config)

        logger.error("Market fetch failed", segment="spot")
        logger.info("Markets fetched", total=5)
        logger.metric("bingx_endpoint_weight", 1, segment="spot")
        await logger.shutdown()

        lines = [msgspec.json.decode(line) for line in path.read_text().splitlines()]
        assert [(line["level"], line["type"], line["message"]) for line in lines] == [
            ("ERROR", "TEXT", "Market fetch failed"),
            ("INFO", "METRIC", ""),
        ]
        assert lines[0]["context"] == {"segment": "spot"}
        assert lines[1]["metric"]["tags"] == {"segment": "spot"}
