"""
Logging configuration.

Frozen msgspec structs, loaded from the ``logging:`` section of config.yaml
via ``LoggingConfig.from_dict`` or picked per environment with the
``default_*`` constructors. ``validate()`` raises ValueError.
"""

from typing import Any, Dict, List, Optional

import msgspec

LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
ENVIRONMENTS = ("dev", "prod", "test", "staging")
FILE_FORMATS = ("text", "json")


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ValueError(message)


class BackendConfig(msgspec.Struct, frozen=True):
    enabled: bool = True
    min_level: str = "INFO"

    def validate(self) -> None:
        _require(self.min_level.upper() in LEVEL_NAMES, f"Invalid log level: {self.min_level}")


class ConsoleBackendConfig(BackendConfig, frozen=True):
    """stdlib-bridged console output; ``color`` only applies on a tty."""
    color: bool = True
    include_context: bool = True
    max_message_length: int = 1000


class FileBackendConfig(BackendConfig, frozen=True):
    """
    Line-per-record log file.

    ``buffer_size`` lines (or ``flush_interval`` seconds) are collected
    before an async write; the file rotates at ``max_size_mb`` keeping
    ``backup_count`` old copies.
    """
    path: str = "logs/bingx_connector.log"
    format: str = "text"
    max_size_mb: int = 100
    backup_count: int = 5
    buffer_size: int = 64
    flush_interval: float = 1.0

    def validate(self) -> None:
        super().validate()
        _require(self.format in FILE_FORMATS, f"Invalid format: {self.format}")
        _require(self.max_size_mb > 0, "max_size_mb must be positive")
        _require(self.backup_count >= 0, "backup_count cannot be negative")


class PerformanceConfig(msgspec.Struct, frozen=True):
    """Logger queue: capacity, records per dispatch batch, idle poll interval (s)."""
    buffer_size: int = 10000
    batch_size: int = 50
    dispatch_interval: float = 0.01

    def validate(self) -> None:
        for name in ("buffer_size", "batch_size", "dispatch_interval"):
            _require(getattr(self, name) > 0, f"{name} must be positive")


class RouterConfig(msgspec.Struct, frozen=True):
    """``default_backends`` receive plain text records below WARNING (dev/test only)."""
    environment: Optional[str] = None
    default_backends: Optional[List[str]] = None

    def get_default_backends(self) -> List[str]:
        return ["console"] if self.default_backends is None else self.default_backends


class LoggingConfig(msgspec.Struct, frozen=True):
    environment: str = "dev"
    console: Optional[ConsoleBackendConfig] = None
    file: Optional[FileBackendConfig] = None
    performance: Optional[PerformanceConfig] = None
    router: Optional[RouterConfig] = None

    def validate(self) -> None:
        _require(self.environment in ENVIRONMENTS, f"Invalid environment: {self.environment}")
        for section in (self.console, self.file, self.performance):
            if section is not None:
                section.validate()

    def get_enabled_backends(self) -> List[str]:
        sections = (("console", self.console), ("file", self.file))
        return [name for name, section in sections if section is not None and section.enabled]

    def to_dict(self) -> Dict[str, Any]:
        return msgspec.to_builtins(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        return msgspec.convert(data, cls)

    @classmethod
    def default_development(cls) -> "LoggingConfig":
        return cls(
            environment="dev",
            console=ConsoleBackendConfig(min_level="DEBUG"),
            file=FileBackendConfig(path="logs/dev.log"),
            performance=PerformanceConfig(),
            router=RouterConfig(default_backends=["console"])
        )

    @classmethod
    def default_production(cls) -> "LoggingConfig":
        # Console off; warnings, metrics and audit records go to a JSON file
        return cls(
            environment="prod",
            console=ConsoleBackendConfig(enabled=False),
            file=FileBackendConfig(min_level="WARNING", path="logs/bingx_connector.json.log",
                                   format="json", max_size_mb=256, backup_count=10),
            performance=PerformanceConfig(buffer_size=50000, batch_size=100),
            router=RouterConfig(default_backends=[])
        )

    @classmethod
    def default_test(cls) -> "LoggingConfig":
        return cls(
            environment="test",
            console=ConsoleBackendConfig(min_level="WARNING", color=False),
            performance=PerformanceConfig(buffer_size=10, batch_size=1, dispatch_interval=0.001),
            router=RouterConfig(default_backends=["console"])
        )
