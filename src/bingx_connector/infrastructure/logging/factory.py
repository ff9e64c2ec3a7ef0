"""
Logging Factory

Creates and caches logger instances from struct-based configuration.
Every component gets its logger through ``get_logger`` or
``get_exchange_logger`` and keeps it as ``self.logger``.
"""

import os
from typing import Dict, Optional

from .interfaces import HFTLoggerInterface, LogLevel
from .hft_logger import HFTLogger
from .router import create_router
from .backends.console import ConsoleBackend, ColorConsoleBackend
from .backends.file import FileBackend
from .structs import LoggingConfig, PerformanceConfig, RouterConfig


class LoggerFactory:
    """Logging factory - trust config, fail fast."""

    _cached_loggers: Dict[str, HFTLoggerInterface] = {}
    _default_config: Optional[LoggingConfig] = None

    @classmethod
    def create_logger(cls, name: str, config: Optional[LoggingConfig] = None) -> HFTLoggerInterface:
        if name in cls._cached_loggers:
            return cls._cached_loggers[name]

        config = config or cls.get_default_config()

        backends = []
        if config.console and config.console.enabled:
            backend_class = ColorConsoleBackend if config.console.color else ConsoleBackend
            backends.append(backend_class(config.console, 'console'))

        if config.file and config.file.enabled:
            backends.append(FileBackend(config.file, 'file'))

        router_config = config.router or RouterConfig()
        if router_config.environment is None:
            router_config = RouterConfig(
                environment=config.environment,
                default_backends=router_config.default_backends
            )

        logger = HFTLogger(
            name=name,
            backends=backends,
            router=create_router({b.name: b for b in backends}, router_config),
            config=config.performance or PerformanceConfig()
        )

        cls._cached_loggers[name] = logger
        return logger

    @classmethod
    def get_default_config(cls) -> LoggingConfig:
        if cls._default_config is None:
            cls._default_config = cls._load_default_config()
        return cls._default_config

    @classmethod
    def set_default_config(cls, config: LoggingConfig) -> None:
        config.validate()
        cls._default_config = config

    @classmethod
    def override_logger(cls, name: str, **overrides) -> bool:
        """
        Override a cached logger at runtime.

        Supported overrides:
            min_level: new minimum level for all backends ("ERROR", ...)
            enabled: enable/disable all backends
            backend_enabled: {backend name: bool}

        Returns False if no logger with that name exists.
        """
        logger = cls._cached_loggers.get(name)
        if logger is None:
            return False

        if "min_level" in overrides:
            level = overrides["min_level"]
            level = LogLevel[level.upper()] if isinstance(level, str) else LogLevel(level)
            for backend in logger.backends:
                backend.min_level = level

        if "enabled" in overrides:
            for backend in logger.backends:
                backend.enabled = overrides["enabled"]

        for backend_name, enabled in overrides.get("backend_enabled", {}).items():
            for backend in logger.backends:
                if backend.name == backend_name:
                    backend.enabled = enabled

        return True

    @classmethod
    def clear_cache(cls) -> None:
        cls._cached_loggers.clear()
        cls._default_config = None

    @classmethod
    def _load_default_config(cls) -> LoggingConfig:
        """Use the ``logging`` section of config.yaml, else ENVIRONMENT defaults."""
        # Delayed import: config imports the logging package
        from bingx_connector.config.config_manager import get_logging_config

        config = get_logging_config()
        if config is not None:
            return config
        return default_config_for_environment(os.getenv('ENVIRONMENT', 'dev'))


def default_config_for_environment(environment: str) -> LoggingConfig:
    environment = environment.lower()
    if environment in ('prod', 'production'):
        return LoggingConfig.default_production()
    if environment == 'test':
        return LoggingConfig.default_test()
    return LoggingConfig.default_development()


def get_logger(name: str) -> HFTLoggerInterface:
    return LoggerFactory.create_logger(name)


def get_exchange_logger(exchange: str, component: str = None) -> HFTLoggerInterface:
    """Get exchange logger, e.g. ``get_exchange_logger('bingx', 'rest.public')``."""
    name = f"{exchange}.{component}" if component else exchange
    logger = get_logger(name)
    logger.set_context(exchange=exchange)
    return logger


def configure_logging(config: LoggingConfig) -> None:
    """Install a logging config for loggers created from now on."""
    LoggerFactory.clear_cache()
    LoggerFactory.set_default_config(config)
