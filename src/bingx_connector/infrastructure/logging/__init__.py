"""
Structured Logging

Configured automatically from config.yaml (``logging:`` section) or from
the ENVIRONMENT variable.

Usage:
    from bingx_connector.infrastructure.logging import get_logger, get_exchange_logger

    logger = get_logger('bingx_connector.config')
    logger.info("Configuration loaded", path="config.yaml")

    logger = get_exchange_logger('bingx', 'rest.public')
    logger.debug("Request issued", operation="quoteContracts", weight=1)
    logger.metric("endpoint_weight", 1, tags={"segment": "swap"})
"""

from .interfaces import (
    LogLevel,
    LogType,
    LogRecord,
    LogBackend,
    LogRouter,
    HFTLoggerInterface
)

from .hft_logger import HFTLogger, LoggingTimer

from .factory import (
    LoggerFactory,
    get_logger,
    get_exchange_logger,
    configure_logging,
    default_config_for_environment
)

from .structs import (
    LoggingConfig,
    ConsoleBackendConfig,
    FileBackendConfig,
    PerformanceConfig,
    RouterConfig,
    BackendConfig
)

from .router import SimpleRouter, create_router

from .backends.console import ConsoleBackend, ColorConsoleBackend
from .backends.file import FileBackend

__all__ = [
    'LogLevel',
    'LogType',
    'LogRecord',
    'LogBackend',
    'LogRouter',
    'HFTLoggerInterface',

    'HFTLogger',
    'LoggingTimer',

    'LoggerFactory',
    'get_logger',
    'get_exchange_logger',
    'configure_logging',
    'default_config_for_environment',

    'LoggingConfig',
    'ConsoleBackendConfig',
    'FileBackendConfig',
    'PerformanceConfig',
    'RouterConfig',
    'BackendConfig',

    'SimpleRouter',
    'create_router',

    'ConsoleBackend',
    'ColorConsoleBackend',
    'FileBackend',
]
