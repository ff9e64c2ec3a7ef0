"""
Log Router

Hardcoded routing of records to backends by type and level.
"""

import os
from typing import Dict, List

from .interfaces import LogRouter, LogBackend, LogRecord, LogLevel, LogType
from .structs import RouterConfig


class SimpleRouter(LogRouter):
    """
    Simple router with predefined routing logic.

    - metrics and audit records go to the file backend (and the console in dev)
    - warnings and above go to the file backend (and the console in dev)
    - everything else goes to the configured default backends in dev
    """

    def __init__(self, backends: Dict[str, LogBackend], config: RouterConfig):
        if not isinstance(config, RouterConfig):
            raise TypeError(f"Expected RouterConfig, got {type(config)}")

        self.backends = backends
        self.config = config
        self.environment = config.environment or os.getenv('ENVIRONMENT', 'dev')
        self.default_backends = config.get_default_backends()
        self.is_dev = self.environment.lower() in ('dev', 'development', 'local', 'test')

    def get_backends(self, record: LogRecord) -> List[LogBackend]:
        if record.log_type in (LogType.METRIC, LogType.AUDIT) or record.level >= LogLevel.WARNING:
            backend_names = ['file']
            if self.is_dev:
                backend_names.append('console')
        else:
            backend_names = list(self.default_backends) if self.is_dev else []

        return [
            backend
            for name in backend_names
            if (backend := self.backends.get(name)) and backend.should_handle(record)
        ]


def create_router(backends: Dict[str, LogBackend], config: RouterConfig) -> LogRouter:
    return SimpleRouter(backends, config)
