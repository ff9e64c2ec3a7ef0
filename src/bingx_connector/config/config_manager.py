"""
Connector Configuration Management

YAML-based configuration with ``.env`` loading and environment variable
substitution.

Usage:
    from bingx_connector.config import get_exchange_config

    bingx_config = get_exchange_config('bingx')   # ExchangeConfig
    bingx_config.credentials.has_private_api

config.yaml layout:

    environment: dev
    network:
      request_timeout: 10.0
      connect_timeout: 5.0
      max_retries: 3
    exchanges:
      bingx:
        api_key: "${BINGX_API_KEY:}"
        secret_key: "${BINGX_SECRET_KEY:}"
        hostname: bingx.com
        rate_limit_ms: 100
    logging:
      environment: dev
      console: {enabled: true, min_level: DEBUG}
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import msgspec
import yaml
from dotenv import load_dotenv

from bingx_connector.infrastructure.exceptions.system import ConfigurationError
from bingx_connector.infrastructure.logging.structs import LoggingConfig
from .structs import ExchangeConfig, ExchangeCredentials, NetworkConfig

CONFIG_PATH_ENV = 'BINGX_CONNECTOR_CONFIG'

ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')


def guess_file_paths(file_name: str) -> List[Path]:
    """Possible locations of ``file_name``, most specific first."""
    return [
        Path(__file__).resolve().parents[3] / file_name,  # Project root
        Path.cwd() / file_name,                           # Current working directory
        Path.home() / file_name,                          # User home directory (fallback)
    ]


def substitute_env_vars(content: str) -> str:
    """
    Substitute environment variables in configuration content.

    Supports:
    - ${VAR_NAME} - environment variable, empty string if unset
    - ${VAR_NAME:default} - environment variable with default value
    """
    def replace_var(match):
        var_expr = match.group(1)
        if ':' in var_expr:
            var_name, default_value = var_expr.split(':', 1)
            env_value = os.getenv(var_name.strip())
            return default_value if env_value is None else env_value

        env_value = os.getenv(var_expr.strip())
        if env_value is None:
            logging.getLogger(__name__).warning(
                f"Environment variable {var_expr.strip()} not set - using empty value")
            return ""
        return env_value

    return ENV_VAR_PATTERN.sub(replace_var, content)


class ConnectorConfig:
    """
    Connector configuration loaded from config.yaml.

    Singleton: the first construction loads the file, later constructions
    return the same instance. ``reset()`` drops it.
    """

    _instance: Optional['ConnectorConfig'] = None
    _initialized: bool = False

    def __new__(cls, config_path: Optional[Path] = None) -> 'ConnectorConfig':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None):
        if self._initialized:
            return

        self._logger = logging.getLogger(__name__)
        self._load_env_file()

        self.config_path = self._find_config_file(config_path)
        self._config_data = self._read_yaml(self.config_path)
        self._parse()

        ConnectorConfig._initialized = True
        self._logger.info(f"Connector configuration loaded from {self.config_path} "
                          f"(environment: {self.environment})")

    @classmethod
    def reset(cls) -> None:
        cls._instance = None
        cls._initialized = False

    def _load_env_file(self) -> None:
        for env_path in guess_file_paths('.env'):
            if env_path.exists():
                load_dotenv(dotenv_path=env_path, override=False)
                self._logger.debug(f"Loaded environment variables from: {env_path}")
                return
        self._logger.debug("No .env file found - using system environment variables only")

    @staticmethod
    def _find_config_file(config_path: Optional[Path]) -> Path:
        if config_path is None and os.getenv(CONFIG_PATH_ENV):
            config_path = Path(os.environ[CONFIG_PATH_ENV])

        if config_path is not None:
            config_path = Path(config_path)
            if not config_path.exists():
                raise ConfigurationError(f"Config file not found: {config_path}", CONFIG_PATH_ENV)
            return config_path

        for candidate in guess_file_paths('config.yaml'):
            if candidate.exists():
                return candidate
        raise ConfigurationError("No config.yaml found", 'config.yaml')

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        with open(path, 'r') as f:
            raw_content = f.read()
        try:
            data = yaml.safe_load(substitute_env_vars(raw_content))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}", 'config.yaml') from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Top level of {path} must be a mapping", 'config.yaml')
        return data

    def _parse(self) -> None:
        environment = self._config_data.get('environment', 'dev')
        if isinstance(environment, dict):
            environment = environment.get('name', 'dev')
        self.environment = str(environment).lower()
        if self.environment not in ('dev', 'prod', 'test', 'staging'):
            raise ConfigurationError(f"Invalid environment '{self.environment}' in config.yaml", 'environment')

        self._network_config = self._convert(self._config_data.get('network') or {}, NetworkConfig, 'network')
        self._validate(self._network_config, 'network')

        self._exchange_configs: Dict[str, ExchangeConfig] = {}
        for exchange_name, exchange_data in (self._config_data.get('exchanges') or {}).items():
            self._exchange_configs[exchange_name.lower()] = self._build_exchange_config(
                exchange_name.lower(), exchange_data or {})

        logging_data = self._config_data.get('logging')
        self._logging_config: Optional[LoggingConfig] = None
        if logging_data:
            logging_data = {'environment': self.environment, **logging_data}
            self._logging_config = self._convert(logging_data, LoggingConfig, 'logging')
            self._validate(self._logging_config, 'logging')

    def _build_exchange_config(self, name: str, data: Dict[str, Any]) -> ExchangeConfig:
        setting = f'exchanges.{name}'
        credentials = ExchangeCredentials(
            api_key=str(data.get('api_key') or ''),
            secret_key=str(data.get('secret_key') or '')
        )

        network_data = data.get('network')
        network = (self._convert(network_data, NetworkConfig, f'{setting}.network')
                   if network_data else self._network_config)

        fields = {k: v for k, v in data.items()
                  if k in ('hostname', 'rate_limit_ms', 'enabled', 'headers')}
        config = self._convert(
            {'name': name, **fields}, ExchangeConfig, setting
        )
        config = msgspec.structs.replace(config, credentials=credentials, network=network)
        self._validate(config, setting)
        return config

    @staticmethod
    def _convert(data: Any, struct_type: type, setting_name: str):
        try:
            return msgspec.convert(data, struct_type)
        except msgspec.ValidationError as e:
            raise ConfigurationError(f"Invalid '{setting_name}' configuration: {e}", setting_name) from e

    @staticmethod
    def _validate(config: Any, setting_name: str) -> None:
        try:
            config.validate()
        except ValueError as e:
            raise ConfigurationError(f"Invalid '{setting_name}' configuration: {e}", setting_name) from e

    def get_exchange_config(self, exchange_name: str) -> ExchangeConfig:
        """
        Get exchange configuration.

        Raises:
            ConfigurationError: If exchange is not configured
        """
        exchange_name = exchange_name.lower()
        if exchange_name not in self._exchange_configs:
            raise ConfigurationError(f"Exchange '{exchange_name}' is not configured", exchange_name)
        return self._exchange_configs[exchange_name]

    def get_all_exchange_configs(self) -> Dict[str, ExchangeConfig]:
        return dict(self._exchange_configs)

    def get_network_config(self) -> NetworkConfig:
        return self._network_config

    def get_logging_config(self) -> Optional[LoggingConfig]:
        return self._logging_config


def get_config() -> ConnectorConfig:
    return ConnectorConfig()


def get_exchange_config(exchange_name: str) -> ExchangeConfig:
    return get_config().get_exchange_config(exchange_name)


def get_logging_config() -> Optional[LoggingConfig]:
    """Logging section of config.yaml, or None when there is no usable config file."""
    try:
        return get_config().get_logging_config()
    except ConfigurationError as e:
        logging.getLogger(__name__).debug(f"Logging falls back to environment defaults: {e}")
        return None
