from .structs import ExchangeConfig, ExchangeCredentials, NetworkConfig
from .config_manager import (
    ConnectorConfig, get_config, get_exchange_config, get_logging_config,
    guess_file_paths, substitute_env_vars
)

__all__ = [
    'ExchangeConfig',
    'ExchangeCredentials',
    'NetworkConfig',
    'ConnectorConfig',
    'get_config',
    'get_exchange_config',
    'get_logging_config',
    'guess_file_paths',
    'substitute_env_vars',
]
