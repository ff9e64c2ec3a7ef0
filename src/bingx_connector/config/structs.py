from typing import Optional, Dict
from msgspec import Struct, field

from bingx_connector.infrastructure.exceptions.exchange import AuthenticationError


class NetworkConfig(Struct, frozen=True):
    """
    Network configuration settings.

    Attributes:
        request_timeout: HTTP request timeout in seconds
        connect_timeout: Connection timeout in seconds
        max_retries: Maximum number of retry attempts for transport failures
        retry_delay: Base delay between retries in seconds
    """
    request_timeout: float = 10.0
    connect_timeout: float = 5.0
    max_retries: int = 3
    retry_delay: float = 0.1

    def validate(self) -> None:
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")
        if self.connect_timeout <= 0:
            raise ValueError("connect_timeout must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if self.retry_delay < 0:
            raise ValueError("retry_delay cannot be negative")


class ExchangeCredentials(Struct, frozen=True):
    """Exchange API credentials."""
    api_key: str = ""
    secret_key: str = ""

    @property
    def has_private_api(self) -> bool:
        """Check if both credentials are provided."""
        return bool(self.api_key) and bool(self.secret_key)

    def check_required_credentials(self) -> None:
        """Raise AuthenticationError unless both api key and secret are set."""
        if not self.api_key:
            raise AuthenticationError(None, "Missing required credential: apiKey")
        if not self.secret_key:
            raise AuthenticationError(None, "Missing required credential: secret")

    def get_preview(self) -> str:
        """Get safe preview of credentials for logging."""
        if not self.api_key:
            return "Not configured"
        if len(self.api_key) > 8:
            return f"{self.api_key[:4]}...{self.api_key[-4:]}"
        return "***"

    def validate(self) -> None:
        """Allow empty credentials for public-only mode, but never just one of them."""
        if not self.api_key and not self.secret_key:
            return
        if bool(self.api_key) != bool(self.secret_key):
            raise ValueError("Both api_key and secret_key must be provided together or both empty")


class ExchangeConfig(Struct, frozen=True):
    """
    Exchange configuration including credentials and settings.

    Attributes:
        name: Exchange name ('bingx')
        hostname: Hostname imploded into the segment API URLs
        credentials: API credentials (may be empty for public-only use)
        network: Network configuration
        rate_limit_ms: Minimum spacing between requests, for an external limiter
        enabled: Whether the exchange is active
        headers: Extra headers sent with every request
    """
    name: str = "bingx"
    hostname: str = "bingx.com"
    credentials: ExchangeCredentials = field(default_factory=ExchangeCredentials)
    network: Optional[NetworkConfig] = None
    rate_limit_ms: int = 100
    enabled: bool = True
    headers: Optional[Dict[str, str]] = None

    def has_credentials(self) -> bool:
        return self.credentials.has_private_api

    def is_public_only(self) -> bool:
        return not self.has_credentials()

    def get_network_config(self) -> NetworkConfig:
        return self.network or NetworkConfig()

    def validate(self) -> None:
        if not self.name:
            raise ValueError("name is required")
        if not self.hostname:
            raise ValueError("hostname is required")
        if self.rate_limit_ms <= 0:
            raise ValueError("rate_limit_ms must be positive")
        self.credentials.validate()
        self.get_network_config().validate()
