from .system import ConfigurationError
from .exchange import (
    ExchangeError, NetworkError, ExchangeNetworkError, ExchangeNotAvailable,
    RateLimitExceeded, InvalidNonce, AuthenticationError, PermissionDenied,
    AccountSuspended, BadRequest, BadSymbol, InvalidAddress, InsufficientFunds,
    InvalidOrder, OrderNotFound, NotSupported
)

__all__ = [
    'ConfigurationError',
    'ExchangeError',
    'NetworkError',
    'ExchangeNetworkError',
    'ExchangeNotAvailable',
    'RateLimitExceeded',
    'InvalidNonce',
    'AuthenticationError',
    'PermissionDenied',
    'AccountSuspended',
    'BadRequest',
    'BadSymbol',
    'InvalidAddress',
    'InsufficientFunds',
    'InvalidOrder',
    'OrderNotFound',
    'NotSupported',
]
