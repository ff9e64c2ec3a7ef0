from .fakes import (
    API_KEY,
    SECRET_KEY,
    FIXED_TIMESTAMP,
    FakeTransport,
    json_response,
    symbols_response,
)

__all__ = [
    'API_KEY',
    'SECRET_KEY',
    'FIXED_TIMESTAMP',
    'FakeTransport',
    'json_response',
    'symbols_response',
]
