from typing import Mapping

from bingx_connector.infrastructure.networking.http.strategies.exception_handler import (
    ExceptionHandlerStrategy, ErrorKind
)

# Venue codes, compared as strings
BINGX_EXACT_ERRORS: Mapping[str, ErrorKind] = {
    'RATE_LIMIT': ErrorKind.RATE_LIMIT,
    '400': ErrorKind.BAD_REQUEST,
    '401': ErrorKind.AUTHENTICATION,
    '403': ErrorKind.PERMISSION_DENIED,
    '404': ErrorKind.BAD_REQUEST,
    '418': ErrorKind.PERMISSION_DENIED,
    '429': ErrorKind.RATE_LIMIT,
    '500': ErrorKind.EXCHANGE_NOT_AVAILABLE,
    '504': ErrorKind.EXCHANGE_NOT_AVAILABLE,
    '100001': ErrorKind.AUTHENTICATION,         # signature verification failed
    '100412': ErrorKind.AUTHENTICATION,         # null signature
    '100413': ErrorKind.AUTHENTICATION,         # incorrect api key
    '100414': ErrorKind.ACCOUNT_SUSPENDED,      # account abnormal
    '100419': ErrorKind.PERMISSION_DENIED,      # ip not whitelisted
    '100410': ErrorKind.RATE_LIMIT,             # frequency limit
    '100421': ErrorKind.INVALID_NONCE,          # timestamp mismatch
    '100202': ErrorKind.INSUFFICIENT_FUNDS,
    '100204': ErrorKind.BAD_REQUEST,
    '100400': ErrorKind.BAD_REQUEST,
    '100437': ErrorKind.BAD_REQUEST,
    '100440': ErrorKind.INVALID_ORDER,
    '100503': ErrorKind.EXCHANGE_NOT_AVAILABLE,
    '80001': ErrorKind.BAD_REQUEST,
    '80012': ErrorKind.INSUFFICIENT_FUNDS,
    '80014': ErrorKind.BAD_REQUEST,
    '80016': ErrorKind.ORDER_NOT_FOUND,
    '80017': ErrorKind.ORDER_NOT_FOUND,
    '101204': ErrorKind.INSUFFICIENT_FUNDS,
    '109414': ErrorKind.BAD_SYMBOL,
}

# Message fragments, checked in order
BINGX_BROAD_ERRORS: Mapping[str, ErrorKind] = {
    'Insufficient assets': ErrorKind.INSUFFICIENT_FUNDS,
    'insufficient balance': ErrorKind.INSUFFICIENT_FUNDS,
    'symbol not exist': ErrorKind.BAD_SYMBOL,
    'symbol is not supported': ErrorKind.BAD_SYMBOL,
    'timestamp': ErrorKind.INVALID_NONCE,
    'Signature verification failed': ErrorKind.AUTHENTICATION,
    'api key': ErrorKind.AUTHENTICATION,
    'order not exist': ErrorKind.ORDER_NOT_FOUND,
    'address': ErrorKind.INVALID_ADDRESS,
    'not supported': ErrorKind.NOT_SUPPORTED,
    'too many requests': ErrorKind.RATE_LIMIT,
    'rate limit': ErrorKind.RATE_LIMIT,
    'system busy': ErrorKind.EXCHANGE_NOT_AVAILABLE,
    'maintenance': ErrorKind.EXCHANGE_NOT_AVAILABLE,
}

BINGX_HTTP_ERRORS: Mapping[int, ErrorKind] = {
    400: ErrorKind.BAD_REQUEST,
    401: ErrorKind.AUTHENTICATION,
    403: ErrorKind.PERMISSION_DENIED,
    404: ErrorKind.BAD_REQUEST,
    418: ErrorKind.PERMISSION_DENIED,
    429: ErrorKind.RATE_LIMIT,
    500: ErrorKind.EXCHANGE_NOT_AVAILABLE,
    502: ErrorKind.EXCHANGE_NOT_AVAILABLE,
    503: ErrorKind.EXCHANGE_NOT_AVAILABLE,
    504: ErrorKind.EXCHANGE_NOT_AVAILABLE,
}


class BingxExceptionHandler(ExceptionHandlerStrategy):
    """BingX error tables. Responses look like ``{"code": 100001, "msg": "..."}``."""

    @property
    def exchange_name(self) -> str:
        return "BingX"

    def get_exact_errors(self) -> Mapping[str, ErrorKind]:
        return BINGX_EXACT_ERRORS

    def get_broad_errors(self) -> Mapping[str, ErrorKind]:
        return BINGX_BROAD_ERRORS

    def get_http_errors(self) -> Mapping[int, ErrorKind]:
        return BINGX_HTTP_ERRORS
