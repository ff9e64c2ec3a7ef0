from .structs import HTTPMethod, SignedRequest, RawResponse
from .rest_manager import RestManager
from .strategies import ExceptionHandlerStrategy, ErrorKind, ClassifiedError

__all__ = [
    'HTTPMethod',
    'SignedRequest',
    'RawResponse',
    'RestManager',
    'ExceptionHandlerStrategy',
    'ErrorKind',
    'ClassifiedError',
]
