from .signer import BingxRequestSigner, API_KEY_HEADER
from .exception_handler import BingxExceptionHandler
from .bingx_rest_client import BingxRestClient

__all__ = [
    'BingxRequestSigner',
    'API_KEY_HEADER',
    'BingxExceptionHandler',
    'BingxRestClient',
]
