from .endpoints import EndpointRegistry, BINGX_API, BINGX_SEGMENTS, to_operation_name, descriptor_for
from .rest import BingxRequestSigner, BingxExceptionHandler, BingxRestClient
from .bingx_exchange import BingxPublicExchange, BINGX_TIMEFRAMES

__all__ = [
    'EndpointRegistry',
    'BINGX_API',
    'BINGX_SEGMENTS',
    'to_operation_name',
    'descriptor_for',
    'BingxRequestSigner',
    'BingxExceptionHandler',
    'BingxRestClient',
    'BingxPublicExchange',
    'BINGX_TIMEFRAMES',
]
