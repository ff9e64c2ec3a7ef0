"""
Pytest configuration and shared fixtures.

Sets up quiet test logging, credentials, a fixed timestamp source and a
fake transport serving canned responses.
"""

import os

import pytest

# Configure test environment before any logger is created
os.environ['ENVIRONMENT'] = 'test'

from bingx_connector.config.structs import ExchangeConfig, ExchangeCredentials
from bingx_connector.exchanges.integrations.bingx.endpoints import EndpointRegistry
from bingx_connector.exchanges.integrations.bingx.rest.bingx_rest_client import BingxRestClient
from bingx_connector.exchanges.integrations.bingx.rest.signer import BingxRequestSigner
from bingx_connector.infrastructure.logging import LoggingConfig, configure_logging

from tests.helpers import API_KEY, SECRET_KEY, FIXED_TIMESTAMP, FakeTransport


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """Quiet logging for the whole test session."""
    configure_logging(LoggingConfig.default_test())


@pytest.fixture
def credentials():
    return ExchangeCredentials(api_key=API_KEY, secret_key=SECRET_KEY)


@pytest.fixture
def public_config():
    return ExchangeConfig(name="bingx")


@pytest.fixture
def private_config(credentials):
    return ExchangeConfig(name="bingx", credentials=credentials)


@pytest.fixture
def registry():
    return EndpointRegistry()


@pytest.fixture
def public_signer():
    return BingxRequestSigner(nonce=lambda: FIXED_TIMESTAMP)


@pytest.fixture
def private_signer(credentials):
    return BingxRequestSigner(credentials, nonce=lambda: FIXED_TIMESTAMP)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def rest_client(public_config, registry, public_signer, transport):
    return BingxRestClient(public_config, registry=registry, signer=public_signer, transport=transport)
