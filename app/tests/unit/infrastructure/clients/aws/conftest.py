"""Fixtures for AWS client tests.

Provides factory-as-fixture pattern for creating configurable fake boto3 clients
used across AWS client unit tests.
"""

from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.configuration.integrations.cognito import CognitoSettings


class FakeClient:
    """Configurable fake boto3 client for unit tests.

    API methods are looked up in ``api_responses``; a callable response is
    called with the request kwargs. Every API call is recorded in ``calls``
    as ``(method, kwargs)``.
    """

    def __init__(self, api_responses: Optional[Dict[str, Any]] = None):
        self._api_responses = api_responses or {}
        self.calls: List[tuple] = []

    def __getattr__(self, name: str):
        """Provide callable for API methods that returns configured responses."""
        if name.startswith("_") or name not in self._api_responses:
            raise AttributeError(name)

        resp = self._api_responses[name]

        def _call(*_args, **_kwargs):
            self.calls.append((name, _kwargs))
            if callable(resp):
                return resp(**_kwargs)
            return resp

        return _call


@pytest.fixture
def make_fake_client():
    """Factory fixture for creating configurable fake boto3 clients.

    Usage:
        def test_something(monkeypatch, make_fake_client):
            client = make_fake_client(api_responses={"get_id": {...}})
            monkeypatch.setattr(executor, "get_boto3_client", lambda *a, **k: client)
    """

    def _factory(api_responses: Optional[Dict[str, Any]] = None) -> FakeClient:
        return FakeClient(api_responses=api_responses)

    return _factory


@pytest.fixture
def install_fake_client(monkeypatch, make_fake_client):
    """Create a FakeClient and route every boto3 client creation to it.

    Returns:
        Callable taking ``api_responses`` and returning the installed FakeClient
    """
    from infrastructure.clients.aws import executor

    def _install(api_responses: Dict[str, Any]) -> FakeClient:
        client = make_fake_client(api_responses=api_responses)
        monkeypatch.setattr(
            executor, "get_boto3_client", lambda *args, **kwargs: client
        )
        return client

    return _install


@pytest.fixture
def session_provider():
    return SessionProvider(region="us-east-1")


@pytest.fixture
def mock_cognito_settings():
    """Mock CognitoSettings instance for testing AWSClients.

    Tests can further customize this mock as needed:
        def test_something(mock_cognito_settings):
            mock_cognito_settings.AWS_REGION = "us-west-2"
    """
    settings = MagicMock(spec=CognitoSettings)
    settings.AWS_REGION = "us-east-1"
    settings.AWS_ACCOUNT_ID = "123456789012"
    settings.ENDPOINT_URL = None
    settings.MAX_RETRIES = 0
    settings.IDENTITY_POOL_ID = "us-east-1:pool"
    settings.DEVELOPER_PROVIDER_NAME = "login.identitybroker"
    settings.DATASET_NAME = "profile"
    settings.SERVICE_ROLE_MAP = {
        "cognito-identity": "arn:aws:iam::123456789012:role/CognitoIdentityRole",
        "cognito-sync": "",
        "ses": "",
    }
    return settings
