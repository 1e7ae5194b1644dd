"""Shared fixtures for the identity broker test suite."""

import pytest

from infrastructure.clients.aws import executor
from infrastructure.configuration.features import IdentityFeatureSettings
from infrastructure.configuration.integrations import CognitoSettings, OAuthSettings
from infrastructure.logging import clear_request_context
from tests.fixtures.aws_clients import FakeAws

POOL_ID = "us-east-1:00000000-0000-0000-0000-000000000000"
DEVELOPER_PROVIDER_NAME = "login.identitybroker"


@pytest.fixture(autouse=True)
def _clear_logging_context():
    clear_request_context()
    yield
    clear_request_context()


@pytest.fixture
def fake_aws(monkeypatch):
    """Stateful Cognito Identity, Cognito Sync and SES fakes behind the executor."""
    fake = FakeAws(developer_provider_name=DEVELOPER_PROVIDER_NAME)
    monkeypatch.setattr(executor, "get_boto3_client", fake.get_boto3_client)
    return fake


@pytest.fixture
def cognito_settings():
    return CognitoSettings(
        AWS_REGION="us-east-1",
        COGNITO_IDENTITY_POOL_ID=POOL_ID,
        COGNITO_DEVELOPER_PROVIDER_NAME=DEVELOPER_PROVIDER_NAME,
        COGNITO_SEPARATOR="----",
        COGNITO_DATASET_NAME="profile",
    )


@pytest.fixture
def oauth_settings():
    return OAuthSettings(
        GOOGLE_CLIENT_ID="google-client",
        GOOGLE_SECRET="google-secret",
        GOOGLE_TOKEN_URL="https://google.test/token",
        GOOGLE_PROFILE_URL="https://google.test/userinfo",
        FACEBOOK_CLIENT_ID="facebook-client",
        FACEBOOK_SECRET="facebook-secret",
        FACEBOOK_TOKEN_URL="https://facebook.test/token",
        FACEBOOK_PROFILE_URL="https://facebook.test/me",
        AMAZON_CLIENT_ID="amazon-client",
        AMAZON_SECRET="amazon-secret",
        AMAZON_TOKEN_URL="https://amazon.test/token",
        AMAZON_PROFILE_URL="https://amazon.test/profile",
        TWITTER_CLIENT_ID="twitter-client",
        TWITTER_SECRET="twitter-secret",
        TWITTER_TOKEN_URL="https://twitter.test/token",
        TWITTER_PROFILE_URL="https://twitter.test/me",
        STRIPE_CLIENT_ID="stripe-client",
        STRIPE_SECRET="stripe-secret",
        STRIPE_TOKEN_URL="https://stripe.test/token",
        STRIPE_PROFILE_URL="https://stripe.test/account",
        PAYPAL_CLIENT_ID="paypal-client",
        PAYPAL_SECRET="paypal-secret",
        PAYPAL_TOKEN_URL="https://paypal.test/token",
        PAYPAL_PROFILE_URL="https://paypal.test/userinfo",
        OAUTH_HTTP_TIMEOUT=5.0,
    )


@pytest.fixture
def identity_settings():
    return IdentityFeatureSettings(
        COGNITO_PASSWORD_RESET_URL="https://app.test/reset/{email}/{reset}",
        COGNITO_PASSWORD_RESET_BODY="Dear {name}, follow the link below:",
        COGNITO_PASSWORD_RESET_SUBJECT="Password reset",
        COGNITO_PASSWORD_RESET_SOURCE="noreply@app.test",
        IDENTITY_CREDENTIALS_EXPIRY_MARGIN_SECONDS=60,
    )
