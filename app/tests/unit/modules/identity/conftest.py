"""Fixtures for identity module tests.

The domain objects run against the stateful AWS fakes from
``tests.fixtures.aws_clients`` and the fake OAuth session from
``tests.fixtures.oauth``.
"""

from datetime import datetime, timedelta, timezone

import pytest

from infrastructure.clients.aws import AWSClients
from modules.identity.directory import IdentityDirectory
from modules.identity.mail import PasswordResetMailer
from modules.identity.oauth import OAuthExchange
from modules.identity.providers import ProviderNormalizer, build_provider_configs
from modules.identity.records import ProfileRecordStore
from modules.identity.service import IdentityService
from tests.fixtures.oauth import FakeOAuthSession, FakeResponse


class MutableClock:
    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock(fake_aws):
    clock = MutableClock(datetime(2030, 1, 1, tzinfo=timezone.utc))
    fake_aws.identity.now = clock
    return clock


@pytest.fixture
def normalizer():
    return ProviderNormalizer(developer_provider_name="login.identitybroker", separator="----")


@pytest.fixture
def aws_clients(fake_aws, cognito_settings, identity_settings):
    return AWSClients(cognito_settings, identity_settings.PASSWORD_RESET_SOURCE)


@pytest.fixture
def directory(aws_clients, normalizer):
    return IdentityDirectory(aws_clients.cognito_identity, normalizer)


@pytest.fixture
def records(aws_clients):
    return ProfileRecordStore(aws_clients.cognito_sync)


@pytest.fixture
def provider_configs(oauth_settings):
    return build_provider_configs(oauth_settings)


@pytest.fixture
def oauth_session():
    return FakeOAuthSession()


@pytest.fixture
def oauth(provider_configs, oauth_session):
    return OAuthExchange(provider_configs, session=oauth_session, timeout=5.0)


@pytest.fixture
def mailer(aws_clients, identity_settings):
    return PasswordResetMailer(aws_clients.ses, identity_settings)


@pytest.fixture
def service(directory, records, oauth, mailer, normalizer, clock):
    return IdentityService(
        directory=directory,
        records=records,
        oauth=oauth,
        mailer=mailer,
        normalizer=normalizer,
        credentials_margin_seconds=60,
        clock=clock,
    )


@pytest.fixture
def google_provider(oauth_session):
    """Queue a Google code exchange answering with the given login token."""

    def _queue(
        id_token="alice",
        refresh_token="google-refresh",
        name="Alice",
        email="alice@test.com",
        expires_in=3600,
    ):
        token = {
            "access_token": f"access-{id_token}",
            "id_token": id_token,
            "expires_in": expires_in,
        }
        if refresh_token:
            token["refresh_token"] = refresh_token
        oauth_session.queue(
            "POST", "https://google.test/token", FakeResponse(200, token)
        )
        oauth_session.queue(
            "GET",
            "https://google.test/userinfo",
            FakeResponse(200, {"sub": id_token, "name": name, "email": email}),
        )

    return _queue


@pytest.fixture
def stripe_provider(oauth_session):
    """Queue a Stripe Connect code exchange for the given account id."""

    def _queue(account_id="acct_1", name="Acme", email="billing@acme.test"):
        oauth_session.queue(
            "POST",
            "https://stripe.test/token",
            FakeResponse(200, {"access_token": "sk_access", "stripe_user_id": account_id}),
        )
        oauth_session.queue(
            "GET",
            "https://stripe.test/account",
            FakeResponse(200, {"id": account_id, "display_name": name, "email": email}),
        )

    return _queue
