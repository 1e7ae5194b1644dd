"""Lookups, profile and credential operations of the identity service."""

import json

import pytest

from infrastructure.configuration import Settings
from modules.identity.directory import LoginExpiredError
from modules.identity.errors import NotFoundError
from modules.identity.service import IdentityService, build_identity_service
from tests.fixtures.oauth import FakeResponse

CALLBACK = "https://app.test/callback"


@pytest.mark.unit
class TestLookups:
    @pytest.mark.asyncio
    async def test_get_id_and_developer_tokens(self, service):
        identity_id = await service.signup("Test User", "user@test.com", "test123")

        assert await service.get_id(None, "user@test.com") == identity_id
        assert await service.get_developer_tokens(identity_id) == ["user@test.com"]

    @pytest.mark.asyncio
    async def test_get_id_unknown_email(self, service):
        with pytest.raises(NotFoundError):
            await service.get_id(None, "nobody@test.com")

    @pytest.mark.asyncio
    async def test_describe_reports_every_login_kind(self, service, directory):
        identity_id = await service.login_federated_with_token(
            "google", "alice", email="alice@test.com"
        )
        await directory.open_id_token(
            {"login.identitybroker": "paypal----p1"}, identity_id=identity_id
        )
        await directory.open_id_token(
            {"login.identitybroker": "github----octo"}, identity_id=identity_id
        )

        linked = await service.describe(identity_id)

        assert linked.id == identity_id
        assert linked.google is True
        assert linked.paypal is True
        assert linked.facebook is False
        assert linked.stripe is False
        assert linked.email == "alice@test.com"
        assert linked.developer_providers == ["paypal", "github"]


@pytest.mark.unit
class TestGetProfile:
    @pytest.mark.asyncio
    async def test_federated_profile(self, service, google_provider):
        google_provider(id_token="alice", name="Alice", email="alice@test.com")
        identity_id = (await service.login_federated("google", "code", "web", CALLBACK)).id

        profile = await service.get_profile(identity_id)

        assert profile.name == "Alice"
        assert profile.provider == "google"
        assert profile.password is False
        assert profile.google is True
        assert json.loads(profile.profiles["google"])["name"] == "Alice"

    @pytest.mark.asyncio
    async def test_name_falls_back_to_email_then_id(self, service):
        with_email = await service.login_federated_with_token(
            "facebook", "fb-1", email="fb@test.com"
        )
        without_email = await service.login_federated_with_token("twitter", "tw-1")

        assert (await service.get_profile(with_email)).name == "fb@test.com"
        assert (await service.get_profile(without_email)).name == without_email

    @pytest.mark.asyncio
    async def test_profile_never_exposes_secrets(self, service):
        identity_id = await service.signup("Test User", "user@test.com", "test123")

        dumped = (await service.get_profile(identity_id)).model_dump()

        assert dumped["password"] is True
        assert "reset" not in dumped
        assert "test123" not in json.dumps(dumped)


@pytest.mark.unit
class TestGetCredentials:
    @pytest.mark.asyncio
    async def test_email_identity_credentials(self, service, fake_aws):
        identity_id = await service.signup("Test User", "user@test.com", "test123")

        credentials = await service.get_credentials(identity_id)

        assert credentials.identity_id == identity_id
        logins = fake_aws.identity.calls[-1][2]
        assert list(logins) == ["cognito-identity.amazonaws.com"]

    @pytest.mark.asyncio
    async def test_identity_without_login_has_no_credentials(self, service, directory):
        identity_id = await directory.resolve("amazon", "amz-1")

        assert await service.get_credentials(identity_id) is None

    @pytest.mark.asyncio
    async def test_expired_federated_login_is_refreshed(
        self, service, google_provider, oauth_session, fake_aws, records
    ):
        google_provider(id_token="alice")
        identity_id = (await service.login_federated("google", "code", "web", CALLBACK)).id
        fake_aws.identity.expired_tokens.add("alice")
        oauth_session.queue(
            "POST",
            "https://google.test/token",
            FakeResponse(200, {"access_token": "at2", "id_token": "alice:v2"}),
        )

        credentials = await service.get_credentials(identity_id)

        assert credentials.identity_id == identity_id
        assert fake_aws.identity.calls[-1][2] == {"accounts.google.com": "alice:v2"}
        assert (await records.get_records(identity_id, ["token"])) == {"token": "alice:v2"}

    @pytest.mark.asyncio
    async def test_refresh_is_attempted_once(
        self, service, google_provider, oauth_session, fake_aws
    ):
        google_provider(id_token="alice")
        identity_id = (await service.login_federated("google", "code", "web", CALLBACK)).id
        fake_aws.identity.expired_tokens.update({"alice", "alice:v2"})
        oauth_session.queue(
            "POST",
            "https://google.test/token",
            FakeResponse(200, {"access_token": "at2", "id_token": "alice:v2"}),
        )

        with pytest.raises(LoginExpiredError):
            await service.get_credentials(identity_id)

        refresh_calls = [
            call
            for call in oauth_session.calls_to("https://google.test/token")
            if call["data"]["grant_type"] == "refresh_token"
        ]
        assert len(refresh_calls) == 1

    @pytest.mark.asyncio
    async def test_context_caches_until_expiry(self, service, clock):
        identity_id = await service.signup("Test User", "user@test.com", "test123")
        context = service.credential_context()

        first = await service.get_credentials(identity_id, context)
        clock.advance(minutes=58)
        assert await service.get_credentials(identity_id, context) is first

        clock.advance(minutes=1)
        renewed = await service.get_credentials(identity_id, context)

        assert renewed.access_key_id != first.access_key_id

    @pytest.mark.asyncio
    async def test_without_context_nothing_is_cached(self, service):
        identity_id = await service.signup("Test User", "user@test.com", "test123")

        first = await service.get_credentials(identity_id)
        second = await service.get_credentials(identity_id)

        assert first.access_key_id != second.access_key_id


@pytest.mark.unit
class TestBuildIdentityService:
    @pytest.mark.asyncio
    async def test_builds_working_service(
        self,
        fake_aws,
        aws_clients,
        cognito_settings,
        oauth_settings,
        identity_settings,
        oauth_session,
    ):
        settings = Settings(
            cognito=cognito_settings, oauth=oauth_settings, identity=identity_settings
        )

        service = build_identity_service(settings, aws_clients, session=oauth_session)

        assert isinstance(service, IdentityService)
        identity_id = await service.signup("Test User", "user@test.com", "test123")
        assert await service.login("user@test.com", password="test123") == identity_id
