"""Tests for the provider normalizer and provider registry."""

import pytest

from modules.identity.providers import (
    DEVELOPER_LOGIN_NAMESPACE,
    Provider,
    ProviderNormalizer,
    build_provider_configs,
    normalize_provider,
    profile_key,
    refresh_key,
)


@pytest.mark.unit
class TestNormalizeProvider:
    @pytest.mark.parametrize(
        "provider, namespace",
        [
            ("google", "accounts.google.com"),
            ("facebook", "graph.facebook.com"),
            ("amazon", "www.amazon.com"),
            ("twitter", "api.twitter.com"),
        ],
    )
    def test_federated_providers_map_to_namespace(self, provider, namespace):
        descriptor = normalize_provider(provider, "tok", "login.identitybroker", "----")

        assert descriptor.name == namespace
        assert descriptor.is_developer is False
        assert descriptor.token == "tok"

    def test_pseudo_provider_is_developer_with_prefixed_token(self):
        descriptor = normalize_provider("stripe", "acct_1", "login.identitybroker", "----")

        assert descriptor.name == "login.identitybroker"
        assert descriptor.is_developer is True
        assert descriptor.token == "stripe----acct_1"

    def test_unknown_provider_name_is_developer(self):
        descriptor = normalize_provider("github", "octocat", "login.identitybroker", "::")

        assert descriptor.is_developer is True
        assert descriptor.token == "github::octocat"

    def test_no_provider_is_plain_email_identifier(self):
        descriptor = normalize_provider(None, "user@test.com", "login.identitybroker", "----")

        assert descriptor.is_developer is True
        assert descriptor.token == "user@test.com"

    def test_missing_token_is_not_prefixed(self):
        descriptor = normalize_provider("paypal", None, "login.identitybroker", "----")

        assert descriptor.token is None


@pytest.mark.unit
class TestProviderNormalizer:
    def test_developer_prefix(self, normalizer):
        assert normalizer.developer_prefix("stripe----acct_1") == "stripe"
        assert normalizer.developer_prefix("user@test.com") == ""

    def test_is_email_identifier(self, normalizer):
        assert normalizer.is_email_identifier("user@test.com") is True
        assert normalizer.is_email_identifier("paypal----123") is False

    def test_provider_for_namespace(self):
        assert ProviderNormalizer.provider_for_namespace("accounts.google.com") is Provider.GOOGLE
        assert ProviderNormalizer.provider_for_namespace("login.identitybroker") is None
        assert ProviderNormalizer.provider_for_namespace(DEVELOPER_LOGIN_NAMESPACE) is None

    def test_provider_parse(self):
        assert Provider.parse("paypal") is Provider.PAYPAL
        assert Provider.parse("github") is None
        assert Provider.parse(None) is None

    def test_developer_owned_providers_have_no_namespace(self):
        assert Provider.STRIPE.namespace is None
        assert Provider.PAYPAL.namespace is None

    def test_record_keys(self):
        assert refresh_key("google") == "refreshgoogle"
        assert profile_key("stripe") == "profilestripe"


@pytest.mark.unit
class TestProviderConfigs:
    def test_registry_covers_every_provider(self, provider_configs):
        assert set(provider_configs) == set(Provider)

    def test_refresh_and_optional_profile_flags(self, provider_configs):
        refreshable = {p for p, c in provider_configs.items() if c.refreshable}
        optional = {p for p, c in provider_configs.items() if c.profile_optional}

        assert refreshable == {
            Provider.GOOGLE,
            Provider.FACEBOOK,
            Provider.AMAZON,
            Provider.TWITTER,
        }
        assert optional == {Provider.GOOGLE, Provider.AMAZON}

    def test_configs_take_settings_values(self, provider_configs):
        google = provider_configs[Provider.GOOGLE]

        assert google.token_url == "https://google.test/token"
        assert google.client_id == "google-client"
        assert google.client_secret == "google-secret"

    def test_build_provider_configs_from_defaults(self):
        from infrastructure.configuration.integrations import OAuthSettings

        configs = build_provider_configs(OAuthSettings(_env_file=None))

        assert len(configs) == len(Provider)


@pytest.mark.unit
class TestProfileNormalizers:
    def test_google_uses_id_token(self, provider_configs):
        normalized = provider_configs[Provider.GOOGLE].normalize(
            {"access_token": "at", "id_token": "idt"},
            {"name": "Alice", "email": "alice@test.com"},
        )

        assert (normalized.id_token, normalized.name, normalized.email) == (
            "idt",
            "Alice",
            "alice@test.com",
        )

    def test_google_without_profile(self, provider_configs):
        normalized = provider_configs[Provider.GOOGLE].normalize({"id_token": "idt"}, None)

        assert normalized.id_token == "idt"
        assert normalized.name is None
        assert normalized.email is None

    @pytest.mark.parametrize("provider", [Provider.FACEBOOK, Provider.AMAZON])
    def test_access_token_providers(self, provider_configs, provider):
        normalized = provider_configs[provider].normalize(
            {"access_token": "at"}, {"name": "Bob", "email": "bob@test.com"}
        )

        assert normalized.id_token == "at"
        assert normalized.email == "bob@test.com"

    def test_twitter_profile_nested_under_data(self, provider_configs):
        normalized = provider_configs[Provider.TWITTER].normalize(
            {"access_token": "at"}, {"data": {"id": "42", "name": "Tweety"}}
        )

        assert normalized.id_token == "at"
        assert normalized.name == "Tweety"
        assert normalized.email is None

    def test_stripe_uses_account_fields(self, provider_configs):
        normalized = provider_configs[Provider.STRIPE].normalize(
            {"access_token": "at"},
            {"id": "acct_1", "display_name": "Acme", "email": "billing@acme.test"},
        )

        assert normalized.id_token == "acct_1"
        assert normalized.name == "Acme"

    def test_stripe_falls_back_to_business_name(self, provider_configs):
        normalized = provider_configs[Provider.STRIPE].normalize(
            {}, {"id": "acct_1", "business_profile": {"name": "Acme Inc"}}
        )

        assert normalized.name == "Acme Inc"

    def test_paypal_uses_last_user_id_segment(self, provider_configs):
        normalized = provider_configs[Provider.PAYPAL].normalize(
            {},
            {
                "user_id": "https://www.paypal.com/webapps/auth/identity/user/AbC123",
                "name": "Pat",
                "email": "pat@test.com",
            },
        )

        assert normalized.id_token == "AbC123"
        assert normalized.name == "Pat"
