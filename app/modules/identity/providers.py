"""Login providers and the provider normalizer.

The provider set is closed: ``Provider`` lists every OAuth provider the broker
can exchange codes with, and ``build_provider_configs`` refuses to build a
registry that misses one. Any other provider name is a developer-owned
pseudo-provider and is represented by its raw name.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from infrastructure.configuration.integrations.oauth import OAuthSettings
from modules.identity.models import NormalizedProfile, ProviderDescriptor

DEVELOPER_LOGIN_NAMESPACE = "cognito-identity.amazonaws.com"


class Provider(str, Enum):
    GOOGLE = "google"
    FACEBOOK = "facebook"
    AMAZON = "amazon"
    TWITTER = "twitter"
    STRIPE = "stripe"
    PAYPAL = "paypal"

    @classmethod
    def parse(cls, name: Optional[str]) -> Optional["Provider"]:
        """Return the member named ``name``, or None for any other name."""
        if not name:
            return None
        try:
            return cls(name)
        except ValueError:
            return None

    @property
    def namespace(self) -> Optional[str]:
        """Directory login namespace, or None for developer-owned providers."""
        return FEDERATED_NAMESPACES.get(self)


FEDERATED_NAMESPACES: Dict[Provider, str] = {
    Provider.GOOGLE: "accounts.google.com",
    Provider.FACEBOOK: "graph.facebook.com",
    Provider.AMAZON: "www.amazon.com",
    Provider.TWITTER: "api.twitter.com",
}


def refresh_key(provider: str) -> str:
    return f"refresh{provider}"


def profile_key(provider: str) -> str:
    return f"profile{provider}"


def normalize_provider(
    provider_name: Optional[str],
    token: Optional[str],
    developer_provider_name: str,
    separator: str,
) -> ProviderDescriptor:
    """Map a (provider, token) pair to its directory-facing form.

    The four natively integrated providers map to their federated
    namespace. Every other name, including None, is developer-owned; a
    named pseudo-provider gets its token prefixed as
    ``<provider><separator><token>`` so several pseudo-providers can live on
    one identity next to the plain email identifier.

    Args:
        provider_name: Provider name, or None for an email login
        token: Login token (email for developer logins)
        developer_provider_name: Developer provider name of the identity pool
        separator: Separator between pseudo-provider name and token

    Returns:
        ProviderDescriptor
    """
    provider = Provider.parse(provider_name)
    if provider is not None and provider.namespace is not None:
        return ProviderDescriptor(
            name=provider.namespace, is_developer=False, token=token
        )

    prefixed = token
    if provider_name and token:
        prefixed = f"{provider_name}{separator}{token}"
    return ProviderDescriptor(
        name=developer_provider_name, is_developer=True, token=prefixed
    )


class ProviderNormalizer:
    """``normalize_provider`` bound to one identity pool's configuration."""

    def __init__(self, developer_provider_name: str, separator: str) -> None:
        self.developer_provider_name = developer_provider_name
        self.separator = separator

    def normalize(
        self, provider_name: Optional[str], token: Optional[str]
    ) -> ProviderDescriptor:
        return normalize_provider(
            provider_name, token, self.developer_provider_name, self.separator
        )

    def developer_prefix(self, identifier: str) -> str:
        """Pseudo-provider part of a developer identifier ("" for an email)."""
        if self.separator not in identifier:
            return ""
        return identifier.split(self.separator, 1)[0]

    def is_email_identifier(self, identifier: str) -> bool:
        return self.separator not in identifier

    @staticmethod
    def provider_for_namespace(namespace: str) -> Optional[Provider]:
        for provider, provider_namespace in FEDERATED_NAMESPACES.items():
            if provider_namespace == namespace:
                return provider
        return None


ProfileNormalizer = Callable[[Dict[str, Any], Optional[Dict[str, Any]]], NormalizedProfile]


def _profile_field(profile: Optional[Dict[str, Any]], key: str) -> Optional[str]:
    if not profile:
        return None
    return profile.get(key)


def _normalize_google(
    token: Dict[str, Any], profile: Optional[Dict[str, Any]]
) -> NormalizedProfile:
    return NormalizedProfile(
        id_token=token.get("id_token"),
        name=_profile_field(profile, "name"),
        email=_profile_field(profile, "email"),
    )


def _normalize_access_token(
    token: Dict[str, Any], profile: Optional[Dict[str, Any]]
) -> NormalizedProfile:
    # Facebook and Amazon logins are presented to the directory as access tokens
    return NormalizedProfile(
        id_token=token.get("access_token"),
        name=_profile_field(profile, "name"),
        email=_profile_field(profile, "email"),
    )


def _normalize_twitter(
    token: Dict[str, Any], profile: Optional[Dict[str, Any]]
) -> NormalizedProfile:
    data = (profile or {}).get("data") or {}
    return NormalizedProfile(
        id_token=token.get("access_token"),
        name=data.get("name"),
        email=None,
    )


def _normalize_stripe(
    token: Dict[str, Any], profile: Optional[Dict[str, Any]]
) -> NormalizedProfile:
    profile = profile or {}
    name = profile.get("display_name")
    if not name:
        name = (profile.get("business_profile") or {}).get("name")
    return NormalizedProfile(
        id_token=profile.get("id"),
        name=name,
        email=profile.get("email"),
    )


def _normalize_paypal(
    token: Dict[str, Any], profile: Optional[Dict[str, Any]]
) -> NormalizedProfile:
    profile = profile or {}
    user_id = profile.get("user_id")
    return NormalizedProfile(
        id_token=user_id.rsplit("/", 1)[-1] if user_id else None,
        name=profile.get("name"),
        email=profile.get("email"),
    )


@dataclass(frozen=True)
class ProviderConfig:
    """Endpoints, client credentials and normalize function of one provider.

    Attributes:
        provider: The provider this record configures
        token_url: Token endpoint (authorization code and refresh grants)
        profile_url: Profile endpoint called with the access token as bearer
        client_id: Client id used for the refresh grant
        client_secret: Client secret sent with every grant
        normalize: Maps (token payload, profile) to a NormalizedProfile
        profile_optional: A failed or empty profile call is not an error
        refreshable: Supports the refresh token grant
    """

    provider: Provider
    token_url: str
    profile_url: str
    client_id: str
    client_secret: str
    normalize: ProfileNormalizer
    profile_optional: bool = False
    refreshable: bool = False


def build_provider_configs(oauth: OAuthSettings) -> Dict[Provider, ProviderConfig]:
    """Build the provider registry from settings.

    Raises:
        ValueError: a Provider member has no configuration
    """
    configs = {
        Provider.GOOGLE: ProviderConfig(
            provider=Provider.GOOGLE,
            token_url=oauth.GOOGLE_TOKEN_URL,
            profile_url=oauth.GOOGLE_PROFILE_URL,
            client_id=oauth.GOOGLE_CLIENT_ID,
            client_secret=oauth.GOOGLE_SECRET,
            normalize=_normalize_google,
            profile_optional=True,
            refreshable=True,
        ),
        Provider.FACEBOOK: ProviderConfig(
            provider=Provider.FACEBOOK,
            token_url=oauth.FACEBOOK_TOKEN_URL,
            profile_url=oauth.FACEBOOK_PROFILE_URL,
            client_id=oauth.FACEBOOK_CLIENT_ID,
            client_secret=oauth.FACEBOOK_SECRET,
            normalize=_normalize_access_token,
            refreshable=True,
        ),
        Provider.AMAZON: ProviderConfig(
            provider=Provider.AMAZON,
            token_url=oauth.AMAZON_TOKEN_URL,
            profile_url=oauth.AMAZON_PROFILE_URL,
            client_id=oauth.AMAZON_CLIENT_ID,
            client_secret=oauth.AMAZON_SECRET,
            normalize=_normalize_access_token,
            profile_optional=True,
            refreshable=True,
        ),
        Provider.TWITTER: ProviderConfig(
            provider=Provider.TWITTER,
            token_url=oauth.TWITTER_TOKEN_URL,
            profile_url=oauth.TWITTER_PROFILE_URL,
            client_id=oauth.TWITTER_CLIENT_ID,
            client_secret=oauth.TWITTER_SECRET,
            normalize=_normalize_twitter,
            refreshable=True,
        ),
        Provider.STRIPE: ProviderConfig(
            provider=Provider.STRIPE,
            token_url=oauth.STRIPE_TOKEN_URL,
            profile_url=oauth.STRIPE_PROFILE_URL,
            client_id=oauth.STRIPE_CLIENT_ID,
            client_secret=oauth.STRIPE_SECRET,
            normalize=_normalize_stripe,
        ),
        Provider.PAYPAL: ProviderConfig(
            provider=Provider.PAYPAL,
            token_url=oauth.PAYPAL_TOKEN_URL,
            profile_url=oauth.PAYPAL_PROFILE_URL,
            client_id=oauth.PAYPAL_CLIENT_ID,
            client_secret=oauth.PAYPAL_SECRET,
            normalize=_normalize_paypal,
        ),
    }
    missing = [provider.value for provider in Provider if provider not in configs]
    if missing:
        raise ValueError(f"missing provider configuration: {', '.join(missing)}")
    return configs
