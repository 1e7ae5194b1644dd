"""OAuth provider integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class OAuthSettings(IntegrationSettings):
    """Client credentials and endpoints of the OAuth2 login providers.

    Client ids for the authorization code grant are supplied by the caller
    (the browser flow knows them); the ids below are used for the refresh
    token grant. Endpoint URLs default to the providers' production URLs,
    except PayPal which defaults to its sandbox.

    Environment Variables:
        OAUTH_HTTP_TIMEOUT: Timeout in seconds for provider calls (default: 30)
        GOOGLE_CLIENT_ID / GOOGLE_SECRET
        FACEBOOK_CLIENT_ID / FACEBOOK_SECRET
        AMAZON_CLIENT_ID / AMAZON_SECRET
        TWITTER_CLIENT_ID / TWITTER_SECRET
        STRIPE_SECRET
        PAYPAL_CLIENT_ID / PAYPAL_SECRET
        <PROVIDER>_TOKEN_URL / <PROVIDER>_PROFILE_URL: Endpoint overrides

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        timeout = settings.oauth.HTTP_TIMEOUT
        google_secret = settings.oauth.GOOGLE_SECRET
        ```
    """

    HTTP_TIMEOUT: float = Field(default=30.0, alias="OAUTH_HTTP_TIMEOUT")

    GOOGLE_CLIENT_ID: str = Field(default="", alias="GOOGLE_CLIENT_ID")
    GOOGLE_SECRET: str = Field(default="", alias="GOOGLE_SECRET")
    GOOGLE_TOKEN_URL: str = Field(
        default="https://oauth2.googleapis.com/token", alias="GOOGLE_TOKEN_URL"
    )
    GOOGLE_PROFILE_URL: str = Field(
        default="https://openidconnect.googleapis.com/v1/userinfo",
        alias="GOOGLE_PROFILE_URL",
    )

    FACEBOOK_CLIENT_ID: str = Field(default="", alias="FACEBOOK_CLIENT_ID")
    FACEBOOK_SECRET: str = Field(default="", alias="FACEBOOK_SECRET")
    FACEBOOK_TOKEN_URL: str = Field(
        default="https://graph.facebook.com/v19.0/oauth/access_token",
        alias="FACEBOOK_TOKEN_URL",
    )
    FACEBOOK_PROFILE_URL: str = Field(
        default="https://graph.facebook.com/v19.0/me?fields=id,name,email",
        alias="FACEBOOK_PROFILE_URL",
    )

    AMAZON_CLIENT_ID: str = Field(default="", alias="AMAZON_CLIENT_ID")
    AMAZON_SECRET: str = Field(default="", alias="AMAZON_SECRET")
    AMAZON_TOKEN_URL: str = Field(
        default="https://api.amazon.com/auth/o2/token", alias="AMAZON_TOKEN_URL"
    )
    AMAZON_PROFILE_URL: str = Field(
        default="https://api.amazon.com/user/profile", alias="AMAZON_PROFILE_URL"
    )

    TWITTER_CLIENT_ID: str = Field(default="", alias="TWITTER_CLIENT_ID")
    TWITTER_SECRET: str = Field(default="", alias="TWITTER_SECRET")
    TWITTER_TOKEN_URL: str = Field(
        default="https://api.twitter.com/2/oauth2/token", alias="TWITTER_TOKEN_URL"
    )
    TWITTER_PROFILE_URL: str = Field(
        default="https://api.twitter.com/2/users/me", alias="TWITTER_PROFILE_URL"
    )

    STRIPE_CLIENT_ID: str = Field(default="", alias="STRIPE_CLIENT_ID")
    STRIPE_SECRET: str = Field(default="", alias="STRIPE_SECRET")
    STRIPE_TOKEN_URL: str = Field(
        default="https://connect.stripe.com/oauth/token", alias="STRIPE_TOKEN_URL"
    )
    STRIPE_PROFILE_URL: str = Field(
        default="https://api.stripe.com/v1/account", alias="STRIPE_PROFILE_URL"
    )

    PAYPAL_CLIENT_ID: str = Field(default="", alias="PAYPAL_CLIENT_ID")
    PAYPAL_SECRET: str = Field(default="", alias="PAYPAL_SECRET")
    PAYPAL_TOKEN_URL: str = Field(
        default="https://api.sandbox.paypal.com/v1/identity/openidconnect/tokenservice",
        alias="PAYPAL_TOKEN_URL",
    )
    PAYPAL_PROFILE_URL: str = Field(
        default="https://api.sandbox.paypal.com/v1/identity/openidconnect/userinfo?schema=openid",
        alias="PAYPAL_PROFILE_URL",
    )
