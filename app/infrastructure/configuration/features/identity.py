"""Identity broker feature settings."""

from pydantic import Field

from infrastructure.configuration.base import FeatureSettings


class IdentityFeatureSettings(FeatureSettings):
    """Password reset email and credential caching behavior.

    Templates use ``str.format`` placeholders: ``{email}`` and ``{reset}`` in
    the URL, ``{name}`` in the body.

    Environment Variables:
        COGNITO_PASSWORD_RESET_URL: Link template sent in the reset email
        COGNITO_PASSWORD_RESET_BODY: Greeting line preceding the link
        COGNITO_PASSWORD_RESET_SUBJECT: Email subject
        COGNITO_PASSWORD_RESET_SOURCE: Sender address (must be verified in SES)
        IDENTITY_CREDENTIALS_EXPIRY_MARGIN_SECONDS: Renew cached AWS
            credentials this many seconds before they expire (default: 60)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        subject = settings.identity.PASSWORD_RESET_SUBJECT
        ```
    """

    PASSWORD_RESET_URL: str = Field(
        default="http://localhost:8100/app.html#/reset/{email}/{reset}",
        alias="COGNITO_PASSWORD_RESET_URL",
    )
    PASSWORD_RESET_BODY: str = Field(
        default="Dear {name}, please follow the link below to reset your password:",
        alias="COGNITO_PASSWORD_RESET_BODY",
    )
    PASSWORD_RESET_SUBJECT: str = Field(
        default="Password reset", alias="COGNITO_PASSWORD_RESET_SUBJECT"
    )
    PASSWORD_RESET_SOURCE: str = Field(
        default="Password reset <noreply@yourdomain.com>",
        alias="COGNITO_PASSWORD_RESET_SOURCE",
    )
    CREDENTIALS_EXPIRY_MARGIN_SECONDS: int = Field(
        default=60, alias="IDENTITY_CREDENTIALS_EXPIRY_MARGIN_SECONDS"
    )
