"""Identity broker configuration settings - main aggregator."""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Integration settings
from infrastructure.configuration.integrations import (
    CognitoSettings,
    OAuthSettings,
)

# Feature settings
from infrastructure.configuration.features import IdentityFeatureSettings


class Settings(BaseSettings):
    """Identity broker configuration settings - main aggregator.

    Aggregates all domain-specific settings into a single configuration object.
    Settings are organized by concern:

    - **Integrations**: AWS Cognito/SES and the OAuth login providers
    - **Features**: identity broker behavior (password reset email, credentials)

    Environment Variables:
        PREFIX: Environment prefix for non-production deployments
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        GIT_SHA: Git commit SHA for deployment tracking

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        pool_id = settings.cognito.IDENTITY_POOL_ID
        timeout = settings.oauth.HTTP_TIMEOUT

        if settings.is_production:
            # Production-specific logic...
        ```
    """

    # Application-level settings
    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    # Integration settings
    cognito: CognitoSettings
    oauth: OAuthSettings

    # Feature settings
    identity: IdentityFeatureSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if PREFIX is empty (production), False otherwise.
        """
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            # Integrations
            "cognito": CognitoSettings,
            "oauth": OAuthSettings,
            # Features
            "identity": IdentityFeatureSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


# Create the singleton settings instance
settings = Settings()
