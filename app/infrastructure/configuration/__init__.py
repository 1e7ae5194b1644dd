"""Infrastructure configuration module - public API.

Centralized configuration for the identity broker using Pydantic
BaseSettings with domain-based organization.

Exports:
    Settings: Main settings class (for testing/overrides)

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    pool_id = settings.cognito.IDENTITY_POOL_ID
    reset_subject = settings.identity.PASSWORD_RESET_SUBJECT
    ```
"""

from infrastructure.configuration.settings import Settings

__all__ = ["Settings"]
