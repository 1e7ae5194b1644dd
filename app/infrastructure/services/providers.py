"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for core infrastructure services.
"""

from functools import lru_cache

from infrastructure.configuration import Settings
from infrastructure.clients.aws import AWSClients
from modules.identity.service import IdentityService, build_identity_service


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    This is the single source of truth for settings across the entire application.
    The @lru_cache decorator ensures only ONE instance is created per process,
    even if called from multiple packages.

    Usage:
        from infrastructure.services.providers import get_settings
        settings = get_settings()

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_aws_clients() -> AWSClients:
    """Provider for AWS clients facade with all service operations.

    Returns a fully-configured AWSClients facade instance with region, endpoint
    and identity pool settings from application configuration. The facade
    composes the Cognito Identity, Cognito Sync and SES clients with a shared
    SessionProvider.

    Credentials (temporary creds from assume_role or default providers) are created
    per API call, so caching this facade is safe; it doesn't hold stale credentials.

    Returns:
        AWSClients: Configured facade instance for all AWS service calls

    Usage:
        aws = get_aws_clients()
        result = aws.cognito_sync.list_records(identity_id)
        if result.is_success:
            records = result.data["Records"]
    """
    settings = get_settings()
    return AWSClients(
        cognito_settings=settings.cognito,
        default_email_source=settings.identity.PASSWORD_RESET_SOURCE,
    )


@lru_cache
def get_identity_service() -> IdentityService:
    """
    Get application-scoped identity service singleton.

    The service holds no per-identity state; credential caching is owned by
    callers through ``IdentityService.credential_context()``.

    Returns:
        IdentityService: Identity broker wired to the AWS clients and OAuth settings.

    Usage:
        service = get_identity_service()
        identity_id = await service.login(email, password=password)
    """
    return build_identity_service(get_settings(), get_aws_clients())
