"""Identity broker module.

Unifies email/password accounts and OAuth provider logins behind one durable
identity held by Cognito Identity, with per-identity profile records in
Cognito Sync.

Usage:
    from infrastructure.services import get_identity_service

    service = get_identity_service()
    identity_id = await service.signup("Test User", "user@test.com", "secret")
    profile = await service.get_profile(identity_id)
"""

from modules.identity.credentials import CredentialContext, RenewableCredentials
from modules.identity.errors import (
    ConflictError,
    IdentityError,
    InvalidRequestError,
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
)
from modules.identity.models import (
    AwsCredentials,
    FederatedLoginResult,
    RefreshedLogin,
)
from modules.identity.providers import Provider, ProviderNormalizer, normalize_provider
from modules.identity.schemas import LinkedLogins, UserProfile
from modules.identity.service import IdentityService, build_identity_service

__all__ = [
    "IdentityService",
    "build_identity_service",
    "CredentialContext",
    "RenewableCredentials",
    "IdentityError",
    "NotFoundError",
    "ConflictError",
    "UnauthorizedError",
    "InvalidRequestError",
    "UpstreamError",
    "AwsCredentials",
    "FederatedLoginResult",
    "RefreshedLogin",
    "Provider",
    "ProviderNormalizer",
    "normalize_provider",
    "LinkedLogins",
    "UserProfile",
]
