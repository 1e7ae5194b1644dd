"""Infrastructure AWS clients public API.

DI-friendly AWS clients with per-service class decomposition. The facade,
AWSClients, composes the Cognito Identity, Cognito Sync and SES clients and
exposes them as attributes:

    from infrastructure.services import get_aws_clients

    aws = get_aws_clients()
    result = aws.cognito_sync.list_records(identity_id)
    if result.is_success:
        records = result.data["Records"]

All infrastructure services are accessed through `infrastructure/services/`
as the single point of entry for dependency injection.
"""

from infrastructure.clients.aws.cognito_identity import CognitoIdentityClient
from infrastructure.clients.aws.cognito_sync import CognitoSyncClient
from infrastructure.clients.aws.facade import AWSClients
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.clients.aws.ses import SesClient

__all__ = [
    "AWSClients",
    "SessionProvider",
    "CognitoIdentityClient",
    "CognitoSyncClient",
    "SesClient",
]
