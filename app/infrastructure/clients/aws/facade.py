"""AWS Clients facade for all AWS service operations.

Provides attribute-based access to the per-service clients the identity broker
uses (Cognito Identity, Cognito Sync, SES) with consistent error handling and
OperationResult return types.
"""

import structlog

from infrastructure.clients.aws.cognito_identity import CognitoIdentityClient
from infrastructure.clients.aws.cognito_sync import CognitoSyncClient
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.clients.aws.ses import SesClient
from infrastructure.configuration.integrations.cognito import CognitoSettings

logger = structlog.get_logger()


class AWSClients:
    """Facade for all AWS service clients.

    Each service client is initialized with a shared SessionProvider that
    handles region configuration, endpoint overrides and role assumption.

    Args:
        cognito_settings: AWS configuration from settings.cognito
        default_email_source: Sender address for SES when a call omits one

    Usage:
        aws = get_aws_clients()
        result = aws.cognito_identity.describe_identity(identity_id)
        if result.is_success:
            namespaces = result.data.get("Logins", [])
    """

    def __init__(
        self, cognito_settings: CognitoSettings, default_email_source: str = ""
    ) -> None:
        self._session_provider = SessionProvider(
            region=cognito_settings.AWS_REGION,
            service_role_map=cognito_settings.SERVICE_ROLE_MAP,
            endpoint_url=cognito_settings.ENDPOINT_URL,
            max_retries=cognito_settings.MAX_RETRIES,
        )

        self.cognito_identity: CognitoIdentityClient = CognitoIdentityClient(
            self._session_provider,
            identity_pool_id=cognito_settings.IDENTITY_POOL_ID,
            developer_provider_name=cognito_settings.DEVELOPER_PROVIDER_NAME,
            account_id=cognito_settings.AWS_ACCOUNT_ID or None,
        )
        self.cognito_sync: CognitoSyncClient = CognitoSyncClient(
            self._session_provider,
            identity_pool_id=cognito_settings.IDENTITY_POOL_ID,
            dataset_name=cognito_settings.DATASET_NAME,
        )
        self.ses: SesClient = SesClient(
            self._session_provider,
            default_source=default_email_source or None,
        )
        self._logger = logger.bind(component="aws_clients")
