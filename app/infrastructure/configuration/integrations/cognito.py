"""AWS Cognito integration settings."""

from typing import Optional

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class CognitoSettings(IntegrationSettings):
    """AWS Cognito Identity, Cognito Sync and SES configuration settings.

    Environment Variables:
        AWS_REGION: AWS region for services (default: us-east-1)
        AWS_ACCOUNT_ID: 12 digit AWS account id passed to GetId
        AWS_ENDPOINT_URL: Optional endpoint override (LocalStack, moto server)
        AWS_MAX_RETRIES: Retries on throttling errors (default: 0)
        COGNITO_IDENTITY_POOL_ID: Identity pool id (e.g. us-east-1:1234...)
        COGNITO_DEVELOPER_PROVIDER_NAME: Developer provider name of the pool
        COGNITO_SEPARATOR: Separator between pseudo-provider and token (default: ----)
        COGNITO_DATASET_NAME: Cognito Sync dataset holding profiles (default: profile)
        COGNITO_IDENTITY_ROLE_ARN: Optional role assumed for Cognito Identity calls
        COGNITO_SYNC_ROLE_ARN: Optional role assumed for Cognito Sync calls
        SES_ROLE_ARN: Optional role assumed for SES calls

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        pool_id = settings.cognito.IDENTITY_POOL_ID
        separator = settings.cognito.SEPARATOR
        ```
    """

    AWS_REGION: str = Field(default="us-east-1", alias="AWS_REGION")
    AWS_ACCOUNT_ID: str = Field(default="", alias="AWS_ACCOUNT_ID")
    ENDPOINT_URL: Optional[str] = Field(default=None, alias="AWS_ENDPOINT_URL")
    MAX_RETRIES: int = Field(default=0, alias="AWS_MAX_RETRIES")

    IDENTITY_POOL_ID: str = Field(default="", alias="COGNITO_IDENTITY_POOL_ID")
    DEVELOPER_PROVIDER_NAME: str = Field(
        default="login.identitybroker", alias="COGNITO_DEVELOPER_PROVIDER_NAME"
    )
    SEPARATOR: str = Field(default="----", alias="COGNITO_SEPARATOR")
    DATASET_NAME: str = Field(default="profile", alias="COGNITO_DATASET_NAME")

    IDENTITY_ROLE_ARN: str = Field(default="", alias="COGNITO_IDENTITY_ROLE_ARN")
    SYNC_ROLE_ARN: str = Field(default="", alias="COGNITO_SYNC_ROLE_ARN")
    SES_ROLE_ARN: str = Field(default="", alias="SES_ROLE_ARN")

    @property
    def SERVICE_ROLE_MAP(self) -> dict[str, str]:
        """Mapping of service names to their associated role ARNs.

        Returns:
            Dict mapping boto3 service names to role ARNs (empty means no assume)
        """
        return {
            "cognito-identity": self.IDENTITY_ROLE_ARN,
            "cognito-sync": self.SYNC_ROLE_ARN,
            "ses": self.SES_ROLE_ARN,
        }
